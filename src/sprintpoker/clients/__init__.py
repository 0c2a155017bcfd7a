"""API clients for external services."""

from sprintpoker.clients.jira import JiraClient

__all__ = ["JiraClient"]
