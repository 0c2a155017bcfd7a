"""sprintpoker - poker-planning commands from Jira sprints."""

__version__ = "0.1.0"
