"""Custom exceptions for sprintpoker."""

from typing import Any


class SprintPokerError(Exception):
    """Base exception for all sprintpoker errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ConfigError(SprintPokerError):
    """Configuration-related errors."""

    pass


class JiraError(SprintPokerError):
    """Jira API errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


class AuthenticationError(JiraError):
    """Authentication/authorization errors."""

    pass
