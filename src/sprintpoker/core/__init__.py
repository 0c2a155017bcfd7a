"""Core utilities and shared components for sprintpoker."""

# Note: Import context lazily to avoid circular imports
# Use: from sprintpoker.core.context import PokerContext
from sprintpoker.core.exceptions import SprintPokerError, ConfigError, JiraError
from sprintpoker.core.output import OutputFormatter

__all__ = [
    "SprintPokerError",
    "ConfigError",
    "JiraError",
    "OutputFormatter",
]
