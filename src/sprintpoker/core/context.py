"""Shared state for one sprintpoker invocation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sprintpoker.config import (
    JiraSettings,
    PlanningConfig,
    SprintPokerConfig,
    get_default_config,
)
from sprintpoker.core.logging import LogLevel, StructuredLogger, setup_logging
from sprintpoker.core.output import OutputFormat, OutputFormatter

if TYPE_CHECKING:
    from sprintpoker.clients.jira import JiraClient
    from sprintpoker.planning.diagnostics import TicketInspector
    from sprintpoker.planning.issues import IssueQuery
    from sprintpoker.planning.runner import PlanningRun
    from sprintpoker.planning.sprints import SprintRepository


class PokerContext:
    """Shared context object for sprintpoker.

    Holds the loaded configuration, the resolved Jira settings, output
    formatting, and lazily created clients.
    """

    def __init__(
        self,
        config: SprintPokerConfig | None = None,
        output_format: OutputFormat = OutputFormat.TABLE,
        verbose: int = 0,
        quiet: bool = False,
        color: bool = True,
    ):
        self._config = config or get_default_config()

        # Determine log level from verbosity
        if verbose >= 2:
            log_level = LogLevel.DEBUG
        elif verbose == 1:
            log_level = LogLevel.INFO
        elif quiet:
            log_level = LogLevel.ERROR
        else:
            log_level = self._config.global_settings.verbosity

        setup_logging(log_level, rich_output=color)
        self._logger = StructuredLogger("context")

        self._output = OutputFormatter(format=output_format, color=color, quiet=quiet)

        self._settings: JiraSettings | None = None
        self._jira_client: JiraClient | None = None
        self._sprints: SprintRepository | None = None
        self._issues: IssueQuery | None = None

    @property
    def config(self) -> SprintPokerConfig:
        """Get the loaded configuration."""
        return self._config

    @property
    def settings(self) -> JiraSettings:
        """Get the resolved Jira settings.

        Raises:
            ConfigError: If a required setting is missing
        """
        if self._settings is None:
            self._settings = self._config.jira.resolve()
            self._logger.debug("Resolved Jira settings", url=self._settings.url)
        return self._settings

    @property
    def planning(self) -> PlanningConfig:
        return self._config.planning

    @property
    def output(self) -> OutputFormatter:
        """Get the output formatter."""
        return self._output

    @property
    def logger(self) -> StructuredLogger:
        return self._logger

    @property
    def jira(self) -> "JiraClient":
        """Get or create the Jira client."""
        if self._jira_client is None:
            from sprintpoker.clients.jira import JiraClient

            self._jira_client = JiraClient(self.settings)
        return self._jira_client

    @property
    def sprints(self) -> "SprintRepository":
        if self._sprints is None:
            from sprintpoker.planning.sprints import SprintRepository

            self._sprints = SprintRepository(self.jira, self.settings, self.planning)
        return self._sprints

    @property
    def issues(self) -> "IssueQuery":
        if self._issues is None:
            from sprintpoker.planning.issues import IssueQuery

            self._issues = IssueQuery(self.jira, self.settings, self.planning)
        return self._issues

    def planning_run(self) -> "PlanningRun":
        """Build the orchestrator for a planning run."""
        from sprintpoker.planning.runner import PlanningRun

        return PlanningRun(
            self.sprints,
            self.issues,
            self.settings,
            planning=self.planning,
            output=self._output,
        )

    def inspector(self) -> "TicketInspector":
        """Build the single-ticket diagnostics helper."""
        from sprintpoker.planning.diagnostics import TicketInspector

        return TicketInspector(self.jira, self.settings, self.sprints, self.issues)

    def close(self) -> None:
        """Release the HTTP client, if one was created."""
        if self._jira_client is not None:
            self._jira_client.close()
            self._jira_client = None
