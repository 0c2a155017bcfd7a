"""Sequence a planning run from sprint lookup to rendered commands."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from rich.markup import escape

from sprintpoker.config import JiraSettings, PlanningConfig
from sprintpoker.core.logging import StructuredLogger
from sprintpoker.core.output import OutputFormatter
from sprintpoker.planning.formatter import render_commands
from sprintpoker.planning.grouping import EpicGroup, group_by_epic
from sprintpoker.planning.issues import IssueQuery
from sprintpoker.planning.models import Sprint
from sprintpoker.planning.selector import select_next_sprint
from sprintpoker.planning.sprints import SprintRepository

logger = StructuredLogger("planning.runner")

COMMANDS_TITLE = "Slack Commands for Poker Planning:"


class RunMode(str, Enum):
    """How the sprint for a run is found."""

    TICKET = "ticket"
    BOARD = "board"


class RunOutcome(str, Enum):
    """Terminal state of a planning run."""

    COMPLETED = "completed"
    NO_SPRINT_FOUND = "no_sprint_found"
    NO_ISSUES_FOUND = "no_issues_found"
    FAILED = "failed"


@dataclass
class RunResult:
    """What a planning run produced."""

    mode: RunMode
    outcome: RunOutcome
    sprint: Sprint | None = None
    groups: dict[str, EpicGroup] = field(default_factory=dict)
    commands: str = ""
    output_file: Path | None = None
    error: str | None = None

    @property
    def ticket_count(self) -> int:
        return sum(len(g.tickets) for g in self.groups.values())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for display."""
        return {
            "mode": self.mode.value,
            "outcome": self.outcome.value,
            "sprint": self.sprint.name if self.sprint else None,
            "sprint_id": self.sprint.id if self.sprint else None,
            "epics": len(self.groups),
            "tickets": self.ticket_count,
            "output_file": str(self.output_file) if self.output_file else None,
            "error": self.error,
        }


class PlanningRun:
    """Finds the sprint to size and prints its poker-planning commands.

    Given a ticket key, the sprint is the one that ticket belongs to and
    the commands are also written to the output file. Without one, the
    sprint is chosen from the board's sprints and output goes to the
    console only.
    """

    def __init__(
        self,
        sprints: SprintRepository,
        issues: IssueQuery,
        settings: JiraSettings,
        planning: PlanningConfig | None = None,
        output: OutputFormatter | None = None,
    ):
        self._sprints = sprints
        self._issues = issues
        self._settings = settings
        self._planning = planning or PlanningConfig()
        self._output = output or OutputFormatter()

    def run(
        self,
        ticket_key: str | None = None,
        board_id: str | None = None,
        output_file: str | Path | None = None,
    ) -> RunResult:
        """Execute one planning run.

        Unexpected errors are logged and reported as a FAILED result
        instead of propagating.
        """
        mode = RunMode.TICKET if ticket_key else RunMode.BOARD
        try:
            if ticket_key:
                path = Path(output_file or self._planning.output_file)
                return self._run_for_ticket(ticket_key, path)
            return self._run_for_board(board_id or self._settings.board_id)
        except Exception as e:
            logger.exception("An error occurred during the planning run", mode=mode.value)
            return RunResult(mode=mode, outcome=RunOutcome.FAILED, error=str(e))

    def _run_for_ticket(self, ticket_key: str, output_file: Path) -> RunResult:
        logger.info(f"Ticket key specified: {ticket_key}")
        logger.info("Getting sprint information from Agile API...")

        sprint = self._sprints.resolve_sprint_for_ticket(ticket_key)
        if sprint is None:
            logger.error(f"No sprint found for ticket {ticket_key}.")
            self._output.print_warning(f"No sprint found for ticket {escape(ticket_key)}")
            return RunResult(mode=RunMode.TICKET, outcome=RunOutcome.NO_SPRINT_FOUND)

        logger.info(f"Using sprint from ticket {ticket_key}: {sprint.name} (ID: {sprint.id})")
        result = self._report(RunMode.TICKET, sprint)
        if result.outcome is not RunOutcome.COMPLETED:
            return result

        output_file.write_text(result.commands, encoding="utf-8")
        result.output_file = output_file
        self._output.print_success(f"Commands also saved to {escape(str(output_file))}")
        return result

    def _run_for_board(self, board_id: str) -> RunResult:
        logger.info(f"Proceeding with board ID {board_id}")
        logger.info("Fetching next sprint...")

        sprints = self._sprints.list_sprints(board_id)
        logger.info(f"Found {len(sprints)} total sprints for board {board_id}")
        for sprint in sprints:
            logger.debug(
                f"- {sprint.name} (ID: {sprint.id})",
                state=sprint.state,
                start=sprint.start_date.isoformat() if sprint.start_date else "Not set",
                end=sprint.end_date.isoformat() if sprint.end_date else "Not set",
            )

        sprint = select_next_sprint(sprints, self._planning.excluded_sprint_marker)
        if sprint is None:
            logger.error("No future sprint found.")
            self._output.print_warning(f"No sprint found on board {escape(str(board_id))}")
            return RunResult(mode=RunMode.BOARD, outcome=RunOutcome.NO_SPRINT_FOUND)

        logger.info(f"Found next sprint: {sprint.name} (ID: {sprint.id})")
        return self._report(RunMode.BOARD, sprint)

    def _report(self, mode: RunMode, sprint: Sprint) -> RunResult:
        status = self._planning.ready_status
        logger.info(f'Fetching issues with "{status}" status...')

        tickets = self._issues.fetch_ready_to_size(sprint.id)
        if not tickets:
            logger.info(f'No issues with "{status}" status found in sprint {sprint.name}.')
            self._output.print_info(f'No "{status}" tickets in {escape(sprint.name)}')
            return RunResult(mode=mode, outcome=RunOutcome.NO_ISSUES_FOUND, sprint=sprint)

        logger.info(f'Found {len(tickets)} issues with "{status}" status.')
        logger.info("Organizing issues by epic...")

        groups = group_by_epic(tickets)
        commands = render_commands(groups, self._settings.url)
        self._output.print_commands(commands, title=COMMANDS_TITLE)

        return RunResult(
            mode=mode,
            outcome=RunOutcome.COMPLETED,
            sprint=sprint,
            groups=groups,
            commands=commands,
        )
