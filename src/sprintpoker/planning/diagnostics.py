"""Diagnostics for a single ticket that does not show up in a planning run."""

from dataclasses import dataclass
from typing import Any

from sprintpoker.clients.jira import JiraClient
from sprintpoker.config import JiraSettings
from sprintpoker.core.exceptions import JiraError
from sprintpoker.core.logging import StructuredLogger
from sprintpoker.planning.issues import IssueQuery
from sprintpoker.planning.models import Board, Sprint
from sprintpoker.planning.sprints import SprintRepository

logger = StructuredLogger("planning.diagnostics")


@dataclass
class InspectionReport:
    """Everything learned about one ticket."""

    ticket_key: str
    found: bool = False
    status: str | None = None
    sprint: Sprint | None = None
    board: Board | None = None
    ready_search_hit: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for display."""
        return {
            "ticket": self.ticket_key,
            "found": self.found,
            "status": self.status,
            "sprint": self.sprint.name if self.sprint else None,
            "sprint_id": self.sprint.id if self.sprint else None,
            "sprint_state": self.sprint.state if self.sprint else None,
            "board": self.board.name if self.board else None,
            "board_id": self.board.id if self.board else None,
            "ready_search_hit": self.ready_search_hit,
            "error": self.error,
        }


class TicketInspector:
    """Explains where a ticket sits: status, sprint, board, and search visibility."""

    def __init__(
        self,
        client: JiraClient,
        settings: JiraSettings,
        sprints: SprintRepository,
        issues: IssueQuery,
    ):
        self._client = client
        self._settings = settings
        self._sprints = sprints
        self._issues = issues

    def inspect(self, ticket_key: str) -> InspectionReport:
        report = InspectionReport(ticket_key=ticket_key)
        logger.info(f"Checking ticket {ticket_key}")

        try:
            data = self._client.get_issue(
                ticket_key,
                fields=[
                    "summary",
                    "status",
                    self._settings.sprint_field,
                    self._settings.sprint_field_key,
                ],
            )
        except JiraError as e:
            logger.error("Error checking ticket", ticket=ticket_key, error=str(e))
            report.error = str(e)
            return report

        fields = data.get("fields") if isinstance(data, dict) else None
        if not isinstance(fields, dict):
            return report

        report.found = True
        status = fields.get("status")
        if isinstance(status, dict) and isinstance(status.get("name"), str):
            report.status = status["name"]
        logger.info(f"Status: {report.status or 'Unknown'}")

        memberships = self._sprints.ticket_sprints(fields)
        if memberships:
            report.sprint = memberships[-1]
            logger.info(
                f"Sprint: {report.sprint.name} (ID: {report.sprint.id})",
                state=report.sprint.state,
            )
            logger.info("Searching for the board containing this sprint...")
            report.board = self._sprints.find_board_for_sprint(report.sprint.id)
            if report.board is None:
                logger.warning("No board contains this sprint", sprint_id=report.sprint.id)
        else:
            logger.info("This ticket is not in any sprint")

        report.ready_search_hit = self._issues.find_ready_ticket(ticket_key) is not None
        if report.ready_search_hit:
            logger.info("Found the ticket with direct search")
        else:
            logger.info("Direct search failed to find the ticket")

        return report
