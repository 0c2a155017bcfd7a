"""Sprint lookups against the Jira Agile API."""

from functools import cmp_to_key
from typing import Any

from sprintpoker.clients.jira import JiraClient
from sprintpoker.config import JiraSettings, PlanningConfig
from sprintpoker.core.exceptions import JiraError
from sprintpoker.core.logging import StructuredLogger
from sprintpoker.planning.models import Board, Sprint

logger = StructuredLogger("planning.sprints")


def _compare_start_dates(a: Sprint, b: Sprint) -> int:
    """Order most recent start first; undated sprints compare equal to anything."""
    if a.start_date is None or b.start_date is None:
        return 0
    if a.start_date > b.start_date:
        return -1
    if a.start_date < b.start_date:
        return 1
    return 0


def sort_by_start_date(sprints: list[Sprint]) -> list[Sprint]:
    """Sort sprints most recent first without failing on missing dates."""
    return sorted(sprints, key=cmp_to_key(_compare_start_dates))


def sprints_from_field(value: Any) -> list[Sprint]:
    """Decode a sprint-membership custom field value, oldest membership first."""
    if not isinstance(value, list):
        return []
    sprints = []
    for entry in value:
        sprint = Sprint.from_api(entry)
        if sprint is not None:
            sprints.append(sprint)
    return sprints


class SprintRepository:
    """Finds sprints for boards and tickets.

    Every lookup tolerates Jira failures: errors are logged and the caller
    gets whatever data was collected, or nothing.
    """

    def __init__(
        self,
        client: JiraClient,
        settings: JiraSettings,
        planning: PlanningConfig | None = None,
    ):
        self._client = client
        self._settings = settings
        self._planning = planning or PlanningConfig()

    def list_sprints(self, board_id: int | str) -> list[Sprint]:
        """Fetch every sprint on a board, most recent start date first.

        Pages through the board's sprints until Jira reports the last page,
        the running count reaches the reported total, or the sprint cap is
        hit. A failed page ends the walk and keeps the sprints already read.
        """
        page_size = self._planning.sprint_page_size
        cap = self._planning.max_sprints
        sprints: list[Sprint] = []
        start_at = 0
        is_last = False

        while not is_last and len(sprints) < cap:
            try:
                data = self._client.list_sprints(board_id, start_at=start_at, max_results=page_size)
            except JiraError as e:
                logger.error(
                    "Error fetching sprints",
                    board_id=board_id,
                    start_at=start_at,
                    error=str(e),
                )
                break

            values = data.get("values") if isinstance(data, dict) else None
            if not isinstance(values, list):
                break

            for entry in values:
                sprint = Sprint.from_api(entry)
                if sprint is None:
                    logger.debug("Skipping malformed sprint", board_id=board_id, entry=entry)
                    continue
                sprints.append(sprint)

            total = data.get("total")
            is_last = bool(data.get("isLast")) or (
                isinstance(total, int) and start_at + len(values) >= total
            )
            start_at += page_size

        return sort_by_start_date(sprints)[:cap]

    def resolve_sprint_for_ticket(self, ticket_key: str) -> Sprint | None:
        """Find the sprint a ticket currently belongs to.

        Jira appends sprint memberships to the sprint custom field, so the
        last entry is the most recent one.
        """
        try:
            data = self._client.get_agile_issue(ticket_key)
        except JiraError as e:
            logger.error("Error getting sprint for ticket", ticket=ticket_key, error=str(e))
            return None

        fields = data.get("fields") if isinstance(data, dict) else None
        if not isinstance(fields, dict):
            logger.info("Ticket has no fields", ticket=ticket_key)
            return None

        value = self._sprint_field_value(fields)
        if not isinstance(value, list) or not value:
            logger.info(
                "No sprint found for ticket",
                ticket=ticket_key,
                field=self._settings.sprint_field,
            )
            return None

        sprint = Sprint.from_api(value[-1])
        if sprint is None:
            logger.warning("Latest sprint entry is malformed", ticket=ticket_key)
            return None

        logger.info(
            f"Found sprint for ticket {ticket_key}",
            sprint=sprint.name,
            id=sprint.id,
            state=sprint.state,
        )
        return sprint

    def ticket_sprints(self, fields: dict[str, Any]) -> list[Sprint]:
        """All sprints recorded in an issue's sprint custom field."""
        return sprints_from_field(self._sprint_field_value(fields))

    def _sprint_field_value(self, fields: dict[str, Any]) -> Any:
        if self._settings.sprint_field in fields:
            return fields[self._settings.sprint_field]
        return fields.get(self._settings.sprint_field_key)

    def list_boards(self) -> list[Board]:
        """Fetch the first page of boards visible to the user."""
        try:
            data = self._client.list_boards()
        except JiraError as e:
            logger.error("Error fetching boards", error=str(e))
            return []

        values = data.get("values") if isinstance(data, dict) else None
        if not isinstance(values, list):
            return []

        boards = []
        for entry in values:
            board = Board.from_api(entry)
            if board is not None:
                boards.append(board)
        return boards

    def find_board_for_sprint(self, sprint_id: int) -> Board | None:
        """Scan every board for the one that owns a sprint."""
        boards = self.list_boards()
        logger.info(f"Found {len(boards)} boards in total")

        for board in boards:
            logger.debug("Checking board", board=board.name, id=board.id)
            if any(s.id == sprint_id for s in self.list_sprints(board.id)):
                logger.info("Found matching sprint on board", board=board.name, id=board.id)
                return board

        return None
