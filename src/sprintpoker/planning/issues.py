"""Ready-to-size issue queries."""

from sprintpoker.clients.jira import JiraClient
from sprintpoker.config import JiraSettings, PlanningConfig
from sprintpoker.core.exceptions import JiraError
from sprintpoker.core.logging import StructuredLogger
from sprintpoker.planning.models import Ticket

logger = StructuredLogger("planning.issues")


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class IssueQuery:
    """Runs the JQL searches that feed a planning session."""

    def __init__(
        self,
        client: JiraClient,
        settings: JiraSettings,
        planning: PlanningConfig | None = None,
    ):
        self._client = client
        self._settings = settings
        self._planning = planning or PlanningConfig()

    def build_sprint_jql(self, sprint_id: int) -> str:
        return (
            f"{self._settings.sprint_field} = {sprint_id} "
            f"AND status = {_quote(self._planning.ready_status)}"
        )

    def fetch_ready_to_size(self, sprint_id: int) -> list[Ticket]:
        """Fetch tickets in a sprint awaiting estimation.

        Only the first page of results is read; tickets beyond
        ``max_issues`` are not returned.
        """
        jql = self.build_sprint_jql(sprint_id)
        logger.info(f"Using JQL query: {jql}")

        try:
            data = self._client.search_issues(
                jql,
                fields=["summary", "status", "parent", self._settings.sprint_field],
                max_results=self._planning.max_issues,
            )
        except JiraError as e:
            logger.error("Error fetching issues", sprint_id=sprint_id, error=str(e))
            return []

        issues = data.get("issues") if isinstance(data, dict) else None
        if not isinstance(issues, list):
            return []

        tickets = []
        for entry in issues:
            ticket = Ticket.from_api(entry)
            if ticket is None:
                logger.debug("Skipping malformed issue", sprint_id=sprint_id)
                continue
            tickets.append(ticket)
        return tickets

    def find_ready_ticket(self, ticket_key: str) -> Ticket | None:
        """Search for a single ticket by key in the ready status."""
        jql = f"key = {ticket_key} AND status = {_quote(self._planning.ready_status)}"
        logger.info(f"Trying direct search with: {jql}")

        try:
            data = self._client.search_issues(
                jql,
                fields=["summary", "status", self._settings.sprint_field],
                max_results=1,
            )
        except JiraError as e:
            logger.error("Error searching for ticket", ticket=ticket_key, error=str(e))
            return None

        issues = data.get("issues") if isinstance(data, dict) else None
        if not isinstance(issues, list) or not issues:
            return None
        return Ticket.from_api(issues[0])
