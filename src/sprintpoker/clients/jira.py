"""Jira Cloud API client using httpx."""

from typing import Any

import httpx

from sprintpoker.config import JiraSettings
from sprintpoker.core.exceptions import AuthenticationError, JiraError
from sprintpoker.core.logging import StructuredLogger

logger = StructuredLogger("clients.jira")


class JiraClient:
    """Read-only client for the Jira Cloud REST and Agile APIs."""

    def __init__(self, settings: JiraSettings):
        self._settings = settings
        self._client: httpx.Client | None = None

    @property
    def base_url(self) -> str:
        return self._settings.url

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            # Jira Cloud uses Basic Auth with email:api_token
            self._client = httpx.Client(
                base_url=self._settings.url,
                auth=(self._settings.email, self._settings.api_token),
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
                timeout=self._settings.timeout,
            )

            logger.debug("Created Jira client", url=self._settings.url)

        return self._client

    def _request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> Any:
        """Make an API request.

        Args:
            method: HTTP method
            path: API path
            **kwargs: Additional request arguments

        Returns:
            Response JSON data

        Raises:
            JiraError: On any HTTP status or transport failure
        """
        try:
            response = self.client.request(method, path, **kwargs)
            response.raise_for_status()

            if response.content:
                return response.json()
            return None

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            try:
                error_data = e.response.json()
                messages = error_data.get("errorMessages", [])
                errors = error_data.get("errors", {})
                message = "; ".join(messages) if messages else str(errors or "") or str(e)
            except (ValueError, AttributeError):
                message = e.response.text or str(e)

            if status_code in (401, 403):
                raise AuthenticationError(message, status_code=status_code)
            raise JiraError(message, status_code=status_code)

        except httpx.RequestError as e:
            raise JiraError(f"Request failed: {e}")

        except ValueError as e:
            raise JiraError(f"Invalid JSON in response from {path}: {e}")

    def get(self, path: str, **kwargs: Any) -> Any:
        """Make a GET request."""
        return self._request("GET", path, **kwargs)

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "JiraClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # Issue operations
    def get_issue(self, issue_key: str, fields: list[str] | None = None) -> dict[str, Any]:
        """Get issue by key from the platform API."""
        params: dict[str, Any] = {}
        if fields:
            params["fields"] = ",".join(fields)
        return self.get(f"/rest/api/3/issue/{issue_key}", params=params)

    def get_agile_issue(self, issue_key: str) -> dict[str, Any]:
        """Get issue by key from the Agile API, which includes sprint fields."""
        return self.get(f"/rest/agile/1.0/issue/{issue_key}")

    def search_issues(
        self,
        jql: str,
        fields: list[str] | None = None,
        max_results: int = 50,
    ) -> dict[str, Any]:
        """Search issues using JQL."""
        params: dict[str, Any] = {
            "jql": jql,
            "maxResults": max_results,
        }
        if fields:
            params["fields"] = ",".join(fields)
        return self.get("/rest/api/3/search", params=params)

    # Board operations (Agile API)
    def list_boards(self) -> dict[str, Any]:
        """List agile boards."""
        return self.get("/rest/agile/1.0/board")

    # Sprint operations
    def list_sprints(
        self,
        board_id: int | str,
        start_at: int = 0,
        max_results: int = 50,
    ) -> dict[str, Any]:
        """List one page of sprints for a board."""
        params: dict[str, Any] = {
            "startAt": start_at,
            "maxResults": max_results,
        }
        return self.get(f"/rest/agile/1.0/board/{board_id}/sprint", params=params)
