"""Data models for Jira sprints, boards, and tickets.

Every model decodes from raw API JSON with ``from_api``. Decoding fails
closed: a payload that is missing required fields or has the wrong shape
yields ``None`` rather than raising, and optional fields that cannot be
parsed are dropped.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class SprintState(str, Enum):
    """Sprint lifecycle states reported by Jira."""

    FUTURE = "future"
    ACTIVE = "active"
    CLOSED = "closed"


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a Jira ISO 8601 timestamp, returning None when unusable."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


@dataclass(frozen=True)
class Sprint:
    """A Jira sprint."""

    id: int
    name: str
    state: str
    start_date: datetime | None = None
    end_date: datetime | None = None

    @classmethod
    def from_api(cls, data: Any) -> "Sprint | None":
        """Decode a sprint payload from the Agile API or a sprint custom field."""
        if not isinstance(data, dict):
            return None

        sprint_id = data.get("id")
        name = data.get("name")
        if isinstance(sprint_id, bool) or not isinstance(name, str):
            return None
        if isinstance(sprint_id, str) and sprint_id.isdigit():
            sprint_id = int(sprint_id)
        if not isinstance(sprint_id, int):
            return None

        state = data.get("state")
        return cls(
            id=sprint_id,
            name=name,
            state=state.lower() if isinstance(state, str) else "",
            start_date=parse_timestamp(data.get("startDate")),
            end_date=parse_timestamp(data.get("endDate")),
        )

    @property
    def is_future(self) -> bool:
        return self.state == SprintState.FUTURE.value

    @property
    def is_active(self) -> bool:
        return self.state == SprintState.ACTIVE.value

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for display."""
        return {
            "id": self.id,
            "name": self.name,
            "state": self.state,
            "start": self.start_date.isoformat() if self.start_date else "Not set",
            "end": self.end_date.isoformat() if self.end_date else "Not set",
        }


@dataclass(frozen=True)
class Board:
    """A Jira agile board."""

    id: int
    name: str
    type: str = ""

    @classmethod
    def from_api(cls, data: Any) -> "Board | None":
        if not isinstance(data, dict):
            return None
        board_id = data.get("id")
        if isinstance(board_id, bool) or not isinstance(board_id, int):
            return None
        name = data.get("name")
        board_type = data.get("type")
        return cls(
            id=board_id,
            name=name if isinstance(name, str) else "",
            type=board_type if isinstance(board_type, str) else "",
        )


@dataclass(frozen=True)
class EpicRef:
    """Reference to a ticket's parent epic."""

    key: str
    summary: str

    @classmethod
    def from_api(cls, data: Any) -> "EpicRef | None":
        if not isinstance(data, dict):
            return None
        key = data.get("key")
        if not isinstance(key, str) or not key:
            return None
        summary = _as_dict(data.get("fields")).get("summary")
        return cls(key=key, summary=summary if isinstance(summary, str) else "")


@dataclass(frozen=True)
class Ticket:
    """A Jira issue as returned by search or issue lookups."""

    id: str
    key: str
    summary: str
    status: str
    epic: EpicRef | None = None

    @classmethod
    def from_api(cls, data: Any) -> "Ticket | None":
        if not isinstance(data, dict):
            return None
        key = data.get("key")
        if not isinstance(key, str) or not key:
            return None

        fields = _as_dict(data.get("fields"))
        summary = fields.get("summary")
        status = _as_dict(fields.get("status")).get("name")
        return cls(
            id=str(data.get("id", "")),
            key=key,
            summary=summary if isinstance(summary, str) else "",
            status=status if isinstance(status, str) else "",
            epic=EpicRef.from_api(fields.get("parent")),
        )
