"""Group tickets by their parent epic."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from sprintpoker.planning.models import Ticket

NO_EPIC_KEY = "NO_EPIC"
NO_EPIC_NAME = "Tasks without Epic"


@dataclass
class EpicGroup:
    """Tickets sharing a parent epic, in the order they were fetched."""

    key: str
    name: str
    tickets: list[Ticket] = field(default_factory=list)

    @property
    def is_no_epic(self) -> bool:
        return self.key == NO_EPIC_KEY


def group_by_epic(tickets: Iterable[Ticket]) -> dict[str, EpicGroup]:
    """Partition tickets into groups keyed by parent epic key.

    Tickets without a parent land in the ``NO_EPIC`` group, which comes
    first and is dropped when empty. An epic's name is taken from the
    first ticket that references it.
    """
    groups: dict[str, EpicGroup] = {
        NO_EPIC_KEY: EpicGroup(key=NO_EPIC_KEY, name=NO_EPIC_NAME),
    }

    for ticket in tickets:
        if ticket.epic is None:
            groups[NO_EPIC_KEY].tickets.append(ticket)
            continue

        group = groups.get(ticket.epic.key)
        if group is None:
            group = EpicGroup(key=ticket.epic.key, name=ticket.epic.summary)
            groups[ticket.epic.key] = group
        group.tickets.append(ticket)

    if not groups[NO_EPIC_KEY].tickets:
        del groups[NO_EPIC_KEY]

    return groups
