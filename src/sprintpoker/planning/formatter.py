"""Render grouped tickets as poker-planning slash commands."""

from collections.abc import Mapping

from sprintpoker.planning.grouping import EpicGroup

COMMAND = "/pp"


def ticket_url(base_url: str, ticket_key: str) -> str:
    return f"{base_url}/browse/{ticket_key}"


def render_commands(groups: Mapping[str, EpicGroup], base_url: str) -> str:
    """One ``/pp <url> <summary>`` line per ticket, a blank line after each group."""
    lines: list[str] = []
    for group in groups.values():
        for ticket in group.tickets:
            lines.append(f"{COMMAND} {ticket_url(base_url, ticket.key)} {ticket.summary}\n")
        lines.append("\n")
    return "".join(lines)
