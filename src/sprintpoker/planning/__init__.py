"""Sprint resolution, ticket grouping, and command rendering."""

from sprintpoker.planning.formatter import render_commands
from sprintpoker.planning.grouping import EpicGroup, group_by_epic
from sprintpoker.planning.issues import IssueQuery
from sprintpoker.planning.models import Board, EpicRef, Sprint, Ticket
from sprintpoker.planning.runner import PlanningRun, RunOutcome, RunResult
from sprintpoker.planning.selector import select_next_sprint
from sprintpoker.planning.sprints import SprintRepository

__all__ = [
    "Board",
    "EpicGroup",
    "EpicRef",
    "IssueQuery",
    "PlanningRun",
    "RunOutcome",
    "RunResult",
    "Sprint",
    "SprintRepository",
    "Ticket",
    "group_by_epic",
    "render_commands",
    "select_next_sprint",
]
