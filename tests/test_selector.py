"""Tests for next-sprint selection."""

from sprintpoker.planning.models import Sprint
from sprintpoker.planning.selector import select_next_sprint


def _sprint(sprint_id: int, name: str, state: str) -> Sprint:
    return Sprint(id=sprint_id, name=name, state=state)


class TestSelectNextSprint:
    """Tests for select_next_sprint."""

    def test_prefers_future_and_skips_devops(self):
        sprints = [
            _sprint(10, "Sprint 10", "future"),
            _sprint(11, "DevOps Sprint", "future"),
            _sprint(9, "Sprint 9", "active"),
        ]

        assert select_next_sprint(sprints).name == "Sprint 10"

    def test_devops_future_sprint_never_chosen_first(self):
        sprints = [
            _sprint(11, "DevOps Sprint", "future"),
            _sprint(10, "Sprint 10", "future"),
        ]

        assert select_next_sprint(sprints).name == "Sprint 10"

    def test_falls_back_to_active(self):
        sprints = [
            _sprint(11, "DevOps Sprint", "future"),
            _sprint(8, "Sprint 8", "closed"),
            _sprint(9, "Sprint 9", "active"),
        ]

        assert select_next_sprint(sprints).name == "Sprint 9"

    def test_falls_back_to_most_recent_closed(self):
        assert select_next_sprint([_sprint(8, "Sprint 8", "closed")]).name == "Sprint 8"

    def test_devops_only_future_falls_through_to_first(self):
        sprints = [_sprint(11, "DevOps Sprint", "future"), _sprint(7, "Sprint 7", "closed")]
        assert select_next_sprint(sprints).name == "DevOps Sprint"

    def test_empty(self):
        assert select_next_sprint([]) is None

    def test_latest_starting_future_sprint_wins(self):
        # Input is sorted most recent first, so the furthest-out future
        # sprint is returned rather than the soonest one.
        sprints = [
            _sprint(12, "Sprint 12", "future"),
            _sprint(11, "Sprint 11", "future"),
            _sprint(10, "Sprint 10", "active"),
        ]

        assert select_next_sprint(sprints).name == "Sprint 12"

    def test_custom_marker(self):
        sprints = [_sprint(2, "Hardening", "future"), _sprint(1, "Sprint 1", "future")]
        assert select_next_sprint(sprints, excluded_marker="Hardening").name == "Sprint 1"

    def test_empty_marker_excludes_nothing(self):
        sprints = [_sprint(2, "DevOps Sprint", "future")]
        assert select_next_sprint(sprints, excluded_marker="").name == "DevOps Sprint"
