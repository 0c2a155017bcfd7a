"""Tests for sprint lookups."""

import pytest

from sprintpoker.config import PlanningConfig
from sprintpoker.core.exceptions import JiraError
from sprintpoker.planning.models import Board, Sprint
from sprintpoker.planning.sprints import SprintRepository, sort_by_start_date

from conftest import sprint_payload


def _page(values, is_last=False, total=None):
    page = {"values": values, "isLast": is_last}
    if total is not None:
        page["total"] = total
    return page


class TestSortByStartDate:
    """Tests for sort_by_start_date."""

    def test_most_recent_first(self):
        sprints = [
            Sprint.from_api(sprint_payload(1, "Old", start="2024-01-01T00:00:00.000Z")),
            Sprint.from_api(sprint_payload(3, "New", start="2024-03-01T00:00:00.000Z")),
            Sprint.from_api(sprint_payload(2, "Mid", start="2024-02-01T00:00:00.000Z")),
        ]

        assert [s.name for s in sort_by_start_date(sprints)] == ["New", "Mid", "Old"]

    def test_missing_dates_do_not_raise(self):
        sprints = [
            Sprint.from_api(sprint_payload(1, "A", start="2020-01-01T00:00:00.000Z")),
            Sprint.from_api(sprint_payload(2, "U")),
            Sprint.from_api(sprint_payload(3, "B", start="2021-01-01T00:00:00.000Z")),
        ]

        result = sort_by_start_date(sprints)

        # An undated sprint compares equal to both neighbours, so nothing moves
        assert [s.name for s in result] == ["A", "U", "B"]

    def test_all_undated_keep_order(self):
        sprints = [Sprint.from_api(sprint_payload(i, f"S{i}")) for i in range(5)]
        assert sort_by_start_date(sprints) == sprints


class TestListSprints:
    """Tests for SprintRepository.list_sprints."""

    def test_single_page(self, mock_jira, settings):
        mock_jira.list_sprints.return_value = _page(
            [
                sprint_payload(1, "Sprint 1", "closed", start="2024-01-01T00:00:00.000Z"),
                sprint_payload(2, "Sprint 2", "active", start="2024-01-15T00:00:00.000Z"),
            ],
            is_last=True,
        )

        sprints = SprintRepository(mock_jira, settings).list_sprints("42")

        assert [s.name for s in sprints] == ["Sprint 2", "Sprint 1"]
        mock_jira.list_sprints.assert_called_once_with("42", start_at=0, max_results=50)

    def test_pages_until_last(self, mock_jira, settings):
        first = [sprint_payload(i, f"S{i}", "closed") for i in range(50)]
        second = [sprint_payload(50 + i, f"S{50 + i}", "future") for i in range(3)]
        mock_jira.list_sprints.side_effect = [_page(first), _page(second, is_last=True)]

        sprints = SprintRepository(mock_jira, settings).list_sprints("42")

        assert len(sprints) == 53
        assert mock_jira.list_sprints.call_args_list[1].kwargs["start_at"] == 50

    def test_stops_when_total_reached(self, mock_jira, settings):
        mock_jira.list_sprints.return_value = _page(
            [sprint_payload(1, "S1"), sprint_payload(2, "S2")],
            is_last=False,
            total=2,
        )

        sprints = SprintRepository(mock_jira, settings).list_sprints("42")

        assert len(sprints) == 2
        assert mock_jira.list_sprints.call_count == 1

    def test_stops_at_cap(self, mock_jira, settings):
        planning = PlanningConfig(sprint_page_size=2, max_sprints=3)
        counter = iter(range(100))

        def endless_page(board_id, start_at, max_results):
            return _page([sprint_payload(next(counter), "S") for _ in range(max_results)])

        mock_jira.list_sprints.side_effect = endless_page

        sprints = SprintRepository(mock_jira, settings, planning).list_sprints("42")

        assert len(sprints) == 3
        assert mock_jira.list_sprints.call_count == 2

    def test_failure_keeps_collected_sprints(self, mock_jira, settings):
        first = [sprint_payload(i, f"S{i}") for i in range(50)]
        mock_jira.list_sprints.side_effect = [_page(first), JiraError("boom", status_code=500)]

        sprints = SprintRepository(mock_jira, settings).list_sprints("42")

        assert len(sprints) == 50

    def test_failure_on_first_page_is_empty(self, mock_jira, settings):
        mock_jira.list_sprints.side_effect = JiraError("boom")
        assert SprintRepository(mock_jira, settings).list_sprints("42") == []

    def test_missing_values_ends_paging(self, mock_jira, settings):
        mock_jira.list_sprints.return_value = {"isLast": False}
        assert SprintRepository(mock_jira, settings).list_sprints("42") == []
        assert mock_jira.list_sprints.call_count == 1

    def test_malformed_entries_skipped(self, mock_jira, settings):
        mock_jira.list_sprints.return_value = _page(
            [sprint_payload(1, "Good"), {"name": "no id"}, "junk"],
            is_last=True,
        )

        sprints = SprintRepository(mock_jira, settings).list_sprints("42")

        assert [s.name for s in sprints] == ["Good"]

    def test_result_sorted_non_increasing(self, mock_jira, settings):
        starts = ["2024-02-01", "2024-05-01", "2024-01-01", "2024-03-01"]
        mock_jira.list_sprints.return_value = _page(
            [sprint_payload(i, f"S{i}", start=f"{d}T00:00:00.000Z") for i, d in enumerate(starts)],
            is_last=True,
        )

        sprints = SprintRepository(mock_jira, settings).list_sprints("42")

        dates = [s.start_date for s in sprints]
        assert dates == sorted(dates, reverse=True)


class TestResolveSprintForTicket:
    """Tests for SprintRepository.resolve_sprint_for_ticket."""

    def test_returns_last_membership(self, mock_jira, settings):
        mock_jira.get_agile_issue.return_value = {
            "key": "T-1",
            "fields": {"cf[10007]": [{"id": 1, "name": "S1"}, {"id": 2, "name": "S2"}]},
        }

        sprint = SprintRepository(mock_jira, settings).resolve_sprint_for_ticket("T-1")

        assert sprint is not None
        assert sprint.name == "S2"
        assert sprint.id == 2
        mock_jira.get_agile_issue.assert_called_once_with("T-1")

    def test_customfield_name_fallback(self, mock_jira, settings):
        mock_jira.get_agile_issue.return_value = {
            "fields": {"customfield_10007": [{"id": 9, "name": "S9", "state": "active"}]},
        }

        sprint = SprintRepository(mock_jira, settings).resolve_sprint_for_ticket("T-1")

        assert sprint.name == "S9"

    @pytest.mark.parametrize(
        "fields",
        [
            {},
            {"cf[10007]": None},
            {"cf[10007]": []},
            {"cf[10007]": {"id": 1, "name": "S1"}},
            {"cf[10007]": [{"id": 1, "name": "S1"}, "garbage"]},
        ],
    )
    def test_absent_when_field_unusable(self, mock_jira, settings, fields):
        mock_jira.get_agile_issue.return_value = {"fields": fields}
        assert SprintRepository(mock_jira, settings).resolve_sprint_for_ticket("T-1") is None

    def test_absent_on_failure(self, mock_jira, settings):
        mock_jira.get_agile_issue.side_effect = JiraError("Issue does not exist", status_code=404)
        assert SprintRepository(mock_jira, settings).resolve_sprint_for_ticket("T-404") is None


class TestBoards:
    """Tests for board lookups."""

    def test_list_boards(self, mock_jira, settings):
        mock_jira.list_boards.return_value = {
            "values": [{"id": 1, "name": "Alpha", "type": "scrum"}, {"name": "broken"}],
        }

        boards = SprintRepository(mock_jira, settings).list_boards()

        assert boards == [Board(id=1, name="Alpha", type="scrum")]

    def test_list_boards_failure(self, mock_jira, settings):
        mock_jira.list_boards.side_effect = JiraError("boom")
        assert SprintRepository(mock_jira, settings).list_boards() == []

    def test_find_board_for_sprint(self, mock_jira, settings):
        mock_jira.list_boards.return_value = {
            "values": [{"id": 1, "name": "Alpha"}, {"id": 2, "name": "Beta"}],
        }
        sprints_by_board = {
            1: _page([sprint_payload(10, "A10")], is_last=True),
            2: _page([sprint_payload(20, "B20")], is_last=True),
        }
        mock_jira.list_sprints.side_effect = (
            lambda board_id, start_at, max_results: sprints_by_board[board_id]
        )

        board = SprintRepository(mock_jira, settings).find_board_for_sprint(20)

        assert board.name == "Beta"

    def test_find_board_for_unknown_sprint(self, mock_jira, settings):
        mock_jira.list_boards.return_value = {"values": [{"id": 1, "name": "Alpha"}]}
        mock_jira.list_sprints.return_value = _page([sprint_payload(10, "A10")], is_last=True)

        assert SprintRepository(mock_jira, settings).find_board_for_sprint(99) is None
