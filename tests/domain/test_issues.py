"""
Tests for Issue domain models

Tests cover:
- Priority naming, including out-of-range values
- Sort rank (no priority and priority 0 rank last)
- Issue ordering by rank then most recent update
- JSON serialization shape
"""

import pytest

from workboard.domain.issues import (
    NO_PRIORITY_RANK,
    Issue,
    IssuePriority,
    IssueStatus,
    IssueTeam,
    priority_name,
    sort_issues,
)


def make_issue(issue_id: str, priority: int | None, updated_at: str) -> Issue:
    return Issue(
        id=issue_id,
        identifier=issue_id.upper(),
        title=f"Issue {issue_id}",
        url=f"https://linear.app/acme/issue/{issue_id}",
        status=IssueStatus(name="Todo", type="unstarted", color="#e2e2e2"),
        priority=IssuePriority.from_value(priority) if priority is not None else None,
        project=None,
        assignee=None,
        created_at="2026-09-01T00:00:00Z",
        updated_at=updated_at,
        team=IssueTeam(name="Engineering", key="ENG"),
    )


class TestPriorityName:
    """Tests for priority_name()"""

    @pytest.mark.parametrize(
        "value,expected",
        [(0, "No priority"), (1, "Urgent"), (2, "High"), (3, "Normal"), (4, "Low")],
    )
    def test_known_priorities(self, value, expected):
        assert priority_name(value) == expected

    @pytest.mark.parametrize("value", [5, 17, -1, -4])
    def test_out_of_range_is_unknown(self, value):
        """Values outside 0..4, negatives included, map to Unknown"""
        assert priority_name(value) == "Unknown"

    def test_from_value_carries_name(self):
        priority = IssuePriority.from_value(1)
        assert priority.value == 1
        assert priority.name == "Urgent"


class TestSortRank:
    """Tests for Issue.sort_rank"""

    def test_missing_priority_ranks_last(self):
        assert make_issue("a", None, "2026-10-01T00:00:00Z").sort_rank == NO_PRIORITY_RANK

    def test_priority_zero_ranks_last(self):
        assert make_issue("a", 0, "2026-10-01T00:00:00Z").sort_rank == NO_PRIORITY_RANK

    def test_priority_value_is_rank(self):
        assert make_issue("a", 3, "2026-10-01T00:00:00Z").sort_rank == 3


class TestSortIssues:
    """Tests for sort_issues()"""

    def test_high_priority_before_no_priority_even_if_older(self):
        """A(priority 2, older) sorts before B(priority 0, newer)"""
        a = make_issue("a", 2, "2026-10-01T10:00:00Z")
        b = make_issue("b", 0, "2026-10-05T10:00:00Z")

        assert [i.id for i in sort_issues([b, a])] == ["a", "b"]

    def test_same_rank_most_recent_first(self):
        older = make_issue("older", 3, "2026-10-01T10:00:00Z")
        newer = make_issue("newer", 3, "2026-10-02T10:00:00Z")

        assert [i.id for i in sort_issues([older, newer])] == ["newer", "older"]

    def test_missing_and_zero_priority_share_a_rank(self):
        none_old = make_issue("none-old", None, "2026-10-01T10:00:00Z")
        zero_new = make_issue("zero-new", 0, "2026-10-03T10:00:00Z")

        assert [i.id for i in sort_issues([none_old, zero_new])] == ["zero-new", "none-old"]

    def test_order_is_rank_then_update(self):
        issues = [
            make_issue("low", 4, "2026-10-09T00:00:00Z"),
            make_issue("none", None, "2026-10-10T00:00:00Z"),
            make_issue("urgent-old", 1, "2026-10-01T00:00:00Z"),
            make_issue("urgent-new", 1, "2026-10-08T00:00:00Z"),
            make_issue("unknown", 7, "2026-10-02T00:00:00Z"),
            make_issue("high", 2, "2026-10-03T00:00:00Z"),
        ]

        result = sort_issues(issues)

        assert [i.id for i in result] == ["urgent-new", "urgent-old", "high", "low", "unknown", "none"]
        ranks = [i.sort_rank for i in result]
        assert ranks == sorted(ranks)

    def test_unparseable_timestamp_sorts_after_parseable_in_rank(self):
        bad = make_issue("bad", 2, "not-a-date")
        good = make_issue("good", 2, "2020-01-01T00:00:00Z")

        assert [i.id for i in sort_issues([bad, good])] == ["good", "bad"]

    def test_input_not_modified(self):
        issues = [make_issue("b", None, "2026-10-01T00:00:00Z"), make_issue("a", 1, "2026-10-01T00:00:00Z")]

        sort_issues(issues)

        assert [i.id for i in issues] == ["b", "a"]


class TestIssueSerialization:
    """Tests for Issue.to_dict()"""

    def test_null_priority_serializes_as_none(self):
        data = make_issue("a", None, "2026-10-01T00:00:00Z").to_dict()
        assert data["priority"] is None

    def test_camel_case_shape(self):
        data = make_issue("a", 2, "2026-10-01T00:00:00Z").to_dict()

        assert data["priority"] == {"value": 2, "name": "High"}
        assert data["updatedAt"] == "2026-10-01T00:00:00Z"
        assert data["createdAt"] == "2026-09-01T00:00:00Z"
        assert data["status"] == {"name": "Todo", "type": "unstarted", "color": "#e2e2e2"}
        assert data["team"] == {"name": "Engineering", "key": "ENG"}
        assert data["project"] is None
        assert data["assignee"] is None
