from datetime import UTC, datetime, timedelta

import pytest

from kabas_app.analytics.metrics.aggregates import (
    group_issues,
    latest_sample_by_member,
    longest_open,
    member_counts,
    status_category_counts,
    status_counts,
    time_stats_by_member,
    top_members,
)
from kabas_app.core.models import Issue, StatusCategory

NOW = datetime(2024, 9, 10, 12, 0, tzinfo=UTC)


def _issue(key, assignee="Alice", hours_ago=1.0, done_after=None, category=StatusCategory.TO_DO, status=None):
    created = NOW - timedelta(hours=hours_ago)
    completed = created + timedelta(hours=done_after) if done_after is not None else None
    return Issue(
        key=key,
        title=f"Issue {key}",
        assignee=assignee,
        status=status or category.value,
        status_category=category,
        created_at=created,
        completed_at=completed,
    )


def _board():
    return [
        _issue("K-1", "Alice", 30, done_after=10, category=StatusCategory.DONE, status="Done"),
        _issue("K-2", "Bob", 5, category=StatusCategory.IN_PROGRESS, status="In Review"),
        _issue("K-3", "Alice", 40, done_after=20, category=StatusCategory.DONE, status="Done"),
        _issue("K-4", "Carol", 2, category=StatusCategory.TO_DO, status="Ready"),
        _issue("K-5", "Bob", 8, category=StatusCategory.IN_PROGRESS, status="In Progress"),
    ]


def test_status_counts():
    board = _board()
    assert status_counts(board) == {"Done": 2, "In Review": 1, "Ready": 1, "In Progress": 1}
    assert status_category_counts(board) == {"Done": 2, "In Progress": 2, "To Do": 1}


def test_category_counts_sum_to_board_size():
    board = _board()
    assert sum(status_category_counts(board).values()) == len(board)


def test_counts_empty():
    assert status_counts([]) == {}
    assert status_category_counts([]) == {}
    assert member_counts([]) == {}


def test_group_issues_preserves_order():
    board = _board()
    groups = group_issues(board, "assignee")
    assert list(groups) == ["Alice", "Bob", "Carol"]
    assert [i.key for i in groups["Alice"]] == ["K-1", "K-3"]
    assert [i.key for i in groups["Bob"]] == ["K-2", "K-5"]
    by_category = group_issues(board, "statusCategory")
    assert list(by_category) == ["Done", "In Progress", "To Do"]
    assert member_counts(board) == {"Alice": 2, "Bob": 2, "Carol": 1}


def test_group_issues_rejects_unknown_attribute():
    with pytest.raises(ValueError):
        group_issues(_board(), "priority")


def test_longest_open_picks_oldest():
    board = [_issue("A", hours_ago=1), _issue("B", hours_ago=5), _issue("C", hours_ago=3)]
    result = longest_open(board, NOW)
    assert result["key"] == "B"
    assert result["ageHours"] == pytest.approx(5.0, abs=0.01)
    assert result["createdAt"] == (NOW - timedelta(hours=5)).isoformat()


def test_longest_open_ignores_completed_and_breaks_ties_first_seen():
    board = [
        _issue("OLD-DONE", hours_ago=100, done_after=1),
        _issue("FIRST", hours_ago=4),
        _issue("SECOND", hours_ago=4),
    ]
    assert longest_open(board, NOW)["key"] == "FIRST"


def test_longest_open_none_when_nothing_open():
    assert longest_open([_issue("A", done_after=0.5)], NOW) is None
    assert longest_open([], NOW) is None


def test_longest_open_clamps_future_creation():
    result = longest_open([_issue("A", hours_ago=-2)], NOW)
    assert result["ageHours"] == 0.0


def test_top_members_rankings():
    board = _board()
    backlog = [_issue("B-1", "Dave"), _issue("B-2", "Erin"), _issue("B-3", "Erin")]
    top = top_members(board, backlog)
    assert top["mostOpened"] == {"member": "Bob", "count": 2}
    assert top["mostTodo"] == {"member": "Carol", "count": 1}
    assert top["mostBacklog"] == {"member": "Erin", "count": 2}


def test_top_members_tie_break_first_encountered():
    board = [
        _issue("1", "Bob"),
        _issue("2", "Alice"),
        _issue("3", "Alice"),
        _issue("4", "Bob"),
    ]
    top = top_members(board, [])
    assert top["mostOpened"] == {"member": "Bob", "count": 2}
    assert top["mostTodo"] == {"member": "Bob", "count": 2}


def test_top_members_without_candidates():
    board = [_issue("1", done_after=1, category=StatusCategory.DONE)]
    top = top_members(board, [])
    assert top["mostOpened"] == {"member": None, "count": 0}
    assert top["mostTodo"] == {"member": None, "count": 0}
    assert top["mostBacklog"] == {"member": None, "count": 0}


def test_time_stats_population_stddev():
    stats = time_stats_by_member(_board())
    assert stats["Alice"] == {"completedTasks": 2, "avgCompletionHours": 15.0, "stdDevHours": 5.0}


def test_time_stats_omits_members_without_completed_issues():
    stats = time_stats_by_member(_board())
    assert set(stats) == {"Alice"}
    assert time_stats_by_member([]) == {}


def test_time_stats_single_issue_and_rounding():
    board = [_issue("X", "Zed", hours_ago=10, done_after=1 / 3)]
    stats = time_stats_by_member(board)
    assert stats["Zed"] == {"completedTasks": 1, "avgCompletionHours": 0.33, "stdDevHours": 0.0}


def test_latest_sample_prefers_newest_open():
    board = [
        _issue("A-old", "Alice", hours_ago=10),
        _issue("A-new", "Alice", hours_ago=2),
        _issue("A-done", "Alice", hours_ago=1, done_after=0.5),
        _issue("B-1", "Bob", hours_ago=30, done_after=5),
        _issue("B-2", "Bob", hours_ago=20, done_after=1),
    ]
    samples = latest_sample_by_member(board)
    assert samples["Alice"]["key"] == "A-new"
    # Bob has nothing open: most recently completed wins (B-2 closed 19h ago)
    assert samples["Bob"]["key"] == "B-2"
    assert latest_sample_by_member([]) == {}
