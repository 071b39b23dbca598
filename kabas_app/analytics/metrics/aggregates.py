"""Board aggregations: counts, groupings, rankings and completion statistics.

Every function takes already-partitioned issues and returns plain,
JSON-serializable structures. Groupings keep first-encounter order so ties
resolve the same way on every run.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

import pandas as pd

from kabas_app.core.mappers import issues_to_dataframe
from kabas_app.core.models import Issue, StatusCategory

from .timing import hours_between, round_hours

GROUP_ATTRIBUTES = {
    "status": lambda i: i.status,
    "statusCategory": lambda i: i.status_category.value,
    "assignee": lambda i: i.assignee,
}

NO_MEMBER: dict[str, Any] = {"member": None, "count": 0}


def _counts(df: pd.DataFrame, column: str) -> dict[str, int]:
    if df.empty:
        return {}
    sizes = df.groupby(column, sort=False).size()
    return {str(k): int(v) for k, v in sizes.items()}


def status_counts(issues: Sequence[Issue]) -> dict[str, int]:
    return _counts(issues_to_dataframe(issues), "status")


def status_category_counts(issues: Sequence[Issue]) -> dict[str, int]:
    return _counts(issues_to_dataframe(issues), "status_category")


def member_counts(issues: Sequence[Issue]) -> dict[str, int]:
    return _counts(issues_to_dataframe(issues), "assignee")


def group_issues(issues: Sequence[Issue], by: str) -> dict[str, list[Issue]]:
    """Group issues by ``status``, ``statusCategory`` or ``assignee``.

    Groups appear in first-encounter order and each group keeps the input's
    relative order.
    """
    try:
        key_fn = GROUP_ATTRIBUTES[by]
    except KeyError:
        raise ValueError(f"Unsupported grouping {by!r}; expected one of {sorted(GROUP_ATTRIBUTES)}") from None
    groups: dict[str, list[Issue]] = {}
    for issue in issues:
        groups.setdefault(key_fn(issue), []).append(issue)
    return groups


def longest_open(issues: Sequence[Issue], now: datetime) -> dict[str, Any] | None:
    """Oldest still-open issue with its age in hours, or None if all are done."""
    best: Issue | None = None
    best_age = 0.0
    for issue in issues:
        if not issue.is_open:
            continue
        age = round_hours(hours_between(issue.created_at, now))
        if best is None or age > best_age:
            best, best_age = issue, age
    if best is None:
        return None
    return {**best.to_dict(), "ageHours": best_age}


def _top(df: pd.DataFrame) -> dict[str, Any]:
    if df.empty:
        return dict(NO_MEMBER)
    sizes = df.groupby("assignee", sort=False).size()
    # idxmax returns the first label reaching the maximum
    member = sizes.idxmax()
    return {"member": str(member), "count": int(sizes[member])}


def top_members(board: Sequence[Issue], backlog: Sequence[Issue]) -> dict[str, dict[str, Any]]:
    board_df = issues_to_dataframe(board)
    backlog_df = issues_to_dataframe(backlog)
    opened = board_df.loc[board_df["completed_at"].isna()]
    todo = board_df.loc[board_df["status_category"] == StatusCategory.TO_DO.value]
    return {
        "mostOpened": _top(opened),
        "mostTodo": _top(todo),
        "mostBacklog": _top(backlog_df),
    }


def backlog_by_member(backlog: Sequence[Issue]) -> dict[str, int]:
    return member_counts(backlog)


def time_stats_by_member(issues: Sequence[Issue]) -> dict[str, dict[str, Any]]:
    """Completion-time statistics for members with at least one finished issue.

    ``stdDevHours`` is the population standard deviation (ddof=0).
    """
    df = issues_to_dataframe(issues)
    done = df.loc[df["completed_at"].notna()].copy()
    if done.empty:
        return {}
    done["duration_hours"] = [
        hours_between(created, completed) for created, completed in zip(done["created_at"], done["completed_at"])
    ]
    grouped = done.groupby("assignee", sort=False)["duration_hours"]
    sizes = grouped.size()
    means = grouped.mean()
    stds = grouped.std(ddof=0)
    stats: dict[str, dict[str, Any]] = {}
    for member in sizes.index:
        stats[str(member)] = {
            "completedTasks": int(sizes[member]),
            "avgCompletionHours": round_hours(means[member]),
            "stdDevHours": round_hours(stds[member]),
        }
    return stats


def latest_sample_by_member(issues: Sequence[Issue]) -> dict[str, dict[str, Any]]:
    """Most recently created open issue per member, else most recently completed."""
    samples: dict[str, dict[str, Any]] = {}
    for member, items in group_issues(issues, "assignee").items():
        opened = [i for i in items if i.is_open]
        completed = [i for i in items if not i.is_open]
        if opened:
            sample = max(opened, key=lambda i: i.created_at)
        else:
            sample = max(completed, key=lambda i: i.completed_at)
        samples[member] = sample.to_dict()
    return samples
