"""Board / backlog segregation."""

from __future__ import annotations

from collections.abc import Iterable

from .models import Issue, PartitionedIssues, StatusCategory


def partition_issues(board_query: Iterable[Issue], backlog_query: Iterable[Issue]) -> PartitionedIssues:
    """Split issues into the active board and the backlog.

    The backlog result is kept as-is. Any board-query issue whose key also
    appears in the backlog is dropped from the board so nothing is counted
    twice. Neither argument's order affects membership.
    """
    backlog = list(backlog_query or [])
    backlog_keys = {issue.key for issue in backlog}
    board = [issue for issue in board_query or [] if issue.key not in backlog_keys]
    return PartitionedIssues(board=board, backlog=backlog)


def split_backlog_by_category(issues: Iterable[Issue]) -> tuple[list[Issue], list[Issue]]:
    """Derive the backlog from the Backlog status column.

    For sources without a dedicated backlog query (GitHub Projects) the
    backlog is simply the items parked in a Backlog column.
    """
    items = list(issues or [])
    backlog = [i for i in items if i.status_category is StatusCategory.BACKLOG]
    return items, backlog
