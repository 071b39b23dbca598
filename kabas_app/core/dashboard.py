"""Dashboard assembly: one payload shape for every tracker source.

``build_dashboard`` runs the whole pipeline (normalize, partition, aggregate)
with the mapper of the requested source; ``assemble_dashboard`` does the
aggregation part for issues that are already normalized and partitioned.
Both are pure: the result depends only on the issues and the injected ``now``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Sequence
from datetime import datetime
from functools import partial
from typing import Any

from kabas_app.analytics.metrics.aggregates import (
    backlog_by_member,
    group_issues,
    latest_sample_by_member,
    longest_open,
    member_counts,
    status_category_counts,
    status_counts,
    time_stats_by_member,
    top_members,
)
from kabas_app.analytics.metrics.efficiency import estimate_efficiency
from kabas_app.analytics.metrics.timing import ensure_aware

from .mappers import IssueMapper, map_github_item, map_jira_issue, normalize_issues
from .models import Issue, PartitionedIssues, SourceKind
from .partition import partition_issues, split_backlog_by_category

logger = logging.getLogger(__name__)


def _dicts(issues: Sequence[Issue]) -> list[dict[str, Any]]:
    return [issue.to_dict() for issue in issues]


def _grouped_dicts(issues: Sequence[Issue], by: str) -> dict[str, list[dict[str, Any]]]:
    return {key: _dicts(items) for key, items in group_issues(issues, by).items()}


def mapper_for(source: SourceKind, *, server: str | None = None) -> IssueMapper:
    if source is SourceKind.JIRA:
        return partial(map_jira_issue, server=server)
    if source is SourceKind.GITHUB:
        return map_github_item
    raise ValueError(f"Unsupported source {source!r}")


def assemble_dashboard(
    partitioned: PartitionedIssues,
    now: datetime,
    *,
    source: SourceKind | None = None,
    project: dict[str, Any] | None = None,
    team: dict[str, Any] | None = None,
) -> dict[str, Any]:
    now = ensure_aware(now)
    board = partitioned.board
    backlog = partitioned.backlog
    return {
        "success": True,
        "source": source.value if source is not None else None,
        "team": team,
        "project": project,
        "generatedAt": now.isoformat(),
        "totals": {
            "boardIssues": len(board),
            "backlogIssues": len(backlog),
        },
        "statusCounts": status_counts(board),
        "statusCategoryCounts": status_category_counts(board),
        "memberCounts": member_counts(board),
        "backlog": {
            "count": len(backlog),
            "byMember": backlog_by_member(backlog),
            "issues": _dicts(backlog),
        },
        "longestOpen": longest_open(board, now),
        "topMembers": top_members(board, backlog),
        "timeStatsByMember": time_stats_by_member(board),
        "efficiency": estimate_efficiency(board, now).to_dict(),
        "latestSampleByMember": latest_sample_by_member(board),
        "drilldowns": {
            "issuesByStatus": _grouped_dicts(board, "status"),
            "issuesByStatusCategory": _grouped_dicts(board, "statusCategory"),
            "issuesByAssignee": _grouped_dicts(board, "assignee"),
        },
        "skipped": partitioned.skipped,
    }


def build_dashboard(
    board_raw: Iterable[dict[str, Any]],
    backlog_raw: Iterable[dict[str, Any]] | None,
    now: datetime,
    *,
    source: SourceKind,
    server: str | None = None,
    project: dict[str, Any] | None = None,
    team: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Normalize raw records of one source and assemble the dashboard.

    Parameters
    ----------
    board_raw : iterable of dict
        Records returned by the board query (Jira search / GitHub project items).
    backlog_raw : iterable of dict | None
        Records returned by the backlog query. ``None`` means the source has no
        backlog query: GitHub then takes its Backlog column as the backlog and
        Jira reports an empty backlog.
    now : datetime
        Computation time; naive values are treated as UTC.
    source : SourceKind
        Selects the record mapper.
    server : str, optional
        Jira base URL used to build issue links.
    """
    mapper = mapper_for(source, server=server)
    board_issues, skipped = normalize_issues(board_raw, mapper)
    if backlog_raw is not None:
        backlog_issues, skipped_backlog = normalize_issues(backlog_raw, mapper)
        skipped += skipped_backlog
    elif source is SourceKind.GITHUB:
        board_issues, backlog_issues = split_backlog_by_category(board_issues)
    else:
        backlog_issues = []

    partitioned = partition_issues(board_issues, backlog_issues)
    partitioned.skipped = skipped
    if skipped:
        logger.warning("Dropped %s malformed or duplicate %s record(s)", skipped, source.value)
    logger.debug(
        "Partitioned %s issues: board=%s backlog=%s",
        source.value,
        len(partitioned.board),
        len(partitioned.backlog),
    )
    return assemble_dashboard(partitioned, now, source=source, project=project, team=team)


def dashboard_to_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False)
