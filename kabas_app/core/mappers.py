"""Mapping raw Jira issues and GitHub Project items into Issue instances."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

import pandas as pd

from kabas_app.analytics.metrics.timing import parse_timestamp

from .config import GITHUB_DEFAULT_STATUS, GITHUB_STATUS_FIELD, JIRA_DEFAULT_STATUS, UNASSIGNED
from .exceptions import ValidationError
from .models import Issue
from .status import classify_status, map_jira_status_category

logger = logging.getLogger(__name__)

IssueMapper = Callable[[dict[str, Any]], Issue]


def _name(node: Any, attr: str = "name") -> str | None:
    if isinstance(node, dict):
        value = node.get(attr)
        if isinstance(value, str) and value.strip():
            return value
    return None


def _nodes(container: Any) -> list[Any]:
    """The ``nodes`` list of a GraphQL connection, empty when absent or malformed."""
    nodes = container.get("nodes") if isinstance(container, dict) else None
    return nodes if isinstance(nodes, list) else []


def map_jira_issue(raw: dict[str, Any], server: str | None = None) -> Issue:
    if not isinstance(raw, dict):
        raise ValidationError(f"Jira issue must be an object, got {type(raw).__name__}")
    key = raw.get("key")
    if not key:
        raise ValidationError("Jira issue without a key")
    fields = raw.get("fields") or {}
    if not isinstance(fields, dict):
        raise ValidationError(f"Jira issue {key} has malformed fields")
    created = parse_timestamp(fields.get("created"))
    if created is None:
        raise ValidationError(f"Jira issue {key} has no valid created timestamp")
    status_block = fields.get("status") or {}
    if not isinstance(status_block, dict):
        raise ValidationError(f"Jira issue {key} has a malformed status")
    url = f"{server.rstrip('/')}/browse/{key}" if server else None
    return Issue(
        key=str(key),
        title=fields.get("summary") or "",
        url=url,
        assignee=_name(fields.get("assignee"), "displayName") or UNASSIGNED,
        status=_name(status_block) or JIRA_DEFAULT_STATUS,
        status_category=map_jira_status_category(_name(status_block.get("statusCategory"))),
        priority=_name(fields.get("priority")),
        created_at=created,
        updated_at=parse_timestamp(fields.get("updated")),
        completed_at=parse_timestamp(fields.get("resolutiondate")),
    )


def _github_status(item: dict[str, Any]) -> str | None:
    """Value of the single-select field named Status, if the item has one."""
    status = None
    for node in _nodes(item.get("fieldValues")):
        if not isinstance(node, dict):
            continue
        if node.get("__typename") not in (None, "ProjectV2ItemFieldSingleSelectValue"):
            continue
        field_name = _name(node.get("field")) or ""
        if field_name.lower() == GITHUB_STATUS_FIELD:
            status = _name(node)
    return status


def _first_login(content: dict[str, Any]) -> str | None:
    for node in _nodes(content.get("assignees")):
        login = _name(node, "login")
        if login:
            return login
    return None


def map_github_item(raw: dict[str, Any]) -> Issue:
    if not isinstance(raw, dict):
        raise ValidationError(f"GitHub project item must be an object, got {type(raw).__name__}")
    content = raw.get("content")
    if not isinstance(content, dict) or not content:
        raise ValidationError(f"GitHub project item {raw.get('id')!r} has no linked content")
    number = content.get("number")
    if number is not None:
        key = f"#{number}"
    elif raw.get("id"):
        key = str(raw["id"])
    else:
        raise ValidationError("GitHub project item without number or id")
    created = parse_timestamp(content.get("createdAt") or raw.get("createdAt"))
    if created is None:
        raise ValidationError(f"GitHub item {key} has no valid createdAt timestamp")
    raw_status = _github_status(raw)
    return Issue(
        key=key,
        title=content.get("title") or "",
        url=content.get("url"),
        assignee=_first_login(content) or UNASSIGNED,
        status=raw_status or GITHUB_DEFAULT_STATUS,
        status_category=classify_status(raw_status),
        priority=None,
        created_at=created,
        updated_at=parse_timestamp(content.get("updatedAt") or raw.get("updatedAt")),
        completed_at=parse_timestamp(content.get("closedAt")),
    )


def normalize_issues(raw_issues: Iterable[dict[str, Any]], mapper: IssueMapper) -> tuple[list[Issue], int]:
    """Map a batch of raw records, skipping the ones that fail validation.

    Returns the normalized issues (first occurrence wins on duplicate keys)
    and the number of records that were dropped.
    """
    issues: list[Issue] = []
    seen: set[str] = set()
    skipped = 0
    for raw in raw_issues or []:
        try:
            issue = mapper(raw)
        except ValidationError as exc:
            logger.warning("Skipping malformed record: %s", exc)
            skipped += 1
            continue
        if issue.key in seen:
            logger.warning("Skipping duplicate issue key %s", issue.key)
            skipped += 1
            continue
        seen.add(issue.key)
        issues.append(issue)
    return issues, skipped


def issues_to_dataframe(issues: Iterable[Issue]) -> pd.DataFrame:
    rows = []
    for i in issues:
        rows.append(
            {
                "key": i.key,
                "title": i.title,
                "assignee": i.assignee,
                "status": i.status,
                "status_category": i.status_category.value,
                "priority": i.priority,
                "created_at": i.created_at,
                "updated_at": i.updated_at,
                "completed_at": i.completed_at,
            }
        )
    columns = [
        "key",
        "title",
        "assignee",
        "status",
        "status_category",
        "priority",
        "created_at",
        "updated_at",
        "completed_at",
    ]
    return pd.DataFrame(rows, columns=columns)
