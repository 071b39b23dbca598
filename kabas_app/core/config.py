"""Central configuration, constants, and shared column definitions."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

# =============================================================================
# Display Settings
# =============================================================================
TIMEZONE = "UTC"
UNASSIGNED = "Unassigned"

# =============================================================================
# Status Configuration
# =============================================================================
# Fallback raw labels when a source omits the status entirely
JIRA_DEFAULT_STATUS = "Unknown"
GITHUB_DEFAULT_STATUS = "To Do"

# Keyword rules for board-column labels (lowercase, evaluated in this order)
BACKLOG_KEYWORDS: Sequence[str] = ("backlog",)
TODO_EXACT: Sequence[str] = ("todo",)
TODO_KEYWORDS: Sequence[str] = ("to do",)
IN_PROGRESS_KEYWORDS: Sequence[str] = ("in progress", "doing")
DONE_KEYWORDS: Sequence[str] = ("done", "complete")

# Jira's native status category names and keys (lowercase)
JIRA_CATEGORY_ALIASES: dict[str, str] = {
    "to do": "To Do",
    "new": "To Do",
    "in progress": "In Progress",
    "indeterminate": "In Progress",
    "done": "Done",
}

# Name of the GitHub Projects single-select field holding the board column
GITHUB_STATUS_FIELD = "status"

# =============================================================================
# Metric Settings
# =============================================================================
HOURS_PRECISION = 2  # decimals for every hour value in the payload
EFFICIENCY_PRECISION = 1  # decimals for efficiencyScore
MIN_PROJECT_DURATION_HOURS = 1e-4
EFFICIENCY_NOTE = (
    "Board-only heuristic. Smaller is better. Uses completed duration + open age-so-far; "
    "project duration = now - earliest created."
)

# =============================================================================
# Jira Connection Settings
# =============================================================================
JIRA_SEARCH_PAGE_SIZE = 500
JIRA_BACKLOG_PAGE_SIZE = 200
JIRA_CACHE_TTL_SECONDS = 300.0

JIRA_FETCH_FIELDS = [
    "project",
    "summary",
    "assignee",
    "status",
    "priority",
    "created",
    "updated",
    "resolutiondate",
]

# =============================================================================
# GitHub Connection Settings
# =============================================================================
GITHUB_GRAPHQL_URL = "https://api.github.com/graphql"
GITHUB_ITEMS_PAGE_SIZE = 100
GITHUB_REQUEST_TIMEOUT = 30.0

# =============================================================================
# Registry / Tables
# =============================================================================
DEFAULT_TEAMS_FILE = "teams.yaml"

ISSUE_TABLE_COLUMNS: Sequence[str] = (
    "key",
    "title",
    "assignee",
    "status",
    "statusCategory",
    "priority",
    "createdAt",
    "completedAt",
)

BACKLOG_TABLE_COLUMNS: Sequence[str] = (
    "key",
    "title",
    "assignee",
    "status",
    "createdAt",
)


@dataclass(slots=True)
class AppSettings:
    max_table_rows: int = 1000
    download_encoding: str = "utf-8"


SETTINGS = AppSettings()
