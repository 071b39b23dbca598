"""Status categorization for both tracker sources.

Board-column labels from GitHub Projects are classified by keyword rules
(BACKLOG_KEYWORDS, TODO_KEYWORDS, ... in config.py). Jira already supplies a
native status category per issue, which is passed through instead of being
re-derived from the status name.
"""

from __future__ import annotations

from .config import (
    BACKLOG_KEYWORDS,
    DONE_KEYWORDS,
    IN_PROGRESS_KEYWORDS,
    JIRA_CATEGORY_ALIASES,
    TODO_EXACT,
    TODO_KEYWORDS,
)
from .models import StatusCategory


def classify_status(value: str | None) -> StatusCategory:
    """Map a raw board-column label to a canonical status category.

    Rules are evaluated in order against the lowercased label; the first match
    wins. Never raises.

    Parameters
    ----------
    value : str | None
        Raw status label (e.g. a GitHub Projects "Status" option).

    Returns
    -------
    StatusCategory
        Backlog, To Do, In Progress or Done. Empty or unmatched labels fall
        back to To Do.

    Examples
    --------
    >>> classify_status("Product Backlog")
    <StatusCategory.BACKLOG: 'Backlog'>
    >>> classify_status("Doing")
    <StatusCategory.IN_PROGRESS: 'In Progress'>
    >>> classify_status(None)
    <StatusCategory.TO_DO: 'To Do'>
    """
    if not value:
        return StatusCategory.TO_DO
    text = str(value).lower()
    if any(word in text for word in BACKLOG_KEYWORDS):
        return StatusCategory.BACKLOG
    if text in TODO_EXACT or any(word in text for word in TODO_KEYWORDS):
        return StatusCategory.TO_DO
    if any(word in text for word in IN_PROGRESS_KEYWORDS):
        return StatusCategory.IN_PROGRESS
    if any(word in text for word in DONE_KEYWORDS):
        return StatusCategory.DONE
    return StatusCategory.TO_DO


def map_jira_status_category(value: str | None) -> StatusCategory:
    """Pass Jira's native status category through to the canonical enum.

    Jira's taxonomy has no backlog bucket, so Backlog is never produced here;
    backlog membership for Jira comes from the board backlog query.

    Parameters
    ----------
    value : str | None
        ``fields.status.statusCategory.name`` (or its key) from Jira.

    Returns
    -------
    StatusCategory
        To Do, In Progress or Done. Missing and unknown categories
        (e.g. "No Category") map to To Do.
    """
    if not value:
        return StatusCategory.TO_DO
    canonical = JIRA_CATEGORY_ALIASES.get(str(value).strip().lower())
    if canonical is None:
        return StatusCategory.TO_DO
    return StatusCategory(canonical)
