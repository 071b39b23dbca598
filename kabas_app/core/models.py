"""Domain data models for normalized issues and team scopes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class StatusCategory(str, Enum):
    BACKLOG = "Backlog"
    TO_DO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class SourceKind(str, Enum):
    JIRA = "jira"
    GITHUB = "github"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass(slots=True)
class Issue:
    key: str
    title: str
    assignee: str
    status: str
    status_category: StatusCategory
    created_at: datetime
    url: str | None = None
    priority: str | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.completed_at is None

    def to_dict(self) -> dict[str, Any]:
        """JSON shape shared by both sources (camelCase, ISO 8601 timestamps)."""
        return {
            "key": self.key,
            "title": self.title,
            "url": self.url,
            "assignee": self.assignee,
            "status": self.status,
            "statusCategory": self.status_category.value,
            "priority": self.priority,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
            "completedAt": _iso(self.completed_at),
        }


@dataclass(slots=True)
class PartitionedIssues:
    board: list[Issue] = field(default_factory=list)
    backlog: list[Issue] = field(default_factory=list)
    skipped: int = 0


@dataclass(slots=True)
class TeamScope:
    """Resolved fetch parameters for one team. Never carries credentials."""

    team_id: str
    team_name: str
    source: SourceKind
    project_key: str | None = None
    board_id: str | None = None
    github_owner: str | None = None
    github_project_number: int | None = None

    def summary(self) -> dict[str, Any]:
        return {"id": self.team_id, "teamName": self.team_name, "boardId": self.board_id}
