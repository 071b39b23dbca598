"""Team registry: resolve a team id into its tracker fetch parameters.

Teams are declared in a YAML file (``teams.yaml`` by default)::

    teams:
      - id: "1"
        name: Team Alpha
        source: jira
        project_key: ALPHA
        board_id: 12
      - id: "2"
        name: Team Beta
        source: github
        github_owner: octocat
        github_project_number: 3

Credentials never live here; they are supplied to the clients separately.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml

from .config import DEFAULT_TEAMS_FILE
from .exceptions import ConfigurationError, TeamNotFoundError
from .models import SourceKind, TeamScope

logger = logging.getLogger(__name__)


def scope_from_mapping(data: dict[str, Any]) -> TeamScope:
    if not isinstance(data, dict):
        raise ConfigurationError(f"Team entry must be a mapping, got {data!r}")
    team_id = data.get("id")
    if team_id is None or str(team_id).strip() == "":
        raise ConfigurationError("Team entry without an id")
    team_id = str(team_id)
    try:
        source = SourceKind(str(data.get("source", "")).strip().lower())
    except ValueError:
        raise ConfigurationError(f"Team {team_id}: unknown source {data.get('source')!r}") from None

    board_id = data.get("board_id")
    number = data.get("github_project_number")
    try:
        number = int(number) if number not in (None, "") else None
    except (TypeError, ValueError):
        raise ConfigurationError(f"Team {team_id}: github_project_number must be an integer") from None
    scope = TeamScope(
        team_id=team_id,
        team_name=str(data.get("name") or team_id),
        source=source,
        project_key=data.get("project_key") or None,
        board_id=str(board_id) if board_id not in (None, "") else None,
        github_owner=data.get("github_owner") or None,
        github_project_number=number,
    )
    if source is SourceKind.JIRA and not scope.project_key:
        raise ConfigurationError(f"Team {team_id}: Jira teams need a project_key")
    if source is SourceKind.GITHUB and not (scope.github_owner and scope.github_project_number):
        raise ConfigurationError(f"Team {team_id}: GitHub teams need github_owner and github_project_number")
    return scope


class TeamRegistry:
    def __init__(self, teams: Iterable[TeamScope] = ()):
        self._teams: dict[str, TeamScope] = {}
        for team in teams:
            self._teams[team.team_id] = team

    @classmethod
    def from_yaml(cls, path: str | Path | None = None) -> TeamRegistry:
        yaml_path = Path(path or DEFAULT_TEAMS_FILE)
        if not yaml_path.exists():
            logger.info("No team registry at %s; starting empty", yaml_path)
            return cls()
        try:
            data = yaml.safe_load(yaml_path.read_text()) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"Cannot read team registry {yaml_path}: {exc}") from exc
        entries = (data.get("teams") or []) if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise ConfigurationError(f"{yaml_path}: expected a top-level 'teams' list")
        return cls(scope_from_mapping(entry) for entry in entries)

    def teams(self) -> list[TeamScope]:
        return list(self._teams.values())

    def resolve(self, team_id: str | int) -> TeamScope:
        try:
            return self._teams[str(team_id)]
        except KeyError:
            raise TeamNotFoundError(f"Team {team_id} not found") from None
