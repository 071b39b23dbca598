"""DashboardService: resolves a team, fetches its issues, and builds the dashboard."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from .dashboard import build_dashboard
from .exceptions import ConfigurationError
from .github_client import GitHubProjectsAPI
from .jira_client import JiraAPI
from .models import SourceKind, TeamScope
from .teams import TeamRegistry

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int | None, int | None], None]
Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


class DashboardService:
    def __init__(
        self,
        *,
        jira: JiraAPI | None = None,
        github: GitHubProjectsAPI | None = None,
        registry: TeamRegistry | None = None,
        clock: Clock = _utc_now,
    ):
        self.jira = jira
        self.github = github
        self.registry = registry or TeamRegistry()
        self.clock = clock
        self._projects: dict[tuple, dict[str, Any]] = {}

    # ------------------ Fetch Methods ------------------
    def _jira(self) -> JiraAPI:
        if self.jira is None:
            raise ConfigurationError("Jira credentials not configured")
        return self.jira

    def _github(self) -> GitHubProjectsAPI:
        if self.github is None:
            raise ConfigurationError("GitHub token not configured")
        return self.github

    def _github_project(self, scope: TeamScope) -> dict[str, Any]:
        cache_key = (scope.github_owner, scope.github_project_number)
        if cache_key not in self._projects:
            api = self._github()
            project = api.get_user_project(scope.github_owner, scope.github_project_number)
            api.ensure_status_field(project["id"])
            self._projects[cache_key] = project
        return self._projects[cache_key]

    def fetch_board_issues(self, scope: TeamScope) -> list[dict[str, Any]]:
        if scope.source is SourceKind.JIRA:
            return self._jira().fetch_project_issues(scope.project_key)
        project = self._github_project(scope)
        return self._github().get_project_items(project["id"])

    def fetch_backlog_issues(self, scope: TeamScope) -> list[dict[str, Any]] | None:
        """Backlog query results, or None when the source has no backlog query.

        GitHub Projects keep their backlog as a board column, so the backlog is
        derived from the board items during the dashboard build instead.
        """
        if scope.source is SourceKind.JIRA:
            return self._jira().fetch_backlog(scope.board_id)
        return None

    # ------------------ Dashboard ------------------
    def dashboard_for_scope(
        self,
        scope: TeamScope,
        *,
        progress: ProgressCallback | None = None,
    ) -> dict[str, Any]:
        # Each dashboard is a fresh snapshot
        if scope.source is SourceKind.JIRA:
            self._jira().clear_cache()
        else:
            self._projects.pop((scope.github_owner, scope.github_project_number), None)
        if progress:
            progress(f"Fetching board issues for {scope.team_name}", None, None)
        board_raw = self.fetch_board_issues(scope)
        if progress:
            progress("Fetching backlog issues", None, None)
        backlog_raw = self.fetch_backlog_issues(scope)

        if scope.source is SourceKind.JIRA:
            api = self._jira()
            project = {"key": scope.project_key, "name": api.project_name(scope.project_key, board_raw)}
            server = api.server
        else:
            gh_project = self._github_project(scope)
            project = {
                "key": f"{scope.github_owner}/{scope.github_project_number}",
                "name": gh_project.get("title") or "",
            }
            server = None

        logger.info(
            "Building %s dashboard for team %s from %s board record(s)",
            scope.source.value,
            scope.team_id,
            len(board_raw),
        )
        if progress:
            progress("Calculating dashboard metrics", None, None)
        return build_dashboard(
            board_raw,
            backlog_raw,
            self.clock(),
            source=scope.source,
            server=server,
            project=project,
            team=scope.summary(),
        )

    def dashboard_for_team(
        self,
        team_id: str | int,
        *,
        progress: ProgressCallback | None = None,
    ) -> dict[str, Any]:
        return self.dashboard_for_scope(self.registry.resolve(team_id), progress=progress)
