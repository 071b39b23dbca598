"""Jira API client wrapper (REST v3 enhanced search + Agile backlog)."""

from __future__ import annotations

import hashlib
import json
import logging
import time
from collections.abc import Iterator
from typing import Any

import requests
from jira import JIRA, JIRAError

from .config import JIRA_BACKLOG_PAGE_SIZE, JIRA_CACHE_TTL_SECONDS, JIRA_FETCH_FIELDS, JIRA_SEARCH_PAGE_SIZE
from .exceptions import SourceError

logger = logging.getLogger(__name__)

SEARCH_PATH = "/rest/api/3/search/jql"
BACKLOG_PATH = "/rest/agile/1.0/board/{board_id}/backlog"


class JiraAPI:
    def __init__(self, server: str, email: str, token: str):
        self.server = server.rstrip("/")
        try:
            self.client = JIRA(
                basic_auth=(email, token), options={"server": self.server, "rest_api_version": "3"}
            )
        except (JIRAError, requests.RequestException) as exc:
            raise SourceError(f"Failed to connect to Jira at {self.server}: {exc}") from exc
        # Search results by query fingerprint: {digest: (stored_at, issues)}
        self._cache: dict[str, tuple[float, list]] = {}
        self._cache_ttl = JIRA_CACHE_TTL_SECONDS

    # ------------------ Search cache ------------------
    def clear_cache(self) -> None:
        self._cache.clear()

    @staticmethod
    def _fingerprint(**query: Any) -> str:
        return hashlib.sha256(json.dumps(query, sort_keys=True).encode()).hexdigest()

    def _cached(self, digest: str) -> list[dict[str, Any]] | None:
        entry = self._cache.get(digest)
        if entry is None:
            return None
        stored_at, issues = entry
        if time.time() - stored_at >= self._cache_ttl:
            del self._cache[digest]
            return None
        return issues

    # ------------------ HTTP ------------------
    def _session(self):
        session = getattr(self.client, "_session", None)
        if session is None:
            raise SourceError("JIRA session unavailable")
        return session

    def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            resp = self._session().get(f"{self.server}{path}", params=params or {})
        except requests.RequestException as exc:
            raise SourceError(f"GET {path} failed: {exc}") from exc
        if resp.status_code >= 400:
            raise SourceError(f"GET {path} failed {resp.status_code}: {resp.text[:200]}")
        try:
            return resp.json()
        except ValueError as exc:
            raise SourceError(f"GET {path} returned a non-JSON body: {resp.text[:200]}") from exc

    # ------------------ Queries ------------------
    def _search_pages(self, params: dict[str, Any]) -> Iterator[list[dict[str, Any]]]:
        """Yield one list of issues per page, following ``nextPageToken``."""
        token = None
        while True:
            data = self._get(SEARCH_PATH, params={**params, "nextPageToken": token} if token else params)
            yield data.get("issues") or []
            token = data.get("nextPageToken")
            if not token or data.get("isLast") is True:
                return

    def search_enhanced(
        self,
        jql: str,
        fields: list[str] | None = None,
        expand: list[str] | None = None,
        page_size: int = JIRA_SEARCH_PAGE_SIZE,
    ) -> list[dict[str, Any]]:
        """Every issue matching ``jql``; repeated queries within the TTL reuse the result."""
        digest = self._fingerprint(jql=jql, fields=fields, expand=expand, page_size=page_size)
        cached = self._cached(digest)
        if cached is not None:
            return cached
        params: dict[str, Any] = {"jql": jql, "maxResults": page_size}
        if fields:
            params["fields"] = ",".join(fields)
        if expand:
            params["expand"] = ",".join(expand)
        issues: list[dict[str, Any]] = []
        for page in self._search_pages(params):
            issues.extend(page)
            logger.debug("Fetched %s issues so far for %r", len(issues), jql)
        self._cache[digest] = (time.time(), issues)
        return issues

    def fetch_project_issues(self, project_key: str) -> list[dict[str, Any]]:
        """All issues of a project, newest first (board query)."""
        jql = f"project = {project_key} ORDER BY created DESC"
        return self.search_enhanced(jql, fields=list(JIRA_FETCH_FIELDS))

    def fetch_backlog(self, board_id: str | int | None, page_size: int = JIRA_BACKLOG_PAGE_SIZE) -> list[dict[str, Any]]:
        """Issues in the backlog of an Agile board (empty when no board is set).

        The Agile API paginates with ``startAt`` rather than page tokens.
        """
        if not board_id:
            return []
        out: list[dict[str, Any]] = []
        start_at = 0
        while True:
            params = {
                "startAt": start_at,
                "maxResults": page_size,
                "fields": ",".join(f for f in JIRA_FETCH_FIELDS if f != "project"),
            }
            data = self._get(BACKLOG_PATH.format(board_id=board_id), params=params)
            issues = data.get("issues", [])
            out.extend(issues)
            if not issues or start_at + len(issues) >= data.get("total", 0):
                break
            start_at += len(issues)
        return out

    def project_name(self, project_key: str, issues: list[dict[str, Any]] | None = None) -> str:
        """Project display name, read from fetched issues when possible."""
        for issue in issues or []:
            fields = issue.get("fields") if isinstance(issue, dict) else None
            project = fields.get("project") if isinstance(fields, dict) else None
            name = project.get("name") if isinstance(project, dict) else None
            if name:
                return name
        return project_key

    def current_user(self) -> str:
        """Display name of the authenticated account (connection test)."""
        try:
            return self.client.myself().get("displayName", "")
        except (JIRAError, requests.RequestException) as exc:
            raise SourceError(f"Jira connection test failed: {exc}") from exc
