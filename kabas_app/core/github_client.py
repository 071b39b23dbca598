"""GitHub Projects (V2) GraphQL client."""

from __future__ import annotations

import logging
from typing import Any

import requests

from .config import GITHUB_GRAPHQL_URL, GITHUB_ITEMS_PAGE_SIZE, GITHUB_REQUEST_TIMEOUT, GITHUB_STATUS_FIELD
from .exceptions import ConfigurationError, MissingStatusFieldError, ProjectNotFoundError, SourceError

logger = logging.getLogger(__name__)

USER_PROJECT_QUERY = """
query($login: String!, $number: Int!) {
  user(login: $login) {
    projectV2(number: $number) {
      id
      title
    }
  }
}
"""

PROJECT_FIELDS_QUERY = """
query($projectId: ID!) {
  node(id: $projectId) {
    ... on ProjectV2 {
      fields(first: 50) {
        nodes {
          __typename
          ... on ProjectV2FieldCommon {
            id
            name
          }
        }
      }
    }
  }
}
"""

PROJECT_ITEMS_QUERY = """
query($projectId: ID!, $first: Int!, $after: String) {
  node(id: $projectId) {
    ... on ProjectV2 {
      items(first: $first, after: $after) {
        pageInfo { hasNextPage endCursor }
        nodes {
          id
          createdAt
          updatedAt
          content {
            __typename
            ... on Issue {
              number
              title
              url
              state
              createdAt
              updatedAt
              closedAt
              assignees(first: 10) { nodes { login } }
            }
            ... on PullRequest {
              number
              title
              url
              state
              createdAt
              updatedAt
              closedAt
              assignees(first: 10) { nodes { login } }
            }
          }
          fieldValues(first: 20) {
            nodes {
              __typename
              ... on ProjectV2ItemFieldSingleSelectValue {
                name
                field { ... on ProjectV2SingleSelectField { name } }
              }
              ... on ProjectV2ItemFieldTextValue {
                text
                field { ... on ProjectV2FieldCommon { name } }
              }
            }
          }
        }
      }
    }
  }
}
"""


class GitHubProjectsAPI:
    def __init__(self, token: str, url: str = GITHUB_GRAPHQL_URL):
        if not token:
            raise ConfigurationError("Missing GitHub token")
        self.url = url
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            }
        )

    def query(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            resp = self.session.post(
                self.url,
                json={"query": query, "variables": variables or {}},
                timeout=GITHUB_REQUEST_TIMEOUT,
            )
        except requests.RequestException as exc:
            raise SourceError(f"GraphQL request failed: {exc}") from exc
        if resp.status_code >= 400:
            raise SourceError(f"GraphQL request failed {resp.status_code}: {resp.text[:200]}")
        try:
            data = resp.json()
        except ValueError as exc:
            raise SourceError(f"GraphQL response is not JSON: {resp.text[:200]}") from exc
        errors = data.get("errors") or []
        if errors:
            raise SourceError(" | ".join(str(e.get("message", e) if isinstance(e, dict) else e) for e in errors))
        return data.get("data") or {}

    def viewer_login(self) -> str:
        data = self.query("query { viewer { login } }")
        return (data.get("viewer") or {}).get("login", "")

    def get_user_project(self, owner: str, number: int) -> dict[str, Any]:
        data = self.query(USER_PROJECT_QUERY, {"login": owner, "number": int(number)})
        project = (data.get("user") or {}).get("projectV2")
        if not project:
            raise ProjectNotFoundError(f"Project #{number} not found for {owner} (check owner + project number)")
        return project

    def get_project_fields(self, project_id: str) -> list[dict[str, Any]]:
        data = self.query(PROJECT_FIELDS_QUERY, {"projectId": project_id})
        return ((data.get("node") or {}).get("fields") or {}).get("nodes") or []

    def ensure_status_field(self, project_id: str) -> None:
        fields = self.get_project_fields(project_id)
        if not any((f.get("name") or "").lower() == GITHUB_STATUS_FIELD for f in fields):
            raise MissingStatusFieldError(
                'Project is missing a field named "Status". Add a single-select field called Status '
                "(Backlog/To Do/In Progress/Done)."
            )

    def get_project_items(self, project_id: str, page_size: int = GITHUB_ITEMS_PAGE_SIZE) -> list[dict[str, Any]]:
        """Every item on the project, following the items cursor."""
        out: list[dict[str, Any]] = []
        cursor = None
        while True:
            data = self.query(
                PROJECT_ITEMS_QUERY,
                {"projectId": project_id, "first": page_size, "after": cursor},
            )
            items = (data.get("node") or {}).get("items") or {}
            out.extend(items.get("nodes") or [])
            page = items.get("pageInfo") or {}
            cursor = page.get("endCursor")
            if not page.get("hasNextPage") or not cursor:
                break
            logger.debug("Fetched %s project items so far", len(out))
        return out
