"""Connection setup page: collect tracker credentials and initialize DashboardService."""

from __future__ import annotations

import streamlit as st

from kabas_app.app import SERVICE_KEY, SETUP_PAGE, register_page
from kabas_app.core.config import DEFAULT_TEAMS_FILE
from kabas_app.core.exceptions import KabasError
from kabas_app.core.github_client import GitHubProjectsAPI
from kabas_app.core.jira_client import JiraAPI
from kabas_app.core.service import DashboardService
from kabas_app.core.teams import TeamRegistry


def secret(section: str, *names: str) -> str | None:
    """First non-empty secret among ``names`` in ``[section]`` or at top level."""
    scoped = st.secrets.get(section, {})
    for name in names:
        value = scoped.get(name) or st.secrets.get(name)
        if value:
            return value
    return None


def init_service(
    *,
    jira_server: str | None,
    jira_email: str | None,
    jira_token: str | None,
    github_token: str | None,
    teams_file: str,
) -> DashboardService:
    jira = JiraAPI(jira_server, jira_email, jira_token) if (jira_server and jira_email and jira_token) else None
    github = GitHubProjectsAPI(github_token) if github_token else None
    registry = TeamRegistry.from_yaml(teams_file)
    service = DashboardService(jira=jira, github=github, registry=registry)
    st.session_state[SERVICE_KEY] = service
    return service


@register_page(SETUP_PAGE, order=20)
def setup_page():
    st.title("Tracker Connection Setup")
    st.caption("Enter credentials (use secrets manager in production).")

    server = st.text_input("Jira Server URL", value=secret("jira", "JIRA_SERVER", "JIRA_BASE_URL") or "")
    email = st.text_input("Jira Email / Username", value=secret("jira", "JIRA_EMAIL") or "")
    token = st.text_input(
        "Jira API Token",
        type="password",
        value=secret("jira", "JIRA_API_TOKEN", "JIRA_TOKEN") or "",
    )
    gh_token = st.text_input("GitHub Token", type="password", value=secret("github", "GITHUB_TOKEN") or "")
    teams_file = st.text_input("Team registry file", value=secret("registry", "TEAMS_FILE") or DEFAULT_TEAMS_FILE)

    if st.button("Initialize Connection", type="primary"):
        if not (server and email and token) and not gh_token:
            st.error("Provide Jira credentials, a GitHub token, or both.")
            return
        try:
            service = init_service(
                jira_server=server,
                jira_email=email,
                jira_token=token,
                github_token=gh_token,
                teams_file=teams_file,
            )
            if service.jira is not None:
                st.write(f"Jira: connected as {service.jira.current_user()}")
            if service.github is not None:
                st.write(f"GitHub: connected as {service.github.viewer_login()}")
            st.success(f"Connection initialized ({len(service.registry.teams())} team(s) registered).")
        except KabasError as e:
            st.error(f"Failed to initialize: {e}")

    if SERVICE_KEY in st.session_state:
        st.info("DashboardService ready.")
