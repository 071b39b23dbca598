"""Convenience launcher for the Streamlit app.

Usage:
  streamlit run run_dashboard.py

Automatically imports every module in ``kabas_app/pages`` so each page
decorated with ``@register_page`` registers itself without manual edits here.
"""

import logging
from importlib import import_module
from pathlib import Path

import streamlit as st

from kabas_app.app import SERVICE_KEY, main

st.set_page_config(layout="wide")
logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
logger = logging.getLogger("kabas_app")

PAGES_DIR = Path(__file__).parent / "kabas_app" / "pages"
for py in sorted(PAGES_DIR.glob("[!_]*.py")):
    mod_name = f"kabas_app.pages.{py.stem}"
    try:
        import_module(mod_name)
    except ImportError as e:  # pragma: no cover - optional page failed to load
        logger.error("Failed importing page %s: %s", mod_name, e)


def _auto_init_service():
    """Initialize the dashboard service from Streamlit secrets if available."""
    if SERVICE_KEY in st.session_state:
        return
    from kabas_app.core.config import DEFAULT_TEAMS_FILE
    from kabas_app.core.exceptions import KabasError
    from kabas_app.pages.setup import init_service, secret

    server = secret("jira", "JIRA_SERVER", "JIRA_BASE_URL")
    email = secret("jira", "JIRA_EMAIL")
    token = secret("jira", "JIRA_API_TOKEN", "JIRA_TOKEN")
    gh_token = secret("github", "GITHUB_TOKEN")
    if not ((server and email and token) or gh_token):
        st.sidebar.warning("Tracker secrets not found. Please use the Setup page.")
        return
    try:
        init_service(
            jira_server=server,
            jira_email=email,
            jira_token=token,
            github_token=gh_token,
            teams_file=secret("registry", "TEAMS_FILE") or DEFAULT_TEAMS_FILE,
        )
        st.sidebar.success("Tracker connection initialized from secrets.")
    except KabasError as e:
        st.sidebar.error(f"Connection failed: {e}")
        st.session_state.pop(SERVICE_KEY, None)


_auto_init_service()

if __name__ == "__main__":
    main()
