"""Page registry and sidebar router for the KABAS dashboard."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass

import streamlit as st

SETUP_PAGE = "Setup / Connection"
SERVICE_KEY = "dashboard_service"


@dataclass(slots=True)
class Page:
    label: str
    render: Callable[[], None]
    order: int = 100


PAGES: dict[str, Page] = {}


def register_page(label: str, *, order: int = 100):
    """Decorator adding a page to the sidebar; lower ``order`` sorts first."""

    def decorator(func):
        PAGES[label] = Page(label=label, render=func, order=order)
        return func

    return decorator


def page_labels() -> list[str]:
    return [p.label for p in sorted(PAGES.values(), key=lambda p: (p.order, p.label))]


def default_page(labels: list[str], state: Mapping) -> int:
    """Index of the page to open: setup until a service exists, else the first page."""
    if SERVICE_KEY not in state and SETUP_PAGE in labels:
        return labels.index(SETUP_PAGE)
    return 0


def main():
    st.sidebar.title("KABAS Team Progress")
    labels = page_labels()
    if not labels:
        st.write("No pages registered yet.")
        return
    choice = st.sidebar.selectbox("Page", labels, index=default_page(labels, st.session_state))
    PAGES[choice].render()


if __name__ == "__main__":
    main()
