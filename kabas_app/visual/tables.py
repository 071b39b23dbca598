"""Reusable table helpers for Streamlit rendering."""

from __future__ import annotations

from typing import Any

import pandas as pd
import streamlit as st

from kabas_app.core.column_config import get_columns
from kabas_app.core.config import SETTINGS


def issues_frame(issues: list[dict[str, Any]], set_name: str = "issues") -> pd.DataFrame:
    """Issue dicts from the dashboard payload as a table with the configured columns."""
    if not issues:
        return pd.DataFrame()
    df = pd.DataFrame(issues)
    cols = [c for c in get_columns(set_name) if c in df.columns]
    if "url" in df.columns and df["url"].notna().any():
        cols = ["url", *[c for c in cols if c != "url"]]
    return df[cols] if cols else df


def render_issue_table(issues: list[dict[str, Any]], set_name: str = "issues"):
    df = issues_frame(issues, set_name)
    if df.empty:
        st.info("No issues.")
        return
    cfg = {}
    if "url" in df.columns:
        cfg["url"] = st.column_config.LinkColumn("Link", display_text="open", width="small")
    st.dataframe(df.head(SETTINGS.max_table_rows), hide_index=True, column_config=cfg)
