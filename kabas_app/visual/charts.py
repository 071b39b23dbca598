"""Chart builders (Altair) for dashboard counts."""

from __future__ import annotations

import altair as alt
import pandas as pd

from kabas_app.core.models import StatusCategory

CATEGORY_COLORS = {
    StatusCategory.BACKLOG.value: "#9e9e9e",
    StatusCategory.TO_DO.value: "#1f77b4",
    StatusCategory.IN_PROGRESS.value: "#ff7f0e",
    StatusCategory.DONE.value: "#2ca02c",
}


def counts_frame(counts: dict[str, int], label: str) -> pd.DataFrame:
    return pd.DataFrame({label: list(counts.keys()), "count": [int(v) for v in counts.values()]})


def status_category_chart(counts: dict[str, int]):
    if not counts:
        return None
    df = counts_frame(counts, "category")
    order = [c.value for c in StatusCategory if c.value in counts]
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("category:N", title="Status category", sort=order),
            y=alt.Y("count:Q", title="Issues"),
            color=alt.Color(
                "category:N",
                scale=alt.Scale(domain=list(CATEGORY_COLORS), range=list(CATEGORY_COLORS.values())),
                legend=None,
            ),
            tooltip=[alt.Tooltip("category:N", title="Category"), alt.Tooltip("count:Q", title="Issues")],
        )
        .properties(height=260)
    )


def member_workload_chart(counts: dict[str, int]):
    if not counts:
        return None
    df = counts_frame(counts, "member")
    return (
        alt.Chart(df)
        .mark_bar(color="#1f77b4")
        .encode(
            x=alt.X("count:Q", title="Board issues"),
            y=alt.Y("member:N", title="Member", sort="-x"),
            tooltip=[alt.Tooltip("member:N", title="Member"), alt.Tooltip("count:Q", title="Issues")],
        )
        .properties(height=max(120, 28 * len(df)))
    )
