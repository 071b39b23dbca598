"""Team dashboard page.

Builds the dashboard payload for the selected team on demand and renders it.
The last payload is kept in session state so widget interactions do not
trigger a refetch.
"""

from __future__ import annotations

import streamlit as st

from kabas_app.analytics.metrics.timing import format_local
from kabas_app.app import SERVICE_KEY, register_page
from kabas_app.core.config import SETTINGS
from kabas_app.core.dashboard import dashboard_to_json
from kabas_app.core.exceptions import KabasError
from kabas_app.core.service import DashboardService
from kabas_app.visual.charts import member_workload_chart, status_category_chart
from kabas_app.visual.tables import render_issue_table


def _render_top_members(top: dict):
    cols = st.columns(3)
    labels = {"mostOpened": "Most open issues", "mostTodo": "Most To Do", "mostBacklog": "Most backlog"}
    for col, (field, label) in zip(cols, labels.items()):
        entry = top.get(field) or {}
        col.metric(label, entry.get("member") or "-", entry.get("count", 0))


def render_dashboard(dashboard: dict):
    project = dashboard.get("project") or {}
    st.subheader(project.get("name") or project.get("key") or "Dashboard")
    st.caption(f"Generated {format_local(dashboard.get('generatedAt'))}")
    totals = dashboard["totals"]
    efficiency = dashboard["efficiency"]
    c1, c2, c3 = st.columns(3)
    c1.metric("Board issues", totals["boardIssues"])
    c2.metric("Backlog issues", totals["backlogIssues"])
    c3.metric("Efficiency score", efficiency["efficiencyScore"], help=efficiency["note"])
    if dashboard.get("skipped"):
        st.caption(f"{dashboard['skipped']} malformed record(s) were skipped.")

    left, right = st.columns(2)
    with left:
        st.markdown("**Status summary**")
        chart = status_category_chart(dashboard["statusCategoryCounts"])
        if chart is not None:
            st.altair_chart(chart, use_container_width=True)
    with right:
        st.markdown("**Workload per member**")
        chart = member_workload_chart(dashboard["memberCounts"])
        if chart is not None:
            st.altair_chart(chart, use_container_width=True)

    _render_top_members(dashboard["topMembers"])

    longest = dashboard.get("longestOpen")
    if longest:
        st.warning(f"Longest open: {longest['key']} {longest['title']} ({longest['ageHours']} h, {longest['assignee']})")

    st.markdown("**Completion time by member (hours)**")
    stats = dashboard["timeStatsByMember"]
    if stats:
        st.dataframe(
            [{"member": m, **s} for m, s in stats.items()],
            hide_index=True,
        )
    else:
        st.info("No completed issues yet.")

    st.markdown("**Drilldown by status category**")
    for category, issues in dashboard["drilldowns"]["issuesByStatusCategory"].items():
        with st.expander(f"{category} ({len(issues)})"):
            render_issue_table(issues)

    with st.expander(f"Backlog ({dashboard['backlog']['count']})"):
        render_issue_table(dashboard["backlog"]["issues"], "backlog")


@register_page("Team Dashboard", order=10)
def team_dashboard_page():
    st.title("Team Dashboard")
    service: DashboardService | None = st.session_state.get(SERVICE_KEY)
    if service is None:
        st.warning("Initialize connection on Setup page first.")
        return
    teams = service.registry.teams()
    if not teams:
        st.info("No teams registered. Add teams to the registry file.")
        return
    names = {f"{t.team_name} ({t.source.value})": t for t in teams}
    choice = st.selectbox("Team", list(names))
    scope = names[choice]

    if st.button("Build Dashboard", type="primary"):
        status = st.status(f"Building dashboard for {scope.team_name}")
        try:
            dashboard = service.dashboard_for_scope(
                scope,
                progress=lambda message, current, total: status.write(message),
            )
            st.session_state["dashboard"] = dashboard
            status.update(label="Dashboard ready", state="complete")
        except KabasError as exc:
            status.update(label="Failed", state="error")
            st.error(f"Failed to build dashboard: {exc}")
            return

    dashboard = st.session_state.get("dashboard")
    if not dashboard or (dashboard.get("team") or {}).get("id") != scope.team_id:
        st.info("No dashboard computed for this team yet.")
        return
    render_dashboard(dashboard)
    st.download_button(
        "Download JSON",
        data=dashboard_to_json(dashboard).encode(SETTINGS.download_encoding),
        file_name=f"dashboard_{scope.team_id}.json",
        mime="application/json",
    )
