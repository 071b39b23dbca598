from datetime import UTC, datetime

import pytest

from kabas_app.core.dashboard import build_dashboard, dashboard_to_json
from kabas_app.core.models import SourceKind

NOW = datetime(2024, 9, 10, 12, 0, tzinfo=UTC)


def _jira(key, assignee="Alice", category="To Do", status=None, created="2024-09-10T02:00:00.000+0000", resolved=None):
    return {
        "key": key,
        "fields": {
            "summary": f"Task {key}",
            "created": created,
            "updated": created,
            "assignee": {"displayName": assignee} if assignee else None,
            "status": {"name": status or category, "statusCategory": {"name": category}},
            "priority": {"name": "Medium"},
            "resolutiondate": resolved,
        },
    }


def _gh(number, status="Todo", login="alice", created="2024-09-10T02:00:00Z", closed=None):
    return {
        "id": f"PVTI_{number}",
        "content": {
            "__typename": "Issue",
            "number": number,
            "title": f"Issue {number}",
            "url": f"https://github.com/acme/repo/issues/{number}",
            "createdAt": created,
            "updatedAt": created,
            "closedAt": closed,
            "assignees": {"nodes": [{"login": login}] if login else []},
        },
        "fieldValues": {
            "nodes": [
                {
                    "__typename": "ProjectV2ItemFieldSingleSelectValue",
                    "name": status,
                    "field": {"name": "Status"},
                }
            ]
            if status
            else []
        },
    }


def _jira_dashboard():
    board = [
        _jira("KAB-1", "Alice", "Done", created="2024-09-09T12:00:00.000+0000", resolved="2024-09-09T22:00:00.000+0000"),
        _jira("KAB-2", "Bob", "In Progress", created="2024-09-10T07:00:00.000+0000"),
        _jira("KAB-3", "Alice", "Done", created="2024-09-08T12:00:00.000+0000", resolved="2024-09-09T08:00:00.000+0000"),
        _jira("KAB-4", None, "To Do"),
        _jira("KAB-5", "Carol", "To Do"),
    ]
    backlog = [_jira("KAB-4", None, "To Do"), _jira("KAB-9", "Dave", "To Do")]
    return build_dashboard(
        board,
        backlog,
        NOW,
        source=SourceKind.JIRA,
        server="https://acme.atlassian.net",
        project={"key": "KAB", "name": "Kabas"},
    )


def _github_dashboard():
    items = [
        _gh(1, "Backlog", "dave"),
        _gh(2, "In Progress", "bob", created="2024-09-10T07:00:00Z"),
        _gh(3, "Done", "alice", created="2024-09-09T12:00:00Z", closed="2024-09-09T22:00:00Z"),
        _gh(4, None, None),
        {"id": "PVTI_note", "content": None},
    ]
    return build_dashboard(items, None, NOW, source=SourceKind.GITHUB)


def test_jira_dashboard_totals_and_backlog():
    dash = _jira_dashboard()
    assert dash["source"] == "jira"
    assert dash["totals"] == {"boardIssues": 4, "backlogIssues": 2}
    assert dash["backlog"]["count"] == 2
    assert dash["backlog"]["byMember"] == {"Unassigned": 1, "Dave": 1}
    board_keys = {i["key"] for items in dash["drilldowns"]["issuesByStatusCategory"].values() for i in items}
    assert board_keys == {"KAB-1", "KAB-2", "KAB-3", "KAB-5"}
    assert not board_keys & {i["key"] for i in dash["backlog"]["issues"]}


def test_jira_dashboard_metrics():
    dash = _jira_dashboard()
    assert dash["statusCategoryCounts"] == {"Done": 2, "In Progress": 1, "To Do": 1}
    assert sum(dash["statusCategoryCounts"].values()) == dash["totals"]["boardIssues"]
    assert dash["memberCounts"] == {"Alice": 2, "Bob": 1, "Carol": 1}
    # KAB-5 was created 10h before now, KAB-2 only 5h
    assert dash["longestOpen"]["key"] == "KAB-5"
    assert dash["longestOpen"]["ageHours"] == 10.0
    assert dash["longestOpen"]["url"] == "https://acme.atlassian.net/browse/KAB-5"
    assert dash["timeStatsByMember"] == {
        "Alice": {"completedTasks": 2, "avgCompletionHours": 15.0, "stdDevHours": 5.0}
    }
    assert dash["topMembers"]["mostBacklog"] == {"member": "Unassigned", "count": 1}
    assert dash["latestSampleByMember"]["Bob"]["key"] == "KAB-2"
    assert dash["project"] == {"key": "KAB", "name": "Kabas"}


def test_github_dashboard_derives_backlog_from_status():
    dash = _github_dashboard()
    assert dash["source"] == "github"
    assert dash["skipped"] == 1
    assert dash["totals"] == {"boardIssues": 3, "backlogIssues": 1}
    assert [i["key"] for i in dash["backlog"]["issues"]] == ["#1"]
    assert dash["topMembers"]["mostBacklog"] == {"member": "dave", "count": 1}
    assert dash["statusCounts"] == {"In Progress": 1, "Done": 1, "To Do": 1}
    assert dash["memberCounts"] == {"bob": 1, "alice": 1, "Unassigned": 1}
    assert "Backlog" not in dash["statusCategoryCounts"]


def test_payload_shape_identical_across_sources():
    jira_dash = _jira_dashboard()
    github_dash = _github_dashboard()
    assert set(jira_dash) == set(github_dash)
    for section in ("totals", "backlog", "drilldowns", "topMembers", "efficiency"):
        assert set(jira_dash[section]) == set(github_dash[section])


def test_dashboard_is_idempotent():
    assert dashboard_to_json(_jira_dashboard()) == dashboard_to_json(_jira_dashboard())
    assert dashboard_to_json(_github_dashboard()) == dashboard_to_json(_github_dashboard())


@pytest.mark.parametrize("source", [SourceKind.JIRA, SourceKind.GITHUB])
def test_empty_input(source):
    dash = build_dashboard([], None, NOW, source=source)
    assert dash["totals"] == {"boardIssues": 0, "backlogIssues": 0}
    assert dash["longestOpen"] is None
    assert dash["efficiency"]["efficiencyScore"] == 0.0
    assert dash["timeStatsByMember"] == {}
    assert dash["topMembers"]["mostOpened"] == {"member": None, "count": 0}
    assert dash["drilldowns"]["issuesByStatusCategory"] == {}
    dashboard_to_json(dash)


def test_source_without_backlog_keeps_board_unchanged():
    board = [_jira("KAB-1"), _jira("KAB-2")]
    dash = build_dashboard(board, None, NOW, source=SourceKind.JIRA)
    assert dash["backlog"]["count"] == 0
    assert dash["totals"]["boardIssues"] == 2
    assert [i["key"] for i in dash["drilldowns"]["issuesByAssignee"]["Alice"]] == ["KAB-1", "KAB-2"]


def test_malformed_record_does_not_abort_batch():
    board = [_jira("KAB-1"), {"fields": {"summary": "no key"}}, _jira("KAB-2", created="not a date")]
    dash = build_dashboard(board, [], NOW, source=SourceKind.JIRA)
    assert dash["totals"]["boardIssues"] == 1
    assert dash["skipped"] == 2


def test_wrongly_shaped_jira_records_are_skipped():
    board = [
        None,
        {"key": "KAB-7", "fields": ["not", "a", "mapping"]},
        {"key": "KAB-8", "fields": {"created": "2024-09-10T02:00:00.000+0000", "status": "Done"}},
        {"key": "KAB-9", "fields": {"created": {"bogus": 1}}},
        _jira("KAB-1"),
    ]
    dash = build_dashboard(board, ["garbage", _jira("KAB-2")], NOW, source=SourceKind.JIRA)
    assert dash["totals"] == {"boardIssues": 1, "backlogIssues": 1}
    assert dash["skipped"] == 5
    dashboard_to_json(dash)


def test_wrongly_shaped_github_items_are_skipped():
    odd_fields = _gh(3, "Done")
    odd_fields["fieldValues"] = ["unexpected"]
    odd_fields["content"]["assignees"] = "octocat"
    items = [None, 42, _gh(1, "In Progress"), odd_fields]
    dash = build_dashboard(items, None, NOW, source=SourceKind.GITHUB)
    assert dash["skipped"] == 2
    assert dash["totals"]["boardIssues"] == 2
    # Unreadable field values fall back to the default column
    assert dash["statusCounts"] == {"In Progress": 1, "To Do": 1}
    assert dash["memberCounts"] == {"alice": 1, "Unassigned": 1}
