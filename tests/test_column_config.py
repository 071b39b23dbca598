from kabas_app.core import column_config
from kabas_app.core.column_config import get_columns, load_column_sets


def test_column_sets_defaults(tmp_path):
    sets = load_column_sets(tmp_path, reload=True)
    assert "issues" in sets and "backlog" in sets
    assert get_columns("issues")[0] == "key"
    assert get_columns("missing") == []


def test_column_sets_yaml_override(tmp_path):
    (tmp_path / "columns.yaml").write_text("sets:\n  backlog: [key, assignee]\n")
    try:
        sets = load_column_sets(tmp_path, reload=True)
        assert sets["backlog"] == ["key", "assignee"]
        assert "statusCategory" in sets["issues"]
    finally:
        column_config._CACHE = None


def test_column_sets_unreadable_yaml_falls_back(tmp_path):
    (tmp_path / "columns.yaml").write_text("sets: [unclosed\n")
    try:
        sets = load_column_sets(tmp_path, reload=True)
        assert sets["backlog"] == ["key", "title", "assignee", "status", "createdAt"]
    finally:
        column_config._CACHE = None
