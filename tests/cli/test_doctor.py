"""Tests for 'kan doctor' command."""

import json

import pytest

from kan.cli.doctor import doctor


def _write_card(root, card_id, **fields):
    record = {
        "_v": 3,
        "id": card_id,
        "alias": card_id,
        "alias_explicit": False,
        "title": "Card",
        "column": "backlog",
        "creator": "tester",
        "created_at_millis": 1,
        "updated_at_millis": 1,
    }
    record.update(fields)
    path = root / ".kan" / "boards" / "main" / "cards" / f"{card_id}.json"
    path.write_text(json.dumps(record))
    return path


def _doctor_args(make_args, **kwargs):
    options = {"board": None, "fix": False, "dry_run": False}
    options.update(kwargs)
    return make_args(**options)


def test_doctor_clean(project, make_args, capsys):
    assert doctor(_doctor_args(make_args)) == 0
    out = capsys.readouterr().out
    assert 'Checking board "main"...' in out
    assert "Columns: 4" in out
    assert "No issues found" in out


def test_doctor_reports_errors(project, make_args, capsys):
    _write_card(project, "a_1", column="archived")
    assert doctor(_doctor_args(make_args)) == 1
    out = capsys.readouterr().out
    assert "[INVALID_COLUMN_REF] main/a_1 Column 'archived' does not exist" in out
    assert "→ Fix: Reassign to backlog" in out
    assert "Summary: 1 error(s)" in out
    assert "Run 'kan doctor --fix' to apply automatic fixes" in out


def test_doctor_dry_run(project, make_args, capsys):
    _write_card(project, "a_1", column="archived")
    assert doctor(_doctor_args(make_args, dry_run=True)) == 1
    out = capsys.readouterr().out
    assert "Dry run: 1 issue(s) would be fixed" in out
    assert "Run 'kan doctor --fix' to apply these fixes" in out


def test_doctor_fix(project, make_args, capsys):
    path = _write_card(project, "a_1", column="archived")
    assert doctor(_doctor_args(make_args, fix=True)) == 0
    out = capsys.readouterr().out
    assert "Fixed 1 issue(s)" in out
    assert "All issues resolved" in out
    assert json.loads(path.read_text())["column"] == "backlog"


def test_doctor_json(project, make_args, capsys):
    _write_card(project, "a_1", parent="a_gone")
    assert doctor(_doctor_args(make_args, json=True)) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["summary"]["warnings"] == 1
    assert data["issues"][0]["code"] == "INVALID_PARENT_REF"
    assert data["boards"][0]["name"] == "main"


def test_doctor_fix_and_dry_run_conflict(project, make_args, capsys):
    with pytest.raises(SystemExit) as exc_info:
        doctor(_doctor_args(make_args, fix=True, dry_run=True))
    assert exc_info.value.code == 1
    assert "cannot be used together" in capsys.readouterr().err


def test_doctor_survives_broken_global_config(project, make_args, isolated_env, capsys):
    config = isolated_env / "kan" / "config.toml"
    config.write_text("repos = [")
    assert doctor(_doctor_args(make_args)) == 0
    assert "[MALFORMED_GLOBAL_CONFIG]" in capsys.readouterr().out
