"""Tests for 'kan init' command."""

import json

import pytest

from kan.cli.init import init_project
from kan.errors import ValidationFailure
from kan.store import FileGlobalStore


def test_init_creates_board(root, make_args, capsys):
    assert init_project(make_args(board="main", data_location="", columns=None)) == 0

    out = capsys.readouterr().out
    assert "Initialized kan board 'main'" in out
    assert "backlog, next, in-progress, done" in out
    assert (root / ".kan" / "boards" / "main" / "config.toml").is_file()
    assert FileGlobalStore().exists(str(root))


def test_init_json(root, make_args, capsys):
    assert init_project(make_args(json=True, board="ops", data_location="", columns="todo, done")) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["created"] is True
    assert data["board"] == "ops"
    assert data["columns"] == ["todo", "done"]
    assert data["root"] == str(root)


def test_init_idempotent(project, make_args, capsys):
    assert init_project(make_args(board="main", data_location="", columns=None)) == 0
    assert "already initialized" in capsys.readouterr().out


def test_init_custom_data_location(root, make_args, capsys):
    assert init_project(make_args(board="main", data_location="tracker", columns=None)) == 0
    assert (root / "tracker" / "boards" / "main").is_dir()
    assert FileGlobalStore().get(str(root)).data_location == "tracker"


@pytest.mark.parametrize("location", ["../outside", "/abs"])
def test_init_rejects_data_location_outside_project(make_args, location):
    with pytest.raises(ValidationFailure, match="inside the project"):
        init_project(make_args(board="main", data_location=location, columns=None))


def test_init_rejects_empty_columns(make_args):
    with pytest.raises(ValidationFailure, match="at least one column"):
        init_project(make_args(board="main", data_location="", columns=" , "))
