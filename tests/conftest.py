"""Shared fixtures: an isolated environment and a project with one board."""

import json

import pytest

from kan.models import BoardConfig, Column
from kan.paths import Paths
from kan.store import FileBoardStore, FileCardStore, FileGlobalStore


@pytest.fixture(autouse=True)
def isolated_env(tmp_path_factory, monkeypatch):
    """Point the global config at a temp dir and fix the author name."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("KAN_GLOBAL_CONFIG", str(home / "kan" / "config.toml"))
    monkeypatch.setenv("KAN_USER", "tester")
    monkeypatch.delenv("KAN_LOG_LEVEL", raising=False)
    return home


@pytest.fixture
def root(tmp_path):
    """Canonical project root."""
    project = tmp_path.resolve() / "project"
    project.mkdir()
    return project


@pytest.fixture
def paths(root):
    return Paths(root)


@pytest.fixture
def boards(paths):
    return FileBoardStore(paths)


@pytest.fixture
def cards(paths):
    return FileCardStore(paths)


@pytest.fixture
def global_store(isolated_env):
    return FileGlobalStore()


@pytest.fixture
def main_board(boards):
    """Board "main" with backlog/doing/done, default backlog."""
    board = BoardConfig(
        id="b_main",
        name="main",
        columns=[Column("backlog", 0), Column("doing", 1), Column("done", 2)],
        default_column="backlog",
    )
    boards.save(board)
    return board


@pytest.fixture
def write_raw(paths):
    """Write a file under the data directory verbatim; returns its path."""

    def _write(relative: str, content):
        path = paths.data_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if not isinstance(content, str):
            content = json.dumps(content, indent=2)
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def card_record():
    """Factory for a current-version card record."""

    def _record(card_id: str, column: str = "backlog", **extra):
        record = {
            "_v": 3,
            "id": card_id,
            "alias": card_id.replace("_", "-"),
            "alias_explicit": False,
            "title": f"Card {card_id}",
            "column": column,
            "creator": "tester",
            "created_at_millis": 1000,
            "updated_at_millis": 1000,
        }
        record.update(extra)
        return record

    return _record
