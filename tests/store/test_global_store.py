"""Tests for the global config store."""

import pytest

from kan.errors import NotFound, UnsupportedVersion
from kan.models import RepoConfig
from kan.store import FileGlobalStore


def test_default_path_from_env(isolated_env):
    assert FileGlobalStore().path == isolated_env / "kan" / "config.toml"


def test_missing_file_is_empty(global_store):
    config = global_store.load()
    assert config.repos == {}
    assert global_store.list() == []


def test_put_get_delete(global_store):
    global_store.put("/a", RepoConfig(data_location="data", default_board="main"))
    assert global_store.exists("/a")
    assert global_store.get("/a") == RepoConfig(data_location="data", default_board="main")
    assert 'kan_schema = "global/1"' in global_store.path.read_text()

    global_store.delete("/a")
    assert not global_store.exists("/a")
    with pytest.raises(NotFound, match="repository not found: /a"):
        global_store.get("/a")


def test_list_sorted(global_store):
    global_store.put("/b", RepoConfig())
    global_store.put("/a", RepoConfig())
    assert global_store.list() == ["/a", "/b"]


def test_newer_schema_rejected(global_store):
    global_store.path.parent.mkdir(parents=True)
    global_store.path.write_text('kan_schema = "global/5"\n')
    with pytest.raises(UnsupportedVersion) as exc_info:
        global_store.load()
    assert exc_info.value.exit_code == 2
