"""Tests for alias generation."""

import pytest

from kan.alias import generate_alias, is_alias_available, slug_words, words_for_threshold
from kan.errors import ValidationFailure
from kan.models import BoardConfig, Card, Column
from kan.store import MemoryBoardStore, MemoryCardStore


@pytest.fixture
def store():
    boards = MemoryBoardStore()
    boards.save(BoardConfig(id="b_1", name="main", columns=[Column("backlog")]))
    return MemoryCardStore(boards)


def _add(store, card_id, alias, explicit=False):
    store.save("main", Card(id=card_id, alias=alias, alias_explicit=explicit, column="backlog"))


def test_slug_words():
    assert slug_words("Fix the Café bug!") == ["fix", "the", "cafe", "bug"]
    assert slug_words("  --Hello--World-- ") == ["hello", "world"]
    assert slug_words("!!!") == []


def test_words_for_threshold_minimum_two():
    assert words_for_threshold(["supercalifragilistic", "expialidocious"]) == 2
    assert words_for_threshold(["one"]) == 1


def test_words_for_threshold_stops_at_twenty_chars():
    words = ["add", "login", "page", "with", "oauth", "support"]
    # "add-login-page-with" is 19 chars; adding "-oauth" would exceed 20
    assert words_for_threshold(words) == 4


def test_generate_alias_basic(store):
    assert generate_alias(store, "main", "Add login page with OAuth support") == "add-login-page-with"


def test_generate_alias_empty_title(store):
    assert generate_alias(store, "main", "") == "card"
    assert generate_alias(store, "main", "???") == "card"


def test_generate_alias_adds_words_on_collision(store):
    _add(store, "a_1", "add-login-page-with")
    assert generate_alias(store, "main", "Add login page with OAuth support") == "add-login-page-with-oauth"


def test_generate_alias_numeric_suffix(store):
    _add(store, "a_1", "fix-bug")
    _add(store, "a_2", "fix-bug-2")
    assert generate_alias(store, "main", "Fix bug") == "fix-bug-3"


def test_generate_alias_excludes_own_card(store):
    _add(store, "a_1", "fix-bug")
    assert generate_alias(store, "main", "Fix bug", exclude_id="a_1") == "fix-bug"


def test_is_alias_available(store):
    _add(store, "a_1", "taken")
    assert not is_alias_available(store, "main", "taken")
    assert is_alias_available(store, "main", "free")
    assert is_alias_available(store, "main", "taken", exclude_id="a_1")


def test_generate_alias_gives_up(store, monkeypatch):
    monkeypatch.setattr("kan.alias.MAX_SUFFIX", 2)
    _add(store, "a_1", "fix-bug")
    _add(store, "a_2", "fix-bug-2")
    with pytest.raises(ValidationFailure, match="unique alias"):
        generate_alias(store, "main", "Fix bug")
