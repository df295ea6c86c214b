"""Tests for card and board resolution."""

import pytest

from kan.errors import AmbiguousBoard, NotFound
from kan.models import BoardConfig, Card, Column, GlobalConfig, RepoConfig
from kan.resolver import BoardResolver, CardResolver, infer_board
from kan.store import MemoryBoardStore, MemoryCardStore, MemoryGlobalStore


def _boards(*names):
    store = MemoryBoardStore()
    for name in names:
        store.save(BoardConfig(id=f"b_{name}", name=name, columns=[Column("todo")]))
    return store


@pytest.fixture
def cards():
    store = MemoryCardStore(_boards("main"))
    store.save("main", Card(id="a_1", alias="fix-bug", column="todo"))
    store.save("main", Card(id="a_2", alias="fix-bug", alias_explicit=True, column="todo"))
    store.save("main", Card(id="a_3", alias="a_1", column="todo"))
    return store


def test_card_by_id(cards):
    assert CardResolver(cards).resolve("main", "a_1").id == "a_1"


def test_card_id_beats_alias(cards):
    # a_3 has alias "a_1" but the exact ID wins
    assert CardResolver(cards).resolve("main", "a_1").id == "a_1"


def test_card_explicit_alias_beats_auto(cards):
    assert CardResolver(cards).resolve("main", "fix-bug").id == "a_2"


def test_card_auto_alias(cards):
    cards.delete("main", "a_2")
    assert CardResolver(cards).resolve("main", "fix-bug").id == "a_1"


def test_card_not_found(cards):
    with pytest.raises(NotFound, match="card not found: nope"):
        CardResolver(cards).resolve("main", "nope")


def test_board_explicit():
    resolver = BoardResolver(_boards("a", "b"), MemoryGlobalStore(), "/p")
    assert resolver.resolve("b") == "b"


def test_board_explicit_missing():
    resolver = BoardResolver(_boards("a"), MemoryGlobalStore(), "/p")
    with pytest.raises(NotFound, match="board not found: zzz"):
        resolver.resolve("zzz")


def test_board_none_exist():
    resolver = BoardResolver(_boards(), MemoryGlobalStore(), "/p")
    with pytest.raises(NotFound, match="no boards found"):
        resolver.resolve()


def test_board_single():
    resolver = BoardResolver(_boards("only"), MemoryGlobalStore(), "/p")
    assert resolver.resolve() == "only"


def test_board_default_from_global_config():
    global_store = MemoryGlobalStore()
    global_store.put("/p", RepoConfig(default_board="b"))
    resolver = BoardResolver(_boards("a", "b"), global_store, "/p")
    assert resolver.resolve() == "b"


def test_board_stale_default_is_ignored():
    global_store = MemoryGlobalStore()
    global_store.put("/p", RepoConfig(default_board="gone"))
    resolver = BoardResolver(_boards("a", "b"), global_store, "/p")
    with pytest.raises(AmbiguousBoard, match="multiple boards exist"):
        resolver.resolve()


def test_board_prompts_when_interactive():
    asked = []

    def prompter(title, options):
        asked.append(options)
        return options[1]

    resolver = BoardResolver(_boards("a", "b"), MemoryGlobalStore(), "/p", prompter=prompter)
    assert resolver.resolve(interactive=True) == "b"
    assert asked == [["a", "b"]]


def test_board_ambiguous_without_prompt():
    resolver = BoardResolver(_boards("a", "b"), MemoryGlobalStore(), "/p", prompter=lambda t, o: o[0])
    with pytest.raises(AmbiguousBoard) as exc_info:
        resolver.resolve(interactive=False)
    assert exc_info.value.exit_code == 1


def test_infer_board():
    config = GlobalConfig(repos={"/p": RepoConfig(default_board="b")})
    assert infer_board(_boards("a", "b"), config, "/p") == "b"
    assert infer_board(_boards("a", "b"), config, "/other") is None
    assert infer_board(_boards("a"), None, "") == "a"
