"""Tests for card operations."""

import pytest

from kan.cards import (
    add_comment,
    apply_custom_fields,
    create_card,
    delete_card,
    edit_alias,
    move_card,
    retitle_card,
)
from kan.errors import NotFound, ValidationFailure
from kan.models import BoardConfig, Card, Column, CustomFieldSchema


def test_create_card_defaults(cards, boards, main_board):
    card = create_card(cards, boards, "main", "Fix the login bug", "alice")
    assert card.id.startswith("a_")
    assert card.column == "backlog"
    assert card.alias == "fix-the-login-bug"
    assert card.alias_explicit is False
    assert card.creator == "alice"
    assert card.created_at_millis == card.updated_at_millis > 0

    loaded = cards.get("main", card.id)
    assert loaded.title == "Fix the login bug"
    assert loaded.alias == "fix-the-login-bug"


def test_create_card_in_column(cards, boards, main_board):
    card = create_card(cards, boards, "main", "Task", "alice", column="doing")
    assert card.column == "doing"


def test_create_card_unknown_column(cards, boards, main_board):
    with pytest.raises(NotFound, match="column not found: nope"):
        create_card(cards, boards, "main", "Task", "alice", column="nope")


def test_create_card_invalid_default_falls_back_to_first(cards, boards, main_board):
    main_board.default_column = "archived"
    boards.save(main_board)
    card = create_card(cards, boards, "main", "Task", "alice")
    assert card.column == "backlog"


def test_create_card_board_without_columns(cards, boards):
    boards.save(BoardConfig(id="b_e", name="empty"))
    with pytest.raises(ValidationFailure, match="no columns"):
        create_card(cards, boards, "empty", "Task", "alice")


def test_create_card_missing_board(cards, boards):
    with pytest.raises(NotFound, match="board not found: ghost"):
        create_card(cards, boards, "ghost", "Task", "alice")


def test_create_card_with_parent(cards, boards, main_board):
    parent = create_card(cards, boards, "main", "Epic", "alice")
    child = create_card(cards, boards, "main", "Story", "alice", parent=parent.id)
    assert cards.get("main", child.id).parent == parent.id


def test_create_card_unknown_parent(cards, boards, main_board):
    with pytest.raises(NotFound, match="card not found: a_missing"):
        create_card(cards, boards, "main", "Story", "alice", parent="a_missing")


def test_create_card_alias_collision_gets_suffix(cards, boards, main_board):
    first = create_card(cards, boards, "main", "Fix bug", "alice")
    second = create_card(cards, boards, "main", "Fix bug", "alice")
    assert first.alias == "fix-bug"
    assert second.alias == "fix-bug-2"


def test_create_card_explicit_alias(cards, boards, main_board):
    card = create_card(cards, boards, "main", "Fix bug", "alice", alias="login")
    assert card.alias == "login"
    assert card.alias_explicit is True


def test_explicit_alias_conflict(cards, boards, main_board):
    create_card(cards, boards, "main", "One", "alice", alias="login")
    with pytest.raises(ValidationFailure, match="already in use"):
        create_card(cards, boards, "main", "Two", "alice", alias="login")


def test_explicit_alias_may_shadow_auto_alias(cards, boards, main_board):
    auto = create_card(cards, boards, "main", "Login", "alice")
    assert auto.alias == "login"
    explicit = create_card(cards, boards, "main", "Other", "alice", alias="login")
    assert explicit.alias_explicit


def test_move_card(cards, boards, main_board):
    card = create_card(cards, boards, "main", "Task", "alice")
    moved = move_card(cards, boards, "main", card.id, "done")
    assert moved.column == "done"
    assert cards.get("main", card.id).column == "done"


def test_move_card_unknown_column(cards, boards, main_board):
    card = create_card(cards, boards, "main", "Task", "alice")
    with pytest.raises(NotFound, match="column not found"):
        move_card(cards, boards, "main", card.id, "archived")


def test_retitle_regenerates_auto_alias(cards, boards, main_board):
    card = create_card(cards, boards, "main", "Old title", "alice")
    card = retitle_card(cards, "main", card.id, "New title")
    assert card.alias == "new-title"


def test_retitle_keeps_explicit_alias(cards, boards, main_board):
    card = create_card(cards, boards, "main", "Old title", "alice", alias="keep")
    card = retitle_card(cards, "main", card.id, "New title")
    assert card.alias == "keep"
    assert card.title == "New title"


def test_edit_alias_clear_regenerates(cards, boards, main_board):
    card = create_card(cards, boards, "main", "Fix bug", "alice", alias="custom")
    card = edit_alias(cards, "main", card.id, "")
    assert card.alias == "fix-bug"
    assert card.alias_explicit is False


def test_edit_alias_same_card_allowed(cards, boards, main_board):
    card = create_card(cards, boards, "main", "Fix bug", "alice", alias="custom")
    assert edit_alias(cards, "main", card.id, "custom").alias == "custom"


def test_add_comment(cards, boards, main_board):
    card = create_card(cards, boards, "main", "Task", "alice")
    comment = add_comment(cards, "main", card.id, "Looks good", "bob")
    assert comment.id.startswith("c_")
    loaded = cards.get("main", card.id)
    assert [(c.body, c.author) for c in loaded.comments] == [("Looks good", "bob")]
    assert loaded.updated_at_millis == comment.created_at_millis


def test_delete_card_clears_children(cards, boards, main_board):
    parent = create_card(cards, boards, "main", "Epic", "alice")
    child = create_card(cards, boards, "main", "Story", "alice", parent=parent.id)
    delete_card(cards, "main", parent.id)
    assert not cards.exists("main", parent.id)
    assert cards.get("main", child.id).parent == ""


def test_delete_missing_card(cards, main_board):
    with pytest.raises(NotFound):
        delete_card(cards, "main", "a_missing")


@pytest.fixture
def field_board():
    return BoardConfig(
        id="b_f",
        name="f",
        columns=[Column("todo")],
        custom_fields={
            "priority": CustomFieldSchema("enum", [{"value": "low"}, {"value": "high"}]),
            "labels": CustomFieldSchema("tags", [{"value": "bug"}]),
            "areas": CustomFieldSchema("enum-set", [{"value": "ui"}, {"value": "api"}]),
            "due": CustomFieldSchema("date"),
            "kind": CustomFieldSchema("rating"),
        },
    )


def test_apply_custom_fields(field_board):
    card = Card(id="a_1")
    apply_custom_fields(card, field_board, {"priority": "high", "labels": "bug, new, bug", "due": "2026-02-01"})
    assert card.custom_fields == {"priority": "high", "labels": ["bug", "new"], "due": "2026-02-01"}


def test_apply_custom_fields_enum_rejects_unknown(field_board):
    with pytest.raises(ValidationFailure, match="must be one of: low, high"):
        apply_custom_fields(Card(id="a_1"), field_board, {"priority": "urgent"})


def test_apply_custom_fields_enum_set(field_board):
    card = Card(id="a_1")
    apply_custom_fields(card, field_board, {"areas": "ui,api"})
    assert card.custom_fields["areas"] == ["ui", "api"]
    with pytest.raises(ValidationFailure, match="'db' is not a valid option"):
        apply_custom_fields(card, field_board, {"areas": "ui,db"})


def test_apply_custom_fields_too_many_values(field_board):
    values = ",".join(f"t{i}" for i in range(21))
    with pytest.raises(ValidationFailure, match="too many values"):
        apply_custom_fields(Card(id="a_1"), field_board, {"labels": values})


def test_apply_custom_fields_undefined(field_board):
    with pytest.raises(ValidationFailure, match="not defined in board config"):
        apply_custom_fields(Card(id="a_1"), field_board, {"owner": "x"})


def test_apply_custom_fields_reserved_prefix(field_board):
    with pytest.raises(ValidationFailure, match='reserved prefix "_"'):
        apply_custom_fields(Card(id="a_1"), field_board, {"_secret": "x"})


def test_apply_custom_fields_unknown_type(field_board):
    with pytest.raises(ValidationFailure, match="unknown field type"):
        apply_custom_fields(Card(id="a_1"), field_board, {"kind": "5"})
