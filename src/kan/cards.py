"""Card operations that keep the board invariants intact."""

import time

from kan.alias import generate_alias
from kan.codec import validate_custom_field_name
from kan.errors import NotFound, ValidationFailure
from kan.ids import new_id
from kan.models import BoardConfig, Card, Comment

MAX_SET_ITEMS = 20

SET_TYPES = ("enum-set", "free-set", "tags")


def now_millis() -> int:
    return int(time.time() * 1000)


def _check_column(board: BoardConfig, column: str) -> str:
    if not board.has_column(column):
        raise NotFound("column", column, hint=f'board "{board.name}"')
    return column


def _option_values(options: list[dict]) -> list[str]:
    return [str(o.get("value", "")) for o in options]


def _parse_set(raw: str) -> list[str]:
    values = []
    for part in raw.split(","):
        part = part.strip()
        if part and part not in values:
            values.append(part)
    return values


def apply_custom_fields(card: Card, board: BoardConfig, fields: dict[str, str]) -> None:
    """Validate raw string values against the board's field definitions and set them."""
    for name, raw in fields.items():
        validate_custom_field_name(name)
        schema = board.custom_fields.get(name)
        if schema is None:
            raise ValidationFailure(f"{name!r} is not defined in board config", field="field")
        allowed = _option_values(schema.options)
        if schema.type in ("string", "date"):
            card.custom_fields[name] = raw
        elif schema.type == "enum":
            if raw not in allowed:
                raise ValidationFailure(f"must be one of: {', '.join(allowed)}", field=name)
            card.custom_fields[name] = raw
        elif schema.type in SET_TYPES:
            values = _parse_set(raw)
            if len(values) > MAX_SET_ITEMS:
                raise ValidationFailure(f"too many values (max {MAX_SET_ITEMS})", field=name)
            if schema.type == "enum-set":
                for value in values:
                    if value not in allowed:
                        raise ValidationFailure(
                            f"{value!r} is not a valid option; must be one of: {', '.join(allowed)}", field=name
                        )
            card.custom_fields[name] = values
        else:
            raise ValidationFailure(f"unknown field type {schema.type!r}", field=name)


def create_card(
    cards,
    boards,
    board_name: str,
    title: str,
    creator: str,
    column: str = "",
    alias: str = "",
    description: str = "",
    parent: str = "",
    fields: dict[str, str] | None = None,
) -> Card:
    """Create and save a card. An empty column means the board's default."""
    board = boards.get(board_name)
    if not column:
        column = board.effective_default_column()
        if column is None:
            raise ValidationFailure(f'board "{board_name}" has no columns', field="column")
    _check_column(board, column)
    if parent and not cards.exists(board_name, parent):
        raise NotFound("card", parent, hint="parent")

    now = now_millis()
    card = Card(
        id=new_id("card", exists=lambda candidate: cards.exists(board_name, candidate)),
        title=title,
        column=column,
        creator=creator,
        created_at_millis=now,
        updated_at_millis=now,
        description=description,
        parent=parent,
    )
    if alias:
        _claim_alias(cards, board_name, card, alias)
    else:
        card.alias = generate_alias(cards, board_name, title)
    if fields:
        apply_custom_fields(card, board, fields)
    cards.save(board_name, card)
    return card


def move_card(cards, boards, board_name: str, card_id: str, column: str) -> Card:
    board = boards.get(board_name)
    _check_column(board, column)
    card = cards.get(board_name, card_id)
    card.column = column
    card.updated_at_millis = now_millis()
    cards.save(board_name, card)
    return card


def _claim_alias(cards, board_name: str, card: Card, alias: str) -> None:
    if not alias:
        raise ValidationFailure("cannot be empty", field="alias")
    for other in cards.find_by_alias(board_name, alias):
        if other.id != card.id and other.alias_explicit:
            raise ValidationFailure(f"already in use by card {other.id}", field="alias")
    card.alias = alias
    card.alias_explicit = True


def edit_alias(cards, board_name: str, card_id: str, alias: str) -> Card:
    """Set an explicit alias. An empty alias goes back to one derived from the title."""
    card = cards.get(board_name, card_id)
    if alias:
        _claim_alias(cards, board_name, card, alias)
    else:
        card.alias = generate_alias(cards, board_name, card.title, exclude_id=card.id)
        card.alias_explicit = False
    card.updated_at_millis = now_millis()
    cards.save(board_name, card)
    return card


def retitle_card(cards, board_name: str, card_id: str, title: str) -> Card:
    """Change the title, regenerating the alias unless it was set explicitly."""
    card = cards.get(board_name, card_id)
    card.title = title
    if not card.alias_explicit:
        card.alias = generate_alias(cards, board_name, title, exclude_id=card.id)
    card.updated_at_millis = now_millis()
    cards.save(board_name, card)
    return card


def add_comment(cards, board_name: str, card_id: str, body: str, author: str) -> Comment:
    card = cards.get(board_name, card_id)
    comment = Comment(id=new_id("comment"), body=body, author=author, created_at_millis=now_millis())
    card.comments.append(comment)
    card.updated_at_millis = comment.created_at_millis
    cards.save(board_name, card)
    return comment


def delete_card(cards, board_name: str, card_id: str) -> None:
    """Delete a card and clear parent links pointing at it."""
    if not cards.exists(board_name, card_id):
        raise NotFound("card", card_id, hint=f'board "{board_name}"')
    cards.delete(board_name, card_id)
    for child in cards.list_cards(board_name):
        if child.parent == card_id:
            child.parent = ""
            cards.save(board_name, child)
