"""Handlers for 'kan card' commands."""

from datetime import datetime

from kan import cards as card_ops
from kan.cli._common import card_summary, open_project, output_json, output_result, resolve_board, resolve_card
from kan.codec import card_to_record
from kan.errors import ValidationFailure
from kan.git import resolve_author


def _parse_fields(pairs: list[str] | None) -> dict[str, str]:
    fields = {}
    for pair in pairs or []:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise ValidationFailure(f"expected NAME=VALUE, got {pair!r}", field="field")
        fields[name] = value
    return fields


def _format_millis(millis: int) -> str:
    if not millis:
        return "-"
    return datetime.fromtimestamp(millis / 1000).strftime("%Y-%m-%d %H:%M")


def card_list(args) -> int:
    """List cards grouped by column."""
    ctx = open_project(args.root)
    board_name = resolve_board(ctx, args.board)
    board = ctx.boards.get(board_name)
    cards = ctx.cards.list_cards(board_name)
    if args.column:
        cards = [c for c in cards if c.column == args.column]

    if args.json:
        output_json([card_summary(c) for c in cards])
        return 0

    columns = board.column_names()
    columns += sorted({c.column for c in cards if c.column not in columns})
    for column in columns:
        if args.column and column != args.column:
            continue
        in_column = [c for c in cards if c.column == column]
        print(f"{column} ({len(in_column)})")
        for card in in_column:
            print(f"  {card.id}  {card.alias:<20} {card.title}")
    return 0


def card_show(args) -> int:
    """Show one card by ID or alias."""
    ctx = open_project(args.root)
    board_name = resolve_board(ctx, args.board)
    card = resolve_card(ctx, board_name, args.id)

    if args.json:
        output_json(card_to_record(card))
        return 0

    print(card.title)
    print(f"  id:       {card.id}")
    print(f"  alias:    {card.alias}{' (explicit)' if card.alias_explicit else ''}")
    print(f"  column:   {card.column}")
    print(f"  creator:  {card.creator}")
    print(f"  created:  {_format_millis(card.created_at_millis)}")
    print(f"  updated:  {_format_millis(card.updated_at_millis)}")
    if card.parent:
        print(f"  parent:   {card.parent}")
    if card.labels:
        print(f"  labels:   {', '.join(card.labels)}")
    for name, value in sorted(card.custom_fields.items()):
        shown = ", ".join(value) if isinstance(value, list) else value
        print(f"  {name}: {shown}")
    if card.description:
        print()
        print(card.description)
    for comment in card.comments:
        print()
        print(f"--- {comment.author} at {_format_millis(comment.created_at_millis)}")
        print(comment.body)
    return 0


def card_add(args) -> int:
    """Create a card."""
    ctx = open_project(args.root)
    board_name = resolve_board(ctx, args.board)
    card = card_ops.create_card(
        ctx.cards,
        ctx.boards,
        board_name,
        args.title,
        creator=resolve_author(ctx.root),
        column=args.column or "",
        alias=args.alias or "",
        description=args.description or "",
        parent=args.parent or "",
        fields=_parse_fields(args.field),
    )
    output_result(card_summary(card), f"Created card {card.id} ({card.alias}) in {card.column}", args.json)
    return 0


def card_move(args) -> int:
    """Move a card to another column."""
    ctx = open_project(args.root)
    board_name = resolve_board(ctx, args.board)
    card = resolve_card(ctx, board_name, args.id)
    card = card_ops.move_card(ctx.cards, ctx.boards, board_name, card.id, args.column)
    output_result(card_summary(card), f"Moved card {card.id} to {card.column}", args.json)
    return 0


def card_edit(args) -> int:
    """Change a card's title and/or alias."""
    ctx = open_project(args.root)
    board_name = resolve_board(ctx, args.board)
    card = resolve_card(ctx, board_name, args.id)
    if args.title is None and args.alias is None:
        raise ValidationFailure("nothing to change; pass --title and/or --alias")
    if args.title is not None:
        card = card_ops.retitle_card(ctx.cards, board_name, card.id, args.title)
    if args.alias is not None:
        card = card_ops.edit_alias(ctx.cards, board_name, card.id, args.alias)
    output_result(card_summary(card), f"Updated card {card.id} ({card.alias})", args.json)
    return 0


def card_comment(args) -> int:
    """Add a comment to a card."""
    ctx = open_project(args.root)
    board_name = resolve_board(ctx, args.board)
    card = resolve_card(ctx, board_name, args.id)
    comment = card_ops.add_comment(ctx.cards, board_name, card.id, args.body, resolve_author(ctx.root))
    output_result(
        {"card_id": card.id, "comment_id": comment.id, "author": comment.author},
        f"Added comment {comment.id} to card {card.id}",
        args.json,
    )
    return 0


def card_delete(args) -> int:
    """Delete a card."""
    ctx = open_project(args.root)
    board_name = resolve_board(ctx, args.board)
    card = resolve_card(ctx, board_name, args.id)
    card_ops.delete_card(ctx.cards, board_name, card.id)
    output_result({"id": card.id, "deleted": True}, f"Deleted card {card.id}", args.json)
    return 0
