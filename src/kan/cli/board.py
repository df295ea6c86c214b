"""Handlers for 'kan board' commands."""

from kan.boards import set_default_board
from kan.cli._common import open_project, output_json, output_result
from kan.errors import NotFound


def board_list(args) -> int:
    """List boards with their columns and card counts."""
    ctx = open_project(args.root)
    repo = ctx.global_store.load().get_repo(ctx.root)
    default = repo.default_board if repo else ""

    items = []
    for name in ctx.boards.list():
        board = ctx.boards.get(name)
        items.append(
            {
                "name": name,
                "default": name == default,
                "columns": board.column_names(),
                "cards": len(ctx.cards.list(name)),
            }
        )

    if args.json:
        output_json(items)
    elif not items:
        print("No boards found")
    else:
        for item in items:
            marker = "*" if item["default"] else " "
            cards = "card" if item["cards"] == 1 else "cards"
            print(f"{marker} {item['name']:<16} {item['cards']} {cards}  [{', '.join(item['columns'])}]")

    return 0


def board_default(args) -> int:
    """Set the board commands use when -b is not given."""
    ctx = open_project(args.root)
    if not ctx.boards.exists(args.name):
        raise NotFound("board", args.name)
    set_default_board(ctx.global_store, ctx.root, args.name)
    output_result({"root": ctx.root, "default_board": args.name}, f"Default board set to {args.name}", args.json)
    return 0
