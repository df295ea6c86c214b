"""CLI argument parser and dispatch for kan."""

import argparse

from kan import __version__
from kan.cli.board import board_default, board_list
from kan.cli.card import card_add, card_comment, card_delete, card_edit, card_list, card_move, card_show
from kan.cli.doctor import doctor
from kan.cli.init import init_project
from kan.cli.migrate import migrate


def build_parser() -> argparse.ArgumentParser:
    """Build the full CLI argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--root", default=".", help="Directory inside the project (default: .)")
    common.add_argument("--json", action="store_true", help="Machine-readable JSON output")
    common.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")

    # -b is shared by every command that works on one board
    board_opt = argparse.ArgumentParser(add_help=False)
    board_opt.add_argument("-b", "--board", help="Board name (default: inferred)")

    parser = argparse.ArgumentParser(
        prog="kan",
        description="File-backed kanban boards",
        parents=[common],
    )
    parser.add_argument("--version", action="version", version=f"kan {__version__}")

    nouns = parser.add_subparsers(dest="noun")

    # --- init ---
    init_p = nouns.add_parser("init", help="Initialize kan in a project", parents=[common])
    init_p.add_argument("--board", default="main", help="Name of the first board (default: main)")
    init_p.add_argument("--data-location", default="", help="Data directory relative to the project (default: .kan)")
    init_p.add_argument("--columns", help="Comma-separated column names")
    init_p.set_defaults(func=init_project)

    # --- board ---
    board_p = nouns.add_parser("board", help="Board operations", parents=[common])
    board_verbs = board_p.add_subparsers(dest="verb")

    board_list_p = board_verbs.add_parser("list", help="List boards", parents=[common])
    board_list_p.set_defaults(func=board_list)

    board_default_p = board_verbs.add_parser("default", help="Set the default board", parents=[common])
    board_default_p.add_argument("name", help="Board name")
    board_default_p.set_defaults(func=board_default)

    # board with no verb = list
    board_p.set_defaults(func=board_list)

    # --- card ---
    card_p = nouns.add_parser("card", help="Card operations", parents=[common, board_opt])
    card_verbs = card_p.add_subparsers(dest="verb")

    card_list_p = card_verbs.add_parser("list", help="List cards", parents=[common, board_opt])
    card_list_p.add_argument("--column", dest="column", help="Filter by column")
    card_list_p.set_defaults(func=card_list)

    card_show_p = card_verbs.add_parser("show", help="Show a card", parents=[common, board_opt])
    card_show_p.add_argument("id", help="Card ID or alias")
    card_show_p.set_defaults(func=card_show)

    card_add_p = card_verbs.add_parser("add", help="Create a card", parents=[common, board_opt])
    card_add_p.add_argument("title", help="Card title")
    card_add_p.add_argument("--column", dest="column", help="Target column (default: board default)")
    card_add_p.add_argument("--alias", help="Explicit alias")
    card_add_p.add_argument("--description", default="", help="Card description")
    card_add_p.add_argument("--parent", help="Parent card ID")
    card_add_p.add_argument("--field", action="append", metavar="NAME=VALUE", help="Custom field value")
    card_add_p.set_defaults(func=card_add)

    card_move_p = card_verbs.add_parser("move", help="Move a card", parents=[common, board_opt])
    card_move_p.add_argument("id", help="Card ID or alias")
    card_move_p.add_argument("column", help="Target column")
    card_move_p.set_defaults(func=card_move)

    card_edit_p = card_verbs.add_parser("edit", help="Change title or alias", parents=[common, board_opt])
    card_edit_p.add_argument("id", help="Card ID or alias")
    card_edit_p.add_argument("--title", help="New title")
    card_edit_p.add_argument("--alias", help="New explicit alias, empty to derive from the title")
    card_edit_p.set_defaults(func=card_edit)

    card_comment_p = card_verbs.add_parser("comment", help="Comment on a card", parents=[common, board_opt])
    card_comment_p.add_argument("id", help="Card ID or alias")
    card_comment_p.add_argument("body", help="Comment text")
    card_comment_p.set_defaults(func=card_comment)

    card_delete_p = card_verbs.add_parser("delete", help="Delete a card", parents=[common, board_opt])
    card_delete_p.add_argument("id", help="Card ID or alias")
    card_delete_p.set_defaults(func=card_delete)

    # card with no verb = list
    card_p.set_defaults(func=card_list, column=None)

    # --- doctor ---
    doctor_p = nouns.add_parser("doctor", help="Check data for consistency issues", parents=[common, board_opt])
    doctor_p.add_argument("--fix", action="store_true", help="Apply automatic fixes")
    doctor_p.add_argument("--dry-run", action="store_true", help="Show fixes without applying them")
    doctor_p.set_defaults(func=doctor)

    # --- migrate ---
    migrate_p = nouns.add_parser("migrate", help="Upgrade data files to the current schema", parents=[common])
    migrate_p.add_argument("--dry-run", action="store_true", help="Show what would change")
    migrate_p.set_defaults(func=migrate)

    return parser
