"""Shared helpers for CLI command handlers."""

import json
import sys
from dataclasses import dataclass

from kan.discovery import discover_project
from kan.errors import AmbiguousBoard, KanError, NotFound
from kan.models import Card
from kan.paths import Paths, canonical_path
from kan.resolver import BoardResolver, CardResolver
from kan.store import FileBoardStore, FileCardStore, FileGlobalStore


@dataclass
class Context:
    """Stores for the project a command runs in."""

    root: str
    paths: Paths
    cards: FileCardStore
    boards: FileBoardStore
    global_store: FileGlobalStore


def open_project(root: str) -> Context:
    """Discover the project containing root. NotFound if there is none."""
    global_store = FileGlobalStore()
    project = discover_project(root, global_store.load())
    if project is None:
        raise NotFound("kan project", canonical_path(root), hint="run 'kan init' first")
    paths = Paths(project.root, project.data_location)
    return Context(
        root=project.root,
        paths=paths,
        cards=FileCardStore(paths),
        boards=FileBoardStore(paths),
        global_store=global_store,
    )


def prompt_select(title: str, options: list[str]) -> str:
    """Ask for one of options on the terminal, by number or by name."""
    print(f"{title}:", file=sys.stderr)
    for i, option in enumerate(options, 1):
        print(f"  {i}) {option}", file=sys.stderr)
    while True:
        try:
            answer = input("> ").strip()
        except EOFError:
            raise AmbiguousBoard("no board selected") from None
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return options[int(answer) - 1]
        if answer in options:
            return answer
        print(f"Enter a number from 1 to {len(options)}", file=sys.stderr)


def resolve_board(ctx: Context, explicit: str | None) -> str:
    resolver = BoardResolver(ctx.boards, ctx.global_store, ctx.root, prompter=prompt_select)
    return resolver.resolve(explicit or "", interactive=sys.stdin.isatty())


def resolve_card(ctx: Context, board: str, ident: str) -> Card:
    return CardResolver(ctx.cards).resolve(board, ident)


def card_summary(card: Card) -> dict:
    return {"id": card.id, "alias": card.alias, "title": card.title, "column": card.column}


def output_json(data: dict | list) -> None:
    """Write JSON to stdout."""
    print(json.dumps(data, indent=2, ensure_ascii=False))


def output_result(data: dict, text: str, json_mode: bool) -> None:
    """Output mutation result as JSON or plain text."""
    if json_mode:
        output_json(data)
    else:
        print(text)


def report_error(exc: KanError, json_mode: bool) -> int:
    """Print a kan error to stderr and return the exit code for it."""
    if json_mode:
        print(json.dumps({"error": str(exc), "code": exc.code}), file=sys.stderr)
    else:
        print(f"error: {exc}", file=sys.stderr)
    return exc.exit_code


def error(message: str, json_mode: bool) -> None:
    """Print error to stderr and exit 1."""
    if json_mode:
        print(json.dumps({"error": message}), file=sys.stderr)
    else:
        print(f"error: {message}", file=sys.stderr)
    sys.exit(1)
