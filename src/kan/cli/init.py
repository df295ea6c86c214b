"""Handler for 'kan init'."""

from pathlib import Path

from kan.boards import create_board, register_repo
from kan.cli._common import output_json
from kan.constants import DEFAULT_COLUMN_COLORS
from kan.errors import ValidationFailure
from kan.models import Column
from kan.paths import Paths, canonical_path
from kan.store import FileBoardStore, FileGlobalStore


def _parse_columns(raw: str | None) -> list[Column] | None:
    if not raw:
        return None
    names = [name.strip() for name in raw.split(",") if name.strip()]
    if not names:
        raise ValidationFailure("at least one column name is required", field="columns")
    return [Column(name=name, position=i, color=DEFAULT_COLUMN_COLORS.get(name, "")) for i, name in enumerate(names)]


def init_project(args) -> int:
    """Create the data directory and a first board, and register the project."""
    root = canonical_path(args.root)
    data_location = args.data_location or ""
    if Path(data_location).is_absolute() or ".." in Path(data_location).parts:
        raise ValidationFailure(f"{data_location!r} must be a path inside the project", field="data location")

    paths = Paths(root, data_location)
    boards = FileBoardStore(paths)
    created = not boards.exists(args.board)
    if created:
        create_board(boards, args.board, _parse_columns(args.columns))
    register_repo(FileGlobalStore(), root, data_location)

    board = boards.get(args.board)
    columns = board.column_names()
    if args.json:
        output_json(
            {
                "root": root,
                "data_dir": str(paths.data_root),
                "board": board.name,
                "columns": columns,
                "created": created,
            }
        )
    elif created:
        print(f"Initialized kan board {board.name!r} at {paths.data_root}")
        print(f"Columns: {', '.join(columns)}")
    else:
        print(f"Board {board.name!r} already initialized at {paths.data_root}")

    return 0
