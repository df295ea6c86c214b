"""Board creation and global config registration."""

import logging

from kan.errors import ValidationFailure
from kan.ids import new_id
from kan.models import BoardConfig, Column, RepoConfig, default_columns
from kan.paths import canonical_path, check_name

logger = logging.getLogger(__name__)


def validate_board(board: BoardConfig) -> None:
    """Column names are unique and the default column is one of them."""
    names = board.column_names()
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValidationFailure(f"duplicate column names: {', '.join(duplicates)}", field="board")
    if board.default_column and board.default_column not in names:
        raise ValidationFailure(
            f"default column {board.default_column!r} is not a column of board {board.name!r}", field="board"
        )


def create_board(boards, name: str, columns: list[Column] | None = None) -> BoardConfig:
    check_name("board", name)
    if boards.exists(name):
        raise ValidationFailure(f"board {name!r} already exists", field="board")
    columns = default_columns() if columns is None else columns
    board = BoardConfig(
        id=new_id("board"),
        name=name,
        columns=columns,
        default_column=columns[0].name if columns else "",
    )
    validate_board(board)
    boards.save(board)
    logger.info("Created board %s", name)
    return board


def register_repo(global_store, project_root: str, data_location: str = "") -> RepoConfig:
    """Record project_root in the global config, keeping any existing default board."""
    key = canonical_path(project_root)
    config = global_store.load()
    repo = config.get_repo(key) or RepoConfig()
    repo.data_location = data_location
    config.set_repo(key, repo)
    global_store.save(config)
    return repo


def set_default_board(global_store, project_root: str, board: str) -> RepoConfig:
    key = canonical_path(project_root)
    config = global_store.load()
    repo = config.get_repo(key) or RepoConfig()
    repo.default_board = board
    config.set_repo(key, repo)
    global_store.save(config)
    return repo
