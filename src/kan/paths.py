"""Filesystem locations of kan data."""

import os
from pathlib import Path

from kan.constants import (
    BOARDS_DIR,
    CARD_SUFFIX,
    CARDS_DIR,
    CONFIG_FILENAME,
    DEFAULT_DATA_DIR,
    GLOBAL_CONFIG_DIR,
    GLOBAL_CONFIG_ENV,
)
from kan.errors import ValidationFailure


def canonical_path(path: str | Path) -> str:
    """Absolute, symlink-free form used as a global config key."""
    return str(Path(path).expanduser().resolve())


def global_config_path() -> Path:
    """Location of the user's global config, overridable via $KAN_GLOBAL_CONFIG."""
    override = os.environ.get(GLOBAL_CONFIG_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / GLOBAL_CONFIG_DIR / CONFIG_FILENAME


def check_name(kind: str, name: str) -> str:
    """Reject names that cannot be used as a single path component."""
    if not name or name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
        raise ValidationFailure(f"{name!r} is not a valid {kind} name", field=kind)
    return name


class Paths:
    """Resolve board and card files for one project.

    data_location is relative to project_root; empty means the default
    ``.kan`` directory.
    """

    def __init__(self, project_root: str | Path, data_location: str = ""):
        self.project_root = Path(project_root)
        self.data_location = data_location

    def __repr__(self) -> str:
        return f"Paths({str(self.project_root)!r}, {self.data_location!r})"

    @property
    def data_root(self) -> Path:
        return self.project_root / (self.data_location or DEFAULT_DATA_DIR)

    @property
    def boards_root(self) -> Path:
        return self.data_root / BOARDS_DIR

    def board_dir(self, board: str) -> Path:
        return self.boards_root / check_name("board", board)

    def board_config_path(self, board: str) -> Path:
        return self.board_dir(board) / CONFIG_FILENAME

    def cards_dir(self, board: str) -> Path:
        return self.board_dir(board) / CARDS_DIR

    def card_path(self, board: str, card_id: str) -> Path:
        return self.cards_dir(board) / f"{check_name('card', card_id)}{CARD_SUFFIX}"
