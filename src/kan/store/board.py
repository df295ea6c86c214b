"""Board configs stored as boards/<board>/config.toml."""

from __future__ import annotations

import shutil

from kan import codec, migrate
from kan.constants import CONFIG_FILENAME, CURRENT_BOARD_VERSION
from kan.errors import KanError, NotFound
from kan.fileio import atomic_write, read_text
from kan.models import BoardConfig
from kan.paths import Paths
from kan.store.base import warn_upgrade
from kan.store.card import stored_version


def board_file_version(text: str, path) -> int:
    return migrate.board_version(codec.load_toml(text, path), path)


class FileBoardStore:
    """Board store backed by a project's data directory."""

    def __init__(self, paths: Paths):
        self.paths = paths

    def get(self, name: str) -> BoardConfig:
        path = self.paths.board_config_path(name)
        try:
            text = read_text(path)
        except FileNotFoundError:
            raise NotFound("board", name) from None
        return migrate.decode_board(text, path)

    def list(self) -> list[str]:
        root = self.paths.boards_root
        if not root.is_dir():
            return []
        return sorted(d.name for d in root.iterdir() if (d / CONFIG_FILENAME).is_file())

    def exists(self, name: str) -> bool:
        try:
            return self.paths.board_config_path(name).is_file()
        except KanError:
            return False

    def save(self, board: BoardConfig) -> None:
        path = self.paths.board_config_path(board.name)
        content = codec.encode_board(board)
        warn_upgrade("board", path, stored_version(path, board_file_version), CURRENT_BOARD_VERSION)
        atomic_write(path, content)
        self.paths.cards_dir(board.name).mkdir(parents=True, exist_ok=True)
        board.version = CURRENT_BOARD_VERSION

    def delete(self, name: str) -> None:
        board_dir = self.paths.board_dir(name)
        if board_dir.is_dir():
            shutil.rmtree(board_dir)
