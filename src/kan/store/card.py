"""Cards stored as one JSON file each under boards/<board>/cards/."""

from __future__ import annotations

import logging
from pathlib import Path

from kan import codec, migrate
from kan.constants import CARD_SUFFIX, CURRENT_CARD_VERSION
from kan.errors import Corrupt, KanError, NotFound
from kan.fileio import atomic_write, is_temp_file, read_text
from kan.models import Card
from kan.paths import Paths
from kan.store.base import CardQueries, warn_upgrade

logger = logging.getLogger(__name__)


def check_card_id(card: Card, card_id: str, path) -> Card:
    """The record's id must match the file it was read from."""
    if card.id != card_id:
        raise Corrupt(path, f"card id {card.id!r} does not match file name {card_id!r}")
    return card


def stored_version(path: Path, version_of) -> int | None:
    """Schema version of the file at path, None if it is absent or unreadable."""
    try:
        text = read_text(path)
    except FileNotFoundError:
        return None
    try:
        return version_of(text, path)
    except Corrupt as e:
        logger.warning("Overwriting unreadable file: %s", e)
        return None


def card_file_version(text: str, path) -> int:
    return migrate.card_version(codec.load_json(text, path), path)


class FileCardStore(CardQueries):
    """Card store backed by a project's data directory."""

    def __init__(self, paths: Paths):
        self.paths = paths

    def get(self, board: str, card_id: str) -> Card:
        path = self.paths.card_path(board, card_id)
        try:
            text = read_text(path)
        except FileNotFoundError:
            raise NotFound("card", card_id, hint=f'board "{board}"') from None
        return check_card_id(migrate.decode_card(text, path), card_id, path)

    def list(self, board: str) -> list[str]:
        cards_dir = self.paths.cards_dir(board)
        if not cards_dir.is_dir():
            return []
        return sorted(
            p.stem
            for p in cards_dir.iterdir()
            if p.is_file() and p.suffix == CARD_SUFFIX and not is_temp_file(p.name)
        )

    def exists(self, board: str, card_id: str) -> bool:
        try:
            return self.paths.card_path(board, card_id).is_file()
        except KanError:
            return False

    def save(self, board: str, card: Card) -> None:
        if not self.paths.board_config_path(board).is_file():
            raise NotFound("board", board)
        path = self.paths.card_path(board, card.id)
        content = codec.encode_card(card)
        warn_upgrade("card", path, stored_version(path, card_file_version), CURRENT_CARD_VERSION)
        atomic_write(path, content)
        card.version = CURRENT_CARD_VERSION

    def delete(self, board: str, card_id: str) -> None:
        self.paths.card_path(board, card_id).unlink(missing_ok=True)
