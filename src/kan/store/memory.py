"""In-memory stores for tests.

They keep serialized text rather than objects, so every save and get goes
through the same codec and migration path as the file stores.
"""

from __future__ import annotations

from kan import codec, migrate
from kan.constants import CURRENT_BOARD_VERSION, CURRENT_CARD_VERSION, CURRENT_GLOBAL_VERSION
from kan.errors import NotFound
from kan.models import BoardConfig, Card, GlobalConfig
from kan.paths import check_name
from kan.store.base import CardQueries, GlobalEntries
from kan.store.card import check_card_id


class MemoryBoardStore:
    def __init__(self):
        self.files: dict[str, str] = {}

    def get(self, name: str) -> BoardConfig:
        if name not in self.files:
            raise NotFound("board", name)
        return migrate.decode_board(self.files[name], f"<memory>/{name}")

    def list(self) -> list[str]:
        return sorted(self.files)

    def exists(self, name: str) -> bool:
        return name in self.files

    def save(self, board: BoardConfig) -> None:
        check_name("board", board.name)
        self.files[board.name] = codec.encode_board(board)
        board.version = CURRENT_BOARD_VERSION

    def delete(self, name: str) -> None:
        self.files.pop(name, None)


class MemoryCardStore(CardQueries):
    """Cards keyed by (board, card_id).

    With a board store attached, saving to an unknown board raises NotFound
    the way the file store does.
    """

    def __init__(self, boards: MemoryBoardStore | None = None):
        self.boards = boards
        self.files: dict[tuple[str, str], str] = {}

    def get(self, board: str, card_id: str) -> Card:
        text = self.files.get((board, card_id))
        if text is None:
            raise NotFound("card", card_id, hint=f'board "{board}"')
        path = f"<memory>/{board}/{card_id}"
        return check_card_id(migrate.decode_card(text, path), card_id, path)

    def list(self, board: str) -> list[str]:
        return sorted(card_id for b, card_id in self.files if b == board)

    def exists(self, board: str, card_id: str) -> bool:
        return (board, card_id) in self.files

    def save(self, board: str, card: Card) -> None:
        if self.boards is not None and not self.boards.exists(board):
            raise NotFound("board", board)
        check_name("card", card.id)
        self.files[(board, card.id)] = codec.encode_card(card)
        card.version = CURRENT_CARD_VERSION

    def delete(self, board: str, card_id: str) -> None:
        self.files.pop((board, card_id), None)


class MemoryGlobalStore(GlobalEntries):
    def __init__(self, text: str = ""):
        self.path = "<memory>/global"
        self.text = text

    def load(self) -> GlobalConfig:
        if not self.text:
            return GlobalConfig()
        return migrate.decode_global(self.text, self.path)

    def save(self, config: GlobalConfig) -> None:
        self.text = codec.encode_global(config)
        config.version = CURRENT_GLOBAL_VERSION
