"""Persistence for cards, boards and the global config."""

from kan.store.base import BoardStore, CardStore, GlobalStore
from kan.store.board import FileBoardStore
from kan.store.card import FileCardStore
from kan.store.global_config import FileGlobalStore
from kan.store.memory import MemoryBoardStore, MemoryCardStore, MemoryGlobalStore

__all__ = [
    "BoardStore",
    "CardStore",
    "GlobalStore",
    "FileBoardStore",
    "FileCardStore",
    "FileGlobalStore",
    "MemoryBoardStore",
    "MemoryCardStore",
    "MemoryGlobalStore",
]
