"""Store interfaces and behaviour shared by every implementation."""

from __future__ import annotations

import logging
from typing import Protocol

from kan.errors import KanError, NotFound
from kan.migrate import min_tool_version
from kan.models import BoardConfig, Card, GlobalConfig, RepoConfig

logger = logging.getLogger(__name__)


class CardStore(Protocol):
    """Cards of all boards, keyed by (board, card_id)."""

    def get(self, board: str, card_id: str) -> Card: ...

    def list(self, board: str) -> list[str]: ...

    def exists(self, board: str, card_id: str) -> bool: ...

    def save(self, board: str, card: Card) -> None: ...

    def delete(self, board: str, card_id: str) -> None: ...

    def list_cards(self, board: str) -> list[Card]: ...

    def find_by_alias(self, board: str, alias: str) -> list[Card]: ...


class BoardStore(Protocol):
    """Board configs keyed by board name."""

    def get(self, name: str) -> BoardConfig: ...

    def list(self) -> list[str]: ...

    def exists(self, name: str) -> bool: ...

    def save(self, board: BoardConfig) -> None: ...

    def delete(self, name: str) -> None: ...


class GlobalStore(Protocol):
    """The single global config document."""

    def load(self) -> GlobalConfig: ...

    def save(self, config: GlobalConfig) -> None: ...

    def get(self, repo_path: str) -> RepoConfig: ...

    def list(self) -> list[str]: ...

    def exists(self, repo_path: str) -> bool: ...

    def put(self, repo_path: str, repo: RepoConfig) -> None: ...

    def delete(self, repo_path: str) -> None: ...


class CardQueries:
    """Queries built on get() and list(), shared by the card stores."""

    def list_cards(self, board: str) -> list[Card]:
        """Load every card of board, skipping (and logging) unreadable ones."""
        cards = []
        for card_id in self.list(board):
            try:
                cards.append(self.get(board, card_id))
            except KanError as e:
                logger.warning("Skipping card %s on board %s: %s", card_id, board, e)
        return cards

    def find_by_alias(self, board: str, alias: str) -> list[Card]:
        return [card for card in self.list_cards(board) if card.alias == alias]


class GlobalEntries:
    """Per-repository accessors built on load() and save()."""

    def get(self, repo_path: str) -> RepoConfig:
        repo = self.load().get_repo(repo_path)
        if repo is None:
            raise NotFound("repository", repo_path)
        return repo

    def list(self) -> list[str]:
        return sorted(self.load().repos)

    def exists(self, repo_path: str) -> bool:
        return self.load().get_repo(repo_path) is not None

    def put(self, repo_path: str, repo: RepoConfig) -> None:
        config = self.load()
        config.set_repo(repo_path, repo)
        self.save(config)

    def delete(self, repo_path: str) -> None:
        config = self.load()
        if config.remove_repo(repo_path):
            self.save(config)


def warn_upgrade(kind: str, where, stored: int | None, current: int) -> None:
    """Log that a file is about to be rewritten at a newer schema."""
    if stored is not None and stored < current:
        logger.warning(
            "Upgrading %s %s from schema v%d to v%d; it now needs kan >= %s",
            kind,
            where,
            stored,
            current,
            min_tool_version(kind, current),
        )
