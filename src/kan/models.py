"""Data models for kan boards."""

from dataclasses import dataclass, field
from typing import Any

from kan.constants import (
    CURRENT_BOARD_VERSION,
    CURRENT_CARD_VERSION,
    CURRENT_GLOBAL_VERSION,
    DEFAULT_COLUMN_COLORS,
    DEFAULT_COLUMNS,
)


@dataclass
class Comment:
    """A comment attached to a card."""

    id: str
    body: str
    author: str = ""
    created_at_millis: int = 0


@dataclass
class Card:
    """A card file in boards/<board>/cards/.

    custom_fields holds board-defined fields; on disk they sit at the top
    level of the JSON object next to the built-in keys. version is the
    schema version the card was read at; cards are always written at the
    current one.
    """

    id: str
    title: str = ""
    alias: str = ""
    alias_explicit: bool = False
    column: str = ""
    creator: str = ""
    created_at_millis: int = 0
    updated_at_millis: int = 0
    description: str = ""
    labels: list[str] = field(default_factory=list)
    parent: str = ""
    comments: list[Comment] = field(default_factory=list)
    custom_fields: dict[str, Any] = field(default_factory=dict)
    version: int = CURRENT_CARD_VERSION


@dataclass
class Column:
    """A column definition in a board config."""

    name: str
    position: int = 0
    color: str = ""
    limit: int = 0


@dataclass
class CustomFieldSchema:
    """Definition of a board-level custom card field."""

    type: str = "string"
    options: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class BoardConfig:
    """Contents of boards/<board>/config.toml."""

    id: str
    name: str
    columns: list[Column] = field(default_factory=list)
    default_column: str = ""
    custom_fields: dict[str, CustomFieldSchema] = field(default_factory=dict)
    version: int = CURRENT_BOARD_VERSION

    def column_names(self) -> list[str]:
        return [col.name for col in self.columns]

    def has_column(self, name: str) -> bool:
        return any(col.name == name for col in self.columns)

    def effective_default_column(self) -> str | None:
        """The column new or stray cards land in.

        Falls back to the first column when default_column is unset or
        invalid; None when the board has no columns at all.
        """
        if self.default_column and self.has_column(self.default_column):
            return self.default_column
        if self.columns:
            return self.columns[0].name
        return None


@dataclass
class RepoConfig:
    """Per-repository settings held in the global config."""

    data_location: str = ""
    default_board: str = ""


@dataclass
class GlobalConfig:
    """The user's global config, keyed by absolute repository path."""

    repos: dict[str, RepoConfig] = field(default_factory=dict)
    editor: str = ""
    version: int = CURRENT_GLOBAL_VERSION

    def get_repo(self, repo_path: str) -> RepoConfig | None:
        return self.repos.get(repo_path)

    def set_repo(self, repo_path: str, repo: RepoConfig) -> None:
        self.repos[repo_path] = repo

    def remove_repo(self, repo_path: str) -> bool:
        """Remove an entry. Returns False if there was nothing to remove."""
        return self.repos.pop(repo_path, None) is not None


def default_columns() -> list[Column]:
    """Columns of a freshly initialized board."""
    return [
        Column(name=name, position=i, color=DEFAULT_COLUMN_COLORS.get(name, ""))
        for i, name in enumerate(DEFAULT_COLUMNS)
    ]
