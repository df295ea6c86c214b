"""Convert cards and configs to and from their on-disk records.

Cards are JSON objects; board and global configs are TOML tables. The
functions here work on records that are already at the current schema
version; kan.migrate upgrades older records before they get here.
"""

import json
import tomllib
from typing import Any

import tomli_w

from kan.constants import (
    BOARD_SCHEMA_PREFIX,
    CARD_VERSION_KEY,
    CURRENT_BOARD_VERSION,
    CURRENT_CARD_VERSION,
    CURRENT_GLOBAL_VERSION,
    GLOBAL_SCHEMA_PREFIX,
    SCHEMA_KEY,
)
from kan.errors import Corrupt, ValidationFailure
from kan.models import BoardConfig, Card, Column, Comment, CustomFieldSchema, GlobalConfig, RepoConfig

KNOWN_CARD_FIELDS = frozenset(
    {
        CARD_VERSION_KEY,
        "id",
        "alias",
        "alias_explicit",
        "title",
        "column",
        "creator",
        "created_at_millis",
        "updated_at_millis",
        "description",
        "labels",
        "parent",
        "comments",
    }
)

RESERVED_PREFIXES = ("_", "kan_")

_MISSING = object()


# --- Text formats ---


def load_json(text: str, path="") -> dict[str, Any]:
    """Parse a JSON object, raising Corrupt for anything else."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise Corrupt(path, f"invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise Corrupt(path, f"expected a JSON object, got {type(data).__name__}")
    return data


def dump_json(record: dict[str, Any]) -> str:
    return json.dumps(record, indent=2, ensure_ascii=False) + "\n"


def load_toml(text: str, path="") -> dict[str, Any]:
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise Corrupt(path, f"invalid TOML: {e}") from e


def dump_toml(record: dict[str, Any]) -> str:
    return tomli_w.dumps(record)


# --- Field helpers ---


def _field(record: dict, key: str, kind: type | tuple, default: Any = _MISSING, path="") -> Any:
    """Fetch record[key], checking its type. bool never passes for int."""
    value = record.get(key, _MISSING)
    if value is _MISSING:
        if default is _MISSING:
            raise Corrupt(path, f"missing required field {key!r}")
        return default
    if isinstance(value, bool) and kind is int:
        raise Corrupt(path, f"field {key!r} must be int, got bool")
    if not isinstance(value, kind):
        expected = kind.__name__ if isinstance(kind, type) else "/".join(k.__name__ for k in kind)
        raise Corrupt(path, f"field {key!r} must be {expected}, got {type(value).__name__}")
    return value


def _string_list(record: dict, key: str, path="") -> list[str]:
    values = _field(record, key, list, [], path)
    if not all(isinstance(v, str) for v in values):
        raise Corrupt(path, f"field {key!r} must be a list of strings")
    return list(values)


def validate_custom_field_name(name: str) -> None:
    """Custom field names may not use prefixes reserved for kan itself.

    Checked when a value is set; keys already on disk are written back as read.
    """
    for prefix in RESERVED_PREFIXES:
        if name.startswith(prefix):
            suggestion = name[len(prefix) :] or f"x_{name}"
            raise ValidationFailure(
                f'custom field "{name}" uses reserved prefix "{prefix}". Try "{suggestion}" instead.'
            )


# --- Cards ---


def card_to_record(card: Card) -> dict[str, Any]:
    """Build the JSON record for a card with custom fields merged in at top level."""
    record: dict[str, Any] = {
        CARD_VERSION_KEY: CURRENT_CARD_VERSION,
        "id": card.id,
        "alias": card.alias,
        "alias_explicit": card.alias_explicit,
        "title": card.title,
        "column": card.column,
        "creator": card.creator,
        "created_at_millis": card.created_at_millis,
        "updated_at_millis": card.updated_at_millis,
    }
    if card.description:
        record["description"] = card.description
    if card.labels:
        record["labels"] = list(card.labels)
    if card.parent:
        record["parent"] = card.parent
    if card.comments:
        record["comments"] = [
            {
                "id": c.id,
                "body": c.body,
                "author": c.author,
                "created_at_millis": c.created_at_millis,
            }
            for c in card.comments
        ]
    for name, value in card.custom_fields.items():
        if name in KNOWN_CARD_FIELDS:
            raise ValidationFailure(f"custom field {name!r} collides with a built-in field")
        record[name] = value
    return record


def _comment_from_record(raw: Any, path="") -> Comment:
    if not isinstance(raw, dict):
        raise Corrupt(path, "comments must be JSON objects")
    return Comment(
        id=_field(raw, "id", str, path=path),
        body=_field(raw, "body", str, "", path),
        author=_field(raw, "author", str, "", path),
        created_at_millis=_field(raw, "created_at_millis", int, 0, path),
    )


def card_from_record(record: dict[str, Any], path="") -> Card:
    """Decode a current-version card record. Unknown keys become custom fields."""
    card_id = _field(record, "id", str, path=path)
    if not card_id:
        raise Corrupt(path, "card id is empty")
    created = _field(record, "created_at_millis", int, 0, path)
    return Card(
        id=card_id,
        title=_field(record, "title", str, "", path),
        alias=_field(record, "alias", str, "", path),
        alias_explicit=_field(record, "alias_explicit", bool, False, path),
        column=_field(record, "column", str, path=path),
        creator=_field(record, "creator", str, "", path),
        created_at_millis=created,
        updated_at_millis=_field(record, "updated_at_millis", int, created, path),
        description=_field(record, "description", str, "", path),
        labels=_string_list(record, "labels", path),
        parent=_field(record, "parent", str, "", path),
        comments=[_comment_from_record(c, path) for c in _field(record, "comments", list, [], path)],
        custom_fields={k: v for k, v in record.items() if k not in KNOWN_CARD_FIELDS},
        version=CURRENT_CARD_VERSION,
    )


def encode_card(card: Card) -> str:
    return dump_json(card_to_record(card))


# --- Board configs ---


def board_to_record(board: BoardConfig) -> dict[str, Any]:
    columns = []
    for col in board.columns:
        entry: dict[str, Any] = {"name": col.name, "position": col.position}
        if col.color:
            entry["color"] = col.color
        if col.limit:
            entry["limit"] = col.limit
        columns.append(entry)
    record: dict[str, Any] = {
        SCHEMA_KEY: f"{BOARD_SCHEMA_PREFIX}{CURRENT_BOARD_VERSION}",
        "id": board.id,
        "name": board.name,
        "default_column": board.default_column,
        "columns": columns,
    }
    if board.custom_fields:
        fields = {}
        for name, schema in board.custom_fields.items():
            entry = {"type": schema.type}
            if schema.options:
                entry["options"] = [dict(o) for o in schema.options]
            fields[name] = entry
        record["custom_fields"] = fields
    return record


def _column_from_record(raw: Any, index: int, path="") -> Column:
    if not isinstance(raw, dict):
        raise Corrupt(path, f"column #{index + 1} must be a table")
    name = _field(raw, "name", str, path=path)
    if not name:
        raise Corrupt(path, f"column #{index + 1} has an empty name")
    return Column(
        name=name,
        position=_field(raw, "position", int, index, path),
        color=_field(raw, "color", str, "", path),
        limit=_field(raw, "limit", int, 0, path),
    )


def board_from_record(record: dict[str, Any], path="") -> BoardConfig:
    """Decode a current-version board config record."""
    raw_fields = _field(record, "custom_fields", dict, {}, path)
    custom_fields = {}
    for name, raw in raw_fields.items():
        if not isinstance(raw, dict):
            raise Corrupt(path, f"custom field {name!r} must be a table")
        options = _field(raw, "options", list, [], path)
        if not all(isinstance(o, dict) for o in options):
            raise Corrupt(path, f"options of custom field {name!r} must be tables")
        custom_fields[name] = CustomFieldSchema(type=_field(raw, "type", str, "string", path), options=options)
    return BoardConfig(
        id=_field(record, "id", str, "", path),
        name=_field(record, "name", str, path=path),
        columns=[_column_from_record(c, i, path) for i, c in enumerate(_field(record, "columns", list, [], path))],
        default_column=_field(record, "default_column", str, "", path),
        custom_fields=custom_fields,
        version=CURRENT_BOARD_VERSION,
    )


def encode_board(board: BoardConfig) -> str:
    return dump_toml(board_to_record(board))


# --- Global config ---


def global_to_record(config: GlobalConfig) -> dict[str, Any]:
    record: dict[str, Any] = {SCHEMA_KEY: f"{GLOBAL_SCHEMA_PREFIX}{CURRENT_GLOBAL_VERSION}"}
    if config.editor:
        record["editor"] = config.editor
    repos = {}
    for repo_path, repo in config.repos.items():
        entry = {}
        if repo.data_location:
            entry["data_location"] = repo.data_location
        if repo.default_board:
            entry["default_board"] = repo.default_board
        repos[repo_path] = entry
    if repos:
        record["repos"] = repos
    return record


def global_from_record(record: dict[str, Any], path="") -> GlobalConfig:
    repos = {}
    for repo_path, raw in _field(record, "repos", dict, {}, path).items():
        if not isinstance(raw, dict):
            raise Corrupt(path, f"repo entry {repo_path!r} must be a table")
        repos[repo_path] = RepoConfig(
            data_location=_field(raw, "data_location", str, "", path),
            default_board=_field(raw, "default_board", str, "", path),
        )
    return GlobalConfig(
        repos=repos,
        editor=_field(record, "editor", str, "", path),
        version=CURRENT_GLOBAL_VERSION,
    )


def encode_global(config: GlobalConfig) -> str:
    return dump_toml(global_to_record(config))
