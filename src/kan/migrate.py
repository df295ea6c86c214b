"""Schema versions and upgrades for kan data files.

Every file kind carries its schema version: cards in a ``_v`` integer,
board and global configs in a ``kan_schema = "<kind>/<n>"`` string. A file
without a version marker predates versioning and counts as version 1.

Reads upgrade records in memory, one step at a time, and never write. Files
are brought up to date on disk either by the next save of the entity or in
bulk by ``plan()`` and ``execute()``.
"""

import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from kan import codec
from kan.constants import (
    BOARD_SCHEMA_PREFIX,
    CARD_SUFFIX,
    CARD_VERSION_KEY,
    CARDS_DIR,
    CONFIG_FILENAME,
    CURRENT_BOARD_VERSION,
    CURRENT_CARD_VERSION,
    CURRENT_GLOBAL_VERSION,
    GLOBAL_SCHEMA_PREFIX,
    SCHEMA_KEY,
)
from kan.errors import Corrupt, UnsupportedVersion
from kan.fileio import atomic_write, is_temp_file, read_text
from kan.models import BoardConfig, Card, GlobalConfig
from kan.paths import Paths

logger = logging.getLogger(__name__)

# Oldest kan release able to read each schema version.
MIN_TOOL_VERSION = {
    "card/1": "0.1.0",
    "card/2": "0.2.0",
    "card/3": "0.4.0",
    "board/1": "0.1.0",
    "board/2": "0.2.0",
    "board/3": "0.4.0",
    "global/1": "0.1.0",
}

CURRENT_VERSIONS = {
    "card": CURRENT_CARD_VERSION,
    "board": CURRENT_BOARD_VERSION,
    "global": CURRENT_GLOBAL_VERSION,
}


def min_tool_version(kind: str, version: int) -> str:
    """Minimum kan version that understands kind at version."""
    return MIN_TOOL_VERSION.get(f"{kind}/{version}", "a newer version")


# --- Version detection ---


def _positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def card_version(record: dict, path="") -> int:
    """The ``_v`` of a card record, 1 when absent."""
    if CARD_VERSION_KEY not in record:
        return 1
    value = record[CARD_VERSION_KEY]
    if not _positive_int(value):
        raise Corrupt(path, f"invalid card version {value!r}")
    return value


def parse_schema(value: Any, prefix: str, path="") -> int:
    """Parse a ``kind/N`` schema string."""
    if not isinstance(value, str) or not value.startswith(prefix):
        raise Corrupt(path, f"invalid {SCHEMA_KEY} {value!r}, expected {prefix}<n>")
    number = value[len(prefix) :]
    if not number.isdigit() or int(number) < 1:
        raise Corrupt(path, f"invalid {SCHEMA_KEY} {value!r}, expected {prefix}<n>")
    return int(number)


def schema_version(record: dict, prefix: str, path="") -> int:
    if SCHEMA_KEY not in record:
        return 1
    return parse_schema(record[SCHEMA_KEY], prefix, path)


def board_version(record: dict, path="") -> int:
    return schema_version(record, BOARD_SCHEMA_PREFIX, path)


def global_version(record: dict, path="") -> int:
    return schema_version(record, GLOBAL_SCHEMA_PREFIX, path)


def check_supported(kind: str, found: int, path="") -> None:
    current = CURRENT_VERSIONS[kind]
    if found > current:
        raise UnsupportedVersion(kind, path, found, current, min_tool_version(kind, found))


# --- Upgrade steps ---


def _card_1_to_2(record: dict, path) -> dict:
    if "created_by" in record:
        created_by = record.pop("created_by")
        record.setdefault("creator", created_by)
    # v1 had no explicit aliases
    record.setdefault("alias_explicit", False)
    return record


def _card_2_to_3(record: dict, path) -> dict:
    record.setdefault("updated_at_millis", record.get("created_at_millis", 0))
    record.setdefault("comments", [])
    return record


def _board_1_to_2(record: dict, path) -> dict:
    labels = record.pop("labels", None)
    if labels is None:
        return record
    if not isinstance(labels, list) or not all(isinstance(label, dict) for label in labels):
        raise Corrupt(path, "legacy labels must be an array of tables")
    fields = record.setdefault("custom_fields", {})
    if not isinstance(fields, dict):
        raise Corrupt(path, "custom_fields must be a table")
    if "labels" not in fields:
        options = []
        for label in labels:
            option = {"value": label.get("name", label.get("value", ""))}
            if label.get("color"):
                option["color"] = label["color"]
            options.append(option)
        fields["labels"] = {"type": "tags", "options": options}
    return record


def _board_2_to_3(record: dict, path) -> dict:
    columns = record.get("columns", [])
    if isinstance(columns, list):
        for i, column in enumerate(columns):
            if isinstance(column, dict):
                column.setdefault("position", i)
    return record


Step = Callable[[dict, Any], dict]

CARD_STEPS: dict[int, Step] = {1: _card_1_to_2, 2: _card_2_to_3}
BOARD_STEPS: dict[int, Step] = {1: _board_1_to_2, 2: _board_2_to_3}
GLOBAL_STEPS: dict[int, Step] = {}


def _upgrade(kind: str, record: dict, found: int, steps: dict[int, Step], path) -> dict:
    check_supported(kind, found, path)
    upgraded = copy.deepcopy(record)
    for version in range(found, CURRENT_VERSIONS[kind]):
        upgraded = steps[version](upgraded, path)
    return upgraded


def upgrade_card(record: dict, path="") -> dict:
    """Bring a card record to the current version. The input is left untouched."""
    upgraded = _upgrade("card", record, card_version(record, path), CARD_STEPS, path)
    upgraded[CARD_VERSION_KEY] = CURRENT_CARD_VERSION
    return upgraded


def upgrade_board(record: dict, path="") -> dict:
    upgraded = _upgrade("board", record, board_version(record, path), BOARD_STEPS, path)
    upgraded[SCHEMA_KEY] = f"{BOARD_SCHEMA_PREFIX}{CURRENT_BOARD_VERSION}"
    return upgraded


def upgrade_global(record: dict, path="") -> dict:
    upgraded = _upgrade("global", record, global_version(record, path), GLOBAL_STEPS, path)
    upgraded[SCHEMA_KEY] = f"{GLOBAL_SCHEMA_PREFIX}{CURRENT_GLOBAL_VERSION}"
    return upgraded


# --- Decoding ---


def decode_card(text: str, path="") -> Card:
    """Parse, upgrade and decode card JSON. card.version is the stored version."""
    record = codec.load_json(text, path)
    card = codec.card_from_record(upgrade_card(record, path), path)
    card.version = card_version(record, path)
    return card


def decode_board(text: str, path="") -> BoardConfig:
    record = codec.load_toml(text, path)
    board = codec.board_from_record(upgrade_board(record, path), path)
    board.version = board_version(record, path)
    return board


def decode_global(text: str, path="") -> GlobalConfig:
    record = codec.load_toml(text, path)
    config = codec.global_from_record(upgrade_global(record, path), path)
    config.version = global_version(record, path)
    return config


# --- Bulk migration ---


@dataclass
class FileMigration:
    """One file that is stored at an outdated schema version."""

    kind: str
    path: Path
    from_version: int
    to_version: int
    board: str = ""
    card_id: str = ""

    def describe(self) -> str:
        if self.kind == "global":
            name = "global config"
        elif self.kind == "board":
            name = f'board "{self.board}" config'
        else:
            name = f'card {self.card_id} in board "{self.board}"'
        return f"{name}: v{self.from_version} -> v{self.to_version}"


@dataclass
class MigrationPlan:
    files: list[FileMigration] = field(default_factory=list)

    def has_changes(self) -> bool:
        return bool(self.files)

    def to_dict(self) -> dict:
        return {
            "files": [
                {
                    "kind": m.kind,
                    "path": str(m.path),
                    "board": m.board,
                    "card_id": m.card_id,
                    "from_version": m.from_version,
                    "to_version": m.to_version,
                }
                for m in self.files
            ]
        }


def _plan_file(plan: MigrationPlan, kind: str, path: Path, board: str = "", card_id: str = "") -> None:
    text = read_text(path)
    if kind == "card":
        found = card_version(codec.load_json(text, path), path)
    elif kind == "board":
        found = board_version(codec.load_toml(text, path), path)
    else:
        found = global_version(codec.load_toml(text, path), path)
    check_supported(kind, found, path)
    if found < CURRENT_VERSIONS[kind]:
        plan.files.append(FileMigration(kind, path, found, CURRENT_VERSIONS[kind], board, card_id))


def plan(paths: Paths, global_path: Path | None = None) -> MigrationPlan:
    """Find every outdated file of a project, plus the global config if given.

    Unreadable or too-new files raise; `kan doctor` reports those in detail.
    """
    result = MigrationPlan()
    if global_path is not None and global_path.is_file():
        _plan_file(result, "global", global_path)
    if not paths.boards_root.is_dir():
        return result
    for board_dir in sorted(paths.boards_root.iterdir()):
        config_path = board_dir / CONFIG_FILENAME
        if not config_path.is_file():
            continue
        _plan_file(result, "board", config_path, board=board_dir.name)
        cards_dir = board_dir / CARDS_DIR
        if not cards_dir.is_dir():
            continue
        for card_path in sorted(cards_dir.glob(f"*{CARD_SUFFIX}")):
            if is_temp_file(card_path.name):
                continue
            _plan_file(result, "card", card_path, board=board_dir.name, card_id=card_path.stem)
    return result


def execute(plan: MigrationPlan, dry_run: bool = False) -> list[FileMigration]:
    """Rewrite each planned file at the current schema. Returns what was (or would be) migrated."""
    done = []
    for migration in plan.files:
        if not dry_run:
            text = read_text(migration.path)
            if migration.kind == "card":
                content = codec.encode_card(decode_card(text, migration.path))
            elif migration.kind == "board":
                content = codec.encode_board(decode_board(text, migration.path))
            else:
                content = codec.encode_global(decode_global(text, migration.path))
            atomic_write(migration.path, content)
            logger.info("migrated %s", migration.describe())
        done.append(migration)
    return done
