"""Names and versions shared across kan modules."""

DEFAULT_DATA_DIR = ".kan"
BOARDS_DIR = "boards"
CARDS_DIR = "cards"
CONFIG_FILENAME = "config.toml"
CARD_SUFFIX = ".json"

GLOBAL_CONFIG_DIR = ".config/kan"
GLOBAL_CONFIG_ENV = "KAN_GLOBAL_CONFIG"
USER_ENV = "KAN_USER"
LOG_LEVEL_ENV = "KAN_LOG_LEVEL"

# Leftovers of an interrupted atomic write start with this prefix.
TMP_PREFIX = ".kan-tmp-"

CURRENT_CARD_VERSION = 3
CURRENT_BOARD_VERSION = 3
CURRENT_GLOBAL_VERSION = 1

CARD_VERSION_KEY = "_v"
SCHEMA_KEY = "kan_schema"
BOARD_SCHEMA_PREFIX = "board/"
GLOBAL_SCHEMA_PREFIX = "global/"

DEFAULT_COLUMNS = ("backlog", "next", "in-progress", "done")
DEFAULT_COLUMN_COLORS = {
    "backlog": "#6b7280",
    "next": "#3b82f6",
    "in-progress": "#f59e0b",
    "done": "#10b981",
}
