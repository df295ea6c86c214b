"""The user's global config file."""

from __future__ import annotations

from pathlib import Path

from kan import codec, migrate
from kan.constants import CURRENT_GLOBAL_VERSION
from kan.fileio import atomic_write, read_text
from kan.models import GlobalConfig
from kan.paths import global_config_path
from kan.store.base import GlobalEntries, warn_upgrade
from kan.store.card import stored_version


def global_file_version(text: str, path) -> int:
    return migrate.global_version(codec.load_toml(text, path), path)


class FileGlobalStore(GlobalEntries):
    """Global config at path, by default ~/.config/kan/config.toml."""

    def __init__(self, path: Path | None = None):
        self.path = path or global_config_path()

    def load(self) -> GlobalConfig:
        """Read the config. A missing file is an empty config."""
        try:
            text = read_text(self.path)
        except FileNotFoundError:
            return GlobalConfig()
        return migrate.decode_global(text, self.path)

    def save(self, config: GlobalConfig) -> None:
        content = codec.encode_global(config)
        warn_upgrade("global", self.path, stored_version(self.path, global_file_version), CURRENT_GLOBAL_VERSION)
        atomic_write(self.path, content)
        config.version = CURRENT_GLOBAL_VERSION
