"""Find the project a working directory belongs to."""

import os
from dataclasses import dataclass
from pathlib import Path

from kan.constants import BOARDS_DIR, DEFAULT_DATA_DIR
from kan.errors import StaleReference
from kan.models import GlobalConfig


@dataclass
class Project:
    root: str
    data_location: str = ""
    registered: bool = False


def discover_project(start_dir: str | Path, global_config: GlobalConfig | None, is_dir=os.path.isdir) -> Project | None:
    """Walk up from start_dir to the nearest project root.

    A directory registered in the global config wins, using its configured
    data location; a registered directory whose boards are gone raises
    StaleReference. Otherwise a directory holding ``.kan/boards`` is a
    project. Returns None when the filesystem root is reached.
    """
    current = Path(start_dir).expanduser().resolve()
    while True:
        key = str(current)
        repo = global_config.get_repo(key) if global_config is not None else None
        if repo is not None:
            data_dir = current / (repo.data_location or DEFAULT_DATA_DIR)
            if is_dir(data_dir / BOARDS_DIR):
                return Project(root=key, data_location=repo.data_location, registered=True)
            raise StaleReference(key, data_dir)

        if is_dir(current / DEFAULT_DATA_DIR / BOARDS_DIR):
            return Project(root=key)

        if current.parent == current:
            return None
        current = current.parent
