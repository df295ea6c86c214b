"""Git lookups: repository detection and author identity."""

import os
from pathlib import Path

from git import GitConfigParser, InvalidGitRepositoryError, NoSuchPathError, Repo

from kan.constants import USER_ENV
from kan.errors import ValidationFailure


def _get_repo(path: str | Path) -> Repo | None:
    try:
        return Repo(path, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError):
        return None


def is_git_repo(path: str | Path) -> bool:
    """Check if path is inside a git repository."""
    return _get_repo(path) is not None


def repo_root(path: str | Path) -> str | None:
    """Top-level working tree directory of the repository containing path."""
    repo = _get_repo(path)
    if repo is None or repo.working_tree_dir is None:
        return None
    return str(repo.working_tree_dir)


def read_user_name(path: str | Path = ".") -> str:
    """git config user.name as seen from path, or "" if unset.

    Outside a repository only the global config is consulted.
    """
    repo = _get_repo(path)
    if repo is not None:
        reader = repo.config_reader()
    else:
        reader = GitConfigParser(
            [os.path.expanduser("~/.gitconfig"), os.path.expanduser("~/.config/git/config")],
            read_only=True,
        )
    return str(reader.get_value("user", "name", default="")).strip()


def resolve_author(path: str | Path = ".") -> str:
    """Name recorded as card creator and comment author.

    $KAN_USER, then git config user.name, then $USER.
    """
    user = os.environ.get(USER_ENV)
    if user:
        return user
    name = read_user_name(path)
    if name:
        return name
    user = os.environ.get("USER")
    if user:
        return user
    raise ValidationFailure(
        "cannot determine author: set $KAN_USER, configure 'git config user.name', or set $USER",
        field="author",
    )
