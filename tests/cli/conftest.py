"""Shared fixtures for CLI tests."""

from argparse import Namespace

import pytest

from kan.cli.init import init_project


@pytest.fixture
def make_args(root):
    """Namespace with the options every command shares, plus kwargs."""

    def _make(**kwargs):
        defaults = {"root": str(root), "json": False, "verbose": False}
        defaults.update(kwargs)
        return Namespace(**defaults)

    return _make


@pytest.fixture
def project(root, make_args, capsys):
    """A project initialized with board "main" and the default columns."""
    init_project(make_args(board="main", data_location="", columns=None))
    capsys.readouterr()
    return root
