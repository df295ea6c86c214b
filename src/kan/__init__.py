"""File-backed kanban boards with integrity checks and schema migrations."""

__version__ = "0.4.0"
