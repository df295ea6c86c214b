"""Whole-file reads and crash-safe writes."""

import os
import tempfile
from pathlib import Path

from kan.constants import TMP_PREFIX
from kan.errors import Corrupt

FILE_MODE = 0o644


def atomic_write(path: Path, content: str) -> None:
    """Replace path with content so readers see either the old or the new file.

    The temp file lives in the target directory so the final rename never
    crosses filesystems. The result has mode FILE_MODE, not mkstemp's 0600.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=TMP_PREFIX)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, FILE_MODE)
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.remove(tmp_path)
        except OSError:
            pass
        raise


def read_text(path: Path) -> str:
    """Read a UTF-8 file.

    FileNotFoundError propagates to the caller; any other read or decode
    failure means the file exists but is unusable, and raises Corrupt.
    """
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except UnicodeDecodeError as e:
        raise Corrupt(path, f"not valid UTF-8: {e.reason} at byte {e.start}") from e
    except OSError as e:
        raise Corrupt(path, f"cannot read file: {e.strerror or e}") from e


def is_temp_file(name: str) -> bool:
    """True for names produced by an interrupted atomic_write."""
    return name.startswith(TMP_PREFIX)
