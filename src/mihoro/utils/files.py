"""Filesystem helpers shared by the settings store, overlay and installer."""

import logging
import os
import shutil
import tempfile
from pathlib import Path

from mihoro.errors import IoError

logger = logging.getLogger(__name__)


def ensure_parent_dir(path: Path) -> None:
    """Create the parent directory of ``path`` if it does not exist."""
    parent = Path(path).parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise IoError(f"Cannot create directory {parent}: {e}") from e


def atomic_write_text(path: Path, text: str) -> None:
    """Write ``text`` to a temp file beside ``path`` and rename it into place."""
    path = Path(path)
    ensure_parent_dir(path)
    try:
        fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    except OSError as e:
        raise IoError(f"Cannot write {path}: {e}") from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp, path)
    except OSError as e:
        raise IoError(f"Cannot write {path}: {e}") from e
    finally:
        Path(tmp).unlink(missing_ok=True)
    logger.debug(f"Wrote {path}")


def move_file(src: Path, dest: Path) -> Path:
    """Move ``src`` to ``dest``, creating the destination directory."""
    ensure_parent_dir(dest)
    try:
        shutil.move(str(src), str(dest))
    except OSError as e:
        raise IoError(f"Cannot move {src} to {dest}: {e}") from e
    logger.debug(f"Moved {src} -> {dest}")
    return Path(dest)


def delete_path(path: Path) -> bool:
    """Remove a file or directory tree.

    Returns:
        True if something was removed, False if ``path`` did not exist.
    """
    path = Path(path)
    if not path.exists() and not path.is_symlink():
        return False
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as e:
        raise IoError(f"Cannot remove {path}: {e}") from e
    logger.debug(f"Removed {path}")
    return True
