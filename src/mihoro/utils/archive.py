"""Gzip extraction for downloaded mihomo release archives."""

import gzip
import logging
import os
import shutil
from pathlib import Path

from mihoro.errors import IoError

from .files import ensure_parent_dir

logger = logging.getLogger(__name__)


def extract_gzip(archive: Path, dest: Path) -> Path:
    """Decompress a single-file gzip archive to ``dest`` and remove the archive.

    Args:
        archive: Path to the ``.gz`` file.
        dest: Path of the extracted file.

    Returns:
        The extracted file path. An existing file at ``dest`` is only
        replaced once extraction has succeeded.

    Raises:
        IoError: If the archive is unreadable, corrupt or truncated.
    """
    dest = Path(dest)
    staged = dest.with_name(dest.name + ".tmp")
    ensure_parent_dir(dest)
    try:
        with gzip.open(archive, "rb") as src, open(staged, "wb") as out:
            shutil.copyfileobj(src, out)
        # A running executable cannot be opened for writing (ETXTBSY), only renamed over.
        os.replace(staged, dest)
    except (OSError, EOFError) as e:
        staged.unlink(missing_ok=True)
        raise IoError(f"Cannot extract {archive}: {e}") from e

    Path(archive).unlink(missing_ok=True)
    logger.info(f"Extracted {archive} -> {dest}")
    return dest
