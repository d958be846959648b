"""HTTP download of the mihomo binary and remote config."""

import logging
import os
import shutil
import urllib.error
import urllib.request
from pathlib import Path

from mihoro import __version__
from mihoro.errors import IoError

from .files import ensure_parent_dir

logger = logging.getLogger(__name__)

# Socket timeout only; there is no retry.
DOWNLOAD_TIMEOUT_S = 60


def fetch_to_file(url: str, dest: Path, timeout: float = DOWNLOAD_TIMEOUT_S) -> int:
    """Download ``url`` into ``dest``.

    The body is streamed into ``<dest>.part`` and renamed over ``dest`` once
    complete, so a failed download leaves any previous file in place.

    Returns:
        Number of bytes written.

    Raises:
        IoError: On any network or filesystem failure.
    """
    dest = Path(dest)
    ensure_parent_dir(dest)
    partial = dest.with_name(dest.name + ".part")

    logger.info(f"Downloading {url}")
    try:
        req = urllib.request.Request(url, headers={"User-Agent": f"mihoro/{__version__}"})
        with urllib.request.urlopen(req, timeout=timeout) as resp, open(partial, "wb") as f:
            shutil.copyfileobj(resp, f)
            size = f.tell()
        os.replace(partial, dest)
    except (urllib.error.URLError, OSError, ValueError) as e:
        partial.unlink(missing_ok=True)
        raise IoError(f"Failed to download {url}: {e}") from e

    logger.info(f"Downloaded {size} bytes to {dest}")
    return size
