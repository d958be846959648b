"""sudo escalation for writing outside the user's home."""

import logging
import os
import subprocess
from pathlib import Path

from mihoro.errors import IoError

logger = logging.getLogger(__name__)


def is_root() -> bool:
    return os.geteuid() == 0


def request_elevated_privileges() -> None:
    """Make sure sudo credentials are cached, prompting for a password if needed."""
    if is_root():
        return
    logger.info("sudo required, enter password below")
    try:
        subprocess.run(["sudo", "-v"], check=True)
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        raise IoError(f"Could not obtain sudo privileges: {e}") from e


def install_file_privileged(src: Path, dest: Path) -> None:
    """Copy ``src`` to ``dest`` as root."""
    request_elevated_privileges()
    prefix = [] if is_root() else ["sudo"]
    try:
        subprocess.run([*prefix, "mkdir", "-p", str(Path(dest).parent)], check=True)
        subprocess.run([*prefix, "cp", str(src), str(dest)], check=True)
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        raise IoError(f"Failed to install {dest}: {e}") from e
    logger.debug(f"Installed {dest} as root")
