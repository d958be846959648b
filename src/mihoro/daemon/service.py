"""systemd unit file for running mihomo."""

import logging
import os
import tempfile
from pathlib import Path

from mihoro.config.models import DAEMON_NAME
from mihoro.utils.files import atomic_write_text
from mihoro.utils.privileges import install_file_privileged

logger = logging.getLogger(__name__)

SERVICE_NAME = DAEMON_NAME
SERVICE_FILENAME = f"{SERVICE_NAME}.service"

_UNIT_TEMPLATE = """\
[Unit]
Description=mihomo Daemon, Another Clash Kernel.
After=network.target NetworkManager.service systemd-networkd.service iwd.service

[Service]
Type=simple
LimitNPROC=4096
LimitNOFILE=1000000
Restart=always
ExecStartPre=/usr/bin/sleep 1s
ExecStart={binary_path} -d {config_root}

[Install]
WantedBy=default.target
"""


def render_service_unit(binary_path: Path, config_root: Path) -> str:
    return _UNIT_TEMPLATE.format(binary_path=binary_path, config_root=config_root)


def _needs_root(dest: Path) -> bool:
    # The first existing ancestor is where the temp file or mkdir would land.
    for parent in dest.parents:
        if parent.exists():
            return not os.access(parent, os.W_OK)
    return False


def write_service_unit(binary_path: Path, config_root: Path, dest: Path) -> Path:
    """Write the unit file to ``dest``.

    Destinations the current user cannot write to (``/etc/systemd/system``)
    are installed through sudo.
    """
    dest = Path(dest)
    unit = render_service_unit(binary_path, config_root)

    if _needs_root(dest):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".service", delete=False) as tmp:
            tmp.write(unit)
            tmp_path = Path(tmp.name)
        try:
            install_file_privileged(tmp_path, dest)
        finally:
            tmp_path.unlink(missing_ok=True)
    else:
        atomic_write_text(dest, unit)

    logger.info(f"Created {SERVICE_FILENAME} at {dest}")
    return dest
