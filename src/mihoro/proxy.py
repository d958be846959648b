"""Shell commands for exporting mihomo as the session proxy."""

import logging
import socket

from mihoro.config.models import DaemonConfigOverrides
from mihoro.errors import IoError

logger = logging.getLogger(__name__)

LOCALHOST = "127.0.0.1"
PROXY_VARS = ("https_proxy", "http_proxy", "all_proxy")


def export_command(host: str, overrides: DaemonConfigOverrides) -> str:
    http = f"http://{host}:{overrides.port}"
    socks = f"socks5://{host}:{overrides.socks_port}"
    return f"export https_proxy={http} http_proxy={http} all_proxy={socks}"


def unset_command() -> str:
    return "unset " + " ".join(PROXY_VARS)


def lan_address() -> str:
    """Return this host's address on the default-route interface.

    A UDP connect sends no packets; it only selects the outgoing interface.
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            s.connect(("10.255.255.255", 1))
            return s.getsockname()[0]
    except OSError as e:
        raise IoError(f"Cannot determine LAN address: {e}") from e
