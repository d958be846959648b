"""Install, update and remove the mihomo binary, config and unit file."""

import logging
from dataclasses import dataclass
from pathlib import Path

from mihoro.config.models import Settings
from mihoro.errors import IoError, ValidationError
from mihoro.utils.archive import extract_gzip
from mihoro.utils.download import fetch_to_file
from mihoro.utils.files import delete_path, move_file

from .overlay import apply_overrides
from .service import SERVICE_FILENAME, write_service_unit

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yaml"


@dataclass(frozen=True)
class InstallPaths:
    """Expanded local destinations derived from Settings."""

    binary: Path
    config_root: Path
    service_unit: Path

    @property
    def config_file(self) -> Path:
        return self.config_root / CONFIG_FILENAME

    @classmethod
    def from_settings(cls, settings: Settings) -> "InstallPaths":
        return cls(
            binary=Path(settings.binary_path).expanduser(),
            config_root=Path(settings.config_root).expanduser(),
            service_unit=Path(settings.service_unit_root).expanduser() / SERVICE_FILENAME,
        )


def install_binary(url: str, dest: Path) -> Path:
    """Download the mihomo binary to ``dest`` and mark it executable.

    Release assets are gzip'd; a URL not ending in ``.gz`` is taken as the
    raw executable.
    """
    if not url:
        raise ValidationError("remote_binary_url")

    if url.endswith(".gz"):
        archive = dest.with_name(dest.name + ".gz")
        fetch_to_file(url, archive)
        extract_gzip(archive, dest)
    else:
        staged = dest.with_name(dest.name + ".download")
        fetch_to_file(url, staged)
        move_file(staged, dest)

    try:
        dest.chmod(0o755)
    except OSError as e:
        raise IoError(f"Cannot make {dest} executable: {e}") from e
    logger.info(f"Installed mihomo binary at {dest}")
    return dest


def update_config(settings: Settings, paths: InstallPaths) -> Path:
    """Download the remote config and apply overrides to it."""
    fetch_to_file(settings.remote_config_url, paths.config_file)
    apply_overrides(paths.config_file, settings.daemon_config)
    return paths.config_file


def setup(settings: Settings) -> InstallPaths:
    """Full install: binary, config with overrides, and unit file.

    ``remote_binary_url`` is only required here; the other commands never
    download the binary.
    """
    paths = InstallPaths.from_settings(settings)
    install_binary(settings.remote_binary_url, paths.binary)
    update_config(settings, paths)
    write_service_unit(paths.binary, paths.config_root, paths.service_unit)
    return paths


def uninstall(settings: Settings) -> list[tuple[Path, bool]]:
    """Remove the binary, unit file and config directory.

    Returns:
        ``(path, removed)`` pairs; ``removed`` is False for paths that did not exist.
    """
    paths = InstallPaths.from_settings(settings)
    results = []
    for target in (paths.binary, paths.service_unit, paths.config_root):
        results.append((target, delete_path(target)))
    return results
