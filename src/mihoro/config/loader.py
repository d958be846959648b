"""Load, validate and persist ``mihoro.toml``."""

import logging
import tomllib
from pathlib import Path

import pydantic
import tomli_w

from mihoro.errors import BootstrapError, IoError, ParseError, ValidationError
from mihoro.utils.files import atomic_write_text, ensure_parent_dir

from .models import Settings, default_settings

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path("~/.config/mihoro.toml")

# Checked in this order so the reported field is stable across runs.
REQUIRED_FIELDS = (
    "remote_config_url",
    "binary_path",
    "config_root",
    "service_unit_root",
)


def dump_settings(settings: Settings) -> str:
    """Render settings as TOML. Absent optional fields are omitted."""
    return tomli_w.dumps(settings.model_dump(mode="json", exclude_none=True))


def parse_settings(text: str, source: Path | str = "<string>") -> Settings:
    """Parse TOML text into Settings without checking required fields.

    Raises:
        ParseError: On TOML syntax errors, wrong field types or unknown enum values.
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ParseError(f"Invalid TOML in {source}: {e}") from e

    try:
        return Settings.model_validate(data)
    except pydantic.ValidationError as e:
        raise ParseError(f"Invalid settings in {source}: {e}") from e


def validate_settings(settings: Settings) -> Settings:
    """Raise ValidationError for the first required field left empty."""
    for field in REQUIRED_FIELDS:
        if not getattr(settings, field):
            raise ValidationError(field)
    return settings


def save_settings(settings: Settings, path: Path) -> None:
    """Serialize settings and replace the file at ``path``."""
    atomic_write_text(Path(path).expanduser(), dump_settings(settings))
    logger.debug(f"Saved settings to {path}")


def load_settings(path: Path) -> Settings:
    """Load mihoro settings, writing a default scaffold on first run.

    * If the file does not exist, writes the default settings to ``path`` and
      raises BootstrapError.
    * Otherwise parses the file and checks that required fields are defined.

    Raises:
        BootstrapError: The default file was just created.
        ParseError: The file is malformed or has wrong field types.
        ValidationError: A required field is empty.
        IoError: The file or its directory cannot be read or created.
    """
    path = Path(path).expanduser()
    ensure_parent_dir(path)

    if not path.exists():
        save_settings(default_settings(), path)
        logger.info(f"Created default settings at {path}")
        raise BootstrapError(path)

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise IoError(f"Cannot read {path}: {e}") from e

    logger.debug(f"Reading settings from {path}")
    return validate_settings(parse_settings(text, source=path))
