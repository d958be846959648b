"""Error types raised by mihoro."""

from pathlib import Path


class MihoroError(Exception):
    """Base class for all mihoro errors."""


class BootstrapError(MihoroError):
    """Raised when a default settings file was just created.

    Not a crash: the user has to edit the scaffold and run again.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"created default config at `{path}`, run again to finish setup")


class ParseError(MihoroError):
    """Raised when a TOML or YAML document is malformed or has wrong field types."""


class ValidationError(MihoroError):
    """Raised when a well-formed settings file leaves a required field empty."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"`{field}` undefined")


class IoError(MihoroError):
    """Raised when a filesystem or network operation fails."""
