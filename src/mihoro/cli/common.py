"""Shared CLI plumbing: consoles, error reporting and settings loading."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from mihoro.config.loader import load_settings
from mihoro.config.models import Settings
from mihoro.errors import BootstrapError, IoError, MihoroError, ParseError, ValidationError

logger = logging.getLogger(__name__)

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)

EXIT_BOOTSTRAP = 2
EXIT_VALIDATION = 3
EXIT_PARSE = 4
EXIT_IO = 5

_EXIT_CODES: tuple[tuple[type[MihoroError], int], ...] = (
    (BootstrapError, EXIT_BOOTSTRAP),
    (ValidationError, EXIT_VALIDATION),
    (ParseError, EXIT_PARSE),
    (IoError, EXIT_IO),
)


def exit_code_for(error: MihoroError) -> int:
    for kind, code in _EXIT_CODES:
        if isinstance(error, kind):
            return code
    return 1


def report_error(error: MihoroError) -> None:
    if isinstance(error, BootstrapError):
        err_console.print(f"[yellow]config:[/yellow] {escape(str(error))}")
    elif isinstance(error, ValidationError):
        err_console.print(f"[red]config:[/red] {escape(str(error))}, edit the settings file and retry")
    else:
        err_console.print(f"[red]error:[/red] {escape(str(error))}")


@contextmanager
def reported_errors() -> Iterator[None]:
    """Turn mihoro errors into a one-line message and a non-zero exit."""
    try:
        yield
    except MihoroError as e:
        logger.debug("Command failed", exc_info=True)
        report_error(e)
        raise SystemExit(exit_code_for(e)) from None


def require_settings(path: Path) -> Settings:
    """Load settings for a command, exiting on any bootstrap or config error."""
    with reported_errors():
        return load_settings(path)
