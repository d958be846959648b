"""mihoro CLI - Main entry point."""

import logging
from pathlib import Path

import click
from rich.markup import escape

from mihoro import __version__
from mihoro.config.loader import DEFAULT_SETTINGS_PATH, dump_settings
from mihoro.daemon import install
from mihoro.daemon.install import InstallPaths
from mihoro.daemon.overlay import apply_overrides
from mihoro.daemon.service import SERVICE_FILENAME

from .common import console, reported_errors, require_settings

_LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def _setup_logging(verbose: bool) -> None:
    """Attach a single stderr handler to the package logger."""
    package_logger = logging.getLogger("mihoro")
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    package_logger.addHandler(handler)


@click.group()
@click.version_option(version=__version__, prog_name="mihoro")
@click.option(
    "-c",
    "--config",
    "config_path",
    default=str(DEFAULT_SETTINGS_PATH),
    envvar="MIHORO_CONFIG",
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Path to mihoro.toml",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, config_path, verbose):
    """mihoro - Mihomo CLI client on Linux.

    Installs the mihomo binary, keeps its config.yaml in sync with a remote
    subscription and applies local overrides on top.
    """
    _setup_logging(verbose)
    ctx.obj = Path(config_path).expanduser()


from .proxy_commands import proxy  # noqa: E402

cli.add_command(proxy)


@cli.command()
@click.pass_obj
def setup(settings_path):
    """Download mihomo and its config, apply overrides and write the unit file."""
    settings = require_settings(settings_path)
    with reported_errors():
        paths = install.setup(settings)

    console.print(f"[green]setup:[/green] binary at [yellow]{escape(str(paths.binary))}[/yellow]")
    console.print(f"[green]setup:[/green] config at [yellow]{escape(str(paths.config_file))}[/yellow]")
    console.print(f"[green]setup:[/green] unit at [yellow]{escape(str(paths.service_unit))}[/yellow]")
    console.print()
    console.print("Enable and start mihomo with:")
    console.print("  systemctl --user daemon-reload")
    console.print(f"  systemctl --user enable --now {SERVICE_FILENAME}")


@cli.command()
@click.option("--binary", is_flag=True, help="Also re-download the mihomo binary")
@click.pass_obj
def update(settings_path, binary):
    """Re-download the remote config and apply overrides."""
    settings = require_settings(settings_path)
    paths = InstallPaths.from_settings(settings)
    with reported_errors():
        if binary:
            install.install_binary(settings.remote_binary_url, paths.binary)
            console.print(f"[green]update:[/green] binary at [yellow]{escape(str(paths.binary))}[/yellow]")
        install.update_config(settings, paths)

    console.print(f"[green]update:[/green] config at [yellow]{escape(str(paths.config_file))}[/yellow]")
    console.print(f"Restart mihomo to pick up changes: systemctl --user restart {SERVICE_FILENAME}")


@cli.command()
@click.pass_obj
def apply(settings_path):
    """Apply overrides to the existing config.yaml without downloading."""
    settings = require_settings(settings_path)
    paths = InstallPaths.from_settings(settings)
    with reported_errors():
        apply_overrides(paths.config_file, settings.daemon_config)

    console.print(f"[green]apply:[/green] overrides applied to [yellow]{escape(str(paths.config_file))}[/yellow]")


@cli.command()
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def uninstall(settings_path, yes):
    """Remove the mihomo binary, unit file and config directory."""
    settings = require_settings(settings_path)
    if not yes:
        click.confirm("Remove mihomo binary, unit file and config directory?", abort=True)

    with reported_errors():
        results = install.uninstall(settings)

    for path, removed in results:
        if removed:
            console.print(f"[green]uninstall:[/green] removed [yellow]{escape(str(path))}[/yellow]")
        else:
            console.print(f"[dim]uninstall: {escape(str(path))} not found, skipped[/dim]")


@cli.group()
def config():
    """Inspect mihoro settings."""


@config.command("show")
@click.pass_obj
def config_show(settings_path):
    """Print the loaded settings as TOML."""
    settings = require_settings(settings_path)
    click.echo(dump_settings(settings), nl=False)


if __name__ == "__main__":
    cli()
