"""CLI commands printing proxy environment variables."""

import click

from mihoro.proxy import LOCALHOST, export_command, lan_address, unset_command

from .common import err_console, reported_errors, require_settings


@click.group()
def proxy():
    """Print shell commands for using mihomo as the session proxy.

    Example: eval "$(mihoro proxy export)"
    """


@proxy.command()
@click.pass_obj
def export(settings_path):
    """Export proxy variables pointing at localhost."""
    settings = require_settings(settings_path)
    click.echo(export_command(LOCALHOST, settings.daemon_config))


@proxy.command("export-lan")
@click.pass_obj
def export_lan(settings_path):
    """Export proxy variables pointing at this host's LAN address."""
    settings = require_settings(settings_path)
    if not settings.daemon_config.allow_lan:
        err_console.print(
            "[yellow]warning:[/yellow] allow_lan is not enabled, "
            "other hosts will not be able to connect"
        )
    with reported_errors():
        host = lan_address()
    click.echo(export_command(host, settings.daemon_config))


@proxy.command()
def unset():
    """Unset proxy variables."""
    click.echo(unset_command())
