"""CLI: chatsync config show|set"""

import click
from pydantic import ValidationError as SettingsValidationError
from rich.console import Console
from rich.table import Table

from chatsync.config import SyncSettings, load_settings, save_settings

console = Console()


def _config_path():
    from chatsync.cli.main import _config_path
    return _config_path()


def _mask(value: str) -> str:
    if len(value) <= 8:
        return "****"
    return f"{value[:4]}...{value[-4:]}"


@click.group()
def config():
    """Show or change settings."""


@config.command("show")
def config_show():
    """Print the effective settings."""
    settings = load_settings(_config_path())
    table = Table(title="chatsync settings")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key, value in settings.model_dump().items():
        if key == "access_token" and value:
            value = _mask(value)
        table.add_row(key, "" if value is None else str(value))
    console.print(table)


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str):
    """Set one setting, e.g. `chatsync config set poll_interval 1.1`."""
    path = _config_path()
    settings = load_settings(path)
    if key not in SyncSettings.model_fields:
        console.print(f"[red]Unknown setting: {key}[/red]")
        raise SystemExit(1)
    try:
        updated = SyncSettings.model_validate({**settings.model_dump(), key: value})
    except SettingsValidationError as e:
        console.print(f"[red]Invalid value for {key}: {e.errors()[0]['msg']}[/red]")
        raise SystemExit(1)
    save_settings(updated, path)
    console.print(f"[green]{key} updated[/green]")
