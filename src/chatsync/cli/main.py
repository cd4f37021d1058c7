"""
chatsync CLI — `chatsync` command.

Commands:
  chatsync config show|set         Settings in ~/.chatsync/config.json
  chatsync history <conversation>  Print the recent timeline once
  chatsync watch <conversation>    Poll and print new messages until Ctrl+C
  chatsync send <conversation> <message>
  chatsync edit <conversation> <message-id> <content>
  chatsync delete <conversation> <message-id>
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
except ImportError:
    raise SystemExit("CLI requires extras: pip install chatsync[cli]")

from chatsync.config import SyncSettings, load_settings
from chatsync.models.conversation import Conversation, ConversationKind
from chatsync.remote import HttpRemoteStore, create_store

console = Console()


def _config_path() -> Optional[Path]:
    ctx = click.get_current_context(silent=True)
    if ctx is None:
        return None
    root = ctx.find_root()
    return (root.obj or {}).get("config_path")


def _load_settings() -> SyncSettings:
    return load_settings(_config_path())


def _get_store(settings: SyncSettings) -> HttpRemoteStore:
    return create_store(settings.base_url, token=settings.access_token, timeout=settings.request_timeout)


def _conversation(conversation_id: str, dm: bool = False, server: Optional[str] = None) -> Conversation:
    return Conversation(
        id=conversation_id,
        kind=ConversationKind.DIRECT if dm else ConversationKind.CHANNEL,
        server_id=server,
    )


def _run(coro):
    return asyncio.run(coro)


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Log sync activity.")
@click.option(
    "--config", "config_path", type=click.Path(path_type=Path), envvar="CHATSYNC_CONFIG", default=None,
    help="Settings file (default ~/.chatsync/config.json).",
)
@click.pass_context
def main(ctx, verbose: bool, config_path: Optional[Path]):
    """chatsync — follow a chat conversation from the terminal."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )


# Register subcommands from separate modules
from chatsync.cli.compose import delete_cmd, edit_cmd, send_cmd
from chatsync.cli.config_cmd import config
from chatsync.cli.timeline import history_cmd, watch_cmd

main.add_command(config)
main.add_command(history_cmd)
main.add_command(watch_cmd)
main.add_command(send_cmd)
main.add_command(edit_cmd)
main.add_command(delete_cmd)


if __name__ == "__main__":
    main()
