"""CLI: chatsync history, chatsync watch"""

import asyncio
import json
from typing import Optional

import click
from rich.console import Console

from chatsync.cli.render import ConsoleHost
from chatsync.engine import ConversationView

console = Console()


def _load_settings():
    from chatsync.cli.main import _load_settings
    return _load_settings()


def _get_store(settings):
    from chatsync.cli.main import _get_store
    return _get_store(settings)


def _conversation(conversation_id, dm, server):
    from chatsync.cli.main import _conversation
    return _conversation(conversation_id, dm, server)


def _run(coro):
    from chatsync.cli.main import _run
    return _run(coro)


@click.command("history")
@click.argument("conversation_id")
@click.option("--dm", is_flag=True, help="Direct conversation.")
@click.option("--server", default=None, help="Server the channel belongs to.")
@click.option("--limit", default=None, type=int, help="Most recent N messages.")
@click.option("--ids", "show_ids", is_flag=True, help="Print message ids.")
@click.option("--json-output", "--json", is_flag=True)
def history_cmd(conversation_id: str, dm: bool, server: Optional[str], limit: Optional[int],
                show_ids: bool, json_output: bool):
    """Print the recent timeline of a conversation."""

    async def _history():
        settings = _load_settings()
        if limit is not None:
            settings = settings.model_copy(update={"fetch_limit": limit})
        store = _get_store(settings)
        host = ConsoleHost(console, settings.media_gateway, show_ids=show_ids and not json_output)
        view = ConversationView(store, None if json_output else host, settings)
        try:
            await view.open(_conversation(conversation_id, dm, server), poll=False)
            result = await view.refresh(force=True)
            entries = list(view.entries)
            view.close()
        finally:
            await store.close()
        if result is None:
            raise SystemExit(1)
        if json_output:
            click.echo(json.dumps([e.message.model_dump() for e in entries], indent=2))
        elif not entries:
            console.print("[dim]No messages.[/dim]")

    _run(_history())


@click.command("watch")
@click.argument("conversation_id")
@click.option("--dm", is_flag=True, help="Direct conversation.")
@click.option("--server", default=None, help="Server the channel belongs to.")
@click.option("--interval", default=None, type=float, help="Seconds between polls.")
def watch_cmd(conversation_id: str, dm: bool, server: Optional[str], interval: Optional[float]):
    """Follow a conversation, printing new messages until Ctrl+C."""

    async def _watch():
        settings = _load_settings()
        if interval is not None:
            settings = settings.model_copy(update={"poll_interval": interval})
        store = _get_store(settings)
        view = ConversationView(store, ConsoleHost(console, settings.media_gateway), settings)
        console.print(f"[cyan]Watching {conversation_id} (Ctrl+C to exit)[/cyan]\n")
        try:
            await view.open(_conversation(conversation_id, dm, server))
            while view.polling:
                await asyncio.sleep(settings.poll_interval)
        finally:
            view.close()
            await store.close()

    try:
        _run(_watch())
    except KeyboardInterrupt:
        pass
