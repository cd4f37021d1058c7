"""CLI: chatsync send, chatsync edit, chatsync delete"""

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


def _act(conversation_id: str, dm: bool, server: Optional[str], action) -> bool:
    async def _go():
        settings = _load_settings()
        store = _get_store(settings)
        host = ConsoleHost(console, settings.media_gateway, timeline=False)
        view = ConversationView(store, host, settings)
        try:
            await view.open(_conversation(conversation_id, dm, server), poll=False)
            return await action(view)
        finally:
            view.close()
            await store.close()

    return _run(_go())


def _option_dm(f):
    f = click.option("--server", default=None, help="Server the channel belongs to.")(f)
    return click.option("--dm", is_flag=True, help="Direct conversation.")(f)


@click.command("send")
@click.argument("conversation_id")
@click.argument("message")
@click.option("--reply-to", default=None, help="Id of the message being replied to.")
@click.option("-a", "--attach", "attachments", multiple=True, help="Attachment as <kind>:<referenceId>.")
@_option_dm
def send_cmd(conversation_id: str, message: str, reply_to: Optional[str], attachments: tuple,
             dm: bool, server: Optional[str]):
    """Send a message."""

    async def _send(view: ConversationView) -> bool:
        if reply_to:
            view.reply(reply_to)
        return await view.send(message, attachments)

    if not _act(conversation_id, dm, server, _send):
        raise SystemExit(1)
    console.print("[green]Sent[/green]")


@click.command("edit")
@click.argument("conversation_id")
@click.argument("message_id")
@click.argument("content")
@_option_dm
def edit_cmd(conversation_id: str, message_id: str, content: str, dm: bool, server: Optional[str]):
    """Replace the content of a message."""

    async def _edit(view: ConversationView) -> bool:
        return await view.edit(message_id, content)

    if not _act(conversation_id, dm, server, _edit):
        raise SystemExit(1)
    console.print(f"[green]Edited {message_id}[/green]")


@click.command("delete")
@click.argument("conversation_id")
@click.argument("message_id")
@_option_dm
def delete_cmd(conversation_id: str, message_id: str, dm: bool, server: Optional[str]):
    """Delete a message."""

    async def _delete(view: ConversationView) -> bool:
        return await view.delete(message_id)

    if not _act(conversation_id, dm, server, _delete):
        raise SystemExit(1)
    console.print(f"[yellow]Deleted {message_id}[/yellow]")
