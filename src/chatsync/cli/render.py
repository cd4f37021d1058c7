"""
Terminal rendering of timeline entries, and a ViewHost that prints them.
"""

from typing import Sequence

from rich.console import Console
from rich.text import Text

from chatsync.attachments import DEFAULT_MEDIA_GATEWAY, FileAttachment, ImageAttachment, TenorAttachment
from chatsync.errors import ChatSyncError
from chatsync.mentions import MentionKind, MentionRef
from chatsync.models.conversation import Conversation
from chatsync.render import TimelineEntry
from chatsync.timeline import date_divider_label, relative_time, to_datetime

UNAVAILABLE = "Original message not available"


def mention_label(ref: MentionRef) -> str:
    sigil = "@" if ref.kind == MentionKind.USER else "#"
    return f"{sigil}{ref.display_text}"


def content_text(entry: TimelineEntry) -> Text:
    text = Text()
    for part in entry.content.segments():
        if isinstance(part, str):
            text.append(part)
        else:
            text.append(mention_label(part), style="bold cyan")
    if entry.message.edited:
        text.append(" (edited)", style="dim")
    return text


def attachment_line(attachment, gateway: str = DEFAULT_MEDIA_GATEWAY) -> str:
    if isinstance(attachment, ImageAttachment):
        return f"[image] {attachment.url(gateway)}"
    if isinstance(attachment, TenorAttachment):
        return f"[gif] {attachment.url()}"
    if isinstance(attachment, FileAttachment):
        label = f" ({attachment.tag})" if attachment.tag else ""
        return f"[file] {attachment.copyable_id}{label}"
    return f"[attachment] {attachment!r}"


def print_entry(console: Console, entry: TimelineEntry, gateway: str = DEFAULT_MEDIA_GATEWAY) -> None:
    if entry.flags.show_date_divider:
        console.rule(date_divider_label(entry.message.timestamp), style="dim")
    if entry.flags.show_avatar_header:
        header = Text(entry.author_name, style="bold")
        timestamp = entry.message.timestamp
        header.append(f"  {to_datetime(timestamp):%H:%M} \u00b7 {relative_time(timestamp)}", style="dim")
        console.print(header)
    if entry.reply is not None:
        if entry.reply.resolved:
            console.print(Text(f"  ↳ {entry.reply.preview}", style="dim italic"))
        else:
            console.print(Text(f"  ↳ {UNAVAILABLE}", style="dim italic"))
    body = Text("  ")
    body.append_text(content_text(entry))
    if body.plain.strip():
        console.print(body)
    for attachment in entry.attachments:
        console.print(Text(f"  {attachment_line(attachment, gateway)}", style="magenta"))


class ConsoleHost:
    """Prints each entry once, in order, as it first appears.

    With ``timeline=False`` only notices and errors are printed.
    """

    def __init__(
        self,
        console: Console,
        gateway: str = DEFAULT_MEDIA_GATEWAY,
        show_ids: bool = False,
        timeline: bool = True,
    ):
        self._console = console
        self._gateway = gateway
        self._show_ids = show_ids
        self._timeline = timeline
        self._printed: set[str] = set()
        self.errors: list[ChatSyncError] = []

    def render(self, conversation: Conversation, entries: Sequence[TimelineEntry]) -> None:
        if not self._timeline:
            return
        for entry in entries:
            if entry.id in self._printed:
                continue
            self._printed.add(entry.id)
            print_entry(self._console, entry, self._gateway)
            if self._show_ids:
                self._console.print(Text(f"  id: {entry.id}", style="dim"))

    def scroll_to_bottom(self, smooth: bool = True) -> None:
        pass

    def scroll_to_entry(self, message_id: str) -> bool:
        return message_id in self._printed

    def viewport(self):
        return None

    def focus_compose(self) -> None:
        pass

    def insert_compose_text(self, text: str) -> None:
        pass

    def notify(self, message: str) -> None:
        self._console.print(Text(message, style="yellow"))

    def notify_error(self, error: ChatSyncError) -> None:
        self.errors.append(error)
        self._console.print(Text(str(error), style="red"))
