"""
Render-ready timeline entries.

Runs the ReplyResolver, MentionCodec and TimelineGrouper over one ordered
list. Tombstoned messages are dropped from the view here.
"""

from dataclasses import dataclass
from datetime import tzinfo
from typing import Any, Mapping, Optional, Sequence

from chatsync.mentions import EncodedContent, encode
from chatsync.models.message import Message
from chatsync.models.profile import Profile, display_name_for
from chatsync.replies import ReplyRef, ReplyResolver
from chatsync.timeline import TimelineFlags, group_timeline


@dataclass(frozen=True)
class TimelineEntry:
    message: Message
    flags: TimelineFlags
    content: EncodedContent
    attachments: tuple[Any, ...]
    reply: Optional[ReplyRef]
    author_name: str
    author: Optional[Profile] = None

    @property
    def id(self) -> str:
        return self.message.id


def build_entries(
    messages: Sequence[Message],
    profiles: Optional[Mapping[str, Profile]] = None,
    tz: Optional[tzinfo] = None,
) -> list[TimelineEntry]:
    profiles = profiles or {}
    visible = [m for m in messages if not m.deleted]
    resolver = ReplyResolver(visible)
    entries = []
    for message, flags in zip(visible, group_timeline(visible, tz)):
        profile = profiles.get(message.author_id)
        entries.append(TimelineEntry(
            message=message,
            flags=flags,
            content=encode(message.content),
            attachments=tuple(message.parsed_attachments),
            reply=resolver.resolve(message),
            author_name=display_name_for(message.author_id, profile),
            author=profile,
        ))
    return entries
