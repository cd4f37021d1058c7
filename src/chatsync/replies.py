"""
ReplyResolver — attaches reply targets to messages of one reconciled list.

The id index is a lookup structure only. It is rebuilt for every list and
thrown away once entries are built. A reply whose target is outside the
cached window is normal and resolves to ``NOT_LOADED``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from chatsync.models.message import Message

PREVIEW_LENGTH = 50


class ReplyState(str, Enum):
    RESOLVED = "resolved"
    NOT_LOADED = "not_loaded"


def preview_text(content: str, limit: int = PREVIEW_LENGTH) -> str:
    if len(content) > limit:
        return content[:limit] + "..."
    return content


@dataclass(frozen=True)
class ReplyRef:
    reply_to_id: str
    state: ReplyState
    target: Optional[Message] = None

    @property
    def resolved(self) -> bool:
        return self.state == ReplyState.RESOLVED

    @property
    def preview(self) -> str:
        if self.target is None:
            return ""
        return preview_text(self.target.content)


class ReplyResolver:
    def __init__(self, messages: Iterable[Message]):
        self._index = {m.id: m for m in messages if not m.deleted}

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._index

    def get(self, message_id: str) -> Optional[Message]:
        return self._index.get(message_id)

    def resolve(self, message: Message) -> Optional[ReplyRef]:
        if message.reply_to_id is None:
            return None
        target = self._index.get(message.reply_to_id)
        if target is None:
            return ReplyRef(reply_to_id=message.reply_to_id, state=ReplyState.NOT_LOADED)
        return ReplyRef(reply_to_id=message.reply_to_id, state=ReplyState.RESOLVED, target=target)

    def resolve_all(self, messages: Iterable[Message]) -> dict[str, ReplyRef]:
        refs = {}
        for message in messages:
            ref = self.resolve(message)
            if ref is not None:
                refs[message.id] = ref
        return refs


def resolve_replies(messages: list[Message]) -> dict[str, ReplyRef]:
    return ReplyResolver(messages).resolve_all(messages)
