"""
SnapshotCache — per-conversation store of the last accepted ordered message set.

The cache is written only by the Reconciler. Everything else reads it. A
non-empty entry lets a revisited conversation render instantly while a
background refresh runs.

Sequence numbers come from one monotonic counter shared by all
conversations. Each entry remembers the highest sequence it accepted
(``Conversation.last_fetch_sequence``); results carrying an older number
are stale.
"""

import itertools
import logging
import time
from dataclasses import dataclass
from typing import Optional

from chatsync.models.conversation import Conversation
from chatsync.models.message import Message

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    conversation: Conversation
    messages: tuple[Message, ...] = ()
    updated_at: Optional[float] = None

    @property
    def last_fetch_sequence(self) -> int:
        return self.conversation.last_fetch_sequence


class SnapshotCache:
    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._floors: dict[str, int] = {}
        self._counter = itertools.count(1)

    def __contains__(self, conversation_id: object) -> bool:
        return conversation_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def register(self, conversation: Conversation) -> Conversation:
        """Create the entry on first open; later opens refresh its metadata only."""
        entry = self._entries.get(conversation.id)
        if entry is None:
            conversation.last_fetch_sequence = max(
                conversation.last_fetch_sequence, self._floors.pop(conversation.id, 0),
            )
            self._entries[conversation.id] = CacheEntry(conversation=conversation)
            return conversation
        conversation.last_fetch_sequence = entry.conversation.last_fetch_sequence
        entry.conversation = conversation
        return conversation

    def get(self, conversation_id: str, include_deleted: bool = False) -> list[Message]:
        """Ordered messages for a conversation, or ``[]`` when nothing is cached."""
        entry = self._entries.get(conversation_id)
        if entry is None:
            return []
        if include_deleted:
            return list(entry.messages)
        return [m for m in entry.messages if not m.deleted]

    def conversation(self, conversation_id: str) -> Optional[Conversation]:
        entry = self._entries.get(conversation_id)
        return entry.conversation if entry else None

    def is_warm(self, conversation_id: str) -> bool:
        return bool(self.get(conversation_id))

    def last_sequence(self, conversation_id: str) -> int:
        entry = self._entries.get(conversation_id)
        if entry is None:
            return self._floors.get(conversation_id, 0)
        return entry.conversation.last_fetch_sequence

    def next_sequence(self) -> int:
        """Issue a sequence number for a fetch or confirmation about to start."""
        return next(self._counter)

    def put(self, conversation_id: str, messages: list[Message], sequence: int) -> None:
        """Replace the stored list with an already merged and ordered one."""
        entry = self._entries.get(conversation_id)
        if entry is None:
            self.register(Conversation(id=conversation_id))
            entry = self._entries[conversation_id]
        entry.messages = tuple(messages)
        entry.updated_at = time.time()
        entry.conversation.last_fetch_sequence = max(entry.conversation.last_fetch_sequence, sequence)

    def fence(self, conversation_id: str) -> int:
        """Mark every sequence issued so far as stale for this conversation.

        Used when a conversation stops being active so that a fetch still in
        flight for it resolves as stale.
        """
        sequence = self.next_sequence()
        entry = self._entries.get(conversation_id)
        if entry is None:
            self._floors[conversation_id] = sequence
        else:
            entry.conversation.last_fetch_sequence = sequence
        logger.debug("Fenced %s at sequence %d", conversation_id, sequence)
        return sequence

    def invalidate(self, conversation_id: str) -> None:
        """Drop cached data. Called on conversation teardown only."""
        self._entries.pop(conversation_id, None)
        self._floors[conversation_id] = self.next_sequence()
