"""
Reconciler — folds fetched snapshots and confirmed mutations into the cache.

A fetch only ever returns the most recent N messages, so anything cached
but missing from the window is kept. Removal happens only through an
explicit delete confirmation, which leaves a tombstone behind. Results are
sorted by ``(timestamp, id)``.
"""

import logging
from dataclasses import dataclass
from operator import attrgetter
from typing import Iterable, Optional

from chatsync.cache import SnapshotCache
from chatsync.models.message import Message

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileResult:
    conversation_id: str
    sequence: int
    accepted: bool
    messages: tuple[Message, ...] = ()
    added: tuple[str, ...] = ()
    changed: tuple[str, ...] = ()

    @property
    def modified(self) -> bool:
        return bool(self.added or self.changed)


def merge_snapshot(existing: Iterable[Message], fetched: Iterable[Message]) -> list[Message]:
    """Insert-or-replace ``fetched`` into ``existing`` by id, then order.

    A locally tombstoned message stays deleted even if a lagging snapshot
    still carries a live copy of it.
    """
    by_id = {m.id: m for m in existing}
    for message in fetched:
        current = by_id.get(message.id)
        if current is not None and current.deleted and not message.deleted:
            continue
        by_id[message.id] = message
    return sorted(by_id.values(), key=attrgetter("sort_key"))


class Reconciler:
    def __init__(self, cache: SnapshotCache):
        self._cache = cache

    def reconcile(self, conversation_id: str, fetched: Iterable[Message], sequence: int) -> ReconcileResult:
        """Merge a fetched window. Older sequences are discarded untouched."""
        current = self._cache.last_sequence(conversation_id)
        if sequence < current:
            logger.debug("Discarding stale fetch for %s (seq %d < %d)", conversation_id, sequence, current)
            return ReconcileResult(
                conversation_id=conversation_id,
                sequence=sequence,
                accepted=False,
                messages=tuple(self._cache.get(conversation_id, include_deleted=True)),
            )

        existing = self._cache.get(conversation_id, include_deleted=True)
        incoming = [
            m if m.conversation_id else m.model_copy(update={"conversation_id": conversation_id})
            for m in fetched
        ]
        merged = merge_snapshot(existing, incoming)
        return self._commit(conversation_id, existing, merged, sequence)

    def apply_confirmed(self, conversation_id: str, message: Message) -> ReconcileResult:
        """Fold a message returned by a confirmed send."""
        return self.reconcile(conversation_id, [message], self._cache.next_sequence())

    def apply_edit(self, conversation_id: str, message_id: str, content: str) -> ReconcileResult:
        """Apply an edit confirmation in place: new content, ``edited`` set."""
        return self._mutate(conversation_id, message_id, lambda m: m.with_edit(content))

    def apply_delete(self, conversation_id: str, message_id: str) -> ReconcileResult:
        """Apply a delete confirmation: the message becomes a tombstone."""
        return self._mutate(conversation_id, message_id, lambda m: m.tombstoned())

    def _mutate(self, conversation_id, message_id, change) -> ReconcileResult:
        sequence = self._cache.next_sequence()
        existing = self._cache.get(conversation_id, include_deleted=True)
        target: Optional[Message] = next((m for m in existing if m.id == message_id), None)
        if target is None:
            logger.debug("Confirmation for %s/%s has no cached target", conversation_id, message_id)
            merged = existing
        else:
            merged = merge_snapshot(existing, [change(target)])
        return self._commit(conversation_id, existing, merged, sequence)

    def _commit(self, conversation_id, existing, merged, sequence) -> ReconcileResult:
        before = {m.id: m for m in existing}
        added = tuple(m.id for m in merged if m.id not in before)
        changed = tuple(m.id for m in merged if m.id in before and before[m.id] != m)
        self._cache.put(conversation_id, merged, sequence)
        if added or changed:
            logger.debug("Reconciled %s: %d added, %d changed", conversation_id, len(added), len(changed))
        return ReconcileResult(
            conversation_id=conversation_id,
            sequence=sequence,
            accepted=True,
            messages=tuple(merged),
            added=added,
            changed=changed,
        )
