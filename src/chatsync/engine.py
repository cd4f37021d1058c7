"""
ConversationView — drives one conversation from cache to rendered entries.

Opening a conversation renders whatever the cache holds, then the polling
scheduler fetches the most recent window on every tick. Each fetch takes a
sequence number before it starts; the reconciler drops results older than
the newest accepted one, and ``close`` fences the conversation so a fetch
still in flight after a switch can never land.

Send/edit/delete go through the outbound queue. Their confirmed effects are
folded into the cache, published, and followed by a forced refresh.
"""

import logging
import time
from datetime import tzinfo
from typing import Callable, Iterable, Optional, Union

from chatsync.cache import SnapshotCache
from chatsync.config import SyncSettings
from chatsync.errors import ChatSyncError, ConnectionError
from chatsync.host import NullHost, ViewHost
from chatsync.models.conversation import Conversation
from chatsync.outbound import OutboundQueue
from chatsync.polling import PollingScheduler, PollState
from chatsync.profiles import ProfileDirectory
from chatsync.reconciler import ReconcileResult, Reconciler
from chatsync.remote import ProfileLookup, RemoteStore
from chatsync.render import TimelineEntry, build_entries
from chatsync.scroll import ScrollAnchor, Viewport

logger = logging.getLogger(__name__)

NOT_FOUND_NOTICE = "Message not found in current view"


class ConversationView:
    def __init__(
        self,
        store: RemoteStore,
        host: Optional[ViewHost] = None,
        settings: Optional[SyncSettings] = None,
        *,
        cache: Optional[SnapshotCache] = None,
        profiles: Optional[ProfileDirectory] = None,
        is_connected: Optional[Callable[[], bool]] = None,
        tz: Optional[tzinfo] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings or SyncSettings()
        self.host: ViewHost = host or NullHost()
        self.cache = cache or SnapshotCache()
        self.reconciler = Reconciler(self.cache)
        self.profiles = profiles or ProfileDirectory(store if isinstance(store, ProfileLookup) else None)
        self.scheduler = PollingScheduler(self.refresh, self.settings.poll_interval, is_connected)
        self.anchor = ScrollAnchor(self.settings.scroll_threshold)
        self.outbound = OutboundQueue(store, self.reconciler, self._on_confirmed)
        self._store = store
        self._tz = tz
        self._clock = clock
        self._active: Optional[Conversation] = None
        self._rendered_for: Optional[str] = None
        self._in_flight: dict[str, int] = {}
        self._last_request: dict[str, float] = {}
        self.entries: list[TimelineEntry] = []
        self.reply_target: Optional[str] = None
        self.editing: Optional[str] = None

    @property
    def active(self) -> Optional[Conversation]:
        return self._active

    @property
    def polling(self) -> bool:
        return self.scheduler.state == PollState.POLLING

    def is_active(self, conversation_id: str) -> bool:
        return self._active is not None and self._active.id == conversation_id

    async def open(self, conversation: Conversation, poll: bool = True) -> list[TimelineEntry]:
        """Make ``conversation`` active. Cached data renders before any fetch."""
        if self._active is not None:
            self.close()
        conversation = self.cache.register(conversation)
        self._active = conversation
        self.anchor.reset()
        self.reply_target = None
        self.editing = None

        if not self.cache.is_warm(conversation.id):
            local = self._store.get_cached_messages(conversation)
            if local:
                logger.debug("Warm start for %s from %d local messages", conversation.id, len(local))
                self.reconciler.reconcile(conversation.id, local, self.cache.next_sequence())
        if self.cache.is_warm(conversation.id):
            await self._publish(conversation, smooth=False)

        if poll:
            self.scheduler.start(conversation)
        return self.entries

    def close(self, invalidate: bool = False) -> Optional[Conversation]:
        """Stop polling and detach from the active conversation.

        ``invalidate`` also drops its cached messages, for conversation
        teardown. Otherwise the cache is kept for a warm revisit.
        """
        previous = self._active
        self.scheduler.stop()
        self._active = None
        self._rendered_for = None
        self.entries = []
        self.reply_target = None
        self.editing = None
        if previous is not None:
            if invalidate:
                self.cache.invalidate(previous.id)
            else:
                self.cache.fence(previous.id)
            logger.debug("Closed %s", previous.id)
        return previous

    def connection_lost(self) -> None:
        self.scheduler.connection_lost()

    def connection_restored(self) -> bool:
        if self._active is None:
            return False
        return self.scheduler.start(self._active)

    async def refresh(self, conversation: Optional[Conversation] = None, force: bool = False) -> Optional[ReconcileResult]:
        """Fetch the recent window once and reconcile it.

        Without ``force`` the fetch is skipped while another one for the same
        conversation is in flight or the last one started too recently.
        Returns None when no fetch completed.
        """
        conversation = conversation or self._active
        if conversation is None:
            return None
        cid = conversation.id
        if not force:
            if self._in_flight.get(cid):
                logger.debug("Skipping refresh of %s: fetch in flight", cid)
                return None
            last = self._last_request.get(cid)
            if last is not None and self._clock() - last < self.settings.min_request_interval:
                logger.debug("Skipping refresh of %s: throttled", cid)
                return None

        sequence = self.cache.next_sequence()
        self._in_flight[cid] = self._in_flight.get(cid, 0) + 1
        self._last_request[cid] = self._clock()
        started = time.perf_counter()
        try:
            fetched = await self._store.fetch_recent_messages(conversation, self.settings.fetch_limit)
        except ChatSyncError as e:
            logger.warning("Refresh of %s failed: %s", cid, e)
            if self.is_active(cid):
                self.host.notify_error(e)
            return None
        finally:
            self._in_flight[cid] -= 1
            if not self._in_flight[cid]:
                del self._in_flight[cid]

        logger.debug(
            "Fetched %d messages for %s (seq %d) in %dms",
            len(fetched), cid, sequence, (time.perf_counter() - started) * 1000,
        )
        result = self.reconciler.reconcile(cid, fetched, sequence)
        if result.accepted and self.is_active(cid) and (result.modified or self._rendered_for != cid):
            await self._publish(conversation)
        return result

    async def _publish(self, conversation: Conversation, smooth: bool = True) -> None:
        cid = conversation.id
        messages = self.cache.get(cid)
        profiles = await self.profiles.ensure(m.author_id for m in messages)
        if not self.is_active(cid):
            return
        messages = self.cache.get(cid)

        self.anchor.begin_mutation()
        previous = {e.id for e in self.entries} if self._rendered_for == cid else set()
        self.entries = build_entries(messages, profiles, self._tz)
        self._rendered_for = cid
        self.host.render(self._active or conversation, self.entries)
        has_new = any(e.id not in previous for e in self.entries)
        if self.anchor.end_mutation(self.host.viewport(), has_new_entries=has_new):
            self.host.scroll_to_bottom(smooth=smooth)

    async def _on_confirmed(self, conversation: Conversation, result: ReconcileResult) -> None:
        if not self.is_active(conversation.id):
            return
        if result.accepted and result.modified:
            await self._publish(conversation)
        await self.refresh(conversation, force=True)

    def reply(self, message_id: str) -> None:
        """Target ``message_id`` with the next send and focus the compose surface."""
        self.reply_target = message_id
        self.editing = None
        self.host.focus_compose()

    def cancel_reply(self) -> None:
        self.reply_target = None

    def begin_edit(self, message_id: str) -> Optional[str]:
        """Enter edit mode for a rendered message. Returns its current content."""
        entry = self._entry(message_id)
        if entry is None:
            self.host.notify(NOT_FOUND_NOTICE)
            return None
        self.editing = message_id
        self.reply_target = None
        self.host.focus_compose()
        return entry.message.content

    def cancel_edit(self) -> None:
        self.editing = None

    def insert_text(self, text: str) -> None:
        self.host.insert_compose_text(text)
        self.host.focus_compose()

    def focus(self) -> None:
        self.host.focus_compose()

    async def send(self, content: str, attachments: Iterable[Union[str, object]] = ()) -> bool:
        try:
            conversation = self._require_active()
            await self.outbound.send(conversation, content, attachments, reply_to=self.reply_target)
        except ChatSyncError as e:
            logger.warning("Send failed: %s", e)
            self.host.notify_error(e)
            return False
        self.reply_target = None
        self.jump_to_latest()
        return True

    async def edit(self, message_id: str, content: str) -> bool:
        try:
            conversation = self._require_active()
            await self.outbound.edit(conversation, message_id, content)
        except ChatSyncError as e:
            logger.warning("Edit of %s failed: %s", message_id, e)
            self.host.notify_error(e)
            return False
        if self.editing == message_id:
            self.editing = None
        return True

    async def delete(self, message_id: str) -> bool:
        try:
            conversation = self._require_active()
            await self.outbound.delete(conversation, message_id)
        except ChatSyncError as e:
            logger.warning("Delete of %s failed: %s", message_id, e)
            self.host.notify_error(e)
            return False
        if self.reply_target == message_id:
            self.reply_target = None
        return True

    def jump_to_message(self, message_id: str) -> bool:
        if self._entry(message_id) is None or not self.host.scroll_to_entry(message_id):
            self.host.notify(NOT_FOUND_NOTICE)
            return False
        return True

    def jump_to_latest(self) -> None:
        self.anchor.jump_to_latest()
        self.host.scroll_to_bottom(smooth=True)

    def on_scroll(self, viewport: Viewport) -> bool:
        return self.anchor.on_scroll(viewport)

    def measure(self, last_height: float, second_last_height: float) -> float:
        """Widen the autoscroll threshold to the height of the last two entries."""
        return self.anchor.widen_for(last_height, second_last_height)

    def _entry(self, message_id: str) -> Optional[TimelineEntry]:
        return next((e for e in self.entries if e.id == message_id), None)

    def _require_active(self) -> Conversation:
        if self._active is None:
            raise ConnectionError("No conversation is open")
        return self._active
