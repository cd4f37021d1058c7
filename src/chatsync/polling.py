"""
PollingScheduler — one background refresh loop for the active conversation.

Idle -> Polling when a conversation becomes active and a connection is
available; Polling -> Idle on switch, teardown or connection loss. The
previous loop is always cancelled before a new one starts, so there is
never more than one timer per scheduler.

Cancelling the loop does not cancel a fetch already in flight. That fetch
completes on its own and its result is dropped by the sequence guard.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from chatsync.models.conversation import Conversation

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 2.0

RefreshFn = Callable[[Conversation], Awaitable[Any]]


class PollState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"


class PollingScheduler:
    def __init__(
        self,
        refresh: RefreshFn,
        interval: float = DEFAULT_POLL_INTERVAL,
        is_connected: Optional[Callable[[], bool]] = None,
    ):
        self._refresh = refresh
        self._interval = interval
        self._is_connected = is_connected or (lambda: True)
        self._active: Optional[Conversation] = None
        self._task: Optional[asyncio.Task] = None
        self._detached: set[asyncio.Task] = set()

    @property
    def state(self) -> PollState:
        if self._active is not None and self._task is not None and not self._task.done():
            return PollState.POLLING
        return PollState.IDLE

    @property
    def active(self) -> Optional[Conversation]:
        return self._active

    @property
    def interval(self) -> float:
        return self._interval

    def start(self, conversation: Conversation) -> bool:
        """Begin polling ``conversation``, replacing any running loop."""
        self.stop()
        if not self._is_connected():
            logger.info("Not polling %s: no connection", conversation.id)
            return False
        self._active = conversation
        self._task = asyncio.get_running_loop().create_task(
            self._run(conversation), name=f"chatsync-poll-{conversation.id}",
        )
        logger.debug("Polling %s every %.1fs", conversation.id, self._interval)
        return True

    def stop(self) -> Optional[Conversation]:
        """Cancel the timer. Returns the conversation that was being polled."""
        previous, task = self._active, self._task
        self._active = None
        self._task = None
        if task is not None and not task.done():
            task.cancel()
        if previous is not None:
            logger.debug("Stopped polling %s", previous.id)
        return previous

    def connection_lost(self) -> Optional[Conversation]:
        logger.info("Connection lost, polling stopped")
        return self.stop()

    async def tick(self) -> bool:
        """Run one fetch-and-reconcile cycle. No-op when nothing is active."""
        conversation = self._active
        if conversation is None:
            return False
        if not self._is_connected():
            self.connection_lost()
            return False
        task = asyncio.get_running_loop().create_task(self._refresh(conversation))
        self._detached.add(task)
        task.add_done_callback(self._forget)
        await asyncio.shield(task)
        return True

    def _forget(self, task: asyncio.Task) -> None:
        self._detached.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.debug("Refresh task ended with %r", task.exception())

    async def _run(self, conversation: Conversation) -> None:
        while self._active is conversation:
            try:
                await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Poll tick failed for %s", conversation.id)
            await asyncio.sleep(self._interval)
