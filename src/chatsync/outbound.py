"""
OutboundQueue — send/edit/delete against the remote store, one at a time.

Nothing is applied before the store confirms. On success the confirmed
state goes through the Reconciler; on failure the draft is kept for retry
and the cache is left alone.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, Iterable, Optional, Union

from chatsync.attachments import encode_attachments
from chatsync.errors import DeleteError, EditError, RemoteStoreError, SendError, ValidationError
from chatsync.models.conversation import Conversation
from chatsync.models.message import Message
from chatsync.reconciler import ReconcileResult, Reconciler
from chatsync.remote import RemoteStore

logger = logging.getLogger(__name__)

ConfirmedFn = Callable[[Conversation, ReconcileResult], Awaitable[Any]]


@dataclass
class Draft:
    content: str = ""
    attachments: tuple[str, ...] = field(default_factory=tuple)
    reply_to: Optional[str] = None

    def payload(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "content": self.content,
            "attachments": encode_attachments(self.attachments),
        }
        if self.reply_to:
            body["replyTo"] = self.reply_to
        return body


class OutboundQueue:
    def __init__(
        self,
        store: RemoteStore,
        reconciler: Reconciler,
        on_confirmed: Optional[ConfirmedFn] = None,
    ):
        self._store = store
        self._reconciler = reconciler
        self._on_confirmed = on_confirmed
        self._lock = asyncio.Lock()
        self._pending = 0
        self.draft: Optional[Draft] = None

    @property
    def busy(self) -> bool:
        """True while a request is queued or waiting on the remote store."""
        return self._pending > 0

    async def send(
        self,
        conversation: Conversation,
        content: str,
        attachments: Iterable[Union[str, Any]] = (),
        reply_to: Optional[str] = None,
    ) -> ReconcileResult:
        items = tuple(a if isinstance(a, str) else a.wire for a in attachments)
        if not content.strip() and not items:
            raise ValidationError("Message is empty")
        draft = Draft(content=content, attachments=items, reply_to=reply_to)
        self.draft = draft

        async with self._request():
            try:
                result = await self._store.send_message(conversation, draft.payload())
            except RemoteStoreError as e:
                raise SendError(f"Send failed: {e}", details={"draft": draft, "cause": e.code}) from e
            if result is False:
                raise SendError("Send was not confirmed", details={"draft": draft})

        self.draft = None
        if isinstance(result, Message):
            confirmed = self._reconciler.apply_confirmed(conversation.id, result)
        else:
            confirmed = ReconcileResult(conversation_id=conversation.id, sequence=0, accepted=False)
        await self._confirmed(conversation, confirmed)
        return confirmed

    async def edit(self, conversation: Conversation, message_id: str, content: str) -> ReconcileResult:
        if not message_id:
            raise ValidationError("No message to edit")
        if not content.strip():
            raise ValidationError("Edited message is empty")
        details = {"message_id": message_id, "content": content}

        async with self._request():
            try:
                ok = await self._store.edit_message(conversation, message_id, content)
            except RemoteStoreError as e:
                raise EditError(f"Edit failed: {e}", details={**details, "cause": e.code}) from e
            if not ok:
                raise EditError("Edit was not confirmed", details=details)

        confirmed = self._reconciler.apply_edit(conversation.id, message_id, content)
        await self._confirmed(conversation, confirmed)
        return confirmed

    async def delete(self, conversation: Conversation, message_id: str) -> ReconcileResult:
        if not message_id:
            raise ValidationError("No message to delete")
        details = {"message_id": message_id}

        async with self._request():
            try:
                ok = await self._store.delete_message(conversation, message_id)
            except RemoteStoreError as e:
                raise DeleteError(f"Delete failed: {e}", details={**details, "cause": e.code}) from e
            if not ok:
                raise DeleteError("Delete was not confirmed", details=details)

        confirmed = self._reconciler.apply_delete(conversation.id, message_id)
        await self._confirmed(conversation, confirmed)
        return confirmed

    @asynccontextmanager
    async def _request(self) -> AsyncIterator[None]:
        self._pending += 1
        try:
            async with self._lock:
                started = time.perf_counter()
                try:
                    yield
                finally:
                    logger.debug("Outbound request took %dms", (time.perf_counter() - started) * 1000)
        finally:
            self._pending -= 1

    async def _confirmed(self, conversation: Conversation, result: ReconcileResult) -> None:
        if self._on_confirmed is not None:
            await self._on_confirmed(conversation, result)

