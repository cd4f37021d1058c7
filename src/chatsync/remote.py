"""
Remote message store: the collaborator interface plus its REST implementation.

Routes (relative to ``<base_url>/api``):

- ``GET    /v1/channels/{id}/messages?limit=N``   (``/v1/dms/{id}/...`` for direct conversations)
- ``POST   /v1/channels/{id}/messages``
- ``PATCH  /v1/channels/{id}/messages/{message_id}``
- ``DELETE /v1/channels/{id}/messages/{message_id}``
- ``GET    /v1/profiles?ids=a,b``

Channels that belong to a server are addressed as
``/v1/servers/{server_id}/channels/{id}/...``.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Iterable, Mapping, Optional, Protocol, Union, runtime_checkable

from pydantic import ValidationError as ModelValidationError

from chatsync.errors import FetchError, RemoteStoreError
from chatsync.models.conversation import Conversation
from chatsync.models.message import Message
from chatsync.models.profile import Profile
from chatsync.transport.http import HttpClient

logger = logging.getLogger(__name__)

SendResult = Union[bool, Message]


@runtime_checkable
class RemoteStore(Protocol):
    async def fetch_recent_messages(self, conversation: Conversation, limit: int) -> list[Message]: ...

    async def send_message(self, conversation: Conversation, payload: dict[str, Any]) -> SendResult: ...

    async def edit_message(self, conversation: Conversation, message_id: str, content: str) -> bool: ...

    async def delete_message(self, conversation: Conversation, message_id: str) -> bool: ...

    def get_cached_messages(self, conversation: Conversation) -> list[Message]: ...


@runtime_checkable
class ProfileLookup(Protocol):
    async def get_profiles(self, user_ids: list[str]) -> dict[str, Profile]: ...


def parse_messages(payload: Any, conversation_id: str = "") -> list[Message]:
    """Build messages from a list, a ``{"messages": [...]}`` body or an id-keyed map.

    Entries that fail validation are skipped.
    """
    if isinstance(payload, Mapping) and "messages" in payload:
        payload = payload["messages"]
    if isinstance(payload, Mapping):
        raw_items: Iterable[Any] = (
            {"id": key, **value} if isinstance(value, Mapping) else value
            for key, value in payload.items()
        )
    elif isinstance(payload, list):
        raw_items = payload
    else:
        return []

    messages = []
    for raw in raw_items:
        if not isinstance(raw, Mapping):
            continue
        try:
            message = Message.model_validate(raw)
        except ModelValidationError as e:
            logger.debug("Skipping malformed message (%d errors)", e.error_count())
            continue
        if not message.conversation_id and conversation_id:
            message = message.model_copy(update={"conversation_id": conversation_id})
        messages.append(message)
    return messages


def _confirmed(payload: Any) -> bool:
    if isinstance(payload, Mapping):
        return bool(payload.get("success", True))
    if isinstance(payload, bool):
        return payload
    return True


class HttpRemoteStore:
    def __init__(self, http: HttpClient):
        self._http = http
        self._snapshots: dict[str, list[Message]] = {}

    @staticmethod
    def messages_path(conversation: Conversation) -> str:
        if conversation.is_direct:
            return f"/v1/dms/{conversation.id}/messages"
        if conversation.server_id:
            return f"/v1/servers/{conversation.server_id}/channels/{conversation.id}/messages"
        return f"/v1/channels/{conversation.id}/messages"

    async def fetch_recent_messages(self, conversation: Conversation, limit: int) -> list[Message]:
        started = time.perf_counter()
        try:
            payload = await self._http.get(self.messages_path(conversation), params={"limit": limit})
        except RemoteStoreError as e:
            raise FetchError(f"Fetching {conversation.id} failed: {e}", details={"cause": e.code}) from e
        messages = parse_messages(payload, conversation.id)[-limit:]
        self._snapshots[conversation.id] = messages
        logger.debug(
            "Got %d messages for %s in %dms",
            len(messages), conversation.id, (time.perf_counter() - started) * 1000,
        )
        return messages

    async def send_message(self, conversation: Conversation, payload: dict[str, Any]) -> SendResult:
        data = await self._http.post(self.messages_path(conversation), payload)
        if isinstance(data, Mapping):
            body = data.get("message", data)
            if isinstance(body, Mapping) and any(k in body for k in ("id", "messageId")):
                try:
                    message = Message.model_validate(body)
                except ModelValidationError:
                    return _confirmed(data)
                if not message.conversation_id:
                    message = message.model_copy(update={"conversation_id": conversation.id})
                return message
        return _confirmed(data)

    async def edit_message(self, conversation: Conversation, message_id: str, content: str) -> bool:
        data = await self._http.patch(f"{self.messages_path(conversation)}/{message_id}", {"content": content})
        return _confirmed(data)

    async def delete_message(self, conversation: Conversation, message_id: str) -> bool:
        data = await self._http.delete(f"{self.messages_path(conversation)}/{message_id}")
        return _confirmed(data)

    def get_cached_messages(self, conversation: Conversation) -> list[Message]:
        return list(self._snapshots.get(conversation.id, []))

    async def get_profiles(self, user_ids: list[str]) -> dict[str, Profile]:
        if not user_ids:
            return {}
        data = await self._http.get("/v1/profiles", params={"ids": ",".join(user_ids)})
        if isinstance(data, Mapping) and "profiles" in data:
            data = data["profiles"]
        items: Iterable[Any]
        if isinstance(data, Mapping):
            items = (
                {"user_id": key, **value} if isinstance(value, Mapping) else None
                for key, value in data.items()
            )
        elif isinstance(data, list):
            items = data
        else:
            return {}
        profiles: dict[str, Profile] = {}
        for raw in items:
            if not isinstance(raw, Mapping):
                continue
            try:
                profile = Profile.model_validate(raw)
            except ModelValidationError:
                continue
            profiles[profile.user_id] = profile
        return profiles

    async def close(self) -> None:
        await self._http.close()


def create_store(
    base_url: str,
    token: Optional[str] = None,
    timeout: float = 30.0,
    transport: Any = None,
) -> HttpRemoteStore:
    return HttpRemoteStore(HttpClient(base_url, token=token, timeout=timeout, transport=transport))
