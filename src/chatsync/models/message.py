"""
Message model — one entry of a conversation log as the remote store returns it.
"""

import math
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from chatsync.attachments import decode_attachment_list, parse_attachments

# Anything below this is a seconds timestamp.
MS_THRESHOLD = 1_000_000_000_000
# 9999-12-31T00:00:00Z, the last day every timezone can still represent.
MAX_TIMESTAMP_MS = 253_402_214_400_000


def normalize_timestamp(value: Any) -> int:
    """Return a millisecond epoch timestamp, accepting seconds or milliseconds.

    Raises ValueError for anything that is not a finite number in
    ``[0, MAX_TIMESTAMP_MS]`` once normalized.
    """
    if isinstance(value, bool):
        raise ValueError("timestamp must be a number")
    try:
        ts = float(value)
    except (TypeError, OverflowError) as e:
        raise ValueError(f"timestamp must be a number, got {type(value).__name__}") from e
    if not math.isfinite(ts):
        raise ValueError("timestamp must be finite")
    if ts < MS_THRESHOLD:
        ts *= 1000
    if not 0 <= ts <= MAX_TIMESTAMP_MS:
        raise ValueError(f"timestamp {value!r} is out of range")
    return int(ts)


class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(validation_alias=AliasChoices("id", "messageId", "message_id"))
    conversation_id: str = Field(
        default="",
        validation_alias=AliasChoices("conversation_id", "conversationId", "channelId"),
    )
    author_id: str = Field(validation_alias=AliasChoices("author_id", "authorId"))
    content: str = ""
    attachments: tuple[str, ...] = ()
    timestamp: int
    reply_to_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("reply_to_id", "replyTo", "replyToId"),
    )
    edited: bool = False
    deleted: bool = False

    @field_validator("id", "author_id", "conversation_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("reply_to_id", mode="before")
    @classmethod
    def _coerce_reply(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value)

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> str:
        return "" if value is None else value

    @field_validator("attachments", mode="before")
    @classmethod
    def _decode_attachments(cls, value: Any) -> tuple[str, ...]:
        return tuple(decode_attachment_list(value))

    @field_validator("timestamp", mode="before")
    @classmethod
    def _normalize_timestamp(cls, value: Any) -> int:
        return normalize_timestamp(value)

    @property
    def sort_key(self) -> tuple[int, str]:
        """Canonical render order: timestamp ascending, id as tiebreak."""
        return (self.timestamp, self.id)

    @property
    def parsed_attachments(self) -> list[Any]:
        return parse_attachments(list(self.attachments))

    def with_edit(self, content: str) -> "Message":
        return self.model_copy(update={"content": content, "edited": True})

    def tombstoned(self) -> "Message":
        return self.model_copy(update={"deleted": True})
