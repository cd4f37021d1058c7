"""
Conversation model.

Membership arrives in several shapes (a list of ids, a list of member
objects, or an id-keyed map). It is normalized once here, at ingestion,
into an insertion-ordered ``dict[str, Member]``.
"""

from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

ID_KEYS = ("id", "userId", "_id")


class ConversationKind(str, Enum):
    CHANNEL = "channel"
    DIRECT = "direct"


def _normalize_roles(value: Any) -> list[str]:
    if isinstance(value, Mapping):
        return [str(k) for k in value]
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return []


class Member(BaseModel):
    id: str
    nickname: Optional[str] = None
    roles: list[str] = Field(default_factory=list)

    @field_validator("roles", mode="before")
    @classmethod
    def _roles(cls, value: Any) -> list[str]:
        return _normalize_roles(value)


def _member_from(raw: Any, fallback_id: Optional[str] = None) -> Optional[Member]:
    if isinstance(raw, Member):
        return raw
    if isinstance(raw, (str, int)):
        return Member(id=str(raw))
    if isinstance(raw, Mapping):
        member_id = next((str(raw[k]) for k in ID_KEYS if raw.get(k)), fallback_id)
        if not member_id:
            return None
        return Member(id=member_id, nickname=raw.get("nickname"), roles=raw.get("roles"))
    if fallback_id:
        return Member(id=fallback_id)
    return None


def normalize_members(value: Any) -> dict[str, Member]:
    """Canonical ordered map of members from any of the wire shapes."""
    members: dict[str, Member] = {}
    if isinstance(value, Mapping):
        items = [_member_from(raw, str(key)) for key, raw in value.items()]
    elif isinstance(value, (list, tuple)):
        items = [_member_from(raw) for raw in value]
    else:
        items = []
    for member in items:
        if member is not None and member.id not in members:
            members[member.id] = member
    return members


class Conversation(BaseModel):
    id: str
    kind: ConversationKind = ConversationKind.CHANNEL
    name: str = ""
    server_id: Optional[str] = None
    members: dict[str, Member] = Field(default_factory=dict)
    last_fetch_sequence: int = 0

    @field_validator("members", mode="before")
    @classmethod
    def _members(cls, value: Any) -> dict[str, Member]:
        return normalize_members(value)

    @property
    def is_direct(self) -> bool:
        return self.kind == ConversationKind.DIRECT
