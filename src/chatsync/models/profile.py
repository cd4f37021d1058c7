"""
Author profile, as returned by the batched profile lookup.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


def shorten_address(address: Optional[str]) -> str:
    if not address:
        return ""
    if len(address) <= 10:
        return address
    return f"{address[:5]}...{address[-5:]}"


class Profile(BaseModel):
    user_id: str = Field(validation_alias=AliasChoices("user_id", "userId", "id"))
    display_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("display_name", "displayName", "primaryName", "nickname"),
    )
    avatar: Optional[str] = Field(default=None, validation_alias=AliasChoices("avatar", "pfp"))


def display_name_for(author_id: str, profile: Optional[Profile] = None) -> str:
    if profile is not None and profile.display_name:
        return profile.display_name
    return shorten_address(author_id)
