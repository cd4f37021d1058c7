"""
ProfileDirectory — batched author-profile lookup with a local memo.

Profiles only decorate entries. A failed lookup is logged and the entry
falls back to a shortened author id.
"""

import logging
from typing import Iterable, Optional

from chatsync.errors import ChatSyncError
from chatsync.models.profile import Profile
from chatsync.remote import ProfileLookup

logger = logging.getLogger(__name__)


class ProfileDirectory:
    def __init__(self, lookup: Optional[ProfileLookup] = None):
        self._lookup = lookup
        self._profiles: dict[str, Profile] = {}
        self._unknown: set[str] = set()

    def get(self, user_id: str) -> Optional[Profile]:
        return self._profiles.get(user_id)

    def snapshot(self) -> dict[str, Profile]:
        return dict(self._profiles)

    def missing(self, user_ids: Iterable[str]) -> list[str]:
        return sorted({u for u in user_ids if u and u not in self._profiles and u not in self._unknown})

    async def ensure(self, user_ids: Iterable[str]) -> dict[str, Profile]:
        """Look up every id not seen before in one batch."""
        wanted = self.missing(user_ids)
        if not wanted or self._lookup is None:
            return self.snapshot()
        try:
            found = await self._lookup.get_profiles(wanted)
        except ChatSyncError as e:
            logger.warning("Profile lookup for %d authors failed: %s", len(wanted), e)
            return self.snapshot()
        self._profiles.update(found)
        self._unknown.update(u for u in wanted if u not in found)
        return self.snapshot()

    def invalidate(self, user_id: Optional[str] = None) -> None:
        if user_id is None:
            self._profiles.clear()
            self._unknown.clear()
        else:
            self._profiles.pop(user_id, None)
            self._unknown.discard(user_id)
