import pytest

from chatsync.errors import RemoteStoreError
from chatsync.models.profile import Profile
from chatsync.profiles import ProfileDirectory


class Lookup:
    def __init__(self, known, fail=False):
        self.known = known
        self.fail = fail
        self.calls = []

    async def get_profiles(self, user_ids):
        self.calls.append(list(user_ids))
        if self.fail:
            raise RemoteStoreError("down")
        return {u: self.known[u] for u in user_ids if u in self.known}


@pytest.mark.asyncio
async def test_batches_unseen_ids_once():
    lookup = Lookup({"a": Profile(user_id="a", display_name="A")})
    directory = ProfileDirectory(lookup)
    result = await directory.ensure(["b", "a", "a", ""])
    assert lookup.calls == [["a", "b"]]
    assert result["a"].display_name == "A"
    assert directory.get("b") is None
    await directory.ensure(["a", "b"])
    assert len(lookup.calls) == 1


@pytest.mark.asyncio
async def test_lookup_failure_is_not_fatal():
    lookup = Lookup({}, fail=True)
    directory = ProfileDirectory(lookup)
    assert await directory.ensure(["a"]) == {}
    lookup.fail = False
    await directory.ensure(["a"])
    assert lookup.calls == [["a"], ["a"]]


@pytest.mark.asyncio
async def test_invalidate_forces_a_new_lookup():
    lookup = Lookup({"a": Profile(user_id="a", display_name="A")})
    directory = ProfileDirectory(lookup)
    await directory.ensure(["a"])
    directory.invalidate("a")
    await directory.ensure(["a"])
    assert len(lookup.calls) == 2


@pytest.mark.asyncio
async def test_without_lookup():
    assert await ProfileDirectory().ensure(["a"]) == {}
