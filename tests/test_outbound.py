import asyncio
import json

import pytest

from chatsync.cache import SnapshotCache
from chatsync.errors import DeleteError, SendError, ValidationError
from chatsync.models.conversation import Conversation
from chatsync.outbound import Draft, OutboundQueue
from chatsync.reconciler import Reconciler

from fakes import FakeStore, make_message

CONV = Conversation(id="c1")


def _queue(store, on_confirmed=None):
    cache = SnapshotCache()
    reconciler = Reconciler(cache)
    reconciler.reconcile("c1", [make_message("m1")], cache.next_sequence())
    return OutboundQueue(store, reconciler, on_confirmed), cache


def test_draft_payload():
    draft = Draft(content="hi", attachments=("image/png:a",), reply_to="m1")
    assert draft.payload() == {"content": "hi", "attachments": '["image/png:a"]', "replyTo": "m1"}
    assert "replyTo" not in Draft(content="hi").payload()


@pytest.mark.asyncio
async def test_send_folds_confirmed_message():
    store = FakeStore()
    confirmed = []

    async def on_confirmed(conversation, result):
        confirmed.append((conversation.id, result.added))

    queue, cache = _queue(store, on_confirmed)
    result = await queue.send(CONV, "hello", ["blob:xyz"])
    assert result.accepted and result.added == ("sent-1",)
    assert [m.id for m in cache.get("c1")] == ["m1", "sent-1"]
    assert json.loads(store.sent[0][1]["attachments"]) == ["blob:xyz"]
    assert confirmed == [("c1", ("sent-1",))]
    assert queue.draft is None


@pytest.mark.asyncio
async def test_attachment_only_send_is_allowed():
    queue, _ = _queue(FakeStore())
    result = await queue.send(CONV, "", ["image/png:abc"])
    assert result.accepted


@pytest.mark.asyncio
async def test_validation_happens_before_any_request():
    store = FakeStore()
    queue, cache = _queue(store)
    with pytest.raises(ValidationError):
        await queue.send(CONV, "  ")
    with pytest.raises(ValidationError):
        await queue.edit(CONV, "m1", "")
    with pytest.raises(ValidationError):
        await queue.delete(CONV, "")
    assert store.sent == [] and store.edits == [] and store.deletes == []
    assert [m.content for m in cache.get("c1")] == ["message m1"]


@pytest.mark.asyncio
async def test_unconfirmed_send_keeps_draft():
    store = FakeStore()
    store.confirm = False
    queue, cache = _queue(store)
    with pytest.raises(SendError) as exc:
        await queue.send(CONV, "keep me", reply_to="m1")
    assert exc.value.details["draft"] == Draft(content="keep me", reply_to="m1")
    assert queue.draft.content == "keep me"
    assert [m.id for m in cache.get("c1")] == ["m1"]


@pytest.mark.asyncio
async def test_failed_delete_leaves_cache_alone():
    store = FakeStore()
    store.fail_outbound = True
    queue, cache = _queue(store)
    with pytest.raises(DeleteError) as exc:
        await queue.delete(CONV, "m1")
    assert exc.value.details["message_id"] == "m1"
    assert [m.id for m in cache.get("c1")] == ["m1"]


@pytest.mark.asyncio
async def test_requests_are_serialized():
    store = FakeStore()
    queue, _ = _queue(store)
    order = []
    original = store.send_message

    async def slow_send(conversation, payload):
        order.append(("start", payload["content"]))
        assert queue.busy
        await asyncio.sleep(0.01)
        order.append(("end", payload["content"]))
        return await original(conversation, payload)

    store.send_message = slow_send
    await asyncio.gather(queue.send(CONV, "a"), queue.send(CONV, "b"))
    assert order == [("start", "a"), ("end", "a"), ("start", "b"), ("end", "b")]
    assert not queue.busy
