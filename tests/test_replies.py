from chatsync.replies import ReplyResolver, ReplyState, preview_text, resolve_replies

from fakes import make_message


def test_resolves_target_in_window():
    target = make_message("m1", content="original")
    reply = make_message("m2", reply_to_id="m1")
    ref = ReplyResolver([target, reply]).resolve(reply)
    assert ref.resolved
    assert ref.state == ReplyState.RESOLVED
    assert ref.target.id == "m1"
    assert ref.preview == "original"


def test_dangling_reference_is_not_loaded():
    reply = make_message("m2", reply_to_id="gone")
    ref = ReplyResolver([reply]).resolve(reply)
    assert ref.state == ReplyState.NOT_LOADED
    assert ref.target is None
    assert ref.preview == ""


def test_deleted_target_is_not_loaded():
    target = make_message("m1").tombstoned()
    reply = make_message("m2", reply_to_id="m1")
    assert not ReplyResolver([target, reply]).resolve(reply).resolved


def test_message_without_reply():
    assert ReplyResolver([]).resolve(make_message("m1")) is None


def test_preview_truncates_at_50():
    assert preview_text("x" * 50) == "x" * 50
    assert preview_text("x" * 51) == "x" * 50 + "..."


def test_resolve_replies_maps_only_replies():
    msgs = [make_message("m1"), make_message("m2", reply_to_id="m1"), make_message("m3", reply_to_id="m9")]
    refs = resolve_replies(msgs)
    assert set(refs) == {"m2", "m3"}
    assert refs["m2"].resolved and not refs["m3"].resolved
