import json

from chatsync.attachments import (
    AttachmentKind,
    FileAttachment,
    ImageAttachment,
    TenorAttachment,
    decode_attachment_list,
    encode_attachments,
    parse_attachment,
    parse_attachments,
)


def test_image_reference():
    att = parse_attachment("image/png:abc123")
    assert isinstance(att, ImageAttachment)
    assert att.kind == AttachmentKind.IMAGE
    assert att.reference_id == "abc123"
    assert att.url() == "https://arweave.net/abc123"
    assert att.url("https://gw.example/") == "https://gw.example/abc123"


def test_unknown_kind_is_a_file_chip():
    att = parse_attachment("blob:xyz")
    assert isinstance(att, FileAttachment)
    assert att.copyable_id == "xyz"
    assert att.tag == "blob"


def test_no_colon_is_a_file_with_the_whole_string():
    att = parse_attachment("justanid")
    assert isinstance(att, FileAttachment)
    assert att.copyable_id == "justanid"
    assert att.wire == "justanid"


def test_tenor_splits_on_first_colon_only():
    att = parse_attachment("tenor:https://media.tenor.com/x.gif")
    assert isinstance(att, TenorAttachment)
    assert att.url() == "https://media.tenor.com/x.gif"


def test_all_image_kinds():
    for kind in ("image/png", "image/jpeg", "image/gif", "image/webp"):
        assert isinstance(parse_attachment(f"{kind}:r"), ImageAttachment)
    assert isinstance(parse_attachment("image/tiff:r"), FileAttachment)


def test_malformed_payload_is_empty():
    assert decode_attachment_list("[not json") == []
    assert decode_attachment_list('{"a": 1}') == []
    assert decode_attachment_list(None) == []
    assert decode_attachment_list("") == []
    assert parse_attachments("garbage") == []


def test_non_string_items_are_dropped():
    assert decode_attachment_list('["image/png:a", 3, null, "blob:b"]') == ["image/png:a", "blob:b"]


def test_payload_as_list_or_json_string():
    wire = '["image/png:a", "tenor:https://t/x"]'
    assert decode_attachment_list(wire) == decode_attachment_list(json.loads(wire))


def test_encode_is_a_json_array_string():
    encoded = encode_attachments(["image/png:a", parse_attachment("blob:b"), parse_attachment("tenor:https://t")])
    assert json.loads(encoded) == ["image/png:a", "blob:b", "tenor:https://t"]
    assert encode_attachments([]) == "[]"
