import pytest

from chatsync.mentions import MentionKind, decode, encode, placeholder

ROUND_TRIP_CASES = [
    "",
    "plain text, no mentions",
    "hi @[Alice](alice_1) and @[Bob B](0xBOB)!",
    "see #[general](123) and #[random](456)",
    "legacy <@alice> in <#789>",
    "mixed @[A](a) <@b> #[c](1) <#2> end",
    "@[A](a)@[A](a)",
    "token lookalike __mention_0__ and __mention_7__",
    "__mention___mention_1__ @[X](x)",
    "unclosed @[Alice](alice and <@ bob>",
    "#[not numeric](abc) stays text",
]


@pytest.mark.parametrize("text", ROUND_TRIP_CASES)
def test_decode_restores_the_source(text):
    assert decode(encode(text)) == text


def test_encode_builds_a_positional_table():
    encoded = encode("hi @[Alice](u1), see #[general](42) or <@u2> <#7>")
    assert encoded.text == "hi __mention_0__, see __mention_1__ or __mention_2__ __mention_3__"
    kinds = [(r.kind, r.display_text, r.target_id, r.legacy) for r in encoded.references]
    assert kinds == [
        (MentionKind.USER, "Alice", "u1", False),
        (MentionKind.CHANNEL, "general", "42", False),
        (MentionKind.USER, "u2", "u2", True),
        (MentionKind.CHANNEL, "7", "7", True),
    ]


def test_each_encode_has_its_own_table():
    first = encode("@[A](a)")
    second = encode("@[B](b) @[C](c)")
    assert first.references[0].target_id == "a"
    assert [r.target_id for r in second.references] == ["b", "c"]
    assert decode(first) == "@[A](a)"


def test_custom_renderer():
    encoded = encode("ping @[Alice](u1) in #[dev](9)")
    rendered = decode(encoded, lambda ref: f"<{ref.kind.value}:{ref.target_id}>")
    assert rendered == "ping <user:u1> in <channel:9>"


def test_literal_token_text_is_not_a_mention():
    encoded = encode("__mention_0__ @[A](a)")
    assert [r.target_id for r in encoded.mentions] == ["a"]
    assert decode(encoded, lambda ref: "X") == "__mention_0__ X"


def test_segments():
    encoded = encode("a @[B](b) c __mention_ d")
    parts = encoded.segments()
    assert parts[0] == "a "
    assert parts[1].target_id == "b"
    assert parts[2] == " c __mention_ d"


def test_decoding_is_repeatable():
    encoded = encode("x <@y> z")
    assert encoded.decode() == encoded.decode() == "x <@y> z"


def test_placeholder_format():
    assert placeholder(3) == "__mention_3__"
