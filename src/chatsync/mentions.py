"""
MentionCodec — raw author text <-> display-safe text with positional tokens.

Recognized syntaxes, scanned left to right:

- ``@[Display Name](userId)``  annotated user mention
- ``#[Display Name](channelId)``  annotated channel mention (numeric id)
- ``<@userId>``  legacy user mention
- ``<#channelId>``  legacy channel mention

Each match becomes ``__mention_<index>__`` in the encoded text and an entry
at ``<index>`` in the reference table returned alongside it. The table
belongs to one ``EncodedContent`` value; nothing is shared between calls.

Any ``__mention_`` already present in the author's text is captured as a
``TEXT`` reference, so the only token prefixes left in the encoded text are
ours and the text decodes back verbatim.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

MENTION_PATTERN = re.compile(
    r"@\[(?P<user_label>[^\]]+)\]\((?P<user_id>[A-Za-z0-9_-]+)\)"
    r"|#\[(?P<channel_label>[^\]]+)\]\((?P<channel_id>[0-9]+)\)"
    r"|<@(?P<legacy_user>[A-Za-z0-9_-]+)>"
    r"|<#(?P<legacy_channel>[0-9]+)>"
    r"|(?P<literal>__mention_)"
)
PLACEHOLDER_PATTERN = re.compile(r"__mention_([0-9]+)__")


class MentionKind(str, Enum):
    USER = "user"
    CHANNEL = "channel"
    TEXT = "text"


@dataclass(frozen=True)
class MentionRef:
    kind: MentionKind
    display_text: str
    target_id: str
    legacy: bool = False

    @property
    def source(self) -> str:
        """The raw syntax this reference was extracted from."""
        if self.kind == MentionKind.TEXT:
            return self.display_text
        if self.legacy:
            sigil = "@" if self.kind == MentionKind.USER else "#"
            return f"<{sigil}{self.target_id}>"
        sigil = "@" if self.kind == MentionKind.USER else "#"
        return f"{sigil}[{self.display_text}]({self.target_id})"


def placeholder(index: int) -> str:
    return f"__mention_{index}__"


def _append_text(parts: list, text: str) -> None:
    if not text:
        return
    if parts and isinstance(parts[-1], str):
        parts[-1] += text
    else:
        parts.append(text)


def _ref_from_match(match: re.Match) -> MentionRef:
    groups = match.groupdict()
    if groups["user_id"] is not None:
        return MentionRef(MentionKind.USER, groups["user_label"], groups["user_id"])
    if groups["channel_id"] is not None:
        return MentionRef(MentionKind.CHANNEL, groups["channel_label"], groups["channel_id"])
    if groups["legacy_user"] is not None:
        return MentionRef(MentionKind.USER, groups["legacy_user"], groups["legacy_user"], legacy=True)
    if groups["legacy_channel"] is not None:
        return MentionRef(MentionKind.CHANNEL, groups["legacy_channel"], groups["legacy_channel"], legacy=True)
    return MentionRef(MentionKind.TEXT, groups["literal"], "")


@dataclass(frozen=True)
class EncodedContent:
    text: str
    references: tuple[MentionRef, ...] = ()

    @property
    def mentions(self) -> tuple[MentionRef, ...]:
        return tuple(r for r in self.references if r.kind != MentionKind.TEXT)

    def segments(self) -> list[Union[str, MentionRef]]:
        """Split into plain text runs and resolved references, in order."""
        parts: list[Union[str, MentionRef]] = []
        pos = 0
        for match in PLACEHOLDER_PATTERN.finditer(self.text):
            index = int(match.group(1))
            if index >= len(self.references):
                continue
            ref = self.references[index]
            _append_text(parts, self.text[pos:match.start()])
            if ref.kind == MentionKind.TEXT:
                _append_text(parts, ref.source)
            else:
                parts.append(ref)
            pos = match.end()
        _append_text(parts, self.text[pos:])
        return parts

    def decode(self, render: Optional[Callable[[MentionRef], str]] = None) -> str:
        return decode(self, render)


def encode(content: str) -> EncodedContent:
    references: list[MentionRef] = []

    def _replace(match: re.Match) -> str:
        references.append(_ref_from_match(match))
        return placeholder(len(references) - 1)

    text = MENTION_PATTERN.sub(_replace, content)
    return EncodedContent(text=text, references=tuple(references))


def decode(encoded: EncodedContent, render: Optional[Callable[[MentionRef], str]] = None) -> str:
    """Substitute every token by index. The default renderer restores the source."""
    render = render or (lambda ref: ref.source)

    def _substitute(match: re.Match) -> str:
        index = int(match.group(1))
        if index >= len(encoded.references):
            return match.group(0)
        ref = encoded.references[index]
        if ref.kind == MentionKind.TEXT:
            return ref.source
        return render(ref)

    return PLACEHOLDER_PATTERN.sub(_substitute, encoded.text)
