"""
Attachment wire codec.

Each attachment is a string ``"<kind>:<referenceId>"``. ``<kind>`` is a
MIME-type-like tag (``image/png``) or a provider tag (``tenor``). A message
carries its attachments as a JSON-encoded array of such strings.

Parsing never raises: a malformed array is an empty list and an unknown
kind is a generic file reference.
"""

import json
import logging
from enum import Enum
from typing import Annotated, Any, Iterable, Literal, Union

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

IMAGE_KINDS = frozenset({"image/png", "image/jpeg", "image/gif", "image/webp"})
TENOR_KIND = "tenor"
DEFAULT_MEDIA_GATEWAY = "https://arweave.net"


class AttachmentKind(str, Enum):
    IMAGE = "image"
    TENOR = "tenor"
    FILE = "file"


class ImageAttachment(BaseModel):
    """Stored image; ``reference_id`` is a transaction id on the media gateway."""
    kind: Literal[AttachmentKind.IMAGE] = AttachmentKind.IMAGE
    mime_type: str
    reference_id: str

    def url(self, gateway: str = DEFAULT_MEDIA_GATEWAY) -> str:
        return f"{gateway.rstrip('/')}/{self.reference_id}"

    @property
    def wire(self) -> str:
        return f"{self.mime_type}:{self.reference_id}"


class TenorAttachment(BaseModel):
    """Animated media; the reference is already a full URL."""
    kind: Literal[AttachmentKind.TENOR] = AttachmentKind.TENOR
    reference_id: str

    def url(self, gateway: str = DEFAULT_MEDIA_GATEWAY) -> str:
        return self.reference_id

    @property
    def wire(self) -> str:
        return f"{TENOR_KIND}:{self.reference_id}"


class FileAttachment(BaseModel):
    """Anything we do not know how to preview. Rendered as a copyable id."""
    kind: Literal[AttachmentKind.FILE] = AttachmentKind.FILE
    tag: str = ""
    reference_id: str

    @property
    def copyable_id(self) -> str:
        return self.reference_id

    @property
    def wire(self) -> str:
        return f"{self.tag}:{self.reference_id}" if self.tag else self.reference_id


Attachment = Annotated[
    Union[ImageAttachment, TenorAttachment, FileAttachment],
    Field(discriminator="kind"),
]


def parse_attachment(raw: str) -> Union[ImageAttachment, TenorAttachment, FileAttachment]:
    """Parse one ``"<kind>:<referenceId>"`` string.

    Only the first colon separates kind from reference, so tenor URLs
    (``tenor:https://...``) keep their scheme.
    """
    tag, sep, reference_id = raw.partition(":")
    if not sep:
        return FileAttachment(reference_id=raw)
    if tag in IMAGE_KINDS:
        return ImageAttachment(mime_type=tag, reference_id=reference_id)
    if tag == TENOR_KIND:
        return TenorAttachment(reference_id=reference_id)
    return FileAttachment(tag=tag, reference_id=reference_id)


def decode_attachment_list(payload: Any) -> list[str]:
    """Turn the wire payload (JSON string or already-decoded list) into strings."""
    if payload is None or payload == "":
        return []
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except ValueError:
            logger.debug("Malformed attachment payload: %.80r", payload)
            return []
    if not isinstance(payload, (list, tuple)):
        logger.debug("Attachment payload is not an array: %r", type(payload).__name__)
        return []
    return [item for item in payload if isinstance(item, str)]


def parse_attachments(payload: Any) -> list[Union[ImageAttachment, TenorAttachment, FileAttachment]]:
    return [parse_attachment(raw) for raw in decode_attachment_list(payload)]


def encode_attachments(items: Iterable[Union[str, ImageAttachment, TenorAttachment, FileAttachment]]) -> str:
    """Encode attachments for the wire as a JSON array string."""
    return json.dumps([item if isinstance(item, str) else item.wire for item in items])
