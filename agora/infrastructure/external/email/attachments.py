"""Attachment payload normalization.

Clients send attachments as data URLs (what a browser FileReader produces),
bare base64 strings, raw bytes, or with no payload at all.
"""

import base64
import binascii
import re

from agora.domain.exceptions import ValidationException
from agora.infrastructure.external.email.protocols import MailAttachment

DATA_URL_PATTERN = re.compile(r"^data:([^;,]*)(?:;[^,]*)?;base64,(.*)$", re.DOTALL)


def _strict_b64decode(filename: str, payload: str) -> bytes:
    """Decode base64 (line breaks allowed), rejecting any other stray character."""
    try:
        return base64.b64decode("".join(payload.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationException(
            f"Attachment {filename!r} is not valid base64", field="attachments"
        ) from e


def normalize_attachment(
    name: str,
    content: bytes | str | None,
    content_type: str | None = None,
) -> MailAttachment:
    """Return a MailAttachment the mailer can send.

    Data URLs are decoded to bytes and their MIME type wins over
    `content_type`. Other strings must be valid base64 and are kept as
    base64 text. Empty or missing content yields a display-only attachment.

    Raises:
        ValidationException: If a data URL or a plain string carries invalid base64.
    """
    filename = (name or "").strip() or "attachment"
    if content is None or len(content) == 0:
        return MailAttachment(filename=filename, content_type=content_type)
    if isinstance(content, bytes):
        return MailAttachment(filename=filename, content=content, content_type=content_type)

    match = DATA_URL_PATTERN.match(content)
    if match is None:
        payload = "".join(content.split())
        _strict_b64decode(filename, payload)
        return MailAttachment(
            filename=filename,
            content=payload,
            content_type=content_type,
            encoding="base64",
        )
    mime, payload = match.groups()
    return MailAttachment(
        filename=filename,
        content=_strict_b64decode(filename, payload),
        content_type=mime or content_type,
    )
