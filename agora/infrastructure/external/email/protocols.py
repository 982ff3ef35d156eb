"""Outbound mail protocols and data structures (transport-agnostic)."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class MailAttachment:
    """Attachment in the form the mailer accepts.

    `content` is raw bytes, a base64 string (encoding="base64"), or None for a
    display-only entry that is listed in the body but not attached.
    """

    filename: str
    content: bytes | str | None = None
    content_type: str | None = None
    encoding: str | None = None

    @property
    def has_payload(self) -> bool:
        return self.content is not None and len(self.content) > 0


@dataclass(frozen=True)
class SendReceipt:
    """Relay acknowledgement for one accepted message."""

    message_id: str


class IMailer(Protocol):
    """Mail relay interface (DIP). SmtpMailer is the production implementation."""

    def check_configured(self) -> None:
        """Raise ConfigurationException when host or sender is missing. No I/O."""
        ...

    async def ensure_ready(self) -> None:
        """Probe relay connectivity once; raise ConfigurationException on failure."""
        ...

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        attachments: list[MailAttachment] | None = None,
        text: str | None = None,
    ) -> SendReceipt:
        """Send one message. Raises InvalidRecipientException or DeliveryException."""
        ...
