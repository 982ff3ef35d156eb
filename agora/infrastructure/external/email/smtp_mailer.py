"""SMTP mail relay client.

smtplib is blocking, so every network round trip runs in a worker thread via
asyncio.to_thread. One connection is opened per message; broadcasts send
sequentially so this never fans out.
"""

import asyncio
import base64
import binascii
import mimetypes
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr, make_msgid

from agora.core.config import Settings
from agora.domain.exceptions import (
    ConfigurationException,
    DeliveryException,
    InvalidRecipientException,
)
from agora.infrastructure.external.email.protocols import MailAttachment, SendReceipt
from agora.shared.telemetry.logging import get_logger, mask_address
from agora.shared.telemetry.tracing import traced
from agora.shared.utils.sanitization import InputNormalizer

logger = get_logger(__name__)

IMPLICIT_TLS_PORT = 465


class SmtpMailer:
    """Send HTML mail through an SMTP relay.

    The first call to ensure_ready() probes the relay (connect, TLS, login,
    NOOP). The result is remembered for the lifetime of the instance: the
    API builds one mailer per request, so a broadcast batch probes once and
    every later send fails fast if the relay was unreachable.
    """

    def __init__(
        self,
        host: str | None,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        from_address: str | None = None,
        from_name: str = "Agora",
        timeout: float = 10.0,
        use_ssl: bool | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_address = from_address
        self.from_name = from_name
        self.timeout = timeout
        self.use_ssl = port == IMPLICIT_TLS_PORT if use_ssl is None else use_ssl
        self._ready = False
        self._probe_error: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpMailer":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=(
                settings.smtp_password.get_secret_value()
                if settings.smtp_password
                else None
            ),
            from_address=settings.smtp_from_address,
            from_name=settings.smtp_from_name,
            timeout=settings.smtp_timeout_seconds,
            use_ssl=settings.smtp_use_ssl,
        )

    def check_configured(self) -> None:
        if not self.host:
            raise ConfigurationException("Mail relay host is not configured (SMTP_HOST)")
        if not self.from_address:
            raise ConfigurationException(
                "Sender address is not configured (SMTP_FROM_ADDRESS)"
            )

    def _connect(self) -> smtplib.SMTP:
        """Open an authenticated connection. Caller closes it."""
        context = ssl.create_default_context()
        client: smtplib.SMTP
        if self.use_ssl:
            client = smtplib.SMTP_SSL(
                self.host, self.port, timeout=self.timeout, context=context
            )
        else:
            client = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            client.ehlo()
            if not self.use_ssl and client.has_extn("starttls"):
                client.starttls(context=context)
                client.ehlo()
            if self.username and self.password:
                client.login(self.username, self.password)
        except BaseException:
            client.close()
            raise
        return client

    def _probe(self) -> None:
        with self._connect() as client:
            client.noop()

    async def ensure_ready(self) -> None:
        """Verify the relay accepts connections; cached per instance.

        Raises:
            ConfigurationException: If settings are incomplete or the relay
                cannot be reached or authenticated against.
        """
        self.check_configured()
        if self._ready:
            return
        if self._probe_error is not None:
            raise ConfigurationException(self._probe_error)
        try:
            await asyncio.to_thread(self._probe)
        except (smtplib.SMTPException, OSError) as e:
            self._probe_error = f"Mail relay unavailable: {str(e) or type(e).__name__}"
            logger.error("SMTP probe failed for %s:%s: %s", self.host, self.port, e)
            raise ConfigurationException(self._probe_error) from e
        self._ready = True
        logger.debug("SMTP relay %s:%s ready", self.host, self.port)

    def _build_message(
        self,
        to: str,
        subject: str,
        html: str,
        attachments: list[MailAttachment] | None,
        text: str | None,
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = formataddr((self.from_name, self.from_address or ""))
        msg["To"] = to
        domain = (self.from_address or "").partition("@")[2] or None
        msg["Message-ID"] = make_msgid(domain=domain)
        if text:
            msg.set_content(text)
            msg.add_alternative(html, subtype="html")
        else:
            msg.set_content(html, subtype="html")

        for attachment in attachments or []:
            if not attachment.has_payload:
                continue
            payload = attachment.content
            if isinstance(payload, str):
                try:
                    payload = base64.b64decode("".join(payload.split()), validate=True)
                except (binascii.Error, ValueError) as e:
                    raise DeliveryException(
                        to, f"attachment {attachment.filename!r} is not valid base64"
                    ) from e
            content_type = (
                attachment.content_type
                or mimetypes.guess_type(attachment.filename)[0]
                or "application/octet-stream"
            )
            maintype, _, subtype = content_type.partition("/")
            msg.add_attachment(
                payload,
                maintype=maintype or "application",
                subtype=subtype or "octet-stream",
                filename=attachment.filename,
            )
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        with self._connect() as client:
            client.send_message(msg)

    @traced("mailer.send")
    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        attachments: list[MailAttachment] | None = None,
        text: str | None = None,
    ) -> SendReceipt:
        """Send one message and return the relay receipt.

        Raises:
            InvalidRecipientException: If `to` is not an address (no I/O done).
            ConfigurationException: If the relay probe failed.
            DeliveryException: If the relay rejects the message or the
                connection fails or times out.
        """
        if not InputNormalizer.looks_like_address(to):
            raise InvalidRecipientException(to)
        await self.ensure_ready()
        msg = self._build_message(to, subject, html, attachments, text)
        try:
            await asyncio.to_thread(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("SMTP send to %s failed: %s", mask_address(to), e)
            raise DeliveryException(to, str(e) or type(e).__name__) from e
        logger.info("Mail sent to %s", mask_address(to))
        return SendReceipt(message_id=str(msg["Message-ID"]))
