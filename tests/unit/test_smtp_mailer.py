"""Tests for SmtpMailer (network calls replaced on the instance)."""

import smtplib
from email.message import EmailMessage

import pytest

from agora.domain.exceptions import (
    ConfigurationException,
    DeliveryException,
    InvalidRecipientException,
)
from agora.infrastructure.external.email.attachments import normalize_attachment
from agora.infrastructure.external.email.smtp_mailer import SmtpMailer


@pytest.fixture
def mailer() -> SmtpMailer:
    m = SmtpMailer(host="smtp.example.com", from_address="noreply@example.com", from_name="Agora")
    m.probes = 0  # type: ignore[attr-defined]
    m.delivered = []  # type: ignore[attr-defined]

    def probe() -> None:
        m.probes += 1  # type: ignore[attr-defined]

    def deliver(msg: EmailMessage) -> None:
        m.delivered.append(msg)  # type: ignore[attr-defined]

    m._probe = probe  # type: ignore[method-assign]
    m._deliver = deliver  # type: ignore[method-assign]
    return m


def test_check_configured_requires_host_and_sender() -> None:
    with pytest.raises(ConfigurationException):
        SmtpMailer(host=None, from_address="noreply@example.com").check_configured()
    with pytest.raises(ConfigurationException):
        SmtpMailer(host="smtp.example.com").check_configured()


def test_implicit_tls_on_port_465() -> None:
    assert SmtpMailer(host="h", port=465).use_ssl is True
    assert SmtpMailer(host="h", port=587).use_ssl is False
    assert SmtpMailer(host="h", port=2525, use_ssl=True).use_ssl is True


async def test_send_rejects_recipient_without_at_before_io(mailer: SmtpMailer) -> None:
    with pytest.raises(InvalidRecipientException):
        await mailer.send("not-an-address", "Hi", "<p>Hi</p>")
    assert mailer.probes == 0  # type: ignore[attr-defined]


async def test_send_builds_message_and_returns_message_id(mailer: SmtpMailer) -> None:
    receipt = await mailer.send("ada@example.com", "Hello", "<p>Hello</p>", text="Hello")
    (msg,) = mailer.delivered  # type: ignore[attr-defined]
    assert msg["To"] == "ada@example.com"
    assert msg["Subject"] == "Hello"
    assert "noreply@example.com" in msg["From"]
    assert receipt.message_id == msg["Message-ID"]
    assert receipt.message_id.endswith("@example.com>")


async def test_probe_runs_once_per_instance(mailer: SmtpMailer) -> None:
    await mailer.send("a@example.com", "S", "<p>x</p>")
    await mailer.send("b@example.com", "S", "<p>x</p>")
    assert mailer.probes == 1  # type: ignore[attr-defined]
    assert len(mailer.delivered) == 2  # type: ignore[attr-defined]


async def test_probe_failure_is_cached_and_fails_fast(mailer: SmtpMailer) -> None:
    calls = []

    def refused() -> None:
        calls.append(1)
        raise ConnectionRefusedError("connection refused")

    mailer._probe = refused  # type: ignore[method-assign]
    with pytest.raises(ConfigurationException):
        await mailer.send("a@example.com", "S", "<p>x</p>")
    with pytest.raises(ConfigurationException):
        await mailer.send("b@example.com", "S", "<p>x</p>")
    assert len(calls) == 1


async def test_relay_rejection_becomes_delivery_exception(mailer: SmtpMailer) -> None:
    def reject(msg: EmailMessage) -> None:
        raise smtplib.SMTPRecipientsRefused({"a@example.com": (550, b"mailbox unavailable")})

    mailer._deliver = reject  # type: ignore[method-assign]
    with pytest.raises(DeliveryException) as exc_info:
        await mailer.send("a@example.com", "S", "<p>x</p>")
    assert exc_info.value.details["recipient"] == "a@example.com"


async def test_timeout_becomes_delivery_exception(mailer: SmtpMailer) -> None:
    def slow(msg: EmailMessage) -> None:
        raise TimeoutError("timed out")

    mailer._deliver = slow  # type: ignore[method-assign]
    with pytest.raises(DeliveryException) as exc_info:
        await mailer.send("a@example.com", "S", "<p>x</p>")
    assert exc_info.value.reason == "timed out"


async def test_attachments_are_decoded_before_transport(mailer: SmtpMailer) -> None:
    attachments = [
        normalize_attachment("pixel.png", "data:image/png;base64,QUJD"),
        normalize_attachment("plain.txt", "QUJD", "text/plain"),
        normalize_attachment("listed-only.pdf", None),
    ]
    await mailer.send("a@example.com", "S", "<p>x</p>", attachments)
    (msg,) = mailer.delivered  # type: ignore[attr-defined]
    parts = {part.get_filename(): part for part in msg.iter_attachments()}
    assert set(parts) == {"pixel.png", "plain.txt"}
    assert parts["pixel.png"].get_content() == b"ABC"
    assert parts["pixel.png"].get_content_type() == "image/png"
    assert parts["plain.txt"].get_payload(decode=True) == b"ABC"
