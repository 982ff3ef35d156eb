"""Outbound email: protocols, SMTP mailer, attachment handling, templates."""

from agora.infrastructure.external.email.attachments import normalize_attachment
from agora.infrastructure.external.email.protocols import (
    IMailer,
    MailAttachment,
    SendReceipt,
)
from agora.infrastructure.external.email.smtp_mailer import SmtpMailer
from agora.infrastructure.external.email.templates import (
    passcode_subject,
    render_broadcast_email,
    render_passcode_email,
)

__all__ = [
    "IMailer",
    "MailAttachment",
    "SendReceipt",
    "SmtpMailer",
    "normalize_attachment",
    "passcode_subject",
    "render_broadcast_email",
    "render_passcode_email",
]
