"""Broadcast dispatcher: resolve recipients, persist the audit record, send one by one."""

from __future__ import annotations

from collections.abc import Sequence
from urllib.parse import urlsplit

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agora.application.dtos.broadcast import (
    BroadcastAttachmentInput,
    DispatchReport,
    DispatchResult,
)
from agora.domain.exceptions import (
    AgoraException,
    DeliveryException,
    MissingInputException,
    NoRecipientsException,
    ValidationException,
)
from agora.infrastructure.external.email.attachments import normalize_attachment
from agora.infrastructure.external.email.protocols import IMailer, MailAttachment
from agora.infrastructure.external.email.templates import render_broadcast_email
from agora.infrastructure.persistence.repositories.account_repo import AccountRepository
from agora.infrastructure.persistence.repositories.broadcast_repo import commit_broadcast
from agora.shared.telemetry.logging import get_logger, mask_address
from agora.shared.telemetry.tracing import add_span_attributes, traced
from agora.shared.utils.sanitization import InputNormalizer, normalize_address

logger = get_logger(__name__)

INVALID_RECIPIENT_ERROR = "invalid recipient"
MEDIA_LINK_SCHEMES = frozenset({"http", "https"})


def dedupe_recipients(recipients: Sequence[str | None]) -> list[str]:
    """Trim and lowercase, keep the first occurrence of each address.

    Blank or missing entries collapse into a single "" entry, which the
    dispatcher reports as an invalid recipient.
    """
    seen: set[str] = set()
    resolved: list[str] = []
    for raw in recipients:
        address = normalize_address(raw)
        if address not in seen:
            seen.add(address)
            resolved.append(address)
    return resolved


def clean_media_links(media_links: Sequence[str | None] | None) -> list[str]:
    """Trim links and drop blanks. Only absolute http(s) URLs are accepted.

    Raises:
        ValidationException: A link has another scheme (javascript:, data:, ...).
    """
    links: list[str] = []
    for raw in media_links or []:
        link = (raw or "").strip()
        if not link:
            continue
        parts = urlsplit(link)
        if parts.scheme.lower() not in MEDIA_LINK_SCHEMES or not parts.netloc:
            raise ValidationException("Media links must be http(s) URLs", field="media_links")
        links.append(link)
    return links


class BroadcastDispatcher:
    """Send an admin broadcast to every resolved recipient.

    The audit record is committed in its own transaction before the first
    send, so it stays on record even if the batch is interrupted. Once it
    exists the call always returns a report, and individual failures only
    show up as unsuccessful entries in it.
    """

    def __init__(
        self,
        accounts: AccountRepository,
        mailer: IMailer,
        audit_sessions: async_sessionmaker[AsyncSession],
        brand: str = "Agora Community",
    ) -> None:
        self.accounts = accounts
        self.mailer = mailer
        self.audit_sessions = audit_sessions
        self.brand = brand

    async def resolve_recipients(self, recipients: Sequence[str | None] | None) -> list[str]:
        """Explicit recipients when given, else every active account, sorted.

        The fallback applies only when the list is omitted or empty; a list of
        blank entries is kept as given.
        """
        if recipients:
            return dedupe_recipients(recipients)
        return await self.accounts.list_active_emails()

    @traced("broadcast.dispatch")
    async def dispatch(
        self,
        subject: str,
        body_text: str,
        sent_by: str,
        recipients: Sequence[str | None] | None = None,
        media_links: Sequence[str] | None = None,
        attachments: Sequence[BroadcastAttachmentInput] | None = None,
    ) -> DispatchReport:
        """Send the broadcast and return per-recipient results in send order.

        Raises:
            MissingInputException: Subject or body is empty.
            NoRecipientsException: Nothing to send to; no record is written.
            ValidationException: An attachment payload is not valid base64, or a
                media link is not an http(s) URL.
        """
        if not (subject or "").strip():
            raise MissingInputException("subject")
        if not (body_text or "").strip():
            raise MissingInputException("content")

        targets = await self.resolve_recipients(recipients)
        if not targets:
            raise NoRecipientsException()

        names = await self.accounts.get_display_names(targets)
        links = clean_media_links(media_links)
        mail_attachments: list[MailAttachment] = [
            normalize_attachment(a.name, a.content, a.content_type)
            for a in attachments or []
        ]
        attachment_names = [a.filename for a in mail_attachments]

        record = await commit_broadcast(
            self.audit_sessions,
            subject=subject,
            body_text=body_text,
            recipients=targets,
            sent_by=sent_by,
            media_links=links,
            attachment_names=attachment_names,
        )
        add_span_attributes(broadcast_id=record.id, recipient_count=len(targets))
        logger.info(
            "Broadcast %s saved by %s for %d recipient(s)", record.id, sent_by, len(targets)
        )

        report = DispatchReport(broadcast_id=record.id, recipients=targets)
        for to in targets:
            report.results.append(
                await self._send_one(
                    to,
                    subject,
                    body_text,
                    recipient_name=names.get(to) or InputNormalizer.local_part(to),
                    media_links=links,
                    attachments=mail_attachments,
                    attachment_names=attachment_names,
                )
            )

        logger.info(
            "Broadcast %s processed: %d sent, %d failed",
            record.id,
            len(report.results) - report.failed_count,
            report.failed_count,
        )
        return report

    async def _send_one(
        self,
        to: str,
        subject: str,
        body_text: str,
        *,
        recipient_name: str,
        media_links: list[str],
        attachments: list[MailAttachment],
        attachment_names: list[str],
    ) -> DispatchResult:
        if not InputNormalizer.looks_like_address(to):
            logger.warning("Skipping invalid recipient %r", to)
            return DispatchResult(recipient=to, success=False, error=INVALID_RECIPIENT_ERROR)
        html = render_broadcast_email(
            body_text,
            recipient_name=recipient_name,
            media_links=media_links,
            attachments=attachment_names,
            brand=self.brand,
        )
        try:
            receipt = await self.mailer.send(to, subject, html, attachments or None)
        except DeliveryException as e:
            return DispatchResult(recipient=to, success=False, error=e.reason)
        except AgoraException as e:
            logger.warning("Send to %s failed: %s", mask_address(to), e.message)
            return DispatchResult(recipient=to, success=False, error=e.message)
        except Exception as e:
            logger.exception("Unexpected error sending to %s", mask_address(to))
            return DispatchResult(recipient=to, success=False, error=str(e) or type(e).__name__)
        return DispatchResult(recipient=to, success=True, message_id=receipt.message_id)
