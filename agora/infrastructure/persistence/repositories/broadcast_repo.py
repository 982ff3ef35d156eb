"""Broadcast audit repository."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agora.domain.exceptions import StorageUnavailableException
from agora.infrastructure.persistence.database import STORAGE_ERRORS
from agora.infrastructure.persistence.models.broadcast import BroadcastMessage
from agora.infrastructure.persistence.repositories.base import BaseRepository


class BroadcastRepository(BaseRepository[BroadcastMessage]):
    """Creates the audit record written before a broadcast is sent."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, BroadcastMessage)

    async def create_message(
        self,
        *,
        subject: str,
        body_text: str,
        recipients: Sequence[str],
        sent_by: str,
        media_links: Sequence[str] = (),
        attachment_names: Sequence[str] = (),
    ) -> BroadcastMessage:
        return await self.create(
            BroadcastMessage(
                subject=subject,
                body_text=body_text,
                recipients=list(recipients),
                media_links=list(media_links),
                attachment_names=list(attachment_names),
                sent_by=sent_by,
            )
        )


async def commit_broadcast(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    subject: str,
    body_text: str,
    recipients: Sequence[str],
    sent_by: str,
    media_links: Sequence[str] = (),
    attachment_names: Sequence[str] = (),
) -> BroadcastMessage:
    """Write the audit record in its own transaction and commit it.

    The record is durable when this returns, whatever happens to the
    caller's request transaction afterwards.
    """
    try:
        async with session_factory() as session:
            async with session.begin():
                return await BroadcastRepository(session).create_message(
                    subject=subject,
                    body_text=body_text,
                    recipients=recipients,
                    sent_by=sent_by,
                    media_links=media_links,
                    attachment_names=attachment_names,
                )
    except STORAGE_ERRORS as e:
        raise StorageUnavailableException() from e
