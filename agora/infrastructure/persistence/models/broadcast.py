"""Broadcast audit record, written once before any message is sent."""

from typing import Any

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agora.infrastructure.persistence.database import Base
from agora.infrastructure.persistence.models.mixins import CreatedAtMixin, CuidMixin


class BroadcastMessage(CuidMixin, CreatedAtMixin, Base):
    """Audit record of one broadcast. Table: broadcast_message.

    Stores attachment display names only; payload bytes are never persisted.
    """

    __tablename__ = "broadcast_message"

    subject: Mapped[str] = mapped_column(String(998), nullable=False)
    body_text: Mapped[str] = mapped_column(Text, nullable=False)
    media_links: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    attachment_names: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    recipients: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    sent_by: Mapped[str] = mapped_column(String(320), nullable=False)
