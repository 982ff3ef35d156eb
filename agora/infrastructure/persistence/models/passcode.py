"""One-time passcode record. At most one row per (owner, purpose)."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, UniqueConstraint, false
from sqlalchemy.orm import Mapped, mapped_column

from agora.infrastructure.persistence.database import Base
from agora.infrastructure.persistence.models.mixins import CreatedAtMixin, CuidMixin


class PasscodeRecord(CuidMixin, CreatedAtMixin, Base):
    """Passcode issued to an owner for one purpose. Table: passcode.

    Re-issuing for the same (owner, purpose) replaces the row in place, so
    an older code can never be verified once a newer one exists.
    """

    __tablename__ = "passcode"

    owner: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(16), nullable=False)
    purpose: Mapped[str] = mapped_column(String(32), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    used: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    __table_args__ = (
        UniqueConstraint("owner", "purpose", name="uq_passcode_owner_purpose"),
    )
