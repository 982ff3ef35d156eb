"""Account ORM model. Email is the single canonical identifier."""

from sqlalchemy import Boolean, String, false, true
from sqlalchemy.orm import Mapped, mapped_column

from agora.domain.enums import AccountRole
from agora.infrastructure.persistence.database import Base
from agora.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class Account(CuidMixin, TimestampMixin, Base):
    """Community member or admin. Table: account. Email stored lowercased, unique."""

    __tablename__ = "account"

    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    role: Mapped[str] = mapped_column(
        String(16), nullable=False, default=AccountRole.MEMBER.value
    )
    is_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )

    @property
    def is_admin(self) -> bool:
        return self.role == AccountRole.ADMIN
