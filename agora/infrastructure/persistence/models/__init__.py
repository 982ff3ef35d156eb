"""Persistence models: ORM entities and mixins."""

from agora.infrastructure.persistence.models.account import Account
from agora.infrastructure.persistence.models.broadcast import BroadcastMessage
from agora.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    TimestampMixin,
)
from agora.infrastructure.persistence.models.passcode import PasscodeRecord

__all__ = [
    "Account",
    "BroadcastMessage",
    "PasscodeRecord",
    "CuidMixin",
    "CreatedAtMixin",
    "TimestampMixin",
]
