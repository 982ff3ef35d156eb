"""Persistence repositories. Re-exports for dependency injection."""

from agora.infrastructure.persistence.repositories.account_repo import AccountRepository
from agora.infrastructure.persistence.repositories.base import BaseRepository
from agora.infrastructure.persistence.repositories.broadcast_repo import (
    BroadcastRepository,
    commit_broadcast,
)
from agora.infrastructure.persistence.repositories.passcode_repo import PasscodeStore

__all__ = [
    "AccountRepository",
    "BaseRepository",
    "BroadcastRepository",
    "commit_broadcast",
    "PasscodeStore",
]
