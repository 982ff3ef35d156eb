"""Request context management using contextvars.

Async-safe storage for request-scoped data: the request ID (set by
RequestIDMiddleware, read by the logging filter) and the authenticated
owner (set by the broadcast auth dependency).
"""

from contextvars import ContextVar
from dataclasses import dataclass

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)
_current_owner_id: ContextVar[str | None] = ContextVar("current_owner_id", default=None)
_current_owner_address: ContextVar[str | None] = ContextVar(
    "current_owner_address", default=None
)


@dataclass(frozen=True)
class OwnerContext:
    """Immutable snapshot of the authenticated owner for this request."""

    owner_id: str | None
    owner_address: str | None


def set_request_id(request_id: str | None) -> None:
    _request_id.set(request_id)


def get_request_id() -> str | None:
    """Return the current request ID, or None outside a request."""
    return _request_id.get()


def set_current_owner(owner_id: str, owner_address: str) -> None:
    """Set the authenticated owner. Call after the session token has been validated."""
    if not owner_id:
        raise ValueError("owner_id is required")
    _current_owner_id.set(owner_id)
    _current_owner_address.set(owner_address)


def clear_current_owner() -> None:
    _current_owner_id.set(None)
    _current_owner_address.set(None)


def get_owner_context() -> OwnerContext:
    """Return a snapshot of the current owner context."""
    return OwnerContext(
        owner_id=_current_owner_id.get(),
        owner_address=_current_owner_address.get(),
    )
