"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system are timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().
"""

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone (SQLite returns naive values)
    - If aware, converts to UTC

    Use at repository/persistence boundaries to normalize datetimes.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def expires_after(seconds: int, *, now: datetime | None = None) -> datetime:
    """Return the absolute UTC expiry `seconds` from now (or from `now`)."""
    return (now or utc_now()) + timedelta(seconds=seconds)


def is_expired(expires_at: datetime | None, *, now: datetime | None = None) -> bool:
    """True when expires_at is in the past. A missing expiry counts as expired."""
    if expires_at is None:
        return True
    return ensure_utc(expires_at) < (now or utc_now())
