"""Domain enums: passcode purposes, account roles, verification failure reasons."""

from enum import StrEnum


class PasscodePurpose(StrEnum):
    """Flow a passcode was issued for. Stored as the string value."""

    ADMIN_LOGIN = "admin-login"
    LOGIN = "login"
    REGISTRATION = "registration"

    @property
    def issues_token(self) -> bool:
        """Whether a successful verification mints a session token."""
        return self is not PasscodePurpose.REGISTRATION


class AccountRole(StrEnum):
    """Role of an account. Only admins may send broadcasts."""

    MEMBER = "member"
    ADMIN = "admin"


class VerificationFailure(StrEnum):
    """Internal reason a verification failed. Never exposed to HTTP callers."""

    MISSING_INPUT = "MISSING_INPUT"
    NOT_FOUND = "NOT_FOUND"
    EXPIRED = "EXPIRED"
