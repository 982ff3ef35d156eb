"""DTOs for the OTP request and verify flows (no dependency on ORM)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class IssuedCode:
    """Result of a successful code request. The code itself is never returned."""

    owner: str
    purpose: str
    expires_in: int


@dataclass(frozen=True)
class VerifiedOwner:
    """Owner confirmed by a passcode; `token` is None for registration."""

    owner_id: str
    owner_address: str
    name: str
    role: str
    is_verified: bool
    token: str | None = None
