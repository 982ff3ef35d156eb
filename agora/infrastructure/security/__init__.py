"""Security: session token issuing and validation."""

from agora.infrastructure.security.session_tokens import (
    SessionClaims,
    SessionTokenIssuer,
    TestModeAuth,
)

__all__ = [
    "SessionClaims",
    "SessionTokenIssuer",
    "TestModeAuth",
]
