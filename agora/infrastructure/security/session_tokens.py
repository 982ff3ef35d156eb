"""Session tokens minted after a successful passcode verification.

Stateless HS256 JWTs (python-jose). There is no revocation list; the short
lifetime is the only limit on a leaked token.
"""

import hmac
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, cast

from jose import JWTError, jwt

from agora.core.config import Settings
from agora.domain.exceptions import InvalidTokenException
from agora.shared.utils.datetime import utc_now


@dataclass(frozen=True)
class SessionClaims:
    """Identity carried by a valid session token."""

    owner_id: str
    owner_address: str
    bypass: bool = False


@dataclass(frozen=True)
class TestModeAuth:
    """Fixed bypass token for local testing.

    Only constructed when TEST_AUTH_ENABLED is set; Settings refuses that
    flag in production.
    """

    __test__ = False  # not a pytest test class

    token: str
    owner_id: str
    owner_address: str

    def matches(self, candidate: str) -> bool:
        return bool(candidate) and hmac.compare_digest(
            candidate.encode(), self.token.encode()
        )


class SessionTokenIssuer:
    """Issue and validate signed, time-limited session tokens."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(hours=4),
        test_auth: TestModeAuth | None = None,
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key is required")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.lifetime = lifetime
        self._test_auth = test_auth

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionTokenIssuer":
        test_auth = None
        if settings.test_auth_enabled and settings.test_auth_token:
            test_auth = TestModeAuth(
                token=settings.test_auth_token.get_secret_value(),
                owner_id=settings.test_auth_owner_id,
                owner_address=settings.test_auth_owner_address,
            )
        return cls(
            secret_key=settings.secret_key.get_secret_value(),
            algorithm=settings.algorithm,
            lifetime=timedelta(minutes=settings.access_token_expire_minutes),
            test_auth=test_auth,
        )

    def issue(self, owner_id: str, owner_address: str) -> str:
        """Return a signed token for the owner, valid for `lifetime`."""
        issued_at = utc_now()
        claims: dict[str, Any] = {
            "sub": owner_id,
            "email": owner_address,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.lifetime).timestamp()),
        }
        return cast(str, jwt.encode(claims, self._secret_key, algorithm=self._algorithm))

    def validate(self, token: str | None) -> SessionClaims:
        """Decode and verify a token.

        Raises:
            InvalidTokenException: If the token is absent, malformed, badly
                signed, expired, or missing the sub/exp claims.
        """
        if not token:
            raise InvalidTokenException("Missing token")
        if self._test_auth is not None and self._test_auth.matches(token):
            return SessionClaims(
                owner_id=self._test_auth.owner_id,
                owner_address=self._test_auth.owner_address,
                bypass=True,
            )
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require_exp": True, "require_sub": True},
            )
        except JWTError as e:
            raise InvalidTokenException() from e
        owner_id = payload.get("sub")
        if not isinstance(owner_id, str) or not owner_id:
            raise InvalidTokenException()
        return SessionClaims(owner_id=owner_id, owner_address=str(payload.get("email") or ""))
