"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions, the mailer, the token issuer
and the application services. Routes depend only on these; tests swap the
mailer through app.dependency_overrides[get_mailer].
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from agora.application.services.broadcast_dispatcher import BroadcastDispatcher
from agora.application.services.otp_service import OtpService
from agora.core.config import get_settings
from agora.domain.exceptions import AuthorizationException
from agora.infrastructure.external.email.protocols import IMailer
from agora.infrastructure.external.email.smtp_mailer import SmtpMailer
from agora.infrastructure.persistence.database import (
    get_db_transactional,
    get_session_factory,
)
from agora.infrastructure.persistence.repositories import (
    AccountRepository,
    PasscodeStore,
)
from agora.infrastructure.security.session_tokens import SessionClaims, SessionTokenIssuer
from agora.shared.context import set_current_owner
from agora.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def get_mailer() -> IMailer:
    """A fresh SMTP mailer per request, so the relay probe is cached per batch."""
    return SmtpMailer.from_settings(get_settings())


def get_token_issuer() -> SessionTokenIssuer:
    return SessionTokenIssuer.from_settings(get_settings())


async def get_account_repo(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> AccountRepository:
    return AccountRepository(db)


async def get_passcode_store(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> PasscodeStore:
    settings = get_settings()
    return PasscodeStore(
        db,
        ttl_seconds=settings.otp_ttl_seconds,
        code_length=settings.otp_length,
    )


async def get_otp_service(
    store: Annotated[PasscodeStore, Depends(get_passcode_store)],
    accounts: Annotated[AccountRepository, Depends(get_account_repo)],
    mailer: Annotated[IMailer, Depends(get_mailer)],
    tokens: Annotated[SessionTokenIssuer, Depends(get_token_issuer)],
) -> OtpService:
    settings = get_settings()
    return OtpService(
        store,
        accounts,
        mailer,
        tokens,
        allow_admin_self_register=settings.allow_admin_self_register,
        brand=settings.brand_name,
    )


async def get_broadcast_dispatcher(
    accounts: Annotated[AccountRepository, Depends(get_account_repo)],
    mailer: Annotated[IMailer, Depends(get_mailer)],
) -> BroadcastDispatcher:
    return BroadcastDispatcher(
        accounts,
        mailer,
        get_session_factory(),
        brand=get_settings().brand_name,
    )


class AdminAuthenticator:
    """Resolve a session token to an active admin.

    The token may come from the Authorization header or the request body,
    so routes call authenticate() after the body is parsed.
    """

    def __init__(self, tokens: SessionTokenIssuer, accounts: AccountRepository) -> None:
        self.tokens = tokens
        self.accounts = accounts

    async def authenticate(self, token: str | None) -> SessionClaims:
        """Return the claims of an admin token and bind the owner to the request context.

        Raises:
            InvalidTokenException: token missing, malformed, badly signed or expired (401).
            AuthorizationException: token owner is not an active admin (403).
        """
        claims = self.tokens.validate(token)
        if not claims.bypass:
            account = await self.accounts.get_by_id(claims.owner_id)
            if account is None or not account.is_active or not account.is_admin:
                logger.warning("Broadcast refused for non-admin owner %s", claims.owner_id)
                raise AuthorizationException("Admin access required")
        set_current_owner(claims.owner_id, claims.owner_address)
        return claims


async def get_admin_authenticator(
    tokens: Annotated[SessionTokenIssuer, Depends(get_token_issuer)],
    accounts: Annotated[AccountRepository, Depends(get_account_repo)],
) -> AdminAuthenticator:
    return AdminAuthenticator(tokens, accounts)
