"""OTP flows: request a code by email, verify it, and mint a session token."""

from __future__ import annotations

from agora.application.dtos.otp import IssuedCode, VerifiedOwner
from agora.application.services.passcode_verifier import PasscodeVerifier
from agora.domain.enums import AccountRole, PasscodePurpose
from agora.domain.exceptions import (
    AccountNotFoundException,
    AuthorizationException,
    MissingInputException,
    ValidationException,
)
from agora.infrastructure.external.email.protocols import IMailer
from agora.infrastructure.external.email.templates import (
    passcode_subject,
    render_passcode_email,
)
from agora.infrastructure.persistence.models.account import Account
from agora.infrastructure.persistence.repositories.account_repo import AccountRepository
from agora.infrastructure.persistence.repositories.passcode_repo import PasscodeStore
from agora.infrastructure.security.session_tokens import SessionTokenIssuer
from agora.shared.telemetry.logging import get_logger, mask_address
from agora.shared.telemetry.tracing import traced
from agora.shared.utils.sanitization import validate_address

logger = get_logger(__name__)

DEFAULT_ADMIN_NAME = "Admin"


class OtpService:
    """Orchestrates account checks, the passcode store, the mailer and tokens.

    Which account is required depends on the purpose:
    - admin-login: an admin account (created on the fly only when
      allow_admin_self_register is set).
    - login: any active account.
    - registration: a name; an unverified member account is created if none
      exists and is marked verified once the code checks out.
    """

    def __init__(
        self,
        store: PasscodeStore,
        accounts: AccountRepository,
        mailer: IMailer,
        tokens: SessionTokenIssuer,
        *,
        allow_admin_self_register: bool = False,
        brand: str = "Agora Community",
    ) -> None:
        self.store = store
        self.accounts = accounts
        self.mailer = mailer
        self.tokens = tokens
        self.verifier = PasscodeVerifier(store)
        self.allow_admin_self_register = allow_admin_self_register
        self.brand = brand

    async def _account_for_request(
        self, address: str, purpose: PasscodePurpose, name: str | None
    ) -> Account:
        account = await self.accounts.get_by_email(address)
        if purpose is PasscodePurpose.ADMIN_LOGIN:
            if account is not None and account.is_admin and account.is_active:
                return account
            if account is None and self.allow_admin_self_register:
                logger.info("Bootstrapping admin account for %s", mask_address(address))
                return await self.accounts.create_account(
                    address, name or DEFAULT_ADMIN_NAME, AccountRole.ADMIN
                )
            raise AccountNotFoundException()
        if purpose is PasscodePurpose.LOGIN:
            if account is None or not account.is_active:
                raise AccountNotFoundException()
            return account
        if not (name or "").strip():
            raise MissingInputException("name")
        if account is None:
            account = await self.accounts.create_account(address, name or "")
        return account

    @traced("otp.request_code")
    async def request_code(
        self,
        owner: str | None,
        purpose: PasscodePurpose | str = PasscodePurpose.ADMIN_LOGIN,
        name: str | None = None,
    ) -> IssuedCode:
        """Issue a fresh code for (owner, purpose) and email it.

        Raises:
            MissingInputException: owner (or name, for registration) is empty.
            ValidationException: owner is not a valid email address.
            AccountNotFoundException: no suitable account for the purpose.
            ConfigurationException: the mail relay is unconfigured or unreachable.
            DeliveryException: the relay refused the message.
        """
        if not (owner or "").strip():
            raise MissingInputException("owner")
        try:
            address = validate_address(owner or "")
        except ValueError as e:
            raise ValidationException("Invalid email address", field="owner") from e
        purpose = PasscodePurpose(purpose)

        account = await self._account_for_request(address, purpose, name)
        self.mailer.check_configured()
        record = await self.store.issue(address, purpose)
        await self.mailer.ensure_ready()

        ttl_minutes = max(1, self.store.ttl_seconds // 60)
        display_name = (name or "").strip() or account.name
        html = render_passcode_email(
            record.code, name=display_name, ttl_minutes=ttl_minutes, brand=self.brand
        )
        text = (
            f"Your verification code is {record.code}. "
            f"It expires in {ttl_minutes} minutes."
        )
        await self.mailer.send(address, passcode_subject(purpose), html, text=text)
        logger.info("Passcode (%s) sent to %s", purpose, mask_address(address))
        return IssuedCode(owner=address, purpose=purpose.value, expires_in=self.store.ttl_seconds)

    @traced("otp.verify_code")
    async def verify_code(
        self,
        owner: str | None,
        code: str | int | None,
        purpose: PasscodePurpose | str = PasscodePurpose.ADMIN_LOGIN,
    ) -> VerifiedOwner | None:
        """Verify a submitted code. Returns None when it is rejected.

        Rejection never raises so the caller can commit the verifier's lazy
        cleanup of an expired record. The reason is only logged.

        Raises:
            AccountNotFoundException: the code was valid but the account is gone
                or has been deactivated since the code was requested.
            AuthorizationException: admin-login code for a non-admin account.
        """
        purpose = PasscodePurpose(purpose)
        outcome = await self.verifier.verify(owner, code, purpose)
        if not outcome.ok or outcome.record is None:
            logger.info(
                "Verification (%s) failed for %s: %s",
                purpose,
                mask_address(owner),
                outcome.reason,
            )
            return None

        account = await self.accounts.get_by_email(outcome.record.owner)
        if account is None or not account.is_active:
            raise AccountNotFoundException()
        if purpose is PasscodePurpose.ADMIN_LOGIN and not account.is_admin:
            raise AuthorizationException("Not an admin account")

        if purpose is PasscodePurpose.REGISTRATION or not account.is_verified:
            await self.accounts.mark_verified(account)

        token = None
        if purpose.issues_token:
            token = self.tokens.issue(account.id, account.email)
        logger.info("Verification (%s) succeeded for %s", purpose, mask_address(account.email))
        return VerifiedOwner(
            owner_id=account.id,
            owner_address=account.email,
            name=account.name,
            role=account.role,
            is_verified=account.is_verified,
            token=token,
        )
