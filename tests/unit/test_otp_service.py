"""Tests for OtpService request/verify flows."""

import pytest
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from agora.application.services.otp_service import OtpService
from agora.domain.enums import AccountRole, PasscodePurpose
from agora.domain.exceptions import (
    AccountNotFoundException,
    AuthorizationException,
    ConfigurationException,
    MissingInputException,
    ValidationException,
)
from agora.infrastructure.persistence.repositories import AccountRepository, PasscodeStore
from agora.infrastructure.security.session_tokens import SessionTokenIssuer
from tests.conftest import FakeMailer

SECRET = "otp-service-secret"


@pytest.fixture
def accounts(db_session: AsyncSession) -> AccountRepository:
    return AccountRepository(db_session)


@pytest.fixture
def store(db_session: AsyncSession) -> PasscodeStore:
    return PasscodeStore(db_session, ttl_seconds=600)


def build_service(
    store: PasscodeStore,
    accounts: AccountRepository,
    mailer: FakeMailer,
    *,
    allow_admin_self_register: bool = False,
) -> OtpService:
    return OtpService(
        store,
        accounts,
        mailer,
        SessionTokenIssuer(SECRET),
        allow_admin_self_register=allow_admin_self_register,
    )


@pytest.fixture
def service(store: PasscodeStore, accounts: AccountRepository, mailer: FakeMailer) -> OtpService:
    return build_service(store, accounts, mailer)


async def test_admin_login_end_to_end(
    service: OtpService, accounts: AccountRepository, mailer: FakeMailer
) -> None:
    admin = await accounts.create_account("admin@co.com", "Ada", AccountRole.ADMIN)

    issued = await service.request_code(" Admin@Co.com ", PasscodePurpose.ADMIN_LOGIN)
    assert issued.owner == "admin@co.com"
    assert issued.expires_in == 600
    (mail,) = mailer.sent
    assert mail.subject == "Your admin login code"
    code = mailer.last_code_for("admin@co.com")
    assert len(code) == 6
    assert code in mail.html

    verified = await service.verify_code("admin@co.com", code, PasscodePurpose.ADMIN_LOGIN)
    assert verified is not None
    assert verified.owner_id == admin.id
    assert verified.token is not None
    payload = jwt.decode(verified.token, SECRET, algorithms=["HS256"])
    assert payload["email"] == "admin@co.com"
    assert payload["exp"] - payload["iat"] == 4 * 60 * 60


async def test_admin_login_unknown_account(service: OtpService, mailer: FakeMailer) -> None:
    with pytest.raises(AccountNotFoundException):
        await service.request_code("nobody@co.com", PasscodePurpose.ADMIN_LOGIN)
    assert mailer.sent == []


async def test_admin_login_refuses_member(
    service: OtpService, accounts: AccountRepository
) -> None:
    await accounts.create_account("member@co.com", "Mo")
    with pytest.raises(AccountNotFoundException):
        await service.request_code("member@co.com", PasscodePurpose.ADMIN_LOGIN)


async def test_admin_self_register_creates_admin(
    store: PasscodeStore, accounts: AccountRepository, mailer: FakeMailer
) -> None:
    service = build_service(store, accounts, mailer, allow_admin_self_register=True)
    await service.request_code("first@co.com", PasscodePurpose.ADMIN_LOGIN)
    account = await accounts.get_by_email("first@co.com")
    assert account is not None and account.is_admin
    assert len(mailer.sent) == 1


@pytest.mark.parametrize("owner", ["not-an-email", "a@", "@co.com"])
async def test_malformed_owner_is_rejected(service: OtpService, owner: str) -> None:
    with pytest.raises(ValidationException):
        await service.request_code(owner, PasscodePurpose.LOGIN)


async def test_missing_owner(service: OtpService) -> None:
    with pytest.raises(MissingInputException):
        await service.request_code("  ", PasscodePurpose.LOGIN)


async def test_unconfigured_mailer_issues_nothing(
    service: OtpService, accounts: AccountRepository, store: PasscodeStore, mailer: FakeMailer
) -> None:
    await accounts.create_account("user@co.com", "Uma")
    mailer.configured = False
    with pytest.raises(ConfigurationException):
        await service.request_code("user@co.com", PasscodePurpose.LOGIN)
    assert await store.find_for_owner("user@co.com") == []


async def test_unreachable_relay_raises_configuration_error(
    service: OtpService, accounts: AccountRepository, mailer: FakeMailer
) -> None:
    await accounts.create_account("user@co.com", "Uma")
    mailer.unreachable = True
    with pytest.raises(ConfigurationException):
        await service.request_code("user@co.com", PasscodePurpose.LOGIN)
    assert mailer.sent == []


async def test_registration_requires_name(service: OtpService) -> None:
    with pytest.raises(MissingInputException):
        await service.request_code("new@co.com", PasscodePurpose.REGISTRATION)


async def test_registration_creates_and_verifies_member(
    service: OtpService, accounts: AccountRepository, mailer: FakeMailer
) -> None:
    await service.request_code("new@co.com", PasscodePurpose.REGISTRATION, name="Nia")
    account = await accounts.get_by_email("new@co.com")
    assert account is not None
    assert account.role == AccountRole.MEMBER
    assert account.is_verified is False
    assert mailer.sent[0].subject == "Verify your email address"

    code = mailer.last_code_for("new@co.com")
    verified = await service.verify_code("new@co.com", code, PasscodePurpose.REGISTRATION)
    assert verified is not None
    assert verified.token is None
    assert verified.is_verified is True


async def test_login_returns_token_and_profile(
    service: OtpService, accounts: AccountRepository, mailer: FakeMailer
) -> None:
    await accounts.create_account("user@co.com", "Uma")
    await service.request_code("user@co.com", PasscodePurpose.LOGIN)
    verified = await service.verify_code(
        "user@co.com", mailer.last_code_for("user@co.com"), PasscodePurpose.LOGIN
    )
    assert verified is not None
    assert verified.token is not None
    assert verified.name == "Uma"
    assert verified.role == "member"


async def test_login_unknown_account(service: OtpService) -> None:
    with pytest.raises(AccountNotFoundException):
        await service.request_code("ghost@co.com", PasscodePurpose.LOGIN)


async def test_wrong_code_returns_none(
    service: OtpService, accounts: AccountRepository, mailer: FakeMailer
) -> None:
    await accounts.create_account("user@co.com", "Uma")
    await service.request_code("user@co.com", PasscodePurpose.LOGIN)
    code = mailer.last_code_for("user@co.com")
    wrong = "1" * 6 if code != "111111" else "222222"
    assert await service.verify_code("user@co.com", wrong, PasscodePurpose.LOGIN) is None
    assert await service.verify_code("user@co.com", code, PasscodePurpose.LOGIN) is not None


async def test_admin_code_for_demoted_account_is_refused(
    service: OtpService, accounts: AccountRepository, mailer: FakeMailer
) -> None:
    admin = await accounts.create_account("admin@co.com", "Ada", AccountRole.ADMIN)
    await service.request_code("admin@co.com", PasscodePurpose.ADMIN_LOGIN)
    admin.role = AccountRole.MEMBER.value
    await accounts.save(admin)
    with pytest.raises(AuthorizationException):
        await service.verify_code(
            "admin@co.com", mailer.last_code_for("admin@co.com"), PasscodePurpose.ADMIN_LOGIN
        )


async def test_login_refused_for_account_deactivated_after_request(
    service: OtpService, accounts: AccountRepository, mailer: FakeMailer
) -> None:
    account = await accounts.create_account("user@co.com", "Uma")
    await service.request_code("user@co.com", PasscodePurpose.LOGIN)
    account.is_active = False
    await accounts.save(account)
    with pytest.raises(AccountNotFoundException):
        await service.verify_code(
            "user@co.com", mailer.last_code_for("user@co.com"), PasscodePurpose.LOGIN
        )
