"""Pytest configuration and fixtures for agora.

Every test gets a fresh in-memory SQLite database (aiosqlite). HTTP tests
use agora.main:app through httpx with the SMTP mailer replaced by
FakeMailer via dependency_overrides. Environment is set before any agora
import so Settings validation passes without a .env file.
"""

import os
import re
from dataclasses import dataclass, field

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-0123456789abcdef0123456789abcdef"
os.environ["ENVIRONMENT"] = "test"
os.environ["SMTP_HOST"] = "smtp.example.com"
os.environ["SMTP_FROM_ADDRESS"] = "noreply@example.com"
os.environ["TEST_AUTH_ENABLED"] = "false"
os.environ["DATABASE_AUTO_CREATE"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from agora.api.v1.dependencies import get_mailer
from agora.core.config import get_settings
from agora.core.limiter import limiter
from agora.domain.enums import AccountRole
from agora.domain.exceptions import (
    ConfigurationException,
    DeliveryException,
    InvalidRecipientException,
)
from agora.infrastructure.external.email.protocols import MailAttachment, SendReceipt
from agora.infrastructure.persistence import database
from agora.infrastructure.persistence.models import Account
from agora.infrastructure.persistence.repositories import AccountRepository
from agora.infrastructure.security.session_tokens import SessionTokenIssuer
from agora.main import app

_CODE_PATTERN = re.compile(r"code is (\d+)")


@dataclass
class SentMail:
    to: str
    subject: str
    html: str
    attachments: list[MailAttachment]
    text: str | None


@dataclass
class FakeMailer:
    """In-memory IMailer. Records every accepted message."""

    fail_for: set[str] = field(default_factory=set)
    unreachable: bool = False
    configured: bool = True
    sent: list[SentMail] = field(default_factory=list)
    probes: int = 0

    def check_configured(self) -> None:
        if not self.configured:
            raise ConfigurationException("Mail relay host is not configured (SMTP_HOST)")

    async def ensure_ready(self) -> None:
        self.check_configured()
        self.probes += 1
        if self.unreachable:
            raise ConfigurationException("Mail relay unavailable: connection refused")

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        attachments: list[MailAttachment] | None = None,
        text: str | None = None,
    ) -> SendReceipt:
        if "@" not in to:
            raise InvalidRecipientException(to)
        await self.ensure_ready()
        if to in self.fail_for:
            raise DeliveryException(to, "550 mailbox unavailable")
        self.sent.append(SentMail(to, subject, html, list(attachments or []), text))
        return SendReceipt(message_id=f"<{len(self.sent)}@test>")

    def last_code_for(self, to: str) -> str:
        for mail in reversed(self.sent):
            if mail.to == to:
                match = _CODE_PATTERN.search(mail.text or "")
                assert match, f"no code in mail to {to}"
                return match.group(1)
        raise AssertionError(f"no mail sent to {to}")


@pytest.fixture
async def database_ready() -> None:
    """Create the schema on a fresh in-memory database; dispose after the test."""
    await database.create_schema()
    yield
    await database.dispose_engine()


@pytest.fixture
async def db_session(database_ready: None) -> AsyncSession:
    """Session for repository and service tests. Changes are flushed, never committed."""
    async with database.get_session_factory()() as session:
        yield session
        await session.rollback()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
async def client(database_ready: None, mailer: FakeMailer) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI) with FakeMailer wired in."""
    limiter.enabled = False
    app.dependency_overrides[get_mailer] = lambda: mailer
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    limiter.enabled = True


async def create_account(
    email: str,
    name: str = "",
    role: AccountRole = AccountRole.MEMBER,
    *,
    is_active: bool = True,
) -> Account:
    """Commit an account in its own transaction (for HTTP tests)."""
    async with database.get_session_factory()() as session:
        async with session.begin():
            account = await AccountRepository(session).create_account(
                email, name, role, is_verified=True
            )
            account.is_active = is_active
        return account


def token_for(account: Account) -> str:
    return SessionTokenIssuer.from_settings(get_settings()).issue(account.id, account.email)


@pytest.fixture
async def admin_account(database_ready: None) -> Account:
    return await create_account("admin@example.com", "Ada Admin", AccountRole.ADMIN)


@pytest.fixture
def admin_headers(admin_account: Account) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_for(admin_account)}"}
