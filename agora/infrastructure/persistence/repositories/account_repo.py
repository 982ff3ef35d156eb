"""Account repository: lookup by address, recipient listing, creation."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from agora.domain.enums import AccountRole
from agora.domain.exceptions import ValidationException
from agora.infrastructure.persistence.models.account import Account
from agora.infrastructure.persistence.repositories.base import BaseRepository
from agora.shared.utils.sanitization import normalize_address


class AccountRepository(BaseRepository[Account]):
    """Accounts keyed by lowercased email."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Account)

    async def get_by_email(self, email: str) -> Account | None:
        address = normalize_address(email)
        if not address:
            return None
        async with self.storage_guard():
            result = await self.db.execute(select(Account).where(Account.email == address))
        return result.scalar_one_or_none()

    async def list_active_emails(self) -> list[str]:
        """Every active account's address, lowercased and sorted."""
        async with self.storage_guard():
            result = await self.db.execute(
                select(Account.email)
                .where(Account.is_active.is_(True))
                .order_by(Account.email)
            )
        return [normalize_address(e) for e in result.scalars().all() if e]

    async def get_display_names(self, emails: Iterable[str]) -> dict[str, str]:
        """Map address -> trimmed display name for accounts among `emails`.

        Addresses with no account, or an account with a blank name, are absent.
        """
        wanted = sorted({normalize_address(e) for e in emails if e})
        if not wanted:
            return {}
        async with self.storage_guard():
            result = await self.db.execute(
                select(Account.email, Account.name).where(Account.email.in_(wanted))
            )
        names: dict[str, str] = {}
        for email, name in result.all():
            display = (name or "").strip()
            if display:
                names[normalize_address(email)] = display
        return names

    async def create_account(
        self,
        email: str,
        name: str = "",
        role: AccountRole = AccountRole.MEMBER,
        *,
        is_verified: bool = False,
    ) -> Account:
        """Create an account; raise ValidationException if the address is taken."""
        address = normalize_address(email)
        if await self.get_by_email(address) is not None:
            raise ValidationException("Account already exists", field="email")
        account = Account(
            email=address,
            name=(name or "").strip(),
            role=role.value,
            is_verified=is_verified,
            is_active=True,
        )
        try:
            return await self.create(account)
        except IntegrityError:
            raise ValidationException("Account already exists", field="email") from None

    async def mark_verified(self, account: Account) -> Account:
        if not account.is_verified:
            account.is_verified = True
            await self.save(account)
        return account

    async def promote_to_admin(self, account: Account) -> Account:
        if account.role != AccountRole.ADMIN:
            account.role = AccountRole.ADMIN.value
            await self.save(account)
        return account
