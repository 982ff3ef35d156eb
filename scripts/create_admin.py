"""Create an admin account, or promote an existing account to admin.

Usage:
    python -m scripts.create_admin <email> [name]
Accounts are keyed by the lowercased email only. Creates the schema first
when DATABASE_AUTO_CREATE is set.
"""

import asyncio
import sys

from agora.core.config import get_settings
from agora.domain.enums import AccountRole
from agora.infrastructure.persistence import database
from agora.infrastructure.persistence.repositories import AccountRepository
from agora.shared.utils.sanitization import validate_address


async def main() -> None:
    """Create or promote the admin; print what was done."""
    if len(sys.argv) < 2:
        print("Usage: python -m scripts.create_admin <email> [name]", file=sys.stderr)
        sys.exit(1)
    try:
        email = validate_address(sys.argv[1])
    except ValueError as e:
        print(f"Invalid email: {e}", file=sys.stderr)
        sys.exit(1)
    name = sys.argv[2] if len(sys.argv) > 2 else "Admin"

    settings = get_settings()
    if settings.database_auto_create:
        await database.create_schema()

    try:
        async with database.get_session_factory()() as session:
            async with session.begin():
                accounts = AccountRepository(session)
                account = await accounts.get_by_email(email)
                if account is None:
                    account = await accounts.create_account(
                        email, name, AccountRole.ADMIN, is_verified=True
                    )
                    print(f"Created admin {account.email} ({account.id})")
                elif account.is_admin:
                    print(f"{account.email} is already an admin ({account.id})")
                else:
                    await accounts.promote_to_admin(account)
                    print(f"Promoted {account.email} to admin ({account.id})")
    finally:
        await database.dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
