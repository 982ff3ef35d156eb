"""Delete expired passcodes.

Usage:
    python -m scripts.purge_expired_passcodes
Expiry is already enforced when a code is verified; this only reclaims
rows for codes that were never submitted. Safe to run from cron.
"""

import asyncio

from agora.infrastructure.persistence import database
from agora.infrastructure.persistence.repositories import PasscodeStore
from agora.shared.telemetry.logging import get_logger, setup_logging

logger = get_logger(__name__)


async def main() -> None:
    setup_logging()
    try:
        async with database.get_session_factory()() as session:
            async with session.begin():
                removed = await PasscodeStore(session).purge_expired()
        logger.info("Purged %d expired passcode(s)", removed)
        print(f"Purged {removed} expired passcode(s)")
    finally:
        await database.dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
