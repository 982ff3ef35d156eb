"""One-time passcode store: issue, lookup, consume, discard, purge."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from agora.domain.exceptions import MissingInputException
from agora.infrastructure.persistence.models.passcode import PasscodeRecord
from agora.infrastructure.persistence.repositories.base import BaseRepository
from agora.shared.utils.datetime import expires_after, utc_now
from agora.shared.utils.generators import DEFAULT_CODE_LENGTH, generate_cuid, generate_numeric_code
from agora.shared.utils.sanitization import normalize_address, normalize_code

DEFAULT_PASSCODE_TTL_SECONDS = 600

# Columns rewritten when a new code replaces the existing (owner, purpose) row.
_REPLACED_COLUMNS = ("id", "code", "expires_at", "used", "created_at")


def _dialect_insert(session: AsyncSession) -> Callable[..., Any] | None:
    """Return the dialect's INSERT construct when it supports ON CONFLICT, else None."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert

        return insert
    if dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert

        return insert
    return None


class PasscodeStore(BaseRepository[PasscodeRecord]):
    """Persist passcodes with at most one live record per (owner, purpose).

    Owners are trimmed and lowercased; submitted codes are reduced to digits
    before an exact comparison. Expiry is enforced at read time.
    """

    def __init__(
        self,
        session: AsyncSession,
        ttl_seconds: int = DEFAULT_PASSCODE_TTL_SECONDS,
        code_length: int = DEFAULT_CODE_LENGTH,
        code_factory: Callable[[int], str] = generate_numeric_code,
    ) -> None:
        super().__init__(session, PasscodeRecord)
        self._ttl_seconds = ttl_seconds
        self._code_length = code_length
        self._code_factory = code_factory

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    async def issue(
        self,
        owner: str,
        purpose: str,
        ttl_seconds: int | None = None,
    ) -> PasscodeRecord:
        """Generate and persist a new code for (owner, purpose); return the record.

        Any existing record for the pair is replaced by a single atomic upsert,
        so two concurrent calls cannot both leave a live code behind.
        """
        owner = normalize_address(owner)
        if not owner:
            raise MissingInputException("owner")
        now = utc_now()
        values = {
            "id": generate_cuid(),
            "owner": owner,
            "purpose": str(purpose),
            "code": self._code_factory(self._code_length),
            "expires_at": expires_after(
                self._ttl_seconds if ttl_seconds is None else ttl_seconds, now=now
            ),
            "used": False,
            "created_at": now,
        }
        async with self.storage_guard():
            insert = _dialect_insert(self.db)
            if insert is not None:
                stmt = insert(PasscodeRecord).values(**values)
                stmt = stmt.on_conflict_do_update(
                    index_elements=["owner", "purpose"],
                    set_={col: stmt.excluded[col] for col in _REPLACED_COLUMNS},
                )
                await self.db.execute(stmt)
            else:
                await self.db.execute(
                    delete(PasscodeRecord)
                    .where(
                        PasscodeRecord.owner == owner,
                        PasscodeRecord.purpose == str(purpose),
                    )
                    .execution_options(synchronize_session=False)
                )
                self.db.add(PasscodeRecord(**values))
                await self.db.flush()
            result = await self.db.execute(
                select(PasscodeRecord)
                .where(PasscodeRecord.id == values["id"])
                .execution_options(populate_existing=True)
            )
        return result.scalar_one()

    async def lookup(
        self,
        owner: str,
        candidate_code: str | int | None,
        purpose: str | None = None,
        *,
        include_expired: bool = False,
        now: datetime | None = None,
    ) -> PasscodeRecord | None:
        """Return the unused record matching owner and the normalized code, or None.

        Expired records are excluded unless include_expired is True (the
        verifier uses that to tell expiry apart and clean up). When several
        records match, the most recently created one wins.
        """
        owner = normalize_address(owner)
        code = normalize_code(candidate_code)
        if not owner or not code:
            return None
        stmt = select(PasscodeRecord).where(
            PasscodeRecord.owner == owner,
            PasscodeRecord.code == code,
            PasscodeRecord.used.is_(False),
        )
        if purpose is not None:
            stmt = stmt.where(PasscodeRecord.purpose == str(purpose))
        if not include_expired:
            stmt = stmt.where(PasscodeRecord.expires_at > (now or utc_now()))
        stmt = stmt.order_by(PasscodeRecord.created_at.desc()).limit(1)
        async with self.storage_guard():
            result = await self.db.execute(stmt)
        return result.scalars().first()

    async def consume(self, record: PasscodeRecord) -> bool:
        """Mark the record used. Returns True only for the call that consumed it.

        Consuming an already-consumed (or replaced) record is a no-op.
        """
        async with self.storage_guard():
            result = await self.db.execute(
                update(PasscodeRecord)
                .where(PasscodeRecord.id == record.id, PasscodeRecord.used.is_(False))
                .values(used=True)
                .execution_options(synchronize_session=False)
            )
        set_committed_value(record, "used", True)
        return result.rowcount == 1

    async def discard(self, record: PasscodeRecord) -> None:
        """Delete the record. Deleting a record that is already gone is a no-op."""
        async with self.storage_guard():
            await self.db.execute(
                delete(PasscodeRecord)
                .where(PasscodeRecord.id == record.id)
                .execution_options(synchronize_session=False)
            )
        if record in self.db:
            self.db.expunge(record)

    async def find_for_owner(self, owner: str, purpose: str | None = None) -> list[PasscodeRecord]:
        """Return every record for owner (any state), newest first."""
        stmt = select(PasscodeRecord).where(
            PasscodeRecord.owner == normalize_address(owner)
        )
        if purpose is not None:
            stmt = stmt.where(PasscodeRecord.purpose == str(purpose))
        stmt = stmt.order_by(PasscodeRecord.created_at.desc())
        async with self.storage_guard():
            result = await self.db.execute(stmt.execution_options(populate_existing=True))
        return list(result.scalars().all())

    async def purge_expired(self, now: datetime | None = None) -> int:
        """Delete every expired record; return how many were removed."""
        async with self.storage_guard():
            result = await self.db.execute(
                delete(PasscodeRecord)
                .where(PasscodeRecord.expires_at <= (now or utc_now()))
                .execution_options(synchronize_session=False)
            )
        return int(result.rowcount or 0)
