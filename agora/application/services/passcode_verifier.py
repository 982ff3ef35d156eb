"""Passcode verification: the single path that turns a submitted code into proof of ownership."""

from __future__ import annotations

from dataclasses import dataclass

from agora.domain.enums import VerificationFailure
from agora.infrastructure.persistence.models.passcode import PasscodeRecord
from agora.infrastructure.persistence.repositories.passcode_repo import PasscodeStore
from agora.shared.telemetry.logging import get_logger, mask_address
from agora.shared.utils.datetime import is_expired, utc_now

logger = get_logger(__name__)


@dataclass(frozen=True)
class VerificationOutcome:
    """ok with the consumed record, or a failure reason.

    The reason is for logs and tests only; callers answer every failure
    with the same message.
    """

    ok: bool
    record: PasscodeRecord | None = None
    reason: VerificationFailure | None = None

    @classmethod
    def rejected(cls, reason: VerificationFailure) -> VerificationOutcome:
        return cls(ok=False, reason=reason)


class PasscodeVerifier:
    """Check a submitted code against the store and consume it on success."""

    def __init__(self, store: PasscodeStore) -> None:
        self.store = store

    async def verify(
        self,
        owner: str | None,
        submitted_code: str | int | None,
        purpose: str | None = None,
    ) -> VerificationOutcome:
        """Verify `submitted_code` for `owner`.

        Empty owner or code -> MISSING_INPUT. No unused record with exactly
        that code (never issued, already used, wrong code, superseded) ->
        NOT_FOUND. A matching record past its expiry is deleted and reported
        as EXPIRED. Otherwise the record is consumed, so a second call with
        the same code gets NOT_FOUND.
        """
        if not (owner or "").strip() or not str(submitted_code or "").strip():
            return VerificationOutcome.rejected(VerificationFailure.MISSING_INPUT)

        now = utc_now()
        record = await self.store.lookup(
            owner, submitted_code, purpose, include_expired=True, now=now
        )
        if record is None:
            logger.info("Passcode rejected for %s: no match", mask_address(owner))
            return VerificationOutcome.rejected(VerificationFailure.NOT_FOUND)

        if is_expired(record.expires_at, now=now):
            await self.store.discard(record)
            logger.info("Passcode rejected for %s: expired", mask_address(owner))
            return VerificationOutcome.rejected(VerificationFailure.EXPIRED)

        if not await self.store.consume(record):
            # Lost a race with a concurrent verify of the same code.
            return VerificationOutcome.rejected(VerificationFailure.NOT_FOUND)
        return VerificationOutcome(ok=True, record=record)
