"""Tests for PasscodeVerifier outcomes."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from agora.application.services.passcode_verifier import PasscodeVerifier
from agora.domain.enums import VerificationFailure
from agora.infrastructure.persistence.repositories.passcode_repo import PasscodeStore


@pytest.fixture
def store(db_session: AsyncSession) -> PasscodeStore:
    codes = iter(["123456", "654321"])
    return PasscodeStore(db_session, code_factory=lambda _n: next(codes))


@pytest.fixture
def verifier(store: PasscodeStore) -> PasscodeVerifier:
    return PasscodeVerifier(store)


async def test_correct_code_verifies_once(store: PasscodeStore, verifier: PasscodeVerifier) -> None:
    await store.issue("a@b.com", "login")

    outcome = await verifier.verify("a@b.com", "123456", "login")
    assert outcome.ok
    assert outcome.record is not None and outcome.record.used

    again = await verifier.verify("a@b.com", "123456", "login")
    assert not again.ok
    assert again.reason is VerificationFailure.NOT_FOUND


async def test_whitespace_in_code_is_tolerated(store: PasscodeStore, verifier: PasscodeVerifier) -> None:
    await store.issue("a@b.com", "login")
    assert (await verifier.verify(" A@B.com ", " 123 456", "login")).ok


async def test_superseded_code_is_not_found(store: PasscodeStore, verifier: PasscodeVerifier) -> None:
    await store.issue("a@b.com", "admin-login")
    await store.issue("a@b.com", "admin-login")

    outcome = await verifier.verify("a@b.com", "123456", "admin-login")
    assert outcome.reason is VerificationFailure.NOT_FOUND
    assert (await verifier.verify("a@b.com", "654321", "admin-login")).ok


async def test_expired_code_is_removed(store: PasscodeStore, verifier: PasscodeVerifier) -> None:
    await store.issue("a@b.com", "login", ttl_seconds=-1)

    outcome = await verifier.verify("a@b.com", "123456", "login")
    assert not outcome.ok
    assert outcome.reason is VerificationFailure.EXPIRED
    assert await store.find_for_owner("a@b.com") == []

    retry = await verifier.verify("a@b.com", "123456", "login")
    assert retry.reason is VerificationFailure.NOT_FOUND


@pytest.mark.parametrize(("owner", "code"), [("", "123456"), ("a@b.com", ""), (None, None), ("  ", " ")])
async def test_missing_input(verifier: PasscodeVerifier, owner: str | None, code: str | None) -> None:
    outcome = await verifier.verify(owner, code)
    assert outcome.reason is VerificationFailure.MISSING_INPUT


async def test_wrong_code_and_letters_are_not_found(store: PasscodeStore, verifier: PasscodeVerifier) -> None:
    await store.issue("a@b.com", "login")
    assert (await verifier.verify("a@b.com", "000000", "login")).reason is VerificationFailure.NOT_FOUND
    assert (await verifier.verify("a@b.com", "abcdef", "login")).reason is VerificationFailure.NOT_FOUND
    assert (await verifier.verify("a@b.com", "123456", "registration")).reason is VerificationFailure.NOT_FOUND
