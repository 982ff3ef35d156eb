"""Tests for PasscodeStore (issue, lookup, consume, discard, purge)."""

from collections.abc import Callable, Iterator
from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from agora.domain.exceptions import MissingInputException
from agora.infrastructure.persistence.repositories.passcode_repo import PasscodeStore
from agora.shared.utils.datetime import ensure_utc, utc_now


def sequence(*codes: str) -> Callable[[int], str]:
    """Code factory returning the given codes in order."""
    it: Iterator[str] = iter(codes)
    return lambda _length: next(it)


@pytest.fixture
def store(db_session: AsyncSession) -> PasscodeStore:
    return PasscodeStore(db_session, code_factory=sequence("123456", "654321", "111111"))


async def test_issue_lookup_consume_round_trip(store: PasscodeStore) -> None:
    record = await store.issue("a@b.com", "login", ttl_seconds=600)
    assert record.code == "123456"
    assert record.owner == "a@b.com"
    assert record.used is False

    found = await store.lookup("a@b.com", record.code)
    assert found is not None
    assert found.id == record.id

    assert await store.consume(found) is True
    assert await store.lookup("a@b.com", record.code) is None


async def test_issue_sets_expiry_from_ttl(store: PasscodeStore) -> None:
    before = utc_now()
    record = await store.issue("a@b.com", "login", ttl_seconds=600)
    expires_at = ensure_utc(record.expires_at)
    assert expires_at is not None
    assert before + timedelta(seconds=599) <= expires_at <= utc_now() + timedelta(seconds=601)


async def test_issue_normalizes_owner(store: PasscodeStore) -> None:
    record = await store.issue("  A@B.Com ", "login")
    assert record.owner == "a@b.com"
    assert await store.lookup("a@b.com", "123456") is not None


async def test_issue_requires_owner(store: PasscodeStore) -> None:
    with pytest.raises(MissingInputException):
        await store.issue("   ", "login")


async def test_second_issue_supersedes_first(store: PasscodeStore) -> None:
    first = await store.issue("a@b.com", "admin-login")
    second = await store.issue("a@b.com", "admin-login")
    assert (first.code, second.code) == ("123456", "654321")

    assert await store.lookup("a@b.com", "123456") is None
    assert await store.lookup("a@b.com", "654321") is not None
    assert len(await store.find_for_owner("a@b.com", "admin-login")) == 1


async def test_issue_for_other_purpose_keeps_existing(store: PasscodeStore) -> None:
    await store.issue("a@b.com", "registration")
    await store.issue("a@b.com", "login")
    assert await store.lookup("a@b.com", "123456", "registration") is not None
    assert await store.lookup("a@b.com", "654321", "login") is not None
    assert await store.lookup("a@b.com", "123456", "login") is None


async def test_lookup_strips_non_digits_but_matches_exactly(store: PasscodeStore) -> None:
    await store.issue("a@b.com", "login")
    assert await store.lookup("a@b.com", " 123 456") is not None
    assert await store.lookup("a@b.com", "123456\n") is not None
    assert await store.lookup("a@b.com", "12345") is None
    assert await store.lookup("a@b.com", "1234567") is None
    assert await store.lookup("A@B.COM", "123456") is not None
    assert await store.lookup("other@b.com", "123456") is None


async def test_lookup_excludes_expired_unless_asked(store: PasscodeStore) -> None:
    await store.issue("a@b.com", "login", ttl_seconds=-1)
    assert await store.lookup("a@b.com", "123456") is None
    assert await store.lookup("a@b.com", "123456", include_expired=True) is not None


async def test_consume_is_idempotent(store: PasscodeStore) -> None:
    record = await store.issue("a@b.com", "login")
    assert await store.consume(record) is True
    assert await store.consume(record) is False
    assert record.used is True


async def test_consume_of_superseded_record_is_noop(store: PasscodeStore) -> None:
    first = await store.issue("a@b.com", "login")
    await store.issue("a@b.com", "login")
    assert await store.consume(first) is False
    assert await store.lookup("a@b.com", "654321") is not None


async def test_discard_removes_record(store: PasscodeStore) -> None:
    record = await store.issue("a@b.com", "login")
    await store.discard(record)
    assert await store.find_for_owner("a@b.com") == []
    await store.discard(record)


async def test_purge_expired_removes_only_expired(store: PasscodeStore) -> None:
    await store.issue("old@b.com", "login", ttl_seconds=-5)
    await store.issue("new@b.com", "login", ttl_seconds=600)
    assert await store.purge_expired() == 1
    assert await store.find_for_owner("old@b.com") == []
    assert len(await store.find_for_owner("new@b.com")) == 1


async def test_default_factory_generates_configured_length(db_session: AsyncSession) -> None:
    record = await PasscodeStore(db_session, code_length=8).issue("a@b.com", "login")
    assert len(record.code) == 8
    assert record.code.isdigit()
