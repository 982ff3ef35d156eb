"""Persistence: async engine, session factory, and Base for SQLAlchemy ORM.

Engine and session factory are created lazily on first use (get_db /
get_db_transactional) so import does not trigger Settings validation, and
are disposed by dispose_engine() at shutdown. Connection-level failures
surface as StorageUnavailableException.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from agora.core.config import get_settings
from agora.domain.exceptions import StorageUnavailableException

logger = logging.getLogger(__name__)

# Set by _ensure_engine() on first use; avoids get_settings() at import time.
engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None

STORAGE_ERRORS = (OperationalError, InterfaceError)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""


def _engine_options(url: str) -> dict[str, Any]:
    """Pool/driver options per backend. In-memory SQLite shares one connection."""
    settings = get_settings()
    if url.startswith("sqlite"):
        options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"):
            options["poolclass"] = StaticPool
        return options
    connect_args: dict[str, Any] = {}
    if "postgresql" in url:
        connect_args["command_timeout"] = settings.db_command_timeout or 60
    return {
        "pool_pre_ping": True,
        "pool_size": settings.db_pool_size or 10,
        "max_overflow": settings.db_max_overflow or 20,
        "pool_recycle": 3600,
        "connect_args": connect_args,
    }


def _ensure_engine() -> None:
    """Create engine and AsyncSessionLocal on first use."""
    global engine, AsyncSessionLocal
    if AsyncSessionLocal is not None:
        return
    settings = get_settings()
    engine = create_async_engine(
        settings.database_url,
        echo=settings.database_echo,
        **_engine_options(settings.database_url),
    )
    AsyncSessionLocal = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the session factory, creating the engine if needed."""
    _ensure_engine()
    assert AsyncSessionLocal is not None
    return AsyncSessionLocal


async def create_schema() -> None:
    """Create all tables (development, tests and single-node deployments)."""
    # Import models so they register on Base.metadata.
    from agora.infrastructure.persistence import models  # noqa: F401

    _ensure_engine()
    assert engine is not None
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except STORAGE_ERRORS as e:
        raise StorageUnavailableException() from e


async def drop_schema() -> None:
    """Drop all tables. Used by tests."""
    _ensure_engine()
    assert engine is not None
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def dispose_engine() -> None:
    """Dispose the engine and forget the session factory (shutdown / tests)."""
    global engine, AsyncSessionLocal
    if engine is not None:
        await engine.dispose()
        logger.info("Database engine disposed")
    engine = None
    AsyncSessionLocal = None


async def get_db() -> AsyncIterator[AsyncSession]:
    """Database session dependency for read operations.

    Does not commit; use get_db_transactional for writes.
    """
    factory = get_session_factory()
    async with factory() as session:
        yield session


async def get_db_transactional() -> AsyncIterator[AsyncSession]:
    """Database session dependency for write operations.

    Begins a transaction, commits on success, rolls back on exception.
    A commit that fails because the database is unreachable raises
    StorageUnavailableException.
    """
    factory = get_session_factory()
    async with factory() as session:
        try:
            async with session.begin():
                yield session
        except STORAGE_ERRORS as e:
            logger.error("Database unavailable: %s", e)
            raise StorageUnavailableException() from e
