"""Base repository: generic get/create/delete and storage-failure translation."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agora.domain.exceptions import StorageUnavailableException
from agora.infrastructure.persistence.database import STORAGE_ERRORS, Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with get_by_id, create and delete.

    Every database round trip runs inside `storage_guard()` so that an
    unreachable database surfaces as StorageUnavailableException instead of a
    driver-specific error.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    @asynccontextmanager
    async def storage_guard(self) -> AsyncIterator[None]:
        """Translate connection-level driver errors to StorageUnavailableException."""
        try:
            yield
        except STORAGE_ERRORS as e:
            raise StorageUnavailableException() from e

    async def get_by_id(self, entity_id: str) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        async with self.storage_guard():
            result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def create(self, obj: ModelType) -> ModelType:
        """Persist a new record and flush so defaults (id, created_at) are populated."""
        async with self.storage_guard():
            self.db.add(obj)
            await self.db.flush()
            await self.db.refresh(obj)
        return obj

    async def save(self, obj: ModelType) -> ModelType:
        """Flush pending changes on an attached record."""
        async with self.storage_guard():
            await self.db.flush()
        return obj

    async def delete(self, obj: ModelType) -> None:
        async with self.storage_guard():
            await self.db.delete(obj)
            await self.db.flush()
