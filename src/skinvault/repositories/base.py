"""
Base repository for record store access.

Repositories never commit: they add, flush and refresh inside the session
they are given, and the caller decides when the unit of work ends.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase

ModelType = TypeVar("ModelType", bound=DeclarativeBase)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class BaseRepository(ABC, Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """Lookup and persistence contract shared by all repositories."""

    @abstractmethod
    async def get(self, session: AsyncSession, id: Any) -> Optional[ModelType]:
        """Get a row by its natural key."""

    @abstractmethod
    async def exists(self, session: AsyncSession, id: Any) -> bool:
        """Check whether a row exists for a natural key."""

    @abstractmethod
    async def create(
        self, session: AsyncSession, *, obj_in: CreateSchemaType
    ) -> ModelType:
        """Insert a new row."""

    @abstractmethod
    async def update(
        self, session: AsyncSession, *, db_obj: ModelType, obj_in: UpdateSchemaType
    ) -> ModelType:
        """Apply changes to an existing row."""

    @abstractmethod
    async def delete(self, session: AsyncSession, *, id: Any) -> Optional[ModelType]:
        """Delete a row by its natural key."""


class BaseSQLAlchemyRepository(
    BaseRepository[ModelType, CreateSchemaType, UpdateSchemaType]
):
    """
    SQLAlchemy implementation of the write operations.

    Subclasses provide ``get`` and ``exists`` because each table is looked
    up by its own natural key rather than the surrogate primary key.
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model = model

    async def create(
        self, session: AsyncSession, *, obj_in: CreateSchemaType
    ) -> ModelType:
        """Insert a row built from a pydantic create model."""
        db_obj = self.model(**obj_in.model_dump())
        session.add(db_obj)
        await session.flush()
        await session.refresh(db_obj)
        return db_obj

    async def update(
        self, session: AsyncSession, *, db_obj: ModelType, obj_in: UpdateSchemaType
    ) -> ModelType:
        """
        Copy explicitly set fields onto ``db_obj``.

        A field explicitly set to ``None`` clears the column; fields left
        unset keep their current value.
        """
        for field, value in obj_in.model_dump(exclude_unset=True).items():
            setattr(db_obj, field, value)

        session.add(db_obj)
        await session.flush()
        await session.refresh(db_obj)
        return db_obj

    async def delete(self, session: AsyncSession, *, id: Any) -> Optional[ModelType]:
        """Delete the row for ``id`` and return it, or None if absent."""
        db_obj = await self.get(session, id)
        if db_obj is not None:
            await session.delete(db_obj)
            await session.flush()
        return db_obj

    async def count(self, session: AsyncSession) -> int:
        """Count all rows in the table."""
        result = await session.execute(select(func.count()).select_from(self.model))
        return result.scalar() or 0
