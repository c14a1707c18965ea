"""
Base CRUD operations for SQLAlchemy models.

Shared insert, lookup and counting helpers for the model-specific CRUD
singletons. Every method flushes at most; the caller owns the transaction.

Dependencies: sqlalchemy
System role: Foundation for all database CRUD operations
"""

from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from edu_assistant.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic data access for one ORM model.

    Subclasses bind the model and add the queries their stage of the
    pipeline needs (role lookup, keyword search, recent history, ...).

    Type Parameters:
        ModelT: SQLAlchemy model class inheriting from Base

    Attributes:
        model: The SQLAlchemy model class to operate on
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **kwargs) -> ModelT:
        """
        Insert a row and load its server-side defaults.

        Args:
            session: Async database session
            **kwargs: Model field values

        Returns:
            Created model instance with generated ID and timestamps
        """
        instance = self.model(**kwargs)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def get_by_id(self, session: AsyncSession, id: UUID) -> ModelT | None:
        return await self.first(session, self.model.id == id)

    async def first(self, session: AsyncSession, *criteria, order_by=None) -> ModelT | None:
        """
        Return the first row matching every criterion.

        Args:
            session: Async database session
            *criteria: SQLAlchemy filter expressions
            order_by: Optional ordering applied before taking the first row

        Returns:
            Model instance, None when nothing matches
        """
        stmt = select(self.model).where(*criteria)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        result = await session.execute(stmt.limit(1))
        return result.scalars().first()

    async def count(self, session: AsyncSession, *criteria) -> int:
        """Count rows, optionally filtered by SQLAlchemy expressions."""
        stmt = select(func.count()).select_from(self.model)
        if criteria:
            stmt = stmt.where(*criteria)
        result = await session.execute(stmt)
        return result.scalar_one()
