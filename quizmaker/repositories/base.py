"""
Base Repository

Primary-key CRUD shared by the user, quiz, question, option and attempt
repositories.

Repositories only flush; the calling service owns the transaction and
decides when to commit or roll back.
"""

from typing import Generic, TypeVar, Type, Optional, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from quizmaker.db.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Lookup, insert, update and delete by id for one mapped table."""

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    # -----------------------------
    # Lookup
    # -----------------------------
    async def get_by_id(self, id: Any) -> Optional[ModelType]:
        result = await self.db.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    # -----------------------------
    # Insert
    # -----------------------------
    async def create(self, **kwargs) -> ModelType:
        """Add a row and load its server defaults (timestamps)."""
        instance = self.model(**kwargs)
        self.db.add(instance)
        await self.db.flush()
        await self.db.refresh(instance)
        return instance

    # -----------------------------
    # Update
    # -----------------------------
    async def update(self, id: Any, **kwargs) -> Optional[ModelType]:
        """Set the given columns; None when the row is gone."""
        instance = await self.get_by_id(id)
        if not instance:
            return None

        for column, value in kwargs.items():
            setattr(instance, column, value)

        await self.db.flush()
        await self.db.refresh(instance)
        return instance

    # -----------------------------
    # Delete
    # -----------------------------
    async def delete(self, id: Any) -> bool:
        # Child rows go with it through ON DELETE CASCADE
        instance = await self.get_by_id(id)
        if not instance:
            return False

        await self.db.delete(instance)
        await self.db.flush()
        return True
