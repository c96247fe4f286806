"""
User Repository

Data access layer for User model.
All user-related database operations.
"""

from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from quizmaker.repositories.base import BaseRepository
from quizmaker.models import User, UserRole


class UserRepository(BaseRepository[User]):
    """Repository for User model."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    # =================
    # Get by email
    # =================
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by (already normalized) email address."""
        result = await self.db.execute(
            select(User).where(User.email == email)
        )
        return result.scalar_one_or_none()

    # =================
    # Get instructor
    # =================
    async def get_instructor(self, user_id: str) -> Optional[User]:
        """Get a user only if it has the instructor role."""
        result = await self.db.execute(
            select(User).where(
                User.id == user_id,
                User.role == UserRole.INSTRUCTOR
            )
        )
        return result.scalar_one_or_none()

    # =================
    # List users
    # =================
    async def get_all_users(
        self,
        role: Optional[UserRole] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[User]:
        """Get users ordered by creation date, optionally filtered by role."""
        stmt = select(User)
        if role is not None:
            stmt = stmt.where(User.role == role)
        stmt = stmt.order_by(User.created_at.desc()).offset(skip).limit(limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())
