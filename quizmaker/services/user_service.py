"""
User Service

User directory: registration, lookups and credential checks.
"""

import logging
from typing import List, Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from quizmaker.core.exceptions import DuplicateEmailError, NotFoundError
from quizmaker.core.security import (
    get_password_hash,
    verify_password,
    get_dummy_password_hash,
)
from quizmaker.models import User, UserRole
from quizmaker.repositories.user_repo import UserRepository
from quizmaker.services.base import BaseService

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _verify_against_dummy(password: str) -> bool:
    verify_password(password, get_dummy_password_hash())
    return False


class UserService(BaseService):
    """Service class for user directory operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db)
        self.user_repo = UserRepository(db)

    # ============================================================
    # Create User
    # ============================================================
    async def create_user(
        self,
        email: str,
        password: str,
        full_name: str,
        role: UserRole
    ) -> User:
        """
        Create a new user with a hashed password.

        Raises:
            DuplicateEmailError: If the (case-normalized) email is taken
        """
        email = normalize_email(email)

        if await self.user_repo.get_by_email(email):
            raise DuplicateEmailError(
                "User with this email already exists",
                {"email": email}
            )

        password_hash = await run_in_threadpool(get_password_hash, password)

        async with self.transaction():
            try:
                user = await self.user_repo.create(
                    email=email,
                    password_hash=password_hash,
                    full_name=full_name,
                    role=UserRole(role),
                )
            except IntegrityError as e:
                # Lost a race against a concurrent registration
                raise DuplicateEmailError(
                    "User with this email already exists",
                    {"email": email}
                ) from e

        logger.info(f"User created: {user.id} ({user.role.value})")
        return user

    # ============================================================
    # Lookups
    # ============================================================
    async def get_by_id(self, user_id: str) -> Optional[User]:
        return await self.user_repo.get_by_id(user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self.user_repo.get_by_email(normalize_email(email))

    async def list_users(
        self,
        role: Optional[UserRole] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[User]:
        return await self.user_repo.get_all_users(role=role, skip=skip, limit=limit)

    # ============================================================
    # Verify Credentials
    # ============================================================
    async def verify_credentials(self, email: str, password: str) -> Optional[User]:
        """
        Return the user when email and password match, otherwise None.

        Unknown emails still pay for one key derivation so the two failure
        cases take comparable time.
        """
        user = await self.get_by_email(email)

        if not user:
            await run_in_threadpool(_verify_against_dummy, password)
            return None

        if not await run_in_threadpool(verify_password, password, user.password_hash):
            return None

        return user

    # ============================================================
    # Update / Delete
    # ============================================================
    async def update_user(
        self,
        user_id: str,
        full_name: Optional[str] = None,
        email: Optional[str] = None
    ) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found", {"user_id": user_id})

        changes = {}
        if full_name is not None:
            changes["full_name"] = full_name
        if email is not None:
            email = normalize_email(email)
            if email != user.email:
                if await self.user_repo.get_by_email(email):
                    raise DuplicateEmailError(
                        "User with this email already exists",
                        {"email": email}
                    )
                changes["email"] = email

        if not changes:
            return user

        async with self.transaction():
            try:
                user = await self.user_repo.update(user_id, **changes)
            except IntegrityError as e:
                raise DuplicateEmailError(
                    "User with this email already exists",
                    {"email": email}
                ) from e
        return user

    async def delete_user(self, user_id: str) -> bool:
        """Hard delete; the Store cascades to owned quizzes and attempts."""
        async with self.transaction():
            deleted = await self.user_repo.delete(user_id)
        if deleted:
            logger.info(f"User deleted: {user_id}")
        return deleted
