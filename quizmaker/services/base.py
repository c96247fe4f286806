"""
Service Base

Each public service operation that writes runs inside ``transaction()``:
all of its statements commit together or not at all.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quizmaker.core.exceptions import ServiceError, StoreError

logger = logging.getLogger(__name__)


class BaseService:
    """Holds the session and owns commit / rollback."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        try:
            yield
            await self.db.commit()
        except ServiceError:
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Store operation failed in {self.__class__.__name__}: {e}")
            raise StoreError("Database operation failed") from e
