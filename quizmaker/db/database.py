"""
Database Module

Async SQLAlchemy engine, session factory and declarative Base.
"""

import logging
from typing import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from quizmaker.core.config import settings

logger = logging.getLogger(__name__)


def _engine_kwargs() -> dict:
    kwargs = {"echo": settings.SQLALCHEMY_ECHO, "pool_pre_ping": True}
    if settings.DB_POOL_SIZE is not None:
        kwargs["pool_size"] = settings.DB_POOL_SIZE
    if settings.DB_MAX_OVERFLOW is not None:
        kwargs["max_overflow"] = settings.DB_MAX_OVERFLOW
    return kwargs


engine = create_async_engine(settings.DATABASE_URL, **_engine_kwargs())


def enable_sqlite_foreign_keys(sync_engine) -> None:
    """SQLite only enforces ON DELETE CASCADE with this pragma set."""

    @event.listens_for(sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


if engine.dialect.name == "sqlite":
    enable_sqlite_foreign_keys(engine.sync_engine)


AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding one session per request.

    Services commit their own work; anything left open is rolled back here.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def check_db_connection() -> bool:
    """Return True if the Store answers a trivial query."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False
