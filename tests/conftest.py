"""Pytest configuration and shared fixtures."""

import os

# Settings are read at import time; point them at SQLite before anything loads
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-quizmaker")

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from quizmaker.core.security import TokenManager
from quizmaker.db.database import Base, enable_sqlite_foreign_keys, get_db
from quizmaker.main import app
from quizmaker.models import User, UserRole, Quiz
from quizmaker.schemas.quiz import QuizCreate
from quizmaker.services.quiz_service import QuizService
from quizmaker.services.user_service import UserService

from tests.helpers import TEST_PASSWORD, register


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test; one shared connection."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(test_engine.sync_engine)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def token_manager() -> TokenManager:
    return TokenManager(secret_key="unit-test-secret")


# ============================================================
# Factories
# ============================================================

@pytest_asyncio.fixture
async def make_user(db_session):
    async def _make_user(
        email: str,
        role: UserRole = UserRole.STUDENT,
        full_name: str = "Test User",
        password: str = TEST_PASSWORD,
    ) -> User:
        return await UserService(db_session).create_user(email, password, full_name, role)

    return _make_user


@pytest_asyncio.fixture
async def instructor(make_user) -> User:
    return await make_user("instructor@example.com", UserRole.INSTRUCTOR, "Ada Instructor")


@pytest_asyncio.fixture
async def other_instructor(make_user) -> User:
    return await make_user("other.instructor@example.com", UserRole.INSTRUCTOR, "Ben Other")


@pytest_asyncio.fixture
async def student(make_user) -> User:
    return await make_user("student@example.com", UserRole.STUDENT, "Sam Student")


@pytest_asyncio.fixture
async def make_quiz(db_session):
    async def _make_quiz(instructor_id: str, **fields) -> Quiz:
        fields.setdefault("title", "Sample Quiz")
        return await QuizService(db_session).create_quiz(QuizCreate(**fields), instructor_id)

    return _make_quiz


@pytest_asyncio.fixture
async def quiz(make_quiz, instructor) -> Quiz:
    return await make_quiz(instructor.id, title="Python Basics", passing_score=70)


# ============================================================
# HTTP client
# ============================================================

@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Client against the app with get_db bound to the test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        try:
            yield ac
        finally:
            app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def author(client: AsyncClient) -> dict:
    return await register(client, "author@example.com", "instructor", "Tina Author")


@pytest_asyncio.fixture
async def rival(client: AsyncClient) -> dict:
    return await register(client, "rival@example.com", "instructor", "Rick Rival")


@pytest_asyncio.fixture
async def learner(client: AsyncClient) -> dict:
    return await register(client, "learner@example.com", "student", "Lee Learner")
