"""Tests for the user directory and authentication services."""

import pytest

from quizmaker.core.exceptions import (
    DuplicateEmailError,
    ErrorKind,
    InvalidCredentialsError,
    NotFoundError,
    UnauthenticatedError,
)
from quizmaker.models import UserRole
from quizmaker.schemas.auth import UserLogin, UserRegister
from quizmaker.services.auth_service import AuthService
from quizmaker.services.user_service import UserService
from tests.helpers import TEST_PASSWORD


@pytest.mark.asyncio
async def test_create_user_normalizes_email_and_hides_password(db_session):
    user = await UserService(db_session).create_user(
        "  Mixed.Case@Example.COM ", TEST_PASSWORD, "Mixed Case", UserRole.STUDENT
    )

    assert user.email == "mixed.case@example.com"
    assert user.role == UserRole.STUDENT
    assert user.password_hash != TEST_PASSWORD


@pytest.mark.asyncio
async def test_duplicate_email_is_a_conflict_regardless_of_case(db_session, student):
    with pytest.raises(DuplicateEmailError) as exc_info:
        await UserService(db_session).create_user(
            "STUDENT@example.com", TEST_PASSWORD, "Copy Cat", UserRole.STUDENT
        )
    assert exc_info.value.kind == ErrorKind.CONFLICT


@pytest.mark.asyncio
async def test_lookups_return_none_when_absent(db_session):
    service = UserService(db_session)
    assert await service.get_by_email("nobody@example.com") is None
    assert await service.get_by_id("missing-id") is None


@pytest.mark.asyncio
async def test_verify_credentials(db_session, student):
    service = UserService(db_session)

    found = await service.verify_credentials("Student@Example.com", TEST_PASSWORD)
    assert found is not None and found.id == student.id

    assert await service.verify_credentials("student@example.com", "wrong-password") is None
    assert await service.verify_credentials("ghost@example.com", TEST_PASSWORD) is None


@pytest.mark.asyncio
async def test_list_users_filters_by_role(db_session, student, instructor):
    service = UserService(db_session)

    instructors = await service.list_users(role=UserRole.INSTRUCTOR)
    assert [u.id for u in instructors] == [instructor.id]
    assert len(await service.list_users()) == 2


@pytest.mark.asyncio
async def test_update_user(db_session, student, instructor):
    service = UserService(db_session)

    updated = await service.update_user(student.id, full_name="Samira Student", email="Samira@Example.com")
    assert updated.full_name == "Samira Student"
    assert updated.email == "samira@example.com"

    with pytest.raises(DuplicateEmailError):
        await service.update_user(student.id, email=instructor.email)

    with pytest.raises(NotFoundError):
        await service.update_user("missing-id", full_name="Nobody")


@pytest.mark.asyncio
async def test_delete_user(db_session, student):
    service = UserService(db_session)

    assert await service.delete_user(student.id) is True
    assert await service.get_by_id(student.id) is None
    assert await service.delete_user(student.id) is False


# ============================================================
# AuthService
# ============================================================

@pytest.mark.asyncio
async def test_register_then_login(db_session, token_manager):
    auth = AuthService(db_session, token_manager)

    user, token = await auth.register(UserRegister(
        email="new@example.com",
        password=TEST_PASSWORD,
        full_name="  New   Person ",
        role=UserRole.INSTRUCTOR,
    ))
    assert user.full_name == "New Person"
    assert token_manager.verify_token(token).user_id == user.id

    logged_in, login_token = await auth.login(UserLogin(email="new@example.com", password=TEST_PASSWORD))
    assert logged_in.id == user.id
    assert token_manager.verify_token(login_token).role == "instructor"

    response = auth.build_auth_response(user, token)
    assert response.expires_in == 7 * 24 * 60 * 60
    assert response.user.email == "new@example.com"


@pytest.mark.asyncio
async def test_login_failures_share_one_error(db_session, token_manager, student):
    auth = AuthService(db_session, token_manager)

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        await auth.login(UserLogin(email=student.email, password="nope"))
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        await auth.login(UserLogin(email="ghost@example.com", password=TEST_PASSWORD))

    assert wrong_password.value.message == unknown_email.value.message == "Invalid email or password"


@pytest.mark.asyncio
async def test_get_current_user(db_session, token_manager, student):
    auth = AuthService(db_session, token_manager)

    token = token_manager.issue_token(student.id, "student")
    assert (await auth.get_current_user(token)).id == student.id

    with pytest.raises(UnauthenticatedError):
        await auth.get_current_user("garbage")

    with pytest.raises(UnauthenticatedError):
        await auth.get_current_user(token_manager.issue_token("deleted-user", "student"))
