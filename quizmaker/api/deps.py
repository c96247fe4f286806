from fastapi import Depends, Request, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from quizmaker.core.config import settings
from quizmaker.core.exceptions import ForbiddenError, UnauthenticatedError
from quizmaker.core.security import TokenManager, get_token_manager as build_token_manager
from quizmaker.db.database import get_db
from quizmaker.models import User, UserRole
from quizmaker.services.attempt_service import QuizAttemptService
from quizmaker.services.auth_service import AuthService
from quizmaker.services.question_service import QuestionService
from quizmaker.services.quiz_service import QuizService

logger = logging.getLogger(__name__)

# Security scheme for Swagger UI; the cookie is accepted as well
security = HTTPBearer(auto_error=False)

_token_manager: Optional[TokenManager] = None


# =====================================================
# Token Manager
# =====================================================
def get_token_manager() -> TokenManager:
    global _token_manager
    if _token_manager is None:
        _token_manager = build_token_manager()
    return _token_manager


# =====================================================
# Session Cookie
# =====================================================
def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.AUTH_COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        secure=settings.IS_PRODUCTION,
        samesite="lax",
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.IS_PRODUCTION,
        samesite="lax",
    )


def extract_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    """Bearer header first, then the session cookie."""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.AUTH_COOKIE_NAME)


# =====================================================
# Get Current user
# =====================================================
async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
    token_manager: TokenManager = Depends(get_token_manager),
) -> User:
    """
    Dependency that validates the session token and returns current user.

    Raises:
        UnauthenticatedError: If the token is missing, invalid or expired
    """
    token = extract_token(request, credentials)
    if not token:
        raise UnauthenticatedError("Not authenticated")

    auth_service = AuthService(db, token_manager)
    return await auth_service.get_current_user(token)


async def require_instructor(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.INSTRUCTOR:
        raise ForbiddenError("Instructor access required")
    return current_user


async def require_student(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.STUDENT:
        raise ForbiddenError("Student access required")
    return current_user


# =====================================================
# Services
# =====================================================
def get_auth_service(
    db: AsyncSession = Depends(get_db),
    token_manager: TokenManager = Depends(get_token_manager),
) -> AuthService:
    return AuthService(db, token_manager)


def get_quiz_service(db: AsyncSession = Depends(get_db)) -> QuizService:
    return QuizService(db)


def get_question_service(db: AsyncSession = Depends(get_db)) -> QuestionService:
    return QuestionService(db)


def get_attempt_service(db: AsyncSession = Depends(get_db)) -> QuizAttemptService:
    return QuizAttemptService(db)
