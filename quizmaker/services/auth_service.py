import logging
from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from quizmaker.core.exceptions import InvalidCredentialsError, UnauthenticatedError
from quizmaker.core.security import TokenManager
from quizmaker.models import User
from quizmaker.schemas.auth import UserRegister, UserLogin, AuthResponse, UserResponse
from quizmaker.services.user_service import UserService

logger = logging.getLogger(__name__)


class AuthService:
    """
    Service class for authentication operations.

    """
    def __init__(self, db: AsyncSession, token_manager: TokenManager):
        """
        Initialize with database session and token manager.

        Args:
            db: AsyncSession instance
            token_manager: Signs and verifies session tokens
        """
        self.db = db
        self.token_manager = token_manager
        self.user_service = UserService(db)

    # ============================================================
    # User Registration
    # ============================================================
    async def register(self, user_data: UserRegister) -> Tuple[User, str]:
        """
        Register a new user.

        Args:
            user_data: Validated registration data

        Returns:
            The created user and a freshly issued token

        Raises:
            DuplicateEmailError: If email already exists
        """
        user = await self.user_service.create_user(
            email=user_data.email,
            password=user_data.password,
            full_name=user_data.full_name,
            role=user_data.role,
        )
        return user, self._issue(user)

    # ============================================================
    # User Login
    # ============================================================
    async def login(self, login_data: UserLogin) -> Tuple[User, str]:
        """
        Authenticate user and return a token.

        Raises:
            InvalidCredentialsError: If credentials are invalid
        """
        user = await self.user_service.verify_credentials(
            login_data.email,
            login_data.password
        )

        if not user:
            raise InvalidCredentialsError("Invalid email or password")

        return user, self._issue(user)

    # ============================================================
    # Get Current User
    # ============================================================
    async def get_current_user(self, token: str) -> User:
        """
        Get user from a session token.

        Raises:
            UnauthenticatedError: If token is invalid or the user is gone
        """
        principal = self.token_manager.verify_token(token)

        if not principal:
            raise UnauthenticatedError("Invalid or expired token")

        user = await self.user_service.get_by_id(principal.user_id)

        if not user:
            raise UnauthenticatedError("User not found")

        return user

    # ============================================================
    # Helper Methods
    # ============================================================
    def _issue(self, user: User) -> str:
        return self.token_manager.issue_token(user.id, user.role.value)

    def build_auth_response(self, user: User, token: str) -> AuthResponse:
        return AuthResponse(
            access_token=token,
            token_type="bearer",
            expires_in=self.token_manager.expire_days * 24 * 60 * 60,
            user=UserResponse.model_validate(user),
        )
