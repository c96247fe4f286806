from fastapi import APIRouter, Depends, Response, status

from quizmaker.schemas.auth import (
    UserRegister,
    UserLogin,
    AuthResponse,
    UserResponse,
    ErrorResponse,
    MessageResponse,
)
from quizmaker.services.auth_service import AuthService
from quizmaker.api.deps import (
    get_auth_service,
    get_current_user,
    set_auth_cookie,
    clear_auth_cookie,
)
from quizmaker.models.user import User

# ============================================================
# Router Setup
# ============================================================

router = APIRouter(tags=["Authentication"])


# ============================================================
# Registration Endpoint
# ============================================================

@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "User created successfully"},
        409: {"model": ErrorResponse, "description": "Email already exists"},
        422: {"description": "Validation error"}
    }
)
async def register(
    user_data: UserRegister,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Register a new user account.

    Returns the token and user info; the token is also set as a cookie.
    """
    user, token = await auth_service.register(user_data)
    set_auth_cookie(response, token)
    return auth_service.build_auth_response(user, token)


# ============================================================
# Login Endpoint
# ============================================================
@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        200: {"description": "Login successful"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    }
)
async def login(
    login_data: UserLogin,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Authenticate user and start a session.

    - **email**: Registered email address
    - **password**: Account password
    """
    user, token = await auth_service.login(login_data)
    set_auth_cookie(response, token)
    return auth_service.build_auth_response(user, token)


# ============================================================
# Logout Endpoint
# ============================================================
@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    """Clear the session cookie. Bearer tokens simply expire."""
    clear_auth_cookie(response)
    return MessageResponse(message="Logged out successfully")


# ============================================================
# Current User Endpoint
# ============================================================
@router.get(
    "/me",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}}
)
async def get_me(current_user: User = Depends(get_current_user)):
    """Return the authenticated user's profile."""
    return current_user
