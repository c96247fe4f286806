from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime

from quizmaker.models.user import UserRole


# ============================================================
# Request Schemas (What client sends)
# ============================================================

class UserRegister(BaseModel):
    """Schema for user registration request"""

    email: EmailStr  # Pydantic validates this is a valid email
    password: str = Field(
        min_length=8,
        max_length=100,
        description="Password must be 8-100 characters"
    )
    full_name: str = Field(
        min_length=2,
        max_length=100,
        description="Full name must be 2-100 characters"
    )
    role: UserRole = Field(
        description="Account type: student or instructor"
    )

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        """Remove extra whitespace from name"""
        v = " ".join(v.split())
        if len(v) < 2:
            raise ValueError("Full name must be at least 2 characters long")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "email": "instructor@university.edu",
                "password": "SecurePass123",
                "full_name": "Abebe Kebede",
                "role": "instructor"
            }
        }


class UserLogin(BaseModel):
    """Schema for user login request"""

    email: EmailStr
    password: str = Field(min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "email": "student@university.edu",
                "password": "SecurePass123"
            }
        }


# ============================================================
# Response Schemas (What server sends back)
# ============================================================

class MessageResponse(BaseModel):
    """Schema for simple message responses"""
    message: str
    success: bool = True


class UserResponse(BaseModel):
    """Schema for user data in responses (NO password!)"""

    id: str
    email: str
    full_name: str
    role: UserRole
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True  # Allow creating from ORM model


class AuthResponse(BaseModel):
    """Returned by register and login; the token is also set as a cookie."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int  # Seconds until the token expires
    user: UserResponse


class ErrorResponse(BaseModel):
    """Schema for error responses"""

    detail: str
    kind: str
