import enum

from sqlalchemy import Column, String, Enum
from sqlalchemy.orm import relationship
from .base import BaseModel


class UserRole(str, enum.Enum):
    STUDENT = "student"
    INSTRUCTOR = "instructor"


class User(BaseModel):
    __tablename__ = "users"

    # Stored lower-cased; uniqueness is therefore case-insensitive
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)
    role = Column(
        "user_type",
        Enum(
            UserRole,
            name="user_type",
            values_callable=lambda x: [e.value for e in x]
        ),
        nullable=False,
        index=True
    )

    # Relationships - User OWNS these
    quizzes = relationship("Quiz", back_populates="instructor", cascade="all, delete-orphan", passive_deletes=True)
    quiz_attempts = relationship("QuizAttempt", back_populates="student", cascade="all, delete-orphan", passive_deletes=True)
