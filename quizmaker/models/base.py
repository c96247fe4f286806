"""
Base Model Module

This module provides a base class for all SQLAlchemy models with common fields:
- id: Primary key (opaque UUID string)
- created_at: Timestamp when record was created
- updated_at: Timestamp when record was last update
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, func

from quizmaker.db.database import Base


def generate_id() -> str:
    """Opaque, globally unique identifier stored as text."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel(Base):
    """
    Abstract base model class that provides common fields for all models.

    Attributes:
        id (str): Primary key, auto-generated UUID string
        created_at (DateTime): Timestamp set automatically when record is created
        updated_at (DateTime): Timestamp updated automatically when record is modified
    """

    # This makes the class abstract - no table will be created for BaseModel itself
    __abstract__ = True

    id = Column(
        String(36),
        primary_key=True,
        default=generate_id,
        nullable=False,
        index=True
    )

    created_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False
    )

    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False
    )

    def __repr__(self):
        """String representation for debugging."""
        return f"<{self.__class__.__name__}(id={self.id})>"
