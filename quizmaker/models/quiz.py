from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Text
from sqlalchemy.orm import relationship
from .base import BaseModel


class Quiz(BaseModel):
    __tablename__ = "quizzes"

    instructor_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Quiz info
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    # Settings
    duration_minutes = Column(Integer, nullable=True)  # NULL = no limit
    passing_score = Column(Integer, nullable=True)     # percentage, 0-100
    is_published = Column(Boolean, default=False, nullable=False, index=True)

    # Relationships
    instructor = relationship("User", back_populates="quizzes")
    questions = relationship(
        "Question",
        back_populates="quiz",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Question.order_index"
    )
    attempts = relationship("QuizAttempt", back_populates="quiz", cascade="all, delete-orphan", passive_deletes=True)
