import enum

from sqlalchemy import Column, String, Integer, ForeignKey, DateTime, Enum, Index, func, text
from sqlalchemy.orm import relationship

from quizmaker.db.database import Base
from .base import generate_id, utcnow


class AttemptStatus(str, enum.Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"
    __table_args__ = (
        # At most one in-progress attempt per (quiz, student)
        Index(
            "uq_quiz_attempts_active",
            "quiz_id",
            "student_id",
            unique=True,
            postgresql_where=text("status = 'in_progress'"),
            sqlite_where=text("status = 'in_progress'"),
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_id, index=True)
    quiz_id = Column(String(36), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Timing
    started_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False, index=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # Results (nullable because filled after completion)
    score = Column(Integer, nullable=True)
    total_points = Column(Integer, nullable=True)

    status = Column(
        Enum(
            AttemptStatus,
            name="attempt_status",
            values_callable=lambda x: [e.value for e in x]
        ),
        default=AttemptStatus.IN_PROGRESS,
        nullable=False,
        index=True
    )

    # Relationships
    student = relationship("User", back_populates="quiz_attempts")
    quiz = relationship("Quiz", back_populates="attempts")
