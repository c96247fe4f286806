import enum

from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Text, DateTime, Enum, func
from sqlalchemy.orm import relationship

from quizmaker.db.database import Base
from .base import generate_id, utcnow


class QuestionType(str, enum.Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    SHORT_ANSWER = "short_answer"


class Question(Base):
    __tablename__ = "questions"

    id = Column(String(36), primary_key=True, default=generate_id, index=True)
    quiz_id = Column(String(36), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)

    # Question content
    question_text = Column(Text, nullable=False)
    question_type = Column(
        Enum(
            QuestionType,
            name="question_type",
            values_callable=lambda x: [e.value for e in x]
        ),
        nullable=False
    )

    # Metadata
    points = Column(Integer, default=1, nullable=False)
    order_index = Column(Integer, default=0, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False
    )

    # Relationships
    quiz = relationship("Quiz", back_populates="questions")
    answer_options = relationship(
        "AnswerOption",
        back_populates="question",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="AnswerOption.order_index"
    )


class AnswerOption(Base):
    """
    A choice attached to one question.

    For short_answer questions the single row's option_text holds JSON
    metadata: {"sampleAnswer": ..., "answerGuidelines": ...}.
    """
    __tablename__ = "answer_options"

    id = Column(String(36), primary_key=True, default=generate_id, index=True)
    question_id = Column(String(36), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)

    option_text = Column(Text, nullable=False)
    is_correct = Column(Boolean, default=False, nullable=False)
    order_index = Column(Integer, default=0, nullable=False)

    # Relationships
    question = relationship("Question", back_populates="answer_options")
