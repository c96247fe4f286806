"""
Quiz Schemas

Pydantic models for quiz-related API requests and responses.
"""

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field, field_validator, model_validator

from quizmaker.schemas.attempt import AttemptResponse


# ============================================================
# Request Schemas
# ============================================================

class QuizCreate(BaseModel):
    """Request to create a draft quiz."""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    duration_minutes: Optional[int] = Field(None, ge=1, le=600)
    passing_score: Optional[int] = Field(None, ge=0, le=100)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator("description")
    @classmethod
    def blank_description_is_null(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class QuizUpdate(BaseModel):
    """
    Partial update. Only fields present in the request body change;
    an explicit null clears description, duration or passing score.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    duration_minutes: Optional[int] = Field(None, ge=1, le=600)
    passing_score: Optional[int] = Field(None, ge=0, le=100)
    is_published: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be empty")
        return v

    @field_validator("description")
    @classmethod
    def blank_description_is_null(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        for name in ("title", "is_published"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


# ============================================================
# Response Schemas
# ============================================================

class QuizResponse(BaseModel):
    """Quiz metadata response."""
    id: str
    title: str
    description: Optional[str] = None
    instructor_id: str
    duration_minutes: Optional[int] = None
    passing_score: Optional[int] = None
    is_published: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class QuizWithInstructorResponse(QuizResponse):
    """Quiz joined with its owner's display details."""
    instructor_name: str
    instructor_email: str


class StudentQuizSummary(QuizWithInstructorResponse):
    """Published quiz as listed to students."""
    question_count: int


class QuizListResponse(BaseModel):
    quizzes: List[QuizResponse]
    total: int


class QuizStatsResponse(BaseModel):
    """
    Attempt aggregates for one quiz.

    average_score is the mean raw score of completed attempts (not a
    percentage); pass_rate is a percentage of completed attempts.
    """
    quiz_id: str
    total_attempts: int
    completed_attempts: int
    average_score: Optional[float] = None
    pass_rate: Optional[float] = None


class PublishCheckResponse(BaseModel):
    can_publish: bool
    reason: Optional[str] = None
    question_count: int


class QuizDetailResponse(BaseModel):
    """Quiz with question count; stats only for the owning instructor."""
    quiz: QuizWithInstructorResponse
    question_count: int
    stats: Optional[QuizStatsResponse] = None


class StudentQuizDetailResponse(BaseModel):
    """Quiz as seen by a student, with their own attempt history."""
    quiz: QuizWithInstructorResponse
    question_count: int
    active_attempt: Optional[AttemptResponse] = None
    attempts: List[AttemptResponse]
