from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from quizmaker.models.quiz_attempt import AttemptStatus


# ============================================================
# Request Schemas
# ============================================================

class AttemptCompleteRequest(BaseModel):
    """Externally computed result of an attempt."""
    score: int = Field(..., ge=0)
    total_points: int = Field(..., ge=0)

    @model_validator(mode="after")
    def score_within_total(self):
        if self.score > self.total_points:
            raise ValueError("score cannot exceed total_points")
        return self


# ============================================================
# Response Schemas
# ============================================================

class AttemptResponse(BaseModel):
    id: str
    quiz_id: str
    student_id: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    score: Optional[int] = None
    total_points: Optional[int] = None
    status: AttemptStatus

    class Config:
        from_attributes = True


class AttemptWithDetailsResponse(AttemptResponse):
    quiz_title: str
    quiz_description: Optional[str] = None
    quiz_duration_minutes: Optional[int] = None
    quiz_passing_score: Optional[int] = None
    instructor_name: str


class StudentStatsResponse(BaseModel):
    total_attempts: int
    completed_attempts: int
    average_score_percentage: Optional[float] = None
