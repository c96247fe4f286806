"""
Question Schemas

Questions are a tagged union on ``question_type``:

- multiple_choice: 2-10 answer options, at least one correct
- true_false:      a single correct_answer flag
- short_answer:    optional sample answer and grading guidelines
"""

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, RootModel, field_validator

from quizmaker.models.question import QuestionType

MIN_CHOICE_OPTIONS = 2
MAX_CHOICE_OPTIONS = 10


def check_choice_options(options: List["AnswerOptionInput"]) -> List["AnswerOptionInput"]:
    if len(options) < MIN_CHOICE_OPTIONS:
        raise ValueError("Multiple choice questions must have at least 2 options")
    if len(options) > MAX_CHOICE_OPTIONS:
        raise ValueError("Multiple choice questions cannot have more than 10 options")
    if not any(option.is_correct for option in options):
        raise ValueError("At least one option must be marked as correct")
    return options


# ============================================================
# Request Schemas
# ============================================================

class AnswerOptionInput(BaseModel):
    """One choice of a multiple choice question."""
    id: Optional[str] = Field(None, description="Ignored on write; options are recreated")
    option_text: str = Field(..., min_length=1, max_length=500)
    is_correct: bool = False
    order_index: int = Field(..., ge=0)

    @field_validator("option_text")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Option text is required")
        return v


class QuestionCreateBase(BaseModel):
    question_text: str = Field(..., min_length=1, max_length=1000)
    points: int = Field(1, ge=1, le=100)
    order_index: Optional[int] = Field(
        None,
        ge=0,
        description="Appended after the last question when omitted"
    )

    @field_validator("question_text")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Question text is required")
        return v


class MultipleChoiceQuestionCreate(QuestionCreateBase):
    question_type: Literal["multiple_choice"] = "multiple_choice"
    answer_options: List[AnswerOptionInput]

    @field_validator("answer_options")
    @classmethod
    def validate_options(cls, v: List[AnswerOptionInput]) -> List[AnswerOptionInput]:
        return check_choice_options(v)


class TrueFalseQuestionCreate(QuestionCreateBase):
    question_type: Literal["true_false"] = "true_false"
    correct_answer: bool


class ShortAnswerQuestionCreate(QuestionCreateBase):
    question_type: Literal["short_answer"] = "short_answer"
    sample_answer: Optional[str] = Field(None, max_length=2000)
    answer_guidelines: Optional[str] = Field(None, max_length=1000)


QuestionCreate = Annotated[
    Union[
        MultipleChoiceQuestionCreate,
        TrueFalseQuestionCreate,
        ShortAnswerQuestionCreate,
    ],
    Field(discriminator="question_type"),
]


class QuestionCreateRequest(RootModel[QuestionCreate]):
    """Request body wrapper for the question union."""


class QuestionUpdate(BaseModel):
    """
    Partial update. Variant fields are applied only when they match the
    stored question type; the others are ignored.
    """
    question_text: Optional[str] = Field(None, min_length=1, max_length=1000)
    points: Optional[int] = Field(None, ge=1, le=100)
    order_index: Optional[int] = Field(None, ge=0)

    # multiple_choice
    answer_options: Optional[List[AnswerOptionInput]] = None
    # true_false
    correct_answer: Optional[bool] = None
    # short_answer
    sample_answer: Optional[str] = Field(None, max_length=2000)
    answer_guidelines: Optional[str] = Field(None, max_length=1000)

    @field_validator("question_text")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("Question text cannot be empty")
        return v

    @field_validator("answer_options")
    @classmethod
    def validate_options(cls, v: Optional[List[AnswerOptionInput]]) -> Optional[List[AnswerOptionInput]]:
        if v is None:
            return None
        return check_choice_options(v)


class QuestionOrderItem(BaseModel):
    question_id: str = Field(..., min_length=1)
    order_index: int = Field(..., ge=0)


class QuestionReorderRequest(BaseModel):
    question_orders: List[QuestionOrderItem] = Field(..., min_length=1)


# ============================================================
# Response Schemas
# ============================================================

class AnswerOptionResponse(BaseModel):
    id: str
    question_id: str
    option_text: str
    is_correct: bool
    order_index: int

    class Config:
        from_attributes = True


class QuestionResponse(BaseModel):
    """A question joined with its answer options."""
    id: str
    quiz_id: str
    question_text: str
    question_type: QuestionType
    points: int
    order_index: int
    created_at: datetime
    answer_options: List[AnswerOptionResponse] = Field(default_factory=list)

    # Decoded variant data
    correct_answer: Optional[bool] = None
    sample_answer: Optional[str] = None
    answer_guidelines: Optional[str] = None

    class Config:
        from_attributes = True


class QuestionListResponse(BaseModel):
    questions: List[QuestionResponse]
    total: int
