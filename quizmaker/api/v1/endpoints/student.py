"""
Student Endpoints

Browsing published quizzes and running attempts:
- GET  /student/quizzes                 - Published quizzes with question counts
- GET  /student/quizzes/{id}            - Quiz, active attempt and own history
- POST /student/quizzes/{id}/start      - Start an attempt
- GET  /student/attempts                - Own attempts, newest first
- GET  /student/attempts/{id}           - One attempt with quiz details
- POST /student/attempts/{id}/complete  - Record the result
- POST /student/attempts/{id}/abandon   - Give up
- GET  /student/stats                   - Attempt summary
"""

from typing import List

from fastapi import APIRouter, Depends, status

from quizmaker.api.deps import get_attempt_service, get_quiz_service, require_student
from quizmaker.core.exceptions import NotFoundError
from quizmaker.models.user import User
from quizmaker.schemas.attempt import (
    AttemptCompleteRequest,
    AttemptResponse,
    AttemptWithDetailsResponse,
    StudentStatsResponse,
)
from quizmaker.schemas.auth import ErrorResponse
from quizmaker.schemas.quiz import (
    QuizWithInstructorResponse,
    StudentQuizDetailResponse,
    StudentQuizSummary,
)
from quizmaker.services.attempt_service import QuizAttemptService
from quizmaker.services.quiz_service import QuizService

router = APIRouter(tags=["Student"])


async def get_published_quiz(quiz_id: str, service: QuizService) -> QuizWithInstructorResponse:
    quiz = await service.get_with_instructor_info(quiz_id)
    if not quiz or not quiz.is_published:
        raise NotFoundError("Quiz not found", {"quiz_id": quiz_id})
    return quiz


async def ensure_own_attempt(attempt_id: str, student: User, service: QuizAttemptService) -> None:
    # Someone else's attempt is reported as missing
    attempt = await service.get_by_id(attempt_id)
    if not attempt or attempt.student_id != student.id:
        raise NotFoundError("Quiz attempt not found", {"attempt_id": attempt_id})


# ============================================================
# QUIZZES
# ============================================================

@router.get("/quizzes", response_model=List[StudentQuizSummary])
async def list_available_quizzes(
    current_user: User = Depends(require_student),
    service: QuizService = Depends(get_quiz_service),
):
    return await service.list_published_with_counts()


@router.get(
    "/quizzes/{quiz_id}",
    response_model=StudentQuizDetailResponse,
    responses={404: {"model": ErrorResponse, "description": "Quiz not found"}}
)
async def get_quiz(
    quiz_id: str,
    current_user: User = Depends(require_student),
    quiz_service: QuizService = Depends(get_quiz_service),
    attempt_service: QuizAttemptService = Depends(get_attempt_service),
):
    quiz = await get_published_quiz(quiz_id, quiz_service)

    active = await attempt_service.get_active(quiz_id, current_user.id)
    attempts = await attempt_service.list_by_quiz_for_student(quiz_id, current_user.id)

    return StudentQuizDetailResponse(
        quiz=quiz,
        question_count=await quiz_service.get_question_count(quiz_id),
        active_attempt=AttemptResponse.model_validate(active) if active else None,
        attempts=[AttemptResponse.model_validate(a) for a in attempts],
    )


@router.post(
    "/quizzes/{quiz_id}/start",
    response_model=AttemptResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse, "description": "Quiz not found"},
        409: {"model": ErrorResponse, "description": "Attempt already in progress"},
    }
)
async def start_attempt(
    quiz_id: str,
    current_user: User = Depends(require_student),
    quiz_service: QuizService = Depends(get_quiz_service),
    attempt_service: QuizAttemptService = Depends(get_attempt_service),
):
    await get_published_quiz(quiz_id, quiz_service)
    return await attempt_service.create_attempt(quiz_id, current_user.id)


# ============================================================
# ATTEMPTS
# ============================================================

@router.get("/attempts", response_model=List[AttemptWithDetailsResponse])
async def list_attempts(
    current_user: User = Depends(require_student),
    service: QuizAttemptService = Depends(get_attempt_service),
):
    return await service.list_by_student(current_user.id)


@router.get(
    "/attempts/{attempt_id}",
    response_model=AttemptWithDetailsResponse,
    responses={404: {"model": ErrorResponse, "description": "Attempt not found"}}
)
async def get_attempt(
    attempt_id: str,
    current_user: User = Depends(require_student),
    service: QuizAttemptService = Depends(get_attempt_service),
):
    await ensure_own_attempt(attempt_id, current_user, service)
    return await service.get_with_details(attempt_id)


@router.post(
    "/attempts/{attempt_id}/complete",
    response_model=AttemptResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Attempt not found"},
        409: {"model": ErrorResponse, "description": "Attempt is not in progress"},
    }
)
async def complete_attempt(
    attempt_id: str,
    result: AttemptCompleteRequest,
    current_user: User = Depends(require_student),
    service: QuizAttemptService = Depends(get_attempt_service),
):
    await ensure_own_attempt(attempt_id, current_user, service)
    return await service.complete_attempt(attempt_id, result.score, result.total_points)


@router.post(
    "/attempts/{attempt_id}/abandon",
    response_model=AttemptResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Attempt not found"},
        409: {"model": ErrorResponse, "description": "Attempt is not in progress"},
    }
)
async def abandon_attempt(
    attempt_id: str,
    current_user: User = Depends(require_student),
    service: QuizAttemptService = Depends(get_attempt_service),
):
    await ensure_own_attempt(attempt_id, current_user, service)
    return await service.abandon_attempt(attempt_id)


@router.get("/stats", response_model=StudentStatsResponse)
async def get_stats(
    current_user: User = Depends(require_student),
    service: QuizAttemptService = Depends(get_attempt_service),
):
    return await service.get_student_stats(current_user.id)
