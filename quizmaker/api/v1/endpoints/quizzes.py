"""
Quiz Endpoints

Instructor quiz management:
- POST   /quizzes                  - Create a draft quiz
- GET    /quizzes                  - Own quizzes (instructors) or published ones
- GET    /quizzes/{id}             - Quiz detail with question count and owner stats
- PATCH  /quizzes/{id}             - Partial update
- DELETE /quizzes/{id}             - Delete quiz and everything under it
- POST   /quizzes/{id}/publish     - Publish (needs at least one question)
- POST   /quizzes/{id}/unpublish   - Back to draft
- GET    /quizzes/{id}/can-publish - Publish readiness check
"""

from fastapi import APIRouter, Depends, Query, status

from quizmaker.api.deps import get_current_user, get_quiz_service, require_instructor
from quizmaker.core.exceptions import NotFoundError, ValidationFailedError
from quizmaker.models.user import User, UserRole
from quizmaker.schemas.auth import ErrorResponse
from quizmaker.schemas.quiz import (
    QuizCreate,
    QuizUpdate,
    QuizResponse,
    QuizListResponse,
    QuizDetailResponse,
    QuizWithInstructorResponse,
    PublishCheckResponse,
)
from quizmaker.services.quiz_service import QuizService

router = APIRouter(tags=["Quizzes"])


def is_visible(quiz: QuizWithInstructorResponse, user: User) -> bool:
    """Drafts are only visible to their owner."""
    return quiz.is_published or quiz.instructor_id == user.id


async def get_visible_quiz(
    quiz_id: str,
    user: User,
    service: QuizService
) -> QuizWithInstructorResponse:
    quiz = await service.get_with_instructor_info(quiz_id)
    if not quiz or not is_visible(quiz, user):
        raise NotFoundError("Quiz not found", {"quiz_id": quiz_id})
    return quiz


async def ensure_publishable(quiz_id: str, service: QuizService) -> None:
    check = await service.can_publish(quiz_id)
    if not check.can_publish:
        raise ValidationFailedError(check.reason, {"quiz_id": quiz_id})


# ============================================================
# CREATE QUIZ
# ============================================================

@router.post(
    "",
    response_model=QuizResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"model": ErrorResponse, "description": "Instructor access required"},
    }
)
async def create_quiz(
    quiz_data: QuizCreate,
    current_user: User = Depends(require_instructor),
    service: QuizService = Depends(get_quiz_service),
):
    """Create an unpublished quiz owned by the caller."""
    return await service.create_quiz(quiz_data, current_user.id)


# ============================================================
# LIST QUIZZES
# ============================================================

@router.get("", response_model=QuizListResponse)
async def list_quizzes(
    published: bool = Query(False, description="Only list published quizzes"),
    current_user: User = Depends(get_current_user),
    service: QuizService = Depends(get_quiz_service),
):
    """Instructors see their own quizzes; everyone else sees published ones."""
    if current_user.role == UserRole.INSTRUCTOR and not published:
        quizzes = await service.list_by_instructor(current_user.id)
        items = [QuizResponse.model_validate(q) for q in quizzes]
    else:
        items = await service.list_published()

    return QuizListResponse(quizzes=items, total=len(items))


# ============================================================
# GET QUIZ
# ============================================================

@router.get(
    "/{quiz_id}",
    response_model=QuizDetailResponse,
    responses={404: {"model": ErrorResponse, "description": "Quiz not found"}}
)
async def get_quiz(
    quiz_id: str,
    current_user: User = Depends(get_current_user),
    service: QuizService = Depends(get_quiz_service),
):
    quiz = await get_visible_quiz(quiz_id, current_user, service)

    stats = None
    if quiz.instructor_id == current_user.id:
        stats = await service.get_stats(quiz_id)

    return QuizDetailResponse(
        quiz=quiz,
        question_count=await service.get_question_count(quiz_id),
        stats=stats,
    )


# ============================================================
# UPDATE QUIZ
# ============================================================

@router.patch(
    "/{quiz_id}",
    response_model=QuizResponse,
    responses={
        403: {"model": ErrorResponse, "description": "Not the quiz owner"},
        404: {"model": ErrorResponse, "description": "Quiz not found"},
        422: {"model": ErrorResponse, "description": "Quiz cannot be published"},
    }
)
async def update_quiz(
    quiz_id: str,
    quiz_data: QuizUpdate,
    current_user: User = Depends(require_instructor),
    service: QuizService = Depends(get_quiz_service),
):
    """
    Partial update. Setting is_published to true runs the same check as
    the publish endpoint.
    """
    if quiz_data.is_published:
        await service.get_owned_quiz(quiz_id, current_user.id)
        await ensure_publishable(quiz_id, service)

    return await service.update_quiz(quiz_id, current_user.id, quiz_data)


# ============================================================
# DELETE QUIZ
# ============================================================

@router.delete(
    "/{quiz_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        204: {"description": "Quiz deleted successfully"},
        403: {"model": ErrorResponse, "description": "Not the quiz owner"},
        404: {"model": ErrorResponse, "description": "Quiz not found"},
    }
)
async def delete_quiz(
    quiz_id: str,
    current_user: User = Depends(require_instructor),
    service: QuizService = Depends(get_quiz_service),
):
    """Delete a quiz with its questions and attempts."""
    await service.delete_quiz(quiz_id, current_user.id)
    return None


# ============================================================
# PUBLISHING
# ============================================================

@router.post("/{quiz_id}/publish", response_model=QuizResponse)
async def publish_quiz(
    quiz_id: str,
    current_user: User = Depends(require_instructor),
    service: QuizService = Depends(get_quiz_service),
):
    await service.get_owned_quiz(quiz_id, current_user.id)
    await ensure_publishable(quiz_id, service)
    return await service.publish_quiz(quiz_id, current_user.id)


@router.post("/{quiz_id}/unpublish", response_model=QuizResponse)
async def unpublish_quiz(
    quiz_id: str,
    current_user: User = Depends(require_instructor),
    service: QuizService = Depends(get_quiz_service),
):
    return await service.unpublish_quiz(quiz_id, current_user.id)


@router.get("/{quiz_id}/can-publish", response_model=PublishCheckResponse)
async def can_publish(
    quiz_id: str,
    current_user: User = Depends(require_instructor),
    service: QuizService = Depends(get_quiz_service),
):
    await service.get_owned_quiz(quiz_id, current_user.id)
    return await service.can_publish(quiz_id)
