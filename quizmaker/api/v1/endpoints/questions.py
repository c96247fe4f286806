"""
Question Endpoints

Nested under /quizzes/{quiz_id}/questions:
- GET    ""               - Questions in order, with answer options
- POST   ""               - Add a question (multiple_choice, true_false, short_answer)
- PUT    "/reorder"       - Move several questions at once
- PATCH  "/{question_id}" - Partial update
- DELETE "/{question_id}" - Remove and close the gap
"""

from fastapi import APIRouter, Depends, status

from quizmaker.api.deps import (
    get_current_user,
    get_question_service,
    get_quiz_service,
    require_instructor,
)
from quizmaker.api.v1.endpoints.quizzes import get_visible_quiz
from quizmaker.core.exceptions import NotFoundError
from quizmaker.models.user import User
from quizmaker.schemas.auth import ErrorResponse
from quizmaker.schemas.question import (
    QuestionCreateRequest,
    QuestionUpdate,
    QuestionReorderRequest,
    QuestionResponse,
    QuestionListResponse,
)
from quizmaker.services.question_service import QuestionService
from quizmaker.services.quiz_service import QuizService

router = APIRouter(tags=["Questions"])


async def ensure_question_in_quiz(quiz_id: str, question_id: str, service: QuestionService) -> None:
    question = await service.get_by_id(question_id)
    if not question or question.quiz_id != quiz_id:
        raise NotFoundError("Question not found", {"question_id": question_id})


@router.get(
    "",
    response_model=QuestionListResponse,
    responses={404: {"model": ErrorResponse, "description": "Quiz not found"}}
)
async def list_questions(
    quiz_id: str,
    current_user: User = Depends(get_current_user),
    quiz_service: QuizService = Depends(get_quiz_service),
    service: QuestionService = Depends(get_question_service),
):
    await get_visible_quiz(quiz_id, current_user, quiz_service)

    questions = await service.list_by_quiz(quiz_id)
    return QuestionListResponse(questions=questions, total=len(questions))


@router.post(
    "",
    response_model=QuestionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"model": ErrorResponse, "description": "Not the quiz owner"},
        404: {"model": ErrorResponse, "description": "Quiz not found"},
    }
)
async def create_question(
    quiz_id: str,
    question_data: QuestionCreateRequest,
    current_user: User = Depends(require_instructor),
    service: QuestionService = Depends(get_question_service),
):
    """
    Add a question.

    - **multiple_choice**: 2-10 answer_options, at least one correct
    - **true_false**: correct_answer
    - **short_answer**: optional sample_answer and answer_guidelines
    """
    return await service.create_question(quiz_id, question_data.root, current_user.id)


@router.put("/reorder", response_model=QuestionListResponse)
async def reorder_questions(
    quiz_id: str,
    reorder_data: QuestionReorderRequest,
    current_user: User = Depends(require_instructor),
    service: QuestionService = Depends(get_question_service),
):
    questions = await service.reorder_questions(
        quiz_id,
        current_user.id,
        reorder_data.question_orders
    )
    return QuestionListResponse(questions=questions, total=len(questions))


@router.patch(
    "/{question_id}",
    response_model=QuestionResponse,
    responses={
        403: {"model": ErrorResponse, "description": "Not the quiz owner"},
        404: {"model": ErrorResponse, "description": "Question not found"},
    }
)
async def update_question(
    quiz_id: str,
    question_id: str,
    question_data: QuestionUpdate,
    current_user: User = Depends(require_instructor),
    service: QuestionService = Depends(get_question_service),
):
    await ensure_question_in_quiz(quiz_id, question_id, service)
    return await service.update_question(question_id, current_user.id, question_data)


@router.delete(
    "/{question_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        204: {"description": "Question deleted successfully"},
        403: {"model": ErrorResponse, "description": "Not the quiz owner"},
        404: {"model": ErrorResponse, "description": "Question not found"},
    }
)
async def delete_question(
    quiz_id: str,
    question_id: str,
    current_user: User = Depends(require_instructor),
    service: QuestionService = Depends(get_question_service),
):
    await ensure_question_in_quiz(quiz_id, question_id, service)
    await service.delete_question(question_id, current_user.id)
    return None
