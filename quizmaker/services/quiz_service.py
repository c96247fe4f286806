"""
Quiz Service

Business logic for the quiz lifecycle:
- Draft creation by instructors
- Ownership-checked updates and deletion
- Publish gating and attempt statistics
"""

import logging
from typing import List, Optional

from sqlalchemy import Row
from sqlalchemy.ext.asyncio import AsyncSession

from quizmaker.core.exceptions import (
    ForbiddenError,
    InvalidInstructorError,
    NotFoundError,
)
from quizmaker.models import Quiz
from quizmaker.models.base import utcnow
from quizmaker.repositories.quiz_repo import QuizRepository, QuestionRepository
from quizmaker.repositories.user_repo import UserRepository
from quizmaker.schemas.quiz import (
    QuizCreate,
    QuizUpdate,
    QuizResponse,
    QuizWithInstructorResponse,
    StudentQuizSummary,
    QuizStatsResponse,
    PublishCheckResponse,
)
from quizmaker.services.base import BaseService

logger = logging.getLogger(__name__)

NO_QUESTIONS_REASON = "Quiz must have at least one question to be published"


def to_quiz_with_instructor(row: Row) -> QuizWithInstructorResponse:
    quiz, instructor_name, instructor_email = row
    return QuizWithInstructorResponse(
        **QuizResponse.model_validate(quiz).model_dump(),
        instructor_name=instructor_name,
        instructor_email=instructor_email,
    )


class QuizService(BaseService):
    """Service for quiz authoring and lifecycle."""

    def __init__(self, db: AsyncSession):
        super().__init__(db)
        self.quiz_repo = QuizRepository(db)
        self.question_repo = QuestionRepository(db)
        self.user_repo = UserRepository(db)

    # ============================================================
    # CREATE QUIZ
    # ============================================================

    async def create_quiz(self, quiz_data: QuizCreate, instructor_id: str) -> Quiz:
        """
        Create an unpublished quiz owned by an instructor.

        Raises:
            InvalidInstructorError: If the user is missing or not an instructor
        """
        instructor = await self.user_repo.get_instructor(instructor_id)
        if not instructor:
            raise InvalidInstructorError(
                "Invalid instructor ID or user is not an instructor",
                {"instructor_id": instructor_id}
            )

        async with self.transaction():
            quiz = await self.quiz_repo.create(
                title=quiz_data.title,
                description=quiz_data.description,
                instructor_id=instructor_id,
                duration_minutes=quiz_data.duration_minutes,
                passing_score=quiz_data.passing_score,
                is_published=False,
            )

        logger.info(f"Quiz created: {quiz.id} by instructor {instructor_id}")
        return quiz

    # ============================================================
    # READS
    # ============================================================

    async def get_by_id(self, quiz_id: str) -> Optional[Quiz]:
        return await self.quiz_repo.get_by_id(quiz_id)

    async def get_with_instructor_info(self, quiz_id: str) -> Optional[QuizWithInstructorResponse]:
        row = await self.quiz_repo.get_with_instructor(quiz_id)
        return to_quiz_with_instructor(row) if row else None

    async def list_by_instructor(self, instructor_id: str) -> List[Quiz]:
        return await self.quiz_repo.get_by_instructor(instructor_id)

    async def list_published(self) -> List[QuizWithInstructorResponse]:
        rows = await self.quiz_repo.get_published_with_instructor()
        return [to_quiz_with_instructor(row) for row in rows]

    async def list_published_with_counts(self) -> List[StudentQuizSummary]:
        quizzes = await self.list_published()
        counts = await self.question_repo.count_by_quizzes([q.id for q in quizzes])
        return [
            StudentQuizSummary(**q.model_dump(), question_count=counts.get(q.id, 0))
            for q in quizzes
        ]

    async def list_all(self) -> List[QuizWithInstructorResponse]:
        rows = await self.quiz_repo.get_all_with_instructor()
        return [to_quiz_with_instructor(row) for row in rows]

    async def get_owned_quiz(self, quiz_id: str, requester_id: str) -> Quiz:
        """
        Load a quiz the requester owns.

        Raises:
            NotFoundError: If the quiz does not exist
            ForbiddenError: If the requester is not the owner
        """
        quiz = await self.quiz_repo.get_by_id(quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found", {"quiz_id": quiz_id})

        if quiz.instructor_id != requester_id:
            raise ForbiddenError(
                "You do not have permission to modify this quiz",
                {"quiz_id": quiz_id}
            )
        return quiz

    # ============================================================
    # UPDATE QUIZ
    # ============================================================

    async def update_quiz(
        self,
        quiz_id: str,
        requester_id: str,
        quiz_data: QuizUpdate
    ) -> Quiz:
        """
        Apply a partial update.

        Only fields explicitly present in ``quiz_data`` change. The
        is_published flag is written as given; callers run can_publish()
        before publishing.
        """
        await self.get_owned_quiz(quiz_id, requester_id)

        update_data = quiz_data.model_dump(exclude_unset=True)

        async with self.transaction():
            quiz = await self.quiz_repo.update(
                quiz_id,
                **update_data,
                updated_at=utcnow()
            )

        if "is_published" in update_data:
            state = "published" if update_data["is_published"] else "unpublished"
            logger.info(f"Quiz {quiz_id} {state}")
        return quiz

    async def publish_quiz(self, quiz_id: str, requester_id: str) -> Quiz:
        return await self.update_quiz(quiz_id, requester_id, QuizUpdate(is_published=True))

    async def unpublish_quiz(self, quiz_id: str, requester_id: str) -> Quiz:
        return await self.update_quiz(quiz_id, requester_id, QuizUpdate(is_published=False))

    async def can_publish(self, quiz_id: str) -> PublishCheckResponse:
        question_count = await self.get_question_count(quiz_id)

        if question_count == 0:
            return PublishCheckResponse(
                can_publish=False,
                reason=NO_QUESTIONS_REASON,
                question_count=0,
            )

        return PublishCheckResponse(can_publish=True, question_count=question_count)

    # ============================================================
    # DELETE QUIZ
    # ============================================================

    async def delete_quiz(self, quiz_id: str, requester_id: str) -> bool:
        """Ownership-checked delete; questions, options and attempts cascade."""
        await self.get_owned_quiz(quiz_id, requester_id)

        async with self.transaction():
            deleted = await self.quiz_repo.delete(quiz_id)

        logger.info(f"Quiz deleted: {quiz_id}")
        return deleted

    # ============================================================
    # STATISTICS
    # ============================================================

    async def get_stats(self, quiz_id: str) -> QuizStatsResponse:
        """
        Attempt aggregates.

        average_score averages raw completed scores. pass_rate is None when
        nothing is completed or the quiz has no passing score.
        """
        quiz = await self.quiz_repo.get_by_id(quiz_id)
        passing_score = quiz.passing_score if quiz else None

        stats = await self.quiz_repo.get_attempt_stats(quiz_id, passing_score)
        completed = stats["completed_attempts"]

        pass_rate = None
        if completed > 0 and passing_score is not None:
            pass_rate = stats["passed_attempts"] * 100.0 / completed

        return QuizStatsResponse(
            quiz_id=quiz_id,
            total_attempts=stats["total_attempts"],
            completed_attempts=completed,
            average_score=stats["average_score"],
            pass_rate=pass_rate,
        )

    async def get_question_count(self, quiz_id: str) -> int:
        return await self.question_repo.count_by_quiz(quiz_id)
