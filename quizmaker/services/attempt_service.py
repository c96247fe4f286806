"""
Quiz Attempt Service

Attempt lifecycle for students:

    in_progress -> completed
    in_progress -> abandoned

Terminal states never change. Scores are computed elsewhere and recorded
verbatim on completion.
"""

import logging
from typing import List, Optional

from sqlalchemy import Row
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from quizmaker.core.exceptions import (
    ActiveAttemptExistsError,
    InvalidStateError,
    NotFoundError,
    StoreError,
)
from quizmaker.models import QuizAttempt
from quizmaker.models.quiz_attempt import AttemptStatus
from quizmaker.repositories.quiz_repo import QuizRepository, QuizAttemptRepository
from quizmaker.schemas.attempt import (
    AttemptResponse,
    AttemptWithDetailsResponse,
    StudentStatsResponse,
)
from quizmaker.services.base import BaseService

logger = logging.getLogger(__name__)


def to_attempt_with_details(row: Row) -> AttemptWithDetailsResponse:
    attempt = row[0]
    return AttemptWithDetailsResponse(
        **AttemptResponse.model_validate(attempt).model_dump(),
        quiz_title=row.quiz_title,
        quiz_description=row.quiz_description,
        quiz_duration_minutes=row.quiz_duration_minutes,
        quiz_passing_score=row.quiz_passing_score,
        instructor_name=row.instructor_name,
    )


class QuizAttemptService(BaseService):
    """Service for starting, finishing and summarizing quiz attempts."""

    def __init__(self, db: AsyncSession):
        super().__init__(db)
        self.quiz_repo = QuizRepository(db)
        self.attempt_repo = QuizAttemptRepository(db)

    # ============================================================
    # START ATTEMPT
    # ============================================================

    async def create_attempt(self, quiz_id: str, student_id: str) -> QuizAttempt:
        """
        Start an attempt.

        The insert goes straight to the Store; the partial unique index on
        in-progress attempts rejects a second one for the same quiz and
        student, including one racing this call.

        Raises:
            NotFoundError: If the quiz does not exist
            ActiveAttemptExistsError: If an in-progress attempt already exists
        """
        quiz = await self.quiz_repo.get_by_id(quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found", {"quiz_id": quiz_id})

        try:
            async with self.transaction():
                attempt = await self.attempt_repo.create(
                    quiz_id=quiz_id,
                    student_id=student_id,
                    status=AttemptStatus.IN_PROGRESS,
                )
        except StoreError as e:
            conflict = (
                isinstance(e.__cause__, IntegrityError)
                and await self.attempt_repo.get_active(quiz_id, student_id) is not None
            )
            if conflict:
                raise ActiveAttemptExistsError(
                    "You already have an in-progress attempt for this quiz",
                    {"quiz_id": quiz_id}
                ) from e
            raise

        logger.info(f"Attempt {attempt.id} started on quiz {quiz_id} by student {student_id}")
        return attempt

    # ============================================================
    # READS
    # ============================================================

    async def get_by_id(self, attempt_id: str) -> Optional[QuizAttempt]:
        return await self.attempt_repo.get_by_id(attempt_id)

    async def get_with_details(self, attempt_id: str) -> Optional[AttemptWithDetailsResponse]:
        row = await self.attempt_repo.get_with_details(attempt_id)
        return to_attempt_with_details(row) if row else None

    async def list_by_student(self, student_id: str) -> List[AttemptWithDetailsResponse]:
        rows = await self.attempt_repo.get_by_student_with_details(student_id)
        return [to_attempt_with_details(row) for row in rows]

    async def get_active(self, quiz_id: str, student_id: str) -> Optional[QuizAttempt]:
        return await self.attempt_repo.get_active(quiz_id, student_id)

    async def list_by_quiz_for_student(self, quiz_id: str, student_id: str) -> List[QuizAttempt]:
        return await self.attempt_repo.get_user_attempts(quiz_id, student_id)

    # ============================================================
    # FINISH ATTEMPT
    # ============================================================

    async def complete_attempt(
        self,
        attempt_id: str,
        score: int,
        total_points: int
    ) -> QuizAttempt:
        """
        Record a result and close the attempt.

        Raises:
            NotFoundError: If the attempt does not exist
            InvalidStateError: If the attempt is no longer in progress
        """
        await self._get_in_progress(attempt_id)

        async with self.transaction():
            finished = await self.attempt_repo.complete(attempt_id, score, total_points)
            if not finished:
                # Another request closed it first
                raise InvalidStateError(
                    "Quiz attempt is not in progress",
                    {"attempt_id": attempt_id}
                )

        logger.info(f"Attempt {attempt_id} completed: {score}/{total_points}")
        return await self._reload(attempt_id)

    async def abandon_attempt(self, attempt_id: str) -> QuizAttempt:
        """Close an in-progress attempt without a score."""
        await self._get_in_progress(attempt_id)

        async with self.transaction():
            finished = await self.attempt_repo.abandon(attempt_id)
            if not finished:
                raise InvalidStateError(
                    "Quiz attempt is not in progress",
                    {"attempt_id": attempt_id}
                )

        logger.info(f"Attempt {attempt_id} abandoned")
        return await self._reload(attempt_id)

    # ============================================================
    # STATISTICS
    # ============================================================

    async def get_student_stats(self, student_id: str) -> StudentStatsResponse:
        stats = await self.attempt_repo.get_student_stats(student_id)
        return StudentStatsResponse(**stats)

    # ============================================================
    # Helper Methods
    # ============================================================

    async def _get_in_progress(self, attempt_id: str) -> QuizAttempt:
        attempt = await self.attempt_repo.get_by_id(attempt_id)
        if not attempt:
            raise NotFoundError("Quiz attempt not found", {"attempt_id": attempt_id})

        if attempt.status != AttemptStatus.IN_PROGRESS:
            raise InvalidStateError(
                "Quiz attempt is not in progress",
                {"attempt_id": attempt_id, "status": attempt.status.value}
            )
        return attempt

    async def _reload(self, attempt_id: str) -> QuizAttempt:
        attempt = await self.attempt_repo.get_by_id(attempt_id)
        await self.db.refresh(attempt)
        return attempt
