"""
Quiz Repository

Data access layer for Quiz, Question, AnswerOption, and QuizAttempt models.
"""

from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import Row, and_, case, delete, func, select, update

from quizmaker.repositories.base import BaseRepository
from quizmaker.models.base import utcnow
from quizmaker.models.user import User
from quizmaker.models.quiz import Quiz
from quizmaker.models.question import Question, AnswerOption
from quizmaker.models.quiz_attempt import QuizAttempt, AttemptStatus


class QuizRepository(BaseRepository[Quiz]):
    """Repository for Quiz model."""

    def __init__(self, db: AsyncSession):
        super().__init__(Quiz, db)

    def _with_instructor(self):
        return (
            select(
                self.model,
                User.full_name.label("instructor_name"),
                User.email.label("instructor_email"),
            )
            .join(User, self.model.instructor_id == User.id)
        )

    async def get_with_instructor(self, quiz_id: str) -> Optional[Row]:
        stmt = self._with_instructor().where(self.model.id == quiz_id)
        result = await self.db.execute(stmt)
        return result.first()

    async def get_by_instructor(self, instructor_id: str) -> List[Quiz]:
        stmt = (
            select(self.model)
            .where(self.model.instructor_id == instructor_id)
            .order_by(self.model.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_published_with_instructor(self) -> Sequence[Row]:
        stmt = (
            self._with_instructor()
            .where(self.model.is_published.is_(True))
            .order_by(self.model.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return result.all()

    async def get_all_with_instructor(self) -> Sequence[Row]:
        stmt = self._with_instructor().order_by(self.model.created_at.desc())
        result = await self.db.execute(stmt)
        return result.all()

    async def get_attempt_stats(
        self,
        quiz_id: str,
        passing_score: Optional[int]
    ) -> Dict[str, Any]:
        is_completed = QuizAttempt.status == AttemptStatus.COMPLETED

        columns = [
            func.count(QuizAttempt.id),
            func.sum(case((is_completed, 1), else_=0)),
            func.avg(case((is_completed, QuizAttempt.score), else_=None)),
        ]
        if passing_score is not None:
            columns.append(
                func.sum(
                    case(
                        (and_(is_completed, QuizAttempt.score >= passing_score), 1),
                        else_=0
                    )
                )
            )

        stmt = select(*columns).where(QuizAttempt.quiz_id == quiz_id)
        result = await self.db.execute(stmt)
        row = result.one()
        total, completed, average = row[0], row[1], row[2]
        # Without a passing score nothing counts as passed
        passed = row[3] if passing_score is not None else 0

        return {
            "total_attempts": total or 0,
            "completed_attempts": completed or 0,
            "average_score": float(average) if average is not None else None,
            "passed_attempts": passed or 0,
        }


class QuestionRepository(BaseRepository[Question]):
    """Repository for Question model."""

    def __init__(self, db: AsyncSession):
        super().__init__(Question, db)

    async def get_by_quiz(self, quiz_id: str) -> List[Question]:
        stmt = (
            select(self.model)
            .where(self.model.quiz_id == quiz_id)
            .order_by(self.model.order_index)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count_by_quiz(self, quiz_id: str) -> int:
        stmt = (
            select(func.count(self.model.id))
            .where(self.model.quiz_id == quiz_id)
        )
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def count_by_quizzes(self, quiz_ids: List[str]) -> Dict[str, int]:
        if not quiz_ids:
            return {}

        stmt = (
            select(self.model.quiz_id, func.count(self.model.id))
            .where(self.model.quiz_id.in_(quiz_ids))
            .group_by(self.model.quiz_id)
        )
        result = await self.db.execute(stmt)
        return {quiz_id: count for quiz_id, count in result.all()}

    async def close_gap_after(self, quiz_id: str, order_index: int) -> int:
        """Decrement order_index of every question placed after the given slot."""
        stmt = (
            update(self.model)
            .where(
                self.model.quiz_id == quiz_id,
                self.model.order_index > order_index
            )
            .values(order_index=self.model.order_index - 1)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.db.execute(stmt)
        return result.rowcount or 0

    async def set_order_index(self, quiz_id: str, question_id: str, order_index: int) -> bool:
        """Move one question; ids outside the quiz match nothing."""
        stmt = (
            update(self.model)
            .where(
                self.model.id == question_id,
                self.model.quiz_id == quiz_id
            )
            .values(order_index=order_index)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.db.execute(stmt)
        return bool(result.rowcount)


class AnswerOptionRepository(BaseRepository[AnswerOption]):
    """Repository for AnswerOption model."""

    def __init__(self, db: AsyncSession):
        super().__init__(AnswerOption, db)

    async def create_bulk(self, options: List[dict]) -> List[AnswerOption]:
        instances = []
        for o_data in options:
            instance = AnswerOption(**o_data)
            self.db.add(instance)
            instances.append(instance)
        await self.db.flush()
        for inst in instances:
            await self.db.refresh(inst)
        return instances

    async def get_by_question(self, question_id: str) -> List[AnswerOption]:
        stmt = (
            select(self.model)
            .where(self.model.question_id == question_id)
            .order_by(self.model.order_index)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_by_questions(self, question_ids: List[str]) -> Dict[str, List[AnswerOption]]:
        grouped: Dict[str, List[AnswerOption]] = {qid: [] for qid in question_ids}
        if not question_ids:
            return grouped

        stmt = (
            select(self.model)
            .where(self.model.question_id.in_(question_ids))
            .order_by(self.model.question_id, self.model.order_index)
        )
        result = await self.db.execute(stmt)
        for option in result.scalars().all():
            grouped[option.question_id].append(option)
        return grouped

    async def delete_by_question(self, question_id: str) -> int:
        stmt = (
            delete(self.model)
            .where(self.model.question_id == question_id)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.db.execute(stmt)
        return result.rowcount or 0


class QuizAttemptRepository(BaseRepository[QuizAttempt]):
    """Repository for QuizAttempt model."""

    def __init__(self, db: AsyncSession):
        super().__init__(QuizAttempt, db)

    def _with_details(self):
        return (
            select(
                self.model,
                Quiz.title.label("quiz_title"),
                Quiz.description.label("quiz_description"),
                Quiz.duration_minutes.label("quiz_duration_minutes"),
                Quiz.passing_score.label("quiz_passing_score"),
                User.full_name.label("instructor_name"),
            )
            .join(Quiz, self.model.quiz_id == Quiz.id)
            .join(User, Quiz.instructor_id == User.id)
        )

    async def get_with_details(self, attempt_id: str) -> Optional[Row]:
        stmt = self._with_details().where(self.model.id == attempt_id)
        result = await self.db.execute(stmt)
        return result.first()

    async def get_by_student_with_details(self, student_id: str) -> Sequence[Row]:
        stmt = (
            self._with_details()
            .where(self.model.student_id == student_id)
            .order_by(self.model.started_at.desc())
        )
        result = await self.db.execute(stmt)
        return result.all()

    async def get_active(self, quiz_id: str, student_id: str) -> Optional[QuizAttempt]:
        stmt = (
            select(self.model)
            .where(
                self.model.quiz_id == quiz_id,
                self.model.student_id == student_id,
                self.model.status == AttemptStatus.IN_PROGRESS
            )
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_attempts(self, quiz_id: str, student_id: str) -> List[QuizAttempt]:
        stmt = (
            select(self.model)
            .where(
                self.model.quiz_id == quiz_id,
                self.model.student_id == student_id
            )
            .order_by(self.model.started_at.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def finish(self, attempt_id: str, status: AttemptStatus, **values) -> bool:
        """
        Move an in-progress attempt to a terminal status.

        Returns False when the row is missing or no longer in progress.
        """
        stmt = (
            update(self.model)
            .where(
                self.model.id == attempt_id,
                self.model.status == AttemptStatus.IN_PROGRESS
            )
            .values(status=status, **values)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.db.execute(stmt)
        return bool(result.rowcount)

    async def complete(self, attempt_id: str, score: int, total_points: int) -> bool:
        return await self.finish(
            attempt_id,
            AttemptStatus.COMPLETED,
            completed_at=utcnow(),
            score=score,
            total_points=total_points,
        )

    async def abandon(self, attempt_id: str) -> bool:
        return await self.finish(attempt_id, AttemptStatus.ABANDONED)

    async def get_student_stats(self, student_id: str) -> Dict[str, Any]:
        is_completed = self.model.status == AttemptStatus.COMPLETED
        percentage = case(
            (
                and_(
                    is_completed,
                    self.model.score.isnot(None),
                    self.model.total_points > 0
                ),
                self.model.score * 100.0 / self.model.total_points
            ),
            else_=None
        )

        stmt = (
            select(
                func.count(self.model.id),
                func.sum(case((is_completed, 1), else_=0)),
                func.avg(percentage),
            )
            .where(self.model.student_id == student_id)
        )
        result = await self.db.execute(stmt)
        total, completed, average = result.one()

        return {
            "total_attempts": total or 0,
            "completed_attempts": completed or 0,
            "average_score_percentage": (
                round(float(average), 2) if average is not None else None
            ),
        }
