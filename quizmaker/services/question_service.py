"""
Question Service

Business logic for quiz questions:
- Type-specific creation (multiple choice, true/false, short answer)
- Partial updates with per-type answer handling
- Deletion with order compaction and bulk reordering

Questions are a tagged union in the service; they are flattened into the
shared answer_options table only when written.
"""

import json
import logging
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from quizmaker.core.exceptions import (
    ForbiddenError,
    NotFoundError,
    ValidationFailedError,
)
from quizmaker.models import Question, AnswerOption, Quiz
from quizmaker.models.question import QuestionType
from quizmaker.repositories.quiz_repo import (
    QuizRepository,
    QuestionRepository,
    AnswerOptionRepository,
)
from quizmaker.schemas.question import (
    AnswerOptionInput,
    AnswerOptionResponse,
    MultipleChoiceQuestionCreate,
    QuestionCreate,
    QuestionOrderItem,
    QuestionResponse,
    QuestionUpdate,
    ShortAnswerQuestionCreate,
    TrueFalseQuestionCreate,
    check_choice_options,
)
from quizmaker.services.base import BaseService

logger = logging.getLogger(__name__)

TRUE_LABEL = "True"
FALSE_LABEL = "False"


# ============================================================
# Answer option encoding
# ============================================================

def encode_short_answer(sample_answer: Optional[str], answer_guidelines: Optional[str]) -> Optional[str]:
    """JSON metadata for a short answer question, or None when both are empty."""
    if not sample_answer and not answer_guidelines:
        return None
    return json.dumps({
        "sampleAnswer": sample_answer or "",
        "answerGuidelines": answer_guidelines or "",
    })


def decode_short_answer(option_text: str) -> Tuple[Optional[str], Optional[str]]:
    try:
        data = json.loads(option_text)
    except (TypeError, ValueError):
        logger.warning("Short answer metadata is not valid JSON")
        return None, None

    if not isinstance(data, dict):
        return None, None

    return data.get("sampleAnswer") or None, data.get("answerGuidelines") or None


def true_false_options(question_id: str, correct_answer: bool) -> List[dict]:
    return [
        {
            "question_id": question_id,
            "option_text": TRUE_LABEL,
            "is_correct": correct_answer,
            "order_index": 0,
        },
        {
            "question_id": question_id,
            "option_text": FALSE_LABEL,
            "is_correct": not correct_answer,
            "order_index": 1,
        },
    ]


def choice_options(question_id: str, options: List[AnswerOptionInput]) -> List[dict]:
    return [
        {
            "question_id": question_id,
            "option_text": option.option_text,
            "is_correct": option.is_correct,
            "order_index": option.order_index,
        }
        for option in options
    ]


def validate_choice_options(options: Optional[List[AnswerOptionInput]]) -> List[AnswerOptionInput]:
    if options is None:
        raise ValidationFailedError("Multiple choice questions must have at least 2 options")
    try:
        return check_choice_options(options)
    except ValueError as e:
        raise ValidationFailedError(str(e)) from e


class QuestionService(BaseService):
    """Service for question authoring."""

    def __init__(self, db: AsyncSession):
        super().__init__(db)
        self.quiz_repo = QuizRepository(db)
        self.question_repo = QuestionRepository(db)
        self.option_repo = AnswerOptionRepository(db)

    # ============================================================
    # CREATE QUESTION
    # ============================================================

    async def create_question(
        self,
        quiz_id: str,
        question_data: QuestionCreate,
        requester_id: Optional[str] = None
    ) -> QuestionResponse:
        """
        Create a question and its answer options in one transaction.

        Raises:
            NotFoundError: If the quiz does not exist
            ForbiddenError: If requester_id is given and does not own the quiz
            ValidationFailedError: If multiple choice options are invalid
        """
        await self._get_quiz_for(quiz_id, requester_id)

        if isinstance(question_data, MultipleChoiceQuestionCreate):
            validate_choice_options(question_data.answer_options)

        async with self.transaction():
            order_index = question_data.order_index
            if order_index is None:
                order_index = await self.question_repo.count_by_quiz(quiz_id)

            question = await self.question_repo.create(
                quiz_id=quiz_id,
                question_text=question_data.question_text,
                question_type=QuestionType(question_data.question_type),
                points=question_data.points,
                order_index=order_index,
            )

            options = await self.option_repo.create_bulk(
                self._options_for_create(question.id, question_data)
            )

        logger.info(f"Question {question.id} ({question.question_type.value}) added to quiz {quiz_id}")
        return self._to_response(question, options)

    def _options_for_create(self, question_id: str, question_data: QuestionCreate) -> List[dict]:
        if isinstance(question_data, MultipleChoiceQuestionCreate):
            return choice_options(question_id, question_data.answer_options)

        if isinstance(question_data, TrueFalseQuestionCreate):
            return true_false_options(question_id, question_data.correct_answer)

        if isinstance(question_data, ShortAnswerQuestionCreate):
            metadata = encode_short_answer(
                question_data.sample_answer,
                question_data.answer_guidelines
            )
            if metadata is None:
                return []
            return [{
                "question_id": question_id,
                "option_text": metadata,
                "is_correct": True,
                "order_index": 0,
            }]

        raise ValidationFailedError("Unsupported question type")

    # ============================================================
    # READS
    # ============================================================

    async def get_by_id(self, question_id: str) -> Optional[Question]:
        return await self.question_repo.get_by_id(question_id)

    async def get_with_options(self, question_id: str) -> Optional[QuestionResponse]:
        question = await self.question_repo.get_by_id(question_id)
        if not question:
            return None

        options = await self.option_repo.get_by_question(question_id)
        return self._to_response(question, options)

    async def list_by_quiz(self, quiz_id: str) -> List[QuestionResponse]:
        questions = await self.question_repo.get_by_quiz(quiz_id)
        options = await self.option_repo.get_by_questions([q.id for q in questions])

        return [self._to_response(q, options.get(q.id, [])) for q in questions]

    # ============================================================
    # UPDATE QUESTION
    # ============================================================

    async def update_question(
        self,
        question_id: str,
        requester_id: str,
        question_data: QuestionUpdate
    ) -> QuestionResponse:
        """
        Apply a partial update.

        Scalars change independently. Answer data is applied only when it
        matches the stored question type.
        """
        question = await self._get_owned_question(question_id, requester_id)
        question_type = question.question_type
        fields = question_data.model_fields_set

        if (
            question_type == QuestionType.MULTIPLE_CHOICE
            and "answer_options" in fields
        ):
            validate_choice_options(question_data.answer_options)

        scalars = question_data.model_dump(
            include={"question_text", "points", "order_index"},
            exclude_unset=True,
            exclude_none=True,
        )

        async with self.transaction():
            if scalars:
                question = await self.question_repo.update(question_id, **scalars)

            if question_type == QuestionType.MULTIPLE_CHOICE and "answer_options" in fields:
                await self.option_repo.delete_by_question(question_id)
                await self.option_repo.create_bulk(
                    choice_options(question_id, question_data.answer_options)
                )

            elif (
                question_type == QuestionType.TRUE_FALSE
                and question_data.correct_answer is not None
            ):
                await self._flip_true_false(question_id, question_data.correct_answer)

            elif question_type == QuestionType.SHORT_ANSWER and (
                "sample_answer" in fields or "answer_guidelines" in fields
            ):
                await self._write_short_answer(question_id, question_data, fields)

            options = await self.option_repo.get_by_question(question_id)

        return self._to_response(question, options)

    async def _flip_true_false(self, question_id: str, correct_answer: bool) -> None:
        # Only is_correct changes; ids and labels stay stable
        for option in await self.option_repo.get_by_question(question_id):
            if option.option_text == TRUE_LABEL:
                option.is_correct = correct_answer
            elif option.option_text == FALSE_LABEL:
                option.is_correct = not correct_answer
        await self.db.flush()

    async def _write_short_answer(
        self,
        question_id: str,
        question_data: QuestionUpdate,
        fields: set
    ) -> None:
        existing = await self.option_repo.get_by_question(question_id)
        metadata_option = existing[0] if existing else None

        sample_answer, answer_guidelines = (None, None)
        if metadata_option:
            sample_answer, answer_guidelines = decode_short_answer(metadata_option.option_text)

        if "sample_answer" in fields:
            sample_answer = question_data.sample_answer
        if "answer_guidelines" in fields:
            answer_guidelines = question_data.answer_guidelines

        payload = encode_short_answer(sample_answer, answer_guidelines)

        # No metadata row when both fields are empty
        if payload is None:
            if metadata_option:
                await self.option_repo.delete(metadata_option.id)
        elif metadata_option:
            await self.option_repo.update(metadata_option.id, option_text=payload)
        else:
            await self.option_repo.create(
                question_id=question_id,
                option_text=payload,
                is_correct=True,
                order_index=0,
            )

    # ============================================================
    # DELETE QUESTION
    # ============================================================

    async def delete_question(self, question_id: str, requester_id: str) -> bool:
        """Delete a question and shift later siblings up by one slot."""
        question = await self._get_owned_question(question_id, requester_id)
        quiz_id, order_index = question.quiz_id, question.order_index

        async with self.transaction():
            await self.question_repo.delete(question_id)
            await self.question_repo.close_gap_after(quiz_id, order_index)

        logger.info(f"Question {question_id} deleted from quiz {quiz_id}")
        return True

    # ============================================================
    # REORDER QUESTIONS
    # ============================================================

    async def reorder_questions(
        self,
        quiz_id: str,
        requester_id: str,
        question_orders: List[QuestionOrderItem]
    ) -> List[QuestionResponse]:
        """
        Apply new positions in one transaction.

        Ids that do not belong to the quiz are skipped.
        """
        await self._get_quiz_for(quiz_id, requester_id)

        async with self.transaction():
            for item in question_orders:
                moved = await self.question_repo.set_order_index(
                    quiz_id,
                    item.question_id,
                    item.order_index
                )
                if not moved:
                    logger.debug(f"Reorder skipped question {item.question_id} outside quiz {quiz_id}")

        return await self.list_by_quiz(quiz_id)

    # ============================================================
    # Helper Methods
    # ============================================================

    async def _get_quiz_for(self, quiz_id: str, requester_id: Optional[str]) -> Quiz:
        quiz = await self.quiz_repo.get_by_id(quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found", {"quiz_id": quiz_id})

        if requester_id is not None and quiz.instructor_id != requester_id:
            raise ForbiddenError(
                "You do not have permission to modify this quiz",
                {"quiz_id": quiz_id}
            )
        return quiz

    async def _get_owned_question(self, question_id: str, requester_id: str) -> Question:
        question = await self.question_repo.get_by_id(question_id)
        if not question:
            raise NotFoundError("Question not found", {"question_id": question_id})

        await self._get_quiz_for(question.quiz_id, requester_id)
        return question

    def _to_response(self, question: Question, options: List[AnswerOption]) -> QuestionResponse:
        options = sorted(options, key=lambda o: o.order_index)
        response = QuestionResponse(
            id=question.id,
            quiz_id=question.quiz_id,
            question_text=question.question_text,
            question_type=question.question_type,
            points=question.points,
            order_index=question.order_index,
            created_at=question.created_at,
            answer_options=[AnswerOptionResponse.model_validate(o) for o in options],
        )

        if question.question_type == QuestionType.TRUE_FALSE:
            for option in options:
                if option.option_text == TRUE_LABEL:
                    response.correct_answer = option.is_correct

        elif question.question_type == QuestionType.SHORT_ANSWER and options:
            response.sample_answer, response.answer_guidelines = decode_short_answer(
                options[0].option_text
            )

        return response
