"""Tests for the quiz attempt lifecycle."""

import pytest

from quizmaker.core.exceptions import (
    ActiveAttemptExistsError,
    ErrorKind,
    InvalidStateError,
    NotFoundError,
)
from quizmaker.models.quiz_attempt import AttemptStatus
from quizmaker.services.attempt_service import QuizAttemptService


@pytest.mark.asyncio
async def test_create_attempt_starts_in_progress(db_session, quiz, student):
    attempt = await QuizAttemptService(db_session).create_attempt(quiz.id, student.id)

    assert attempt.status == AttemptStatus.IN_PROGRESS
    assert attempt.started_at is not None
    assert attempt.completed_at is None
    assert attempt.score is None


@pytest.mark.asyncio
async def test_second_active_attempt_is_a_conflict(db_session, quiz, student):
    service = QuizAttemptService(db_session)
    # The failed insert rolls the session back and expires loaded objects
    quiz_id, student_id = quiz.id, student.id
    first_id = (await service.create_attempt(quiz_id, student_id)).id

    with pytest.raises(ActiveAttemptExistsError) as exc_info:
        await service.create_attempt(quiz_id, student_id)

    assert exc_info.value.kind == ErrorKind.CONFLICT
    assert exc_info.value.message == "You already have an in-progress attempt for this quiz"
    assert (await service.get_active(quiz_id, student_id)).id == first_id


@pytest.mark.asyncio
async def test_new_attempt_allowed_after_finishing(db_session, quiz, student):
    service = QuizAttemptService(db_session)

    first = await service.create_attempt(quiz.id, student.id)
    await service.abandon_attempt(first.id)
    second = await service.create_attempt(quiz.id, student.id)

    assert second.id != first.id
    assert len(await service.list_by_quiz_for_student(quiz.id, student.id)) == 2


@pytest.mark.asyncio
async def test_attempt_on_missing_quiz(db_session, student):
    with pytest.raises(NotFoundError):
        await QuizAttemptService(db_session).create_attempt("missing", student.id)


@pytest.mark.asyncio
async def test_complete_records_result(db_session, quiz, student):
    service = QuizAttemptService(db_session)
    attempt = await service.create_attempt(quiz.id, student.id)

    completed = await service.complete_attempt(attempt.id, 7, 9)

    assert completed.status == AttemptStatus.COMPLETED
    assert completed.completed_at is not None
    assert (completed.score, completed.total_points) == (7, 9)
    assert await service.get_active(quiz.id, student.id) is None


@pytest.mark.asyncio
async def test_terminal_states_are_final(db_session, quiz, student):
    service = QuizAttemptService(db_session)
    attempt = await service.create_attempt(quiz.id, student.id)
    await service.complete_attempt(attempt.id, 5, 10)

    with pytest.raises(InvalidStateError) as exc_info:
        await service.complete_attempt(attempt.id, 10, 10)
    assert exc_info.value.message == "Quiz attempt is not in progress"

    with pytest.raises(InvalidStateError):
        await service.abandon_attempt(attempt.id)

    unchanged = await service.get_by_id(attempt.id)
    assert unchanged.status == AttemptStatus.COMPLETED
    assert unchanged.score == 5


@pytest.mark.asyncio
async def test_abandon_leaves_no_score(db_session, quiz, student):
    service = QuizAttemptService(db_session)
    attempt = await service.create_attempt(quiz.id, student.id)

    abandoned = await service.abandon_attempt(attempt.id)

    assert abandoned.status == AttemptStatus.ABANDONED
    assert abandoned.score is None
    assert abandoned.total_points is None


@pytest.mark.asyncio
async def test_missing_attempt(db_session):
    service = QuizAttemptService(db_session)

    with pytest.raises(NotFoundError):
        await service.complete_attempt("missing", 1, 1)
    with pytest.raises(NotFoundError):
        await service.abandon_attempt("missing")
    assert await service.get_with_details("missing") is None


@pytest.mark.asyncio
async def test_details_join_quiz_and_instructor(db_session, quiz, student):
    service = QuizAttemptService(db_session)
    attempt = await service.create_attempt(quiz.id, student.id)

    details = await service.get_with_details(attempt.id)
    assert details.quiz_title == "Python Basics"
    assert details.quiz_passing_score == 70
    assert details.instructor_name == "Ada Instructor"

    listed = await service.list_by_student(student.id)
    assert [a.id for a in listed] == [attempt.id]


@pytest.mark.asyncio
async def test_student_stats_average_percentages(db_session, quiz, student, make_quiz, instructor):
    service = QuizAttemptService(db_session)
    other_quiz = await make_quiz(instructor.id, title="Second quiz")

    first = await service.create_attempt(quiz.id, student.id)
    await service.complete_attempt(first.id, 8, 10)
    second = await service.create_attempt(other_quiz.id, student.id)
    await service.complete_attempt(second.id, 5, 10)
    third = await service.create_attempt(quiz.id, student.id)
    await service.abandon_attempt(third.id)

    stats = await service.get_student_stats(student.id)
    assert stats.total_attempts == 3
    assert stats.completed_attempts == 2
    assert stats.average_score_percentage == 65.0


@pytest.mark.asyncio
async def test_student_stats_ignore_zero_total(db_session, quiz, student):
    service = QuizAttemptService(db_session)
    attempt = await service.create_attempt(quiz.id, student.id)
    await service.complete_attempt(attempt.id, 0, 0)

    stats = await service.get_student_stats(student.id)
    assert stats.completed_attempts == 1
    assert stats.average_score_percentage is None


@pytest.mark.asyncio
async def test_student_stats_empty(db_session, student):
    stats = await QuizAttemptService(db_session).get_student_stats(student.id)
    assert (stats.total_attempts, stats.completed_attempts, stats.average_score_percentage) == (0, 0, None)
