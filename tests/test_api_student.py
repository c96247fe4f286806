"""Tests for the student browsing and attempt endpoints."""

import pytest
from httpx import AsyncClient

from tests.helpers import QUIZZES, add_true_false, bearer, create_quiz, register

STUDENT = "/api/v1/student"


async def published_quiz(client: AsyncClient, author: dict, title: str = "Published", questions: int = 1) -> dict:
    quiz = await create_quiz(client, author, title=title, passing_score=70)
    for i in range(questions):
        await add_true_false(client, author, quiz["id"], f"Question {i}")
    response = await client.post(f"{QUIZZES}/{quiz['id']}/publish", headers=bearer(author))
    assert response.status_code == 200, response.text
    return quiz


@pytest.mark.asyncio
async def test_available_quizzes_include_question_counts(
    client: AsyncClient, author: dict, learner: dict
) -> None:
    quiz = await published_quiz(client, author, questions=2)
    await create_quiz(client, author, title="Still a draft")

    response = await client.get(f"{STUDENT}/quizzes", headers=bearer(learner))

    assert response.status_code == 200
    listed = response.json()
    assert [q["id"] for q in listed] == [quiz["id"]]
    assert listed[0]["question_count"] == 2
    assert listed[0]["instructor_name"] == "Tina Author"


@pytest.mark.asyncio
async def test_instructors_are_not_students(client: AsyncClient, author: dict) -> None:
    response = await client.get(f"{STUDENT}/quizzes", headers=bearer(author))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_attempt_flow(client: AsyncClient, author: dict, learner: dict) -> None:
    quiz = await published_quiz(client, author)

    started = await client.post(f"{STUDENT}/quizzes/{quiz['id']}/start", headers=bearer(learner))
    assert started.status_code == 201
    attempt = started.json()
    assert attempt["status"] == "in_progress"

    again = await client.post(f"{STUDENT}/quizzes/{quiz['id']}/start", headers=bearer(learner))
    assert again.status_code == 409
    assert again.json() == {
        "detail": "You already have an in-progress attempt for this quiz",
        "kind": "conflict",
    }

    detail = await client.get(f"{STUDENT}/quizzes/{quiz['id']}", headers=bearer(learner))
    assert detail.json()["active_attempt"]["id"] == attempt["id"]
    assert detail.json()["question_count"] == 1

    completed = await client.post(
        f"{STUDENT}/attempts/{attempt['id']}/complete",
        json={"score": 8, "total_points": 10},
        headers=bearer(learner),
    )
    assert completed.status_code == 200
    assert completed.json()["status"] == "completed"
    assert completed.json()["score"] == 8

    twice = await client.post(
        f"{STUDENT}/attempts/{attempt['id']}/complete",
        json={"score": 10, "total_points": 10},
        headers=bearer(learner),
    )
    assert twice.status_code == 409
    assert twice.json()["kind"] == "invalid_state"

    single = await client.get(f"{STUDENT}/attempts/{attempt['id']}", headers=bearer(learner))
    assert single.json()["quiz_title"] == "Published"
    assert single.json()["instructor_name"] == "Tina Author"

    history = await client.get(f"{STUDENT}/attempts", headers=bearer(learner))
    assert [a["id"] for a in history.json()] == [attempt["id"]]


@pytest.mark.asyncio
async def test_student_stats(client: AsyncClient, author: dict, learner: dict) -> None:
    first_quiz = await published_quiz(client, author, title="First")
    second_quiz = await published_quiz(client, author, title="Second")

    a = (await client.post(f"{STUDENT}/quizzes/{first_quiz['id']}/start", headers=bearer(learner))).json()
    await client.post(
        f"{STUDENT}/attempts/{a['id']}/complete",
        json={"score": 8, "total_points": 10},
        headers=bearer(learner),
    )
    b = (await client.post(f"{STUDENT}/quizzes/{second_quiz['id']}/start", headers=bearer(learner))).json()
    await client.post(
        f"{STUDENT}/attempts/{b['id']}/complete",
        json={"score": 5, "total_points": 10},
        headers=bearer(learner),
    )
    c = (await client.post(f"{STUDENT}/quizzes/{first_quiz['id']}/start", headers=bearer(learner))).json()
    abandoned = await client.post(f"{STUDENT}/attempts/{c['id']}/abandon", headers=bearer(learner))
    assert abandoned.json()["status"] == "abandoned"

    stats = await client.get(f"{STUDENT}/stats", headers=bearer(learner))
    assert stats.json() == {
        "total_attempts": 3,
        "completed_attempts": 2,
        "average_score_percentage": 65.0,
    }


@pytest.mark.asyncio
async def test_drafts_cannot_be_started(client: AsyncClient, author: dict, learner: dict) -> None:
    draft = await create_quiz(client, author)

    assert (await client.get(f"{STUDENT}/quizzes/{draft['id']}", headers=bearer(learner))).status_code == 404
    assert (await client.post(f"{STUDENT}/quizzes/{draft['id']}/start", headers=bearer(learner))).status_code == 404


@pytest.mark.asyncio
async def test_attempts_of_other_students_look_missing(
    client: AsyncClient, author: dict, learner: dict
) -> None:
    quiz = await published_quiz(client, author)
    attempt = (await client.post(f"{STUDENT}/quizzes/{quiz['id']}/start", headers=bearer(learner))).json()

    intruder = await register(client, "intruder@example.com", "student")
    url = f"{STUDENT}/attempts/{attempt['id']}"

    assert (await client.get(url, headers=bearer(intruder))).status_code == 404
    assert (await client.post(f"{url}/abandon", headers=bearer(intruder))).status_code == 404
    assert (await client.post(
        f"{url}/complete", json={"score": 1, "total_points": 1}, headers=bearer(intruder)
    )).status_code == 404


@pytest.mark.asyncio
async def test_owner_sees_attempt_stats(client: AsyncClient, author: dict, learner: dict) -> None:
    quiz = await published_quiz(client, author)
    attempt = (await client.post(f"{STUDENT}/quizzes/{quiz['id']}/start", headers=bearer(learner))).json()
    await client.post(
        f"{STUDENT}/attempts/{attempt['id']}/complete",
        json={"score": 80, "total_points": 100},
        headers=bearer(learner),
    )

    view = await client.get(f"{QUIZZES}/{quiz['id']}", headers=bearer(author))
    stats = view.json()["stats"]
    assert stats["total_attempts"] == 1
    assert stats["completed_attempts"] == 1
    assert stats["average_score"] == 80.0
    assert stats["pass_rate"] == 100.0


@pytest.mark.asyncio
async def test_score_above_total_is_rejected(client: AsyncClient, author: dict, learner: dict) -> None:
    quiz = await published_quiz(client, author)
    attempt = (await client.post(f"{STUDENT}/quizzes/{quiz['id']}/start", headers=bearer(learner))).json()

    inflated = await client.post(
        f"{STUDENT}/attempts/{attempt['id']}/complete",
        json={"score": 50, "total_points": 10},
        headers=bearer(learner),
    )
    assert inflated.status_code == 422

    single = await client.get(f"{STUDENT}/attempts/{attempt['id']}", headers=bearer(learner))
    assert single.json()["status"] == "in_progress"
    assert single.json()["score"] is None

    stats = (await client.get(f"{STUDENT}/stats", headers=bearer(learner))).json()
    assert stats["completed_attempts"] == 0
