"""Helpers shared by the API tests."""

from httpx import AsyncClient

TEST_PASSWORD = "SecurePass123"


async def register(client: AsyncClient, email: str, role: str, full_name: str = "Api User") -> dict:
    response = await client.post(
        "/api/v1/auth/register",
        json={
            "email": email,
            "password": TEST_PASSWORD,
            "full_name": full_name,
            "role": role,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def bearer(auth: dict) -> dict:
    return {"Authorization": f"Bearer {auth['access_token']}"}


QUIZZES = "/api/v1/quizzes"


async def create_quiz(client: AsyncClient, auth: dict, **fields) -> dict:
    fields.setdefault("title", "API Quiz")
    response = await client.post(QUIZZES, json=fields, headers=bearer(auth))
    assert response.status_code == 201, response.text
    return response.json()


async def add_true_false(client: AsyncClient, auth: dict, quiz_id: str, text: str = "Is it?") -> dict:
    response = await client.post(
        f"{QUIZZES}/{quiz_id}/questions",
        json={"question_type": "true_false", "question_text": text, "correct_answer": True},
        headers=bearer(auth),
    )
    assert response.status_code == 201, response.text
    return response.json()
