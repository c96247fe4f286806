"""Tests for the request logging middleware."""

import logging

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from quizmaker.middleware.logging import LoggingMiddleware


def build_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(LoggingMiddleware)

    @app.get("/ping")
    async def ping():
        return {"pong": True}

    @app.get("/boom")
    async def boom():
        raise RuntimeError("boom")

    return app


@pytest.mark.asyncio
async def test_logs_request_and_sets_timing_header(caplog) -> None:
    caplog.set_level(logging.INFO, logger="quizmaker.middleware.logging")

    transport = ASGITransport(app=build_app())
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get("/ping")

    assert response.status_code == 200
    assert float(response.headers["X-Response-Time-ms"]) >= 0
    assert any("GET /ping -> 200" in record.getMessage() for record in caplog.records)


@pytest.mark.asyncio
async def test_failed_request_is_logged_and_reraised(caplog) -> None:
    caplog.set_level(logging.INFO, logger="quizmaker.middleware.logging")

    transport = ASGITransport(app=build_app(), raise_app_exceptions=True)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        with pytest.raises(RuntimeError):
            await ac.get("/boom")

    failures = [r for r in caplog.records if "GET /boom failed" in r.getMessage()]
    assert failures and failures[0].levelno == logging.ERROR
