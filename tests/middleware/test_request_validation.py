"""Tests for the request size validation filter."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from adoption_api.middleware.request_validation import RequestSizeValidationMiddleware


@pytest.fixture
def app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestSizeValidationMiddleware, max_size=1024)

    @app.post("/upload")
    async def upload(body: dict) -> dict:
        return {"keys": len(body)}

    return app


@pytest.mark.asyncio
async def test_small_request_passes(app: FastAPI) -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/upload", json={"a": 1})

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_oversized_request_is_413(app: FastAPI) -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/upload", json={"a": "x" * 2048})

    assert response.status_code == 413
    data = response.json()
    assert data["error_code"] == "PAYLOAD_TOO_LARGE"
    assert data["details"]["max_size"] == "1KB"


def test_default_limit_from_settings() -> None:
    middleware = RequestSizeValidationMiddleware(FastAPI())
    assert middleware.max_size == 512 * 1024
