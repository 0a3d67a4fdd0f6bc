"""Shared fixtures: in-memory stores, API keys and an app client."""

from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from adoption_api.config import Settings
from adoption_api.main import create_app
from adoption_api.models.api_key import AccessLevel, ApiKey
from adoption_api.repositories.api_key_repository import InMemoryApiKeyRepository
from adoption_api.repositories.catalog_repository import CatalogRepository
from adoption_api.repositories.idempotency_repository import InMemoryIdempotencyStore
from adoption_api.repositories.rate_limit_repository import (
    InMemoryRateLimitCounterStore,
)
from adoption_api.services.catalog_service import CatalogService
from adoption_api.services.rate_limiter import RateLimiterService


def make_settings(**overrides: Any) -> Settings:
    """Settings for tests: memory backend and a limit no test reaches."""
    values: dict[str, Any] = {
        "storage_backend": "memory",
        "rate_limit_window_seconds": 60,
        "rate_limit_max_requests": 1000,
        "bootstrap_api_key": None,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def api_key_store() -> InMemoryApiKeyRepository:
    """Create a fresh API key store for each test."""
    return InMemoryApiKeyRepository()


@pytest.fixture
def idempotency_store() -> InMemoryIdempotencyStore:
    return InMemoryIdempotencyStore()


@pytest.fixture
def catalog_repository() -> CatalogRepository:
    return CatalogRepository()


@pytest.fixture
def catalog_service(catalog_repository: CatalogRepository) -> CatalogService:
    return CatalogService(catalog_repository)


@pytest.fixture
async def write_key(api_key_store: InMemoryApiKeyRepository) -> ApiKey:
    """A READ_WRITE key registered in the store."""
    return await api_key_store.create("Abrigo Central", AccessLevel.READ_WRITE)


@pytest.fixture
async def read_key(api_key_store: InMemoryApiKeyRepository) -> ApiKey:
    """A READ_ONLY key registered in the store."""
    return await api_key_store.create("Painel Público", AccessLevel.READ_ONLY)


@pytest.fixture
def app_factory(
    api_key_store: InMemoryApiKeyRepository,
    idempotency_store: InMemoryIdempotencyStore,
    catalog_service: CatalogService,
) -> Callable[..., FastAPI]:
    """
    Build an app wired to the test stores.

    Keyword arguments override settings, e.g. ``rate_limit_max_requests=3``.
    """

    def factory(**setting_overrides: Any) -> FastAPI:
        app_settings = make_settings(**setting_overrides)
        limiter = RateLimiterService(
            store=InMemoryRateLimitCounterStore(),
            window_seconds=app_settings.rate_limit_window_seconds,
            max_requests=app_settings.rate_limit_max_requests,
        )
        return create_app(
            app_settings,
            api_key_store=api_key_store,
            limiter=limiter,
            idempotency_store=idempotency_store,
            catalog=catalog_service,
        )

    return factory


@pytest.fixture
def app(app_factory: Callable[..., FastAPI]) -> FastAPI:
    return app_factory()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the ASGI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
