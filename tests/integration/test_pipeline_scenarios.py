"""End-to-end scenarios through the complete filter pipeline."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import FastAPI, status
from httpx import ASGITransport, AsyncClient

from adoption_api.models.api_key import AccessLevel, ApiKey
from adoption_api.repositories.api_key_repository import InMemoryApiKeyRepository
from adoption_api.repositories.catalog_repository import CatalogRepository

# Mark all tests in this module as integration tests
pytestmark = pytest.mark.integration


def client_for(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_reads_are_public(client: AsyncClient) -> None:
    """GET /cachorros succeeds without any key."""
    response = await client.get("/cachorros")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == []


@pytest.mark.asyncio
async def test_write_without_key_is_401(client: AsyncClient) -> None:
    response = await client.post("/cachorros", json={"nome": "Rex"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    data = response.json()
    assert data["status"] == "error"
    assert data["error_code"] == "UNAUTHORIZED"
    assert "Chave de API ausente ou inválida" in data["message"]
    assert data["correlation_id"] == response.headers["x-request-id"]


@pytest.mark.asyncio
async def test_read_only_key_delete_is_403(
    client: AsyncClient, write_key: ApiKey, read_key: ApiKey
) -> None:
    await client.post(
        "/cachorros", json={"nome": "Rex"}, headers={"X-API-Key": write_key.key_value}
    )

    response = await client.delete(
        "/cachorros/1", headers={"X-API-Key": read_key.key_value}
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert (await client.get("/cachorros/1")).status_code == status.HTTP_200_OK


@pytest.mark.asyncio
async def test_rate_limit_saturates_window(
    app_factory: Callable[..., FastAPI], read_key: ApiKey
) -> None:
    app = app_factory(rate_limit_window_seconds=60, rate_limit_max_requests=3)
    headers = {"X-API-Key": read_key.key_value}

    async with client_for(app) as client:
        responses = [await client.get("/racas", headers=headers) for _ in range(4)]

    assert [r.status_code for r in responses] == [200, 200, 200, 429]
    assert [r.headers["x-ratelimit-remaining"] for r in responses] == [
        "2",
        "1",
        "0",
        "0",
    ]
    limited = responses[-1]
    assert limited.headers["retry-after"] == "60"
    assert limited.headers["x-ratelimit-limit"] == "3"
    assert limited.headers["x-ratelimit-reset"] == "60"
    assert limited.json()["error_code"] == "RATE_LIMIT_EXCEEDED"


@pytest.mark.asyncio
async def test_requests_without_identity_are_not_limited(
    app_factory: Callable[..., FastAPI],
) -> None:
    app = app_factory(rate_limit_max_requests=1)

    async with client_for(app) as client:
        responses = [await client.get("/racas") for _ in range(3)]

    assert all(r.status_code == status.HTTP_200_OK for r in responses)
    assert "x-ratelimit-limit" not in responses[0].headers


@pytest.mark.asyncio
async def test_forwarded_clients_are_limited_separately(
    app_factory: Callable[..., FastAPI],
) -> None:
    app = app_factory(rate_limit_max_requests=1)

    async with client_for(app) as client:
        first = await client.get("/racas", headers={"X-Forwarded-For": "10.0.0.1"})
        second = await client.get(
            "/racas", headers={"X-Forwarded-For": "10.0.0.1, 172.16.0.1"}
        )
        other = await client.get("/racas", headers={"X-Forwarded-For": "10.0.0.2"})

    assert first.status_code == status.HTTP_200_OK
    assert second.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert other.status_code == status.HTTP_200_OK


@pytest.mark.asyncio
async def test_idempotent_replay_executes_once(
    client: AsyncClient, write_key: ApiKey, catalog_repository: CatalogRepository
) -> None:
    headers = {"X-API-Key": write_key.key_value, "X-Idempotency-Key": "adocao-123"}
    body = {"dataSolicitacao": "2025-11-11", "justificativa": "Casa com quintal"}

    first = await client.post("/v2/adocoes", json=body, headers=headers)
    second = await client.post("/v2/adocoes", json=body, headers=headers)

    assert first.status_code == second.status_code == status.HTTP_201_CREATED
    assert first.json() == second.json()
    assert second.headers["location"] == first.headers["location"]
    assert second.headers["x-idempotency-status"] == "IDEMPOTENT_REPLAY"
    assert len(await catalog_repository.adocoes.list()) == 1


@pytest.mark.asyncio
async def test_missing_idempotency_key_is_400(
    client: AsyncClient, write_key: ApiKey, catalog_repository: CatalogRepository
) -> None:
    response = await client.post(
        "/v2/adocoes",
        json={"dataSolicitacao": "2025-11-11"},
        headers={"X-API-Key": write_key.key_value},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "obrigatório" in response.json()["message"]
    assert await catalog_repository.adocoes.list() == []


@pytest.mark.asyncio
async def test_failed_request_is_not_memoized(
    client: AsyncClient, write_key: ApiKey
) -> None:
    auth = {"X-API-Key": write_key.key_value}
    headers = {**auth, "X-Idempotency-Key": "x"}
    body = {"dataSolicitacao": "2025-11-11", "cachorro": {"id": 1}}

    rejected = await client.post("/v2/adocoes", json=body, headers=headers)
    await client.post("/cachorros", json={"nome": "Rex"}, headers=auth)
    accepted = await client.post("/v2/adocoes", json=body, headers=headers)

    assert rejected.status_code == status.HTTP_400_BAD_REQUEST
    assert accepted.status_code == status.HTTP_201_CREATED
    assert "x-idempotency-status" not in accepted.headers
    assert accepted.json()["cachorro"]["nome"] == "Rex"


@pytest.mark.asyncio
async def test_unauthenticated_request_never_reaches_idempotency(
    client: AsyncClient, write_key: ApiKey
) -> None:
    headers = {"X-Idempotency-Key": "shared"}
    body = {"dataSolicitacao": "2025-11-11"}

    denied = await client.post("/v2/adocoes", json=body, headers=headers)
    created = await client.post(
        "/v2/adocoes",
        json=body,
        headers={**headers, "X-API-Key": write_key.key_value},
    )

    assert denied.status_code == status.HTTP_401_UNAUTHORIZED
    assert created.status_code == status.HTTP_201_CREATED
    assert "x-idempotency-status" not in created.headers


@pytest.mark.asyncio
async def test_replays_count_against_the_limit(
    app_factory: Callable[..., FastAPI],
    write_key: ApiKey,
    catalog_repository: CatalogRepository,
) -> None:
    app = app_factory(rate_limit_max_requests=2)
    auth = {"X-API-Key": write_key.key_value}
    body = {"dataSolicitacao": "2025-11-11"}

    async with client_for(app) as client:
        await client.post(
            "/v2/adocoes", json=body, headers={**auth, "X-Idempotency-Key": "a"}
        )
        await client.post(
            "/v2/adocoes", json=body, headers={**auth, "X-Idempotency-Key": "a"}
        )
        limited = await client.post(
            "/v2/adocoes", json=body, headers={**auth, "X-Idempotency-Key": "b"}
        )

    assert limited.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert len(await catalog_repository.adocoes.list()) == 1


@pytest.mark.asyncio
async def test_oversized_body_rejected_before_auth(
    app_factory: Callable[..., FastAPI],
) -> None:
    app = app_factory(max_request_size_bytes=100)

    async with client_for(app) as client:
        response = await client.post("/racas", json={"nome": "x" * 200})

    assert response.status_code == status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    assert response.headers["x-request-id"]


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["HEAD", "OPTIONS"])
async def test_only_get_skips_authentication(client: AsyncClient, method: str) -> None:
    response = await client.request(method, "/racas")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_expired_key_accepted_under_default_settings(
    client: AsyncClient, api_key_store: InMemoryApiKeyRepository
) -> None:
    api_key = await api_key_store.create(
        "Abrigo Antigo",
        AccessLevel.READ_WRITE,
        expires_at=datetime.now(timezone.utc) - timedelta(days=1),
    )

    response = await client.post(
        "/racas", json={"nome": "Beagle"}, headers={"X-API-Key": api_key.key_value}
    )

    assert response.status_code == status.HTTP_201_CREATED


@pytest.mark.asyncio
async def test_expired_key_rejected_when_enforced(
    app_factory: Callable[..., FastAPI], api_key_store: InMemoryApiKeyRepository
) -> None:
    api_key = await api_key_store.create(
        "Abrigo Antigo",
        AccessLevel.READ_WRITE,
        expires_at=datetime.now(timezone.utc) - timedelta(days=1),
    )
    app = app_factory(enforce_api_key_expiry=True)

    async with client_for(app) as client:
        response = await client.post(
            "/racas", json={"nome": "Beagle"}, headers={"X-API-Key": api_key.key_value}
        )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["message"] == "Acesso negado. Chave de API expirada."
