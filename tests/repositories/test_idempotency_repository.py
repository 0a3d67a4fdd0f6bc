"""Unit tests for the idempotency record stores."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import ClientError

from adoption_api.exceptions import StoreUnavailableError
from adoption_api.models.idempotency import IdempotencyRecord
from adoption_api.repositories.idempotency_repository import (
    DynamoIdempotencyStore,
    InMemoryIdempotencyStore,
)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_record(expiry: float, body: bytes = b'{"id":1}') -> IdempotencyRecord:
    return IdempotencyRecord(
        status_code=201,
        body=body,
        media_type="application/json",
        headers={"location": "/v2/adocoes/1"},
        expiry=expiry,
    )


class TestInMemoryIdempotencyStore:
    """Tests for InMemoryIdempotencyStore."""

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self) -> None:
        store = InMemoryIdempotencyStore()
        assert await store.get("POST:/v2/adocoes:abc") is None

    @pytest.mark.asyncio
    async def test_put_then_get(self) -> None:
        clock = FakeClock()
        store = InMemoryIdempotencyStore(clock=clock)
        record = make_record(expiry=clock.now + 60)

        await store.put("POST:/v2/adocoes:abc", record)

        assert await store.get("POST:/v2/adocoes:abc") == record

    @pytest.mark.asyncio
    async def test_expired_record_is_absent(self) -> None:
        clock = FakeClock()
        store = InMemoryIdempotencyStore(clock=clock)
        await store.put("k", make_record(expiry=clock.now + 60))

        clock.now += 60
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_put_overwrites(self) -> None:
        clock = FakeClock()
        store = InMemoryIdempotencyStore(clock=clock)
        await store.put("k", make_record(expiry=clock.now + 60, body=b"first"))
        await store.put("k", make_record(expiry=clock.now + 60, body=b"second"))

        record = await store.get("k")
        assert record is not None
        assert record.body == b"second"

    @pytest.mark.asyncio
    async def test_put_evicts_expired_entries(self) -> None:
        clock = FakeClock()
        store = InMemoryIdempotencyStore(clock=clock)
        await store.put("old", make_record(expiry=clock.now + 1))

        clock.now += 5
        await store.put("new", make_record(expiry=clock.now + 60))

        assert "old" not in store._records
        assert "new" in store._records

    @pytest.mark.asyncio
    async def test_clear(self) -> None:
        store = InMemoryIdempotencyStore(clock=FakeClock())
        await store.put("k", make_record(expiry=2000.0))
        store.clear()
        assert await store.get("k") is None


class TestDynamoIdempotencyStore:
    """Tests for DynamoIdempotencyStore against a mocked table."""

    @pytest.fixture
    def table(self) -> MagicMock:
        table = MagicMock()
        table.put_item = AsyncMock(return_value={})
        table.get_item = AsyncMock(return_value={})
        return table

    @pytest.fixture
    def store(self, table: MagicMock) -> DynamoIdempotencyStore:
        dynamodb = MagicMock()
        dynamodb.Table = AsyncMock(return_value=table)
        store = DynamoIdempotencyStore("test-idempotency", clock=FakeClock())
        store.session = MagicMock()
        store.session.resource.return_value.__aenter__ = AsyncMock(
            return_value=dynamodb
        )
        store.session.resource.return_value.__aexit__ = AsyncMock(
            return_value=False
        )
        return store

    @pytest.mark.asyncio
    async def test_put_writes_ttl_and_encoded_body(
        self, store: DynamoIdempotencyStore, table: MagicMock
    ) -> None:
        await store.put("POST:/v2/adocoes:abc", make_record(expiry=1060.7))

        item = table.put_item.call_args.kwargs["Item"]
        assert item["cache_key"] == "POST:/v2/adocoes:abc"
        assert item["status_code"] == 201
        assert item["body"] == "eyJpZCI6MX0="
        assert item["expires_at"] == Decimal(1060)
        assert item["headers"] == {"location": "/v2/adocoes/1"}
        assert item["media_type"] == "application/json"

    @pytest.mark.asyncio
    async def test_get_decodes_item(
        self, store: DynamoIdempotencyStore, table: MagicMock
    ) -> None:
        table.get_item.return_value = {
            "Item": {
                "cache_key": "k",
                "status_code": Decimal(201),
                "body": "eyJpZCI6MX0=",
                "headers": {"location": "/v2/adocoes/1"},
                "expires_at": Decimal(2000),
                "media_type": "application/json",
            }
        }

        record = await store.get("k")

        assert record is not None
        assert record.status_code == 201
        assert record.body == b'{"id":1}'
        assert record.headers == {"location": "/v2/adocoes/1"}

    @pytest.mark.asyncio
    async def test_get_ignores_expired_item_not_yet_deleted(
        self, store: DynamoIdempotencyStore, table: MagicMock
    ) -> None:
        table.get_item.return_value = {
            "Item": {
                "cache_key": "k",
                "status_code": Decimal(201),
                "body": "",
                "expires_at": Decimal(999),
            }
        }
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_get_missing(self, store: DynamoIdempotencyStore) -> None:
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_failure_raises_store_unavailable(
        self, store: DynamoIdempotencyStore, table: MagicMock
    ) -> None:
        table.get_item.side_effect = ClientError(
            {"Error": {"Code": "ProvisionedThroughputExceededException"}},
            "GetItem",
        )
        with pytest.raises(StoreUnavailableError):
            await store.get("k")
