"""
Idempotency record stores.

The in-process store keeps records in a dict with TTL-based expiration and is
suitable for single-instance deployments. Multi-node deployments must share
records through the DynamoDB store, otherwise replay protection only holds
per node.
"""

import threading
import time
from base64 import b64decode, b64encode
from collections.abc import Callable
from decimal import Decimal
from typing import Any, Dict, Optional, Protocol

from adoption_api.config import settings
from adoption_api.models.idempotency import IdempotencyRecord
from adoption_api.repositories.base import BaseRepository


class IdempotencyStore(Protocol):
    """Storage contract for cached idempotent responses."""

    async def get(self, key: str) -> Optional[IdempotencyRecord]: ...

    async def put(self, key: str, record: IdempotencyRecord) -> None: ...


class InMemoryIdempotencyStore:
    """
    In-memory idempotency store.

    Records whose expiry has passed are treated as absent and removed lazily
    on access.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._records: Dict[str, IdempotencyRecord] = {}
        self._lock = threading.Lock()

    async def get(self, key: str) -> Optional[IdempotencyRecord]:
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return None
            if not record.is_live(self._clock()):
                del self._records[key]
                return None
            return record

    async def put(self, key: str, record: IdempotencyRecord) -> None:
        with self._lock:
            self._cleanup_expired()
            self._records[key] = record

    def _cleanup_expired(self) -> None:
        """Remove expired entries (called under lock)."""
        now = self._clock()
        expired = [k for k, r in self._records.items() if not r.is_live(now)]
        for k in expired:
            del self._records[k]

    def clear(self) -> None:
        """Clear all cached entries (for testing)."""
        with self._lock:
            self._records.clear()


class DynamoIdempotencyStore(BaseRepository):
    """
    Idempotency store on DynamoDB.

    One item per cache key. ``expires_at`` is a Number attribute holding Unix
    seconds and is meant to be configured as the table's TTL attribute;
    because TTL deletion is lazy, reads still compare it against the clock.
    """

    def __init__(
        self,
        table_name: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(table_name or settings.dynamodb_table_idempotency)
        self._clock = clock

    async def get(self, key: str) -> Optional[IdempotencyRecord]:
        item = await self.get_item({"cache_key": key})
        if not item:
            return None

        record = self._from_item(item)
        if not record.is_live(self._clock()):
            return None
        return record

    async def put(self, key: str, record: IdempotencyRecord) -> None:
        await self.put_item(self._to_item(key, record))

    @staticmethod
    def _to_item(key: str, record: IdempotencyRecord) -> dict[str, Any]:
        item: dict[str, Any] = {
            "cache_key": key,
            "status_code": record.status_code,
            "body": b64encode(record.body).decode("ascii"),
            "headers": record.headers,
            "expires_at": Decimal(str(int(record.expiry))),
        }
        if record.media_type:
            item["media_type"] = record.media_type
        return item

    @staticmethod
    def _from_item(item: dict[str, Any]) -> IdempotencyRecord:
        return IdempotencyRecord(
            status_code=int(item["status_code"]),
            body=b64decode(item.get("body", "")),
            media_type=item.get("media_type"),
            headers=dict(item.get("headers", {})),
            expiry=float(item["expires_at"]),
        )
