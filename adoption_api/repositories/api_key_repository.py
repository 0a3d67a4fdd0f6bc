"""API key stores: in-process and DynamoDB backed."""

import itertools
import threading
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from adoption_api.auth.api_key import (
    MAX_KEY_VALUE_LENGTH,
    generate_key_value,
    mask_key_value,
)
from adoption_api.config import settings
from adoption_api.exceptions import StoreUnavailableError, ValidationError
from adoption_api.logging.config import get_logger
from adoption_api.models.api_key import AccessLevel, ApiKey
from adoption_api.repositories.base import BaseRepository, ConditionFailedError

logger = get_logger(__name__)

MAX_KEY_GENERATION_ATTEMPTS = 5
OWNER_NAME_MAX_LENGTH = 100
SEQUENCE_ITEM_KEY = "#sequence"


class ApiKeyStore(Protocol):
    """Persistence contract for API keys."""

    async def find_by_key_value(self, key_value: str) -> Optional[ApiKey]: ...

    async def create(
        self,
        owner_name: str,
        access_level: Optional[AccessLevel],
        expires_at: Optional[datetime] = None,
    ) -> ApiKey: ...

    async def delete_by_id(self, key_id: int) -> bool: ...

    async def list_all(self) -> list[ApiKey]: ...

    async def seed(
        self, key_value: str, owner_name: str, access_level: AccessLevel
    ) -> ApiKey: ...


def validate_new_key(owner_name: Optional[str], access_level: Any) -> str:
    """
    Validate the fields of a key about to be issued.

    Args:
        owner_name: Requested owner name
        access_level: Requested access level

    Returns:
        The stripped owner name

    Raises:
        ValidationError: If the owner is blank/too long or the level missing
    """
    violations: list[tuple[str, str]] = []
    owner = (owner_name or "").strip()
    if not owner:
        violations.append(("ownerName", "não deve estar em branco"))
    elif len(owner) > OWNER_NAME_MAX_LENGTH:
        violations.append(
            ("ownerName", f"tamanho deve ser no máximo {OWNER_NAME_MAX_LENGTH}")
        )
    if not isinstance(access_level, AccessLevel):
        violations.append(("accessLevel", "não deve ser nulo"))
    if violations:
        raise ValidationError(violations=violations)
    return owner


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryApiKeyRepository:
    """
    Single-process API key store.

    Keys are indexed by value for O(1) lookup. Suitable for single-node
    deployments and tests; contents are lost on restart.
    """

    def __init__(
        self,
        key_generator: Callable[[], str] = generate_key_value,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._key_generator = key_generator
        self._now = now
        self._by_value: dict[str, ApiKey] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    async def find_by_key_value(self, key_value: str) -> Optional[ApiKey]:
        with self._lock:
            return self._by_value.get(key_value)

    async def create(
        self,
        owner_name: str,
        access_level: Optional[AccessLevel],
        expires_at: Optional[datetime] = None,
    ) -> ApiKey:
        owner = validate_new_key(owner_name, access_level)
        with self._lock:
            for _ in range(MAX_KEY_GENERATION_ATTEMPTS):
                key_value = self._key_generator()
                if key_value not in self._by_value:
                    break
                logger.warning(
                    "API key value collision, regenerating",
                    extra={"context": {"key_prefix": mask_key_value(key_value)}},
                )
            else:
                raise StoreUnavailableError(
                    message="Não foi possível gerar uma chave de API única.",
                    store="api_keys",
                )

            api_key = ApiKey(
                id=next(self._ids),
                key_value=key_value,
                owner_name=owner,
                access_level=access_level,
                created_at=self._now(),
                expires_at=expires_at,
            )
            self._by_value[key_value] = api_key
        return api_key

    async def delete_by_id(self, key_id: int) -> bool:
        with self._lock:
            for key_value, api_key in self._by_value.items():
                if api_key.id == key_id:
                    del self._by_value[key_value]
                    return True
        return False

    async def list_all(self) -> list[ApiKey]:
        with self._lock:
            return sorted(self._by_value.values(), key=lambda k: k.id)

    async def seed(
        self, key_value: str, owner_name: str, access_level: AccessLevel
    ) -> ApiKey:
        owner = validate_new_key(owner_name, access_level)
        with self._lock:
            existing = self._by_value.get(key_value)
            if existing:
                return existing
            api_key = ApiKey(
                id=next(self._ids),
                key_value=key_value,
                owner_name=owner,
                access_level=access_level,
                created_at=self._now(),
            )
            self._by_value[key_value] = api_key
        return api_key

    def clear(self) -> None:
        """Remove all keys (useful for testing)."""
        with self._lock:
            self._by_value.clear()


class DynamoApiKeyRepository(BaseRepository):
    """
    API key store on DynamoDB.

    Table layout: partition key ``key_value`` (unique index for lookups),
    global secondary index ``IdIndex`` on ``id`` for deletes by id. Ids come
    from an atomic counter kept in a reserved ``#sequence`` item.
    """

    def __init__(
        self,
        table_name: str | None = None,
        key_generator: Callable[[], str] = generate_key_value,
    ) -> None:
        super().__init__(table_name or settings.dynamodb_table_api_keys)
        self._key_generator = key_generator

    @staticmethod
    def _to_item(api_key: ApiKey) -> dict[str, Any]:
        item: dict[str, Any] = {
            "key_value": api_key.key_value,
            "id": api_key.id,
            "owner_name": api_key.owner_name,
            "access_level": api_key.access_level.value,
            "created_at": api_key.created_at.isoformat(),
        }
        if api_key.expires_at is not None:
            item["expires_at"] = api_key.expires_at.isoformat()
        return item

    @staticmethod
    def _from_item(item: dict[str, Any]) -> ApiKey:
        return ApiKey(
            id=int(item["id"]),
            key_value=item["key_value"],
            owner_name=item["owner_name"],
            access_level=AccessLevel(item["access_level"]),
            created_at=datetime.fromisoformat(item["created_at"]),
            expires_at=(
                datetime.fromisoformat(item["expires_at"])
                if item.get("expires_at")
                else None
            ),
        )

    async def _next_id(self) -> int:
        attributes = await self.update_item(
            key={"key_value": SEQUENCE_ITEM_KEY},
            update_expression="ADD current_id :one",
            expression_values={":one": 1},
            return_values="UPDATED_NEW",
        )
        return int(attributes["current_id"])

    async def find_by_key_value(self, key_value: str) -> Optional[ApiKey]:
        if key_value == SEQUENCE_ITEM_KEY or len(key_value) > MAX_KEY_VALUE_LENGTH:
            return None
        item = await self.get_item({"key_value": key_value})
        if item:
            return self._from_item(item)
        return None

    async def _insert(self, api_key: ApiKey) -> None:
        await self.put_item(
            self._to_item(api_key),
            condition_expression="attribute_not_exists(key_value)",
        )

    async def create(
        self,
        owner_name: str,
        access_level: Optional[AccessLevel],
        expires_at: Optional[datetime] = None,
    ) -> ApiKey:
        owner = validate_new_key(owner_name, access_level)
        key_id = await self._next_id()
        created_at = _utcnow()

        for _ in range(MAX_KEY_GENERATION_ATTEMPTS):
            api_key = ApiKey(
                id=key_id,
                key_value=self._key_generator(),
                owner_name=owner,
                access_level=access_level,
                created_at=created_at,
                expires_at=expires_at,
            )
            try:
                await self._insert(api_key)
                return api_key
            except ConditionFailedError:
                logger.warning(
                    "API key value collision, regenerating",
                    extra={
                        "context": {"key_prefix": mask_key_value(api_key.key_value)}
                    },
                )

        raise StoreUnavailableError(
            message="Não foi possível gerar uma chave de API única.",
            store=self.table_name,
        )

    async def delete_by_id(self, key_id: int) -> bool:
        items = await self.query_items(
            IndexName="IdIndex",
            KeyConditionExpression="#id = :id",
            ExpressionAttributeNames={"#id": "id"},
            ExpressionAttributeValues={":id": key_id},
        )
        if not items:
            return False

        deleted = await self.delete_item(
            {"key_value": items[0]["key_value"]}, return_old=True
        )
        return deleted is not None

    async def list_all(self) -> list[ApiKey]:
        items = await self.scan_items(
            FilterExpression="attribute_exists(owner_name)"
        )
        return sorted((self._from_item(i) for i in items), key=lambda k: k.id)

    async def seed(
        self, key_value: str, owner_name: str, access_level: AccessLevel
    ) -> ApiKey:
        existing = await self.find_by_key_value(key_value)
        if existing:
            return existing

        owner = validate_new_key(owner_name, access_level)
        api_key = ApiKey(
            id=await self._next_id(),
            key_value=key_value,
            owner_name=owner,
            access_level=access_level,
            created_at=_utcnow(),
        )
        try:
            await self._insert(api_key)
        except ConditionFailedError:
            # Seeded concurrently by another instance
            existing = await self.find_by_key_value(key_value)
            if existing:
                return existing
            raise
        return api_key
