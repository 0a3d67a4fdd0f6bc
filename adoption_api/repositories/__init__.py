"""Repository layer: API keys, idempotency records, counters and catalog."""

from adoption_api.repositories.api_key_repository import (
    ApiKeyStore,
    DynamoApiKeyRepository,
    InMemoryApiKeyRepository,
)
from adoption_api.repositories.catalog_repository import CatalogRepository
from adoption_api.repositories.idempotency_repository import (
    DynamoIdempotencyStore,
    IdempotencyStore,
    InMemoryIdempotencyStore,
)
from adoption_api.repositories.rate_limit_repository import (
    DynamoRateLimitCounterStore,
    InMemoryRateLimitCounterStore,
    RateLimitCounterStore,
)

__all__ = [
    "ApiKeyStore",
    "CatalogRepository",
    "DynamoApiKeyRepository",
    "DynamoIdempotencyStore",
    "DynamoRateLimitCounterStore",
    "IdempotencyStore",
    "InMemoryApiKeyRepository",
    "InMemoryIdempotencyStore",
    "InMemoryRateLimitCounterStore",
    "RateLimitCounterStore",
]
