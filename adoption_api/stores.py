"""Construction of the process-wide stores for the configured backend."""

from dataclasses import dataclass

from adoption_api.config import Settings
from adoption_api.logging.config import get_logger
from adoption_api.models.api_key import AccessLevel, ApiKey
from adoption_api.repositories.api_key_repository import (
    ApiKeyStore,
    DynamoApiKeyRepository,
    InMemoryApiKeyRepository,
)
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

logger = get_logger(__name__)


@dataclass
class Stores:
    """The three stores shared by the request pipeline."""

    api_keys: ApiKeyStore
    idempotency: IdempotencyStore
    rate_limits: RateLimitCounterStore


def build_stores(settings: Settings) -> Stores:
    """
    Create the stores for ``settings.storage_backend``.

    ``memory`` keeps everything in the process (single node). ``dynamodb``
    shares state between instances through the configured tables.
    """
    if settings.storage_backend == "dynamodb":
        return Stores(
            api_keys=DynamoApiKeyRepository(settings.dynamodb_table_api_keys),
            idempotency=DynamoIdempotencyStore(settings.dynamodb_table_idempotency),
            rate_limits=DynamoRateLimitCounterStore(
                settings.dynamodb_table_rate_limits
            ),
        )

    return Stores(
        api_keys=InMemoryApiKeyRepository(),
        idempotency=InMemoryIdempotencyStore(),
        rate_limits=InMemoryRateLimitCounterStore(),
    )


async def seed_bootstrap_key(
    api_key_store: ApiKeyStore, settings: Settings
) -> ApiKey | None:
    """
    Install the operator-provided READ_WRITE key, if one is configured.

    Returns:
        The seeded (or already present) key, or None when unconfigured
    """
    if not settings.bootstrap_api_key:
        return None

    api_key = await api_key_store.seed(
        settings.bootstrap_api_key,
        settings.bootstrap_api_key_owner,
        AccessLevel.READ_WRITE,
    )
    logger.info(
        "Bootstrap API key installed",
        extra={"context": {"key_id": api_key.id, "owner": api_key.owner_name}},
    )
    return api_key
