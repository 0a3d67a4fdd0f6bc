"""Data models for the Adoption API."""

from adoption_api.models.api_key import AccessLevel, ApiKey
from adoption_api.models.catalog import (
    Adocao,
    AdocaoStatus,
    AdocaoView,
    Cachorro,
    FichaCachorro,
    Raca,
)
from adoption_api.models.idempotency import IdempotencyRecord, IdempotentContext

__all__ = [
    "AccessLevel",
    "ApiKey",
    "Adocao",
    "AdocaoStatus",
    "AdocaoView",
    "Cachorro",
    "FichaCachorro",
    "IdempotencyRecord",
    "IdempotentContext",
    "Raca",
]
