"""Pydantic schemas for the API key admin endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from adoption_api.models.api_key import AccessLevel, ApiKey


class CreateApiKeyRequest(BaseModel):
    """
    Request schema for issuing a new API key.

    Attributes:
        owner_name: Who the key is issued to (required, 1-100 chars)
        access_level: READ_ONLY or READ_WRITE (required)
        expires_at: Optional expiry timestamp
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {"ownerName": "Abrigo Central", "accessLevel": "READ_WRITE"}
        },
    )

    owner_name: str = Field(..., min_length=1, max_length=100)
    access_level: AccessLevel
    expires_at: Optional[datetime] = None


class ApiKeySummary(BaseModel):
    """API key as listed by the admin endpoint; the key value is withheld."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    owner_name: str
    access_level: AccessLevel
    created_at: datetime
    expires_at: Optional[datetime] = None

    @classmethod
    def from_api_key(cls, api_key: ApiKey) -> "ApiKeySummary":
        return cls(
            id=api_key.id,
            owner_name=api_key.owner_name,
            access_level=api_key.access_level,
            created_at=api_key.created_at,
            expires_at=api_key.expires_at,
        )


class CreatedApiKeyResponse(ApiKeySummary):
    """Response for a newly issued key: the only time keyValue is returned."""

    key_value: str = Field(..., description="Plaintext API key (save this!)")

    @classmethod
    def from_api_key(cls, api_key: ApiKey) -> "CreatedApiKeyResponse":
        return cls(
            id=api_key.id,
            key_value=api_key.key_value,
            owner_name=api_key.owner_name,
            access_level=api_key.access_level,
            created_at=api_key.created_at,
            expires_at=api_key.expires_at,
        )
