"""API key model and access levels."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class AccessLevel(str, Enum):
    """
    Capability attached to an API key.

    Levels are totally ordered by declaration: ``READ_ONLY < READ_WRITE``.
    The comparison operators use that order instead of string comparison.
    """

    READ_ONLY = "READ_ONLY"
    READ_WRITE = "READ_WRITE"

    @property
    def rank(self) -> int:
        return _ACCESS_LEVEL_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, AccessLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, AccessLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, AccessLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, AccessLevel):
            return NotImplemented
        return self.rank >= other.rank


_ACCESS_LEVEL_ORDER = (AccessLevel.READ_ONLY, AccessLevel.READ_WRITE)


class ApiKey(BaseModel):
    """
    API key record used for authentication and authorization.

    Attributes:
        id: Stable integer identifier
        key_value: Opaque 64-character key (unique)
        owner_name: Who the key was issued to
        access_level: READ_ONLY or READ_WRITE
        created_at: Creation timestamp (UTC)
        expires_at: Optional expiry timestamp; None never expires
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "keyValue": "q9X0mZl4n5dQ2Yx...",
                "ownerName": "Abrigo Central",
                "accessLevel": "READ_WRITE",
                "createdAt": "2025-11-11T12:00:00Z",
                "expiresAt": None,
            }
        },
    )

    id: int = Field(..., description="Stable key identifier")
    key_value: str = Field(
        ..., min_length=1, max_length=64, description="Opaque API key value"
    )
    owner_name: str = Field(
        ..., min_length=1, max_length=100, description="Key owner"
    )
    access_level: AccessLevel = Field(
        default=AccessLevel.READ_ONLY, description="Access level"
    )
    created_at: datetime = Field(..., description="Creation timestamp")
    expires_at: Optional[datetime] = Field(
        None, description="Expiry timestamp (None = never)"
    )

    @field_validator("created_at", "expires_at")
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Treat naive timestamps as UTC so comparisons never mix kinds."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def is_expired(self, now: datetime) -> bool:
        """Return True when the key has an expiry at or before ``now``."""
        return self.expires_at is not None and self.expires_at <= now
