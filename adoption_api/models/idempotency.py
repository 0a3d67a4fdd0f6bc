"""Idempotency records and per-request idempotency context."""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class IdempotencyRecord(BaseModel):
    """
    Cached outcome of a successful idempotent request.

    Attributes:
        status_code: HTTP status of the original response
        body: Raw response body as sent to the client
        media_type: Content type of the body
        headers: Replayable response headers (e.g. Location)
        expiry: Unix timestamp after which the record is ignored
    """

    model_config = ConfigDict(frozen=True)

    status_code: int = Field(..., ge=100, le=599)
    body: bytes = b""
    media_type: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    expiry: float = Field(..., description="Unix timestamp")

    def is_live(self, now: float) -> bool:
        """Return True while the record has not reached its expiry."""
        return self.expiry > now


class IdempotentContext(BaseModel):
    """Carries the cache key and TTL from the pre- to the post-phase."""

    model_config = ConfigDict(frozen=True)

    cache_key: str
    expire_after: int
