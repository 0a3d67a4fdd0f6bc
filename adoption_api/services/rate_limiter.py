"""Fixed-window rate limiter service."""

from pydantic import BaseModel, Field

from adoption_api.config import settings
from adoption_api.repositories.rate_limit_repository import (
    InMemoryRateLimitCounterStore,
    RateLimitCounterStore,
)


class RateLimitResult(BaseModel):
    """
    Outcome of a rate limit check.

    Attributes:
        current: Requests counted in the window, including this one
        limit: Maximum requests allowed per window
        remaining: Requests left in the window (never negative)
        exceeded: Whether this request is over the limit
    """

    current: int
    limit: int
    remaining: int = Field(..., ge=0)
    exceeded: bool


class RateLimiterService:
    """
    Counts requests per client key in fixed time windows.

    A counter is created on the first request of a client and expires
    ``window_seconds`` later; bursts across window boundaries are accepted.
    """

    def __init__(
        self,
        store: RateLimitCounterStore | None = None,
        window_seconds: int | None = None,
        max_requests: int | None = None,
    ) -> None:
        """
        Initialize the rate limiter.

        Args:
            store: Counter store (in-memory if None)
            window_seconds: Window length (defaults to settings)
            max_requests: Requests allowed per window (defaults to settings)
        """
        self.store = store or InMemoryRateLimitCounterStore()
        self.window_seconds = (
            settings.rate_limit_window_seconds
            if window_seconds is None
            else window_seconds
        )
        self.max_requests = (
            settings.rate_limit_max_requests if max_requests is None else max_requests
        )

    async def check_rate_limit(self, client_key: str) -> RateLimitResult:
        """
        Count a request of ``client_key`` and report the window state.

        Never blocks; store failures propagate to the caller.

        Args:
            client_key: Client identifier

        Returns:
            RateLimitResult for this request
        """
        previous = await self.store.increment(client_key, self.window_seconds)
        current = previous + 1
        return RateLimitResult(
            current=current,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - current),
            exceeded=previous >= self.max_requests,
        )
