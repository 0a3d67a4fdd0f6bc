"""Fixed-window rate limit counter stores."""

import threading
import time
from collections.abc import Callable
from typing import Dict, Protocol, Tuple

from adoption_api.config import settings
from adoption_api.exceptions import StoreUnavailableError
from adoption_api.repositories.base import BaseRepository, ConditionFailedError

MAX_WINDOW_RESET_ATTEMPTS = 3


class RateLimitCounterStore(Protocol):
    """Storage contract for per-client request counters."""

    async def increment(self, client_key: str, window_seconds: int) -> int:
        """
        Atomically increment the counter of ``client_key``.

        A missing or expired counter starts a new window that expires
        ``window_seconds`` after its creation.

        Returns:
            The counter value before the increment
        """
        ...


class InMemoryRateLimitCounterStore:
    """
    In-memory counter store.

    Tracks ``(request_count, window_expiry)`` per client key. Not shared
    between processes and reset on restart. Expired counters are swept
    at most once per window.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._counters: Dict[str, Tuple[int, float]] = {}
        self._next_sweep = 0.0
        self._lock = threading.Lock()

    async def increment(self, client_key: str, window_seconds: int) -> int:
        with self._lock:
            now = self._clock()
            if now >= self._next_sweep:
                self._cleanup_expired(now)
                self._next_sweep = now + window_seconds

            count, expires_at = self._counters.get(client_key, (0, 0.0))

            if expires_at <= now:
                # Expired or never seen: start a new window
                count, expires_at = 0, now + window_seconds

            self._counters[client_key] = (count + 1, expires_at)
            return count

    def _cleanup_expired(self, now: float) -> None:
        """Remove counters whose window has ended (called under lock)."""
        expired = [k for k, (_, expiry) in self._counters.items() if expiry <= now]
        for k in expired:
            del self._counters[k]

    def reset_key(self, client_key: str) -> None:
        """Drop the counter of a single client."""
        with self._lock:
            self._counters.pop(client_key, None)

    def clear_all(self) -> None:
        """Clear all rate limit counters (useful for testing)."""
        with self._lock:
            self._counters.clear()


class DynamoRateLimitCounterStore(BaseRepository):
    """
    Counter store on DynamoDB, shared by every instance of the service.

    Each client has one item ``{client_key, request_count, expires_at}``. The
    increment is a conditional ``ADD`` that only applies while the window is
    live; once it has passed, a conditional put opens the next window.
    """

    def __init__(
        self,
        table_name: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(table_name or settings.dynamodb_table_rate_limits)
        self._clock = clock

    async def increment(self, client_key: str, window_seconds: int) -> int:
        for _ in range(MAX_WINDOW_RESET_ATTEMPTS):
            now = int(self._clock())
            try:
                attributes = await self.update_item(
                    key={"client_key": client_key},
                    update_expression=(
                        "SET expires_at = if_not_exists(expires_at, :expires_at) "
                        "ADD request_count :one"
                    ),
                    expression_values={
                        ":one": 1,
                        ":now": now,
                        ":expires_at": now + window_seconds,
                    },
                    condition_expression=(
                        "attribute_not_exists(client_key) OR expires_at > :now"
                    ),
                    return_values="UPDATED_NEW",
                )
                return int(attributes["request_count"]) - 1
            except ConditionFailedError:
                pass

            # Window is over: open a new one unless another instance did
            try:
                await self.put_item(
                    {
                        "client_key": client_key,
                        "request_count": 1,
                        "expires_at": now + window_seconds,
                    },
                    condition_expression=(
                        "attribute_not_exists(client_key) OR expires_at <= :now"
                    ),
                    expression_values={":now": now},
                )
                return 0
            except ConditionFailedError:
                continue

        raise StoreUnavailableError(
            message="Falha ao atualizar o contador de requisições.",
            store=self.table_name,
        )
