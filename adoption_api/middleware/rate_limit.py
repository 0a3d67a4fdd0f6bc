"""Per-client rate limiting filter."""

from collections.abc import Callable

from fastapi import Request, Response
from starlette.types import ASGIApp

from adoption_api.exceptions import RateLimitError
from adoption_api.logging.config import get_logger
from adoption_api.middleware.auth import API_KEY_HEADER
from adoption_api.middleware.pipeline import PipelineFilter
from adoption_api.services.rate_limiter import RateLimiterService, RateLimitResult

logger = get_logger(__name__)

FORWARDED_FOR_HEADER = "X-Forwarded-For"
IP_FALLBACK = "IP_FALLBACK"


def resolve_client_identifier(request: Request) -> str:
    """
    Identify the client for rate limiting.

    First match wins: ``API_KEY:<key>``, then the first X-Forwarded-For
    address, then the IP_FALLBACK sentinel.
    """
    api_key = request.headers.get(API_KEY_HEADER, "")
    if api_key.strip():
        return f"API_KEY:{api_key}"

    forwarded_for = request.headers.get(FORWARDED_FOR_HEADER, "")
    if forwarded_for.strip():
        return forwarded_for.split(",")[0].strip()

    return IP_FALLBACK


def rate_limit_headers(result: RateLimitResult, window_seconds: int) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(window_seconds),
    }


class RateLimitFilter(PipelineFilter):
    """
    Applies the fixed-window limiter to identified clients.

    Every limited response carries the X-RateLimit-* headers; requests over
    the limit are answered with 429 and Retry-After. Clients that resolve to
    IP_FALLBACK are not limited.
    """

    def __init__(self, app: ASGIApp, limiter: RateLimiterService) -> None:
        super().__init__(app)
        self.limiter = limiter

    async def filter(self, request: Request, call_next: Callable) -> Response:
        client_key = resolve_client_identifier(request)
        if client_key == IP_FALLBACK:
            return await call_next(request)

        result = await self.limiter.check_rate_limit(client_key)
        window_seconds = self.limiter.window_seconds
        headers = rate_limit_headers(result, window_seconds)

        if result.exceeded:
            logger.warning(
                "Rate limit exceeded",
                extra={
                    "correlation_id": getattr(request.state, "correlation_id", None),
                    "context": {
                        "method": request.method,
                        "path": request.url.path,
                        "current": result.current,
                        "limit": result.limit,
                    },
                },
            )
            raise RateLimitError(
                retry_after=window_seconds,
                headers=headers,
                details={"limit": result.limit, "window_seconds": window_seconds},
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response
