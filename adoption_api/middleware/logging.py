"""Request logging middleware with correlation ID support."""

import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from adoption_api.logging.config import get_logger

logger = get_logger(__name__)

CORRELATION_ID_HEADER = "X-Request-ID"


def _get_or_generate_correlation_id(request: Request) -> str:
    """Return the caller's X-Request-ID, or a new UUID when absent."""
    return request.headers.get(CORRELATION_ID_HEADER) or str(uuid.uuid4())


def _request_context(request: Request) -> dict:
    return {
        "method": request.method,
        "path": request.url.path,
        "client_host": request.client.host if request.client else None,
    }


def _log_request_complete(
    request: Request, response: Response, correlation_id: str, elapsed_ms: float
) -> None:
    """
    Log the completion of a request.

    Args:
        request: The incoming request
        response: The response being returned
        correlation_id: The correlation ID for this request
        elapsed_ms: Time elapsed during request processing
    """
    context = _request_context(request)
    context.update(
        {
            "status_code": response.status_code,
            "response_time_ms": round(elapsed_ms, 2),
            # Owner name set by the auth filter, never the key itself
            "api_key_owner": getattr(request.state, "current_api_key_owner", None),
            "rate_limit_remaining": response.headers.get("X-RateLimit-Remaining"),
            "idempotent_replay": "X-Idempotency-Status" in response.headers,
        }
    )
    logger.info(
        "Request completed",
        extra={"correlation_id": correlation_id, "context": context},
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all HTTP requests and responses.

    Features:
    - Adds a correlation ID (X-Request-ID) to each request and response
    - Logs request start with method and path
    - Logs completion with status, latency, key owner and pipeline outcome
    - Logs unhandled exceptions with traceback before re-raising
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = _get_or_generate_correlation_id(request)
        request.state.correlation_id = correlation_id

        start_time = time.time()
        logger.info(
            "Request started",
            extra={"correlation_id": correlation_id, "context": _request_context(request)},
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            elapsed_ms = (time.time() - start_time) * 1000
            context = _request_context(request)
            context["response_time_ms"] = round(elapsed_ms, 2)
            logger.error(
                "Request failed with exception",
                exc_info=exc,
                extra={"correlation_id": correlation_id, "context": context},
            )
            raise

        elapsed_ms = (time.time() - start_time) * 1000
        _log_request_complete(request, response, correlation_id, elapsed_ms)

        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response
