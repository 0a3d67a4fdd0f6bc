"""Middleware components for request processing."""

from adoption_api.middleware.auth import AuthFilter
from adoption_api.middleware.idempotency import (
    IdempotencyFilter,
    idempotent,
    mark_idempotent,
)
from adoption_api.middleware.logging import LoggingMiddleware
from adoption_api.middleware.rate_limit import RateLimitFilter
from adoption_api.middleware.request_validation import RequestSizeValidationMiddleware

__all__ = [
    "AuthFilter",
    "IdempotencyFilter",
    "LoggingMiddleware",
    "RateLimitFilter",
    "RequestSizeValidationMiddleware",
    "idempotent",
    "mark_idempotent",
]
