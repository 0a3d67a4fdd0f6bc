"""Base class for request filters of the API pipeline."""

from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from adoption_api.exceptions import AdoptionAPIError
from adoption_api.handlers.exception_handler import api_error_response


class PipelineFilter(BaseHTTPMiddleware):
    """
    Middleware that either passes the request on or aborts the pipeline.

    Subclasses implement ``filter`` and abort by raising an AdoptionAPIError,
    which is rendered here as the terminal response. Middleware runs outside
    FastAPI's exception handlers, so the rendering cannot be left to them.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await self.filter(request, call_next)
        except AdoptionAPIError as exc:
            return api_error_response(request, exc)

    async def filter(self, request: Request, call_next: Callable) -> Response:
        raise NotImplementedError
