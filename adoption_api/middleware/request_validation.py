"""Request size validation filter."""

from collections.abc import Callable

from fastapi import Request, Response
from starlette.types import ASGIApp

from adoption_api.config import settings
from adoption_api.exceptions import RequestTooLargeError
from adoption_api.middleware.pipeline import PipelineFilter


class RequestSizeValidationMiddleware(PipelineFilter):
    """
    Rejects requests whose declared Content-Length exceeds the limit.

    Runs before the authentication filter so oversized bodies are refused
    without touching any store. Returns 413 Payload Too Large.
    """

    def __init__(self, app: ASGIApp, max_size: int | None = None) -> None:
        super().__init__(app)
        self.max_size = max_size or settings.max_request_size_bytes

    async def filter(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")

        if content_length and content_length.isdigit():
            size = int(content_length)
            if size > self.max_size:
                size_kb = size / 1024
                max_kb = self.max_size / 1024
                raise RequestTooLargeError(
                    message=f"Request size {size_kb:.1f}KB exceeds maximum {max_kb:.0f}KB",
                    max_size=f"{max_kb:.0f}KB",
                    details={"request_size": f"{size_kb:.1f}KB"},
                )

        return await call_next(request)
