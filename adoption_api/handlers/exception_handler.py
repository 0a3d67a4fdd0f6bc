"""Global exception handlers for consistent error responses."""

from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from adoption_api.exceptions import AdoptionAPIError, ValidationError
from adoption_api.logging.config import get_logger

logger = get_logger(__name__)

VALIDATION_TITLE = "Erro de Validação: Dados de entrada inválidos."


def create_error_response(
    error_code: str,
    message: str,
    status_code: int,
    details: dict[str, Any] | None = None,
    correlation_id: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """
    Create standardized error response.

    Args:
        error_code: Machine-readable error code
        message: Human-readable error message
        status_code: HTTP status code
        details: Additional error details
        correlation_id: Request correlation ID for tracing
        headers: Extra response headers

    Returns:
        JSONResponse with error information
    """
    content: dict[str, Any] = {
        "status": "error",
        "error_code": error_code,
        "message": message,
        "details": details or {},
    }

    if correlation_id:
        content["correlation_id"] = correlation_id

    return JSONResponse(status_code=status_code, content=content, headers=headers)


def create_validation_response(
    title: str,
    violations: list[tuple[str, str]],
    correlation_id: str | None = None,
) -> JSONResponse:
    """
    Collapse field violations into a single 400 response.

    Args:
        title: Summary of the failure
        violations: ``(field, message)`` pairs
        correlation_id: Request correlation ID for tracing

    Returns:
        JSONResponse with ``title`` and one ``details`` entry per field
    """
    content: dict[str, Any] = {
        "status": "error",
        "error_code": "VALIDATION_ERROR",
        "title": title,
        "details": [f"Campo '{field}': {msg}" for field, msg in violations],
    }
    if correlation_id:
        content["correlation_id"] = correlation_id

    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


def api_error_response(request: Request, exc: AdoptionAPIError) -> JSONResponse:
    """
    Render an AdoptionAPIError as a JSON response.

    Used both by the FastAPI exception handler and by the request filters,
    which abort the pipeline with this response.
    """
    correlation_id = getattr(request.state, "correlation_id", None)

    if isinstance(exc, ValidationError):
        return create_validation_response(
            exc.message, exc.violations, correlation_id
        )

    return create_error_response(
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
        correlation_id=correlation_id,
        headers=exc.headers or None,
    )


async def adoption_api_exception_handler(
    request: Request, exc: AdoptionAPIError
) -> JSONResponse:
    """Handle AdoptionAPIError raised by route handlers."""
    return api_error_response(request, exc)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors from FastAPI.

    Every failed field is listed as ``Campo '<field>': <message>``.

    Args:
        request: FastAPI request
        exc: RequestValidationError from Pydantic

    Returns:
        JSONResponse with validation error details
    """
    correlation_id = getattr(request.state, "correlation_id", None)

    violations: list[tuple[str, str]] = []
    for error in exc.errors():
        # Skip the 'body' prefix for cleaner field names
        field_parts = [str(loc) for loc in error["loc"] if loc != "body"]
        field = ".".join(field_parts) if field_parts else "request"

        msg = error["msg"]
        if error["type"] == "missing":
            msg = "campo obrigatório"
        violations.append((field, msg))

    return create_validation_response(VALIDATION_TITLE, violations, correlation_id)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Logs full traceback and returns a generic error to the client.
    Connection and timeout failures are reported as 503.

    Args:
        request: FastAPI request
        exc: Any unhandled exception

    Returns:
        JSONResponse with generic error message
    """
    correlation_id = getattr(request.state, "correlation_id", None)

    logger.error(
        f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
        exc_info=exc,
        extra={
            "correlation_id": correlation_id,
            "context": {
                "exception_type": type(exc).__name__,
                "method": request.method,
                "path": request.url.path,
            },
        },
    )

    if isinstance(exc, (ConnectionError, TimeoutError)):
        return create_error_response(
            error_code="SERVICE_UNAVAILABLE",
            message="Serviço temporariamente indisponível. Tente novamente mais tarde.",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details={"retry_after": 60},
            correlation_id=correlation_id,
            headers={"Retry-After": "60"},
        )

    return create_error_response(
        error_code="INTERNAL_ERROR",
        message="Ocorreu um erro interno. Informe o correlation ID ao suporte.",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        details={},
        correlation_id=correlation_id,
    )
