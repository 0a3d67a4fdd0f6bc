"""Custom exception classes for the Adoption API."""

from typing import Any


class AdoptionAPIError(Exception):
    """Base exception for the Adoption API."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code
            error_code: Machine-readable error code
            details: Additional error details
            headers: Extra response headers to send with the error
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        self.headers = headers or {}


class UnauthorizedError(AdoptionAPIError):
    """Raised when authentication fails (401)."""

    def __init__(
        self,
        message: str = "Acesso negado. Chave de API ausente ou inválida.",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=401,
            error_code="UNAUTHORIZED",
            details=details,
        )


class ForbiddenError(AdoptionAPIError):
    """Raised when the API key lacks the required access level (403)."""

    def __init__(
        self,
        message: str = (
            "Acesso negado. Sua chave de API não possui permissão "
            "para esta operação."
        ),
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=403,
            error_code="FORBIDDEN",
            details=details,
        )


class ValidationError(AdoptionAPIError):
    """
    Raised when input data fails validation (400).

    Field violations are kept as a list of ``(field, message)`` pairs so the
    exception handler can collapse them into a single response.
    """

    def __init__(
        self,
        message: str = "Erro de Validação: Dados de entrada inválidos.",
        violations: list[tuple[str, str]] | None = None,
    ) -> None:
        """
        Initialize ValidationError.

        Args:
            message: Title of the validation failure
            violations: Failed fields and their messages
        """
        self.violations = violations or []
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
        )


class IdempotencyKeyMissingError(AdoptionAPIError):
    """Raised when an idempotent route is called without a key (400)."""

    def __init__(
        self,
        message: str = (
            "O cabeçalho X-Idempotency-Key é obrigatório para esta operação"
        ),
    ) -> None:
        super().__init__(
            message=message,
            status_code=400,
            error_code="IDEMPOTENCY_KEY_REQUIRED",
            details={"header": "X-Idempotency-Key"},
        )


class NotFoundError(AdoptionAPIError):
    """Raised when a resource is not found (404)."""

    def __init__(
        self,
        message: str = "Recurso não encontrado",
        resource: str | None = None,
        resource_id: int | None = None,
    ) -> None:
        """
        Initialize NotFoundError.

        Args:
            message: Error message
            resource: Resource name that was looked up
            resource_id: Identifier that was not found
        """
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if resource_id is not None:
            details["id"] = resource_id
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND",
            details=details,
        )


class ConflictError(AdoptionAPIError):
    """Raised when referential integrity blocks an operation (409)."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=409,
            error_code="CONFLICT",
            details=details,
        )


class RequestTooLargeError(AdoptionAPIError):
    """Raised when request payload exceeds size limit (413)."""

    def __init__(
        self,
        message: str = "Request payload too large",
        max_size: str = "512KB",
        details: dict[str, Any] | None = None,
    ) -> None:
        error_details = details or {}
        error_details["max_size"] = max_size
        super().__init__(
            message=message,
            status_code=413,
            error_code="PAYLOAD_TOO_LARGE",
            details=error_details,
        )


class RateLimitError(AdoptionAPIError):
    """Raised when rate limit is exceeded (429)."""

    def __init__(
        self,
        retry_after: int = 60,
        message: str | None = None,
        headers: dict[str, str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize RateLimitError.

        Args:
            retry_after: Seconds until retry is allowed
            message: Error message (defaults to the window-based message)
            headers: Rate limit headers to send alongside Retry-After
            details: Additional error details
        """
        error_details = details or {}
        error_details["retry_after"] = retry_after
        error_headers = dict(headers or {})
        error_headers["Retry-After"] = str(retry_after)
        super().__init__(
            message=message
            or (
                "Limite de requisições excedido. "
                f"Tente novamente em {retry_after} segundos."
            ),
            status_code=429,
            error_code="RATE_LIMIT_EXCEEDED",
            details=error_details,
            headers=error_headers,
        )
        self.retry_after = retry_after


class StoreUnavailableError(AdoptionAPIError):
    """Raised when a backing store cannot be reached from a filter (500)."""

    def __init__(
        self,
        message: str = "Falha ao acessar o armazenamento.",
        store: str | None = None,
    ) -> None:
        details = {"store": store} if store else {}
        super().__init__(
            message=message,
            status_code=500,
            error_code="STORE_UNAVAILABLE",
            details=details,
        )
        self.store = store


class ServiceUnavailableError(AdoptionAPIError):
    """Raised when a handler's dependency is degraded (503)."""

    def __init__(
        self,
        message: str = (
            "O serviço de persistência está temporariamente indisponível. "
            "Tente novamente mais tarde."
        ),
        service: str | None = None,
        retry_after: int = 60,
    ) -> None:
        details: dict[str, Any] = {"retry_after": retry_after}
        if service:
            details["service"] = service
        super().__init__(
            message=message,
            status_code=503,
            error_code="SERVICE_UNAVAILABLE",
            details=details,
            headers={"Retry-After": str(retry_after)},
        )
