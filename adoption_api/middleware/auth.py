"""API key authentication and access-level authorization filter."""

from collections.abc import Callable
from datetime import datetime, timezone

from fastapi import Request, Response
from starlette.types import ASGIApp

from adoption_api.auth.api_key import mask_key_value
from adoption_api.config import settings
from adoption_api.exceptions import ForbiddenError, UnauthorizedError
from adoption_api.logging.config import get_logger
from adoption_api.middleware.pipeline import PipelineFilter
from adoption_api.models.api_key import AccessLevel
from adoption_api.repositories.api_key_repository import ApiKeyStore

logger = get_logger(__name__)

API_KEY_HEADER = "X-API-Key"
OWNER_STATE_ATTR = "current_api_key_owner"

UNAUTHORIZED_MESSAGE = "Acesso negado. Chave de API ausente ou inválida."
FORBIDDEN_MESSAGE = (
    "Acesso negado. Sua chave de API não possui permissão para esta operação."
)
EXPIRED_MESSAGE = "Acesso negado. Chave de API expirada."

PUBLIC_PATH_MARKERS = ("openapi", "swagger-ui")
# Only GET is public; HEAD, OPTIONS and PATCH still need a READ_ONLY key
PUBLIC_METHODS = frozenset({"GET"})
WRITE_METHODS = frozenset({"POST", "PUT", "DELETE"})


def required_access_level(method: str) -> AccessLevel:
    """Return the access level needed for an HTTP method."""
    if method.upper() in WRITE_METHODS:
        return AccessLevel.READ_WRITE
    return AccessLevel.READ_ONLY


def is_public_request(path: str, method: str) -> bool:
    """Documentation routes and GET requests skip authentication."""
    if any(marker in path for marker in PUBLIC_PATH_MARKERS):
        return True
    return method.upper() in PUBLIC_METHODS


class AuthFilter(PipelineFilter):
    """
    Validates the X-API-Key header of every non-GET request.

    - Missing, blank or unknown key: 401
    - Expired key (when expiry is enforced): 401
    - Key below the access level required by the method: 403
    - Otherwise the key owner is stored on ``request.state``
    """

    def __init__(
        self,
        app: ASGIApp,
        api_key_store: ApiKeyStore,
        enforce_expiry: bool | None = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        """
        Initialize the filter.

        Args:
            app: Next ASGI application
            api_key_store: Store used to look keys up
            enforce_expiry: Reject expired keys (defaults to settings)
            now: Clock used for expiry checks
        """
        super().__init__(app)
        self.api_key_store = api_key_store
        self.enforce_expiry = (
            settings.enforce_api_key_expiry if enforce_expiry is None else enforce_expiry
        )
        self._now = now

    async def filter(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        method = request.method.upper()

        if is_public_request(path, method):
            return await call_next(request)

        key_value = request.headers.get(API_KEY_HEADER, "")
        if not key_value.strip():
            self._log_denial(request, "missing_api_key")
            raise UnauthorizedError(UNAUTHORIZED_MESSAGE)

        api_key = await self.api_key_store.find_by_key_value(key_value)
        if api_key is None:
            self._log_denial(request, "unknown_api_key", key_value)
            raise UnauthorizedError(UNAUTHORIZED_MESSAGE)

        if self.enforce_expiry and api_key.is_expired(self._now()):
            self._log_denial(request, "expired_api_key", key_value)
            raise UnauthorizedError(EXPIRED_MESSAGE, details={"key_id": api_key.id})

        required = required_access_level(method)
        if api_key.access_level < required:
            self._log_denial(request, "insufficient_access_level", key_value)
            raise ForbiddenError(
                FORBIDDEN_MESSAGE,
                details={
                    "access_level": api_key.access_level.value,
                    "required_access_level": required.value,
                },
            )

        setattr(request.state, OWNER_STATE_ATTR, api_key.owner_name)
        return await call_next(request)

    @staticmethod
    def _log_denial(
        request: Request, reason: str, key_value: str | None = None
    ) -> None:
        logger.warning(
            "Request denied by authentication filter",
            extra={
                "correlation_id": getattr(request.state, "correlation_id", None),
                "context": {
                    "reason": reason,
                    "method": request.method,
                    "path": request.url.path,
                    "key_prefix": mask_key_value(key_value),
                },
            },
        )
