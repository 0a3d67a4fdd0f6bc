"""
Idempotency filter for non-GET mutations.

Routes opt in with the ``idempotent`` decorator on the endpoint, or
``mark_idempotent`` on a whole router. A request to an idempotent route must
carry X-Idempotency-Key; a repeat of a successful request with the same
method, path and key gets the cached status and body back without running
the handler again.

Two concurrent requests with the same key can both miss the cache and both
execute; the last successful response wins in the store.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import APIRouter, Request, Response
from starlette.routing import Match
from starlette.types import ASGIApp

from adoption_api.exceptions import IdempotencyKeyMissingError, StoreUnavailableError
from adoption_api.logging.config import get_logger
from adoption_api.middleware.pipeline import PipelineFilter
from adoption_api.models.idempotency import IdempotencyRecord, IdempotentContext
from adoption_api.repositories.idempotency_repository import IdempotencyStore

logger = get_logger(__name__)

IDEMPOTENCY_KEY_HEADER = "X-Idempotency-Key"
IDEMPOTENCY_STATUS_HEADER = "X-Idempotency-Status"
IDEMPOTENT_REPLAY = "IDEMPOTENT_REPLAY"
CONTEXT_STATE_ATTR = "idempotent_context"
STORE_FAILURE_MESSAGE = "Falha ao acessar o cache de idempotência."

DEFAULT_EXPIRE_AFTER = 3600
CREATE_EXPIRE_AFTER = 7200

# Response headers stored with a record and sent again on replay
REPLAYED_HEADERS = ("location",)

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})

_MARKER_ATTR = "__idempotent__"


@dataclass(frozen=True)
class IdempotentMarker:
    """Idempotency settings of a route."""

    expire_after: int = DEFAULT_EXPIRE_AFTER


def idempotent(expire_after: int = DEFAULT_EXPIRE_AFTER) -> Callable:
    """
    Mark an endpoint function as idempotent.

    Args:
        expire_after: Seconds a successful response is replayed for
    """

    def decorator(func: Callable) -> Callable:
        setattr(func, _MARKER_ATTR, IdempotentMarker(expire_after))
        return func

    return decorator


def mark_idempotent(
    router: APIRouter, expire_after: int = DEFAULT_EXPIRE_AFTER
) -> APIRouter:
    """
    Mark every mutating route of ``router`` as idempotent.

    Read-only routes (GET, HEAD, OPTIONS) are left alone and endpoints that
    carry their own marker keep it. Must be called after the routes are
    declared.
    """
    for route in router.routes:
        endpoint = getattr(route, "endpoint", None)
        methods = getattr(route, "methods", None) or set()
        if endpoint is None or hasattr(endpoint, _MARKER_ATTR):
            continue
        if methods - SAFE_METHODS:
            setattr(endpoint, _MARKER_ATTR, IdempotentMarker(expire_after))
    return router


def resolve_idempotent_marker(request: Request) -> IdempotentMarker | None:
    """Find the marker of the route that will handle ``request``, if any."""
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            endpoint = getattr(route, "endpoint", None)
            return getattr(endpoint, _MARKER_ATTR, None)
    return None


def build_cache_key(method: str, path: str, idempotency_key: str) -> str:
    return f"{method.upper()}:{path}:{idempotency_key}"


class IdempotencyFilter(PipelineFilter):
    """
    Replays cached responses and captures successful ones.

    Pre-phase: resolve the route marker, require X-Idempotency-Key, replay a
    live record or attach an IdempotentContext to ``request.state``.
    Post-phase: store 2xx responses; other statuses are never cached so the
    client may retry them.
    """

    def __init__(
        self,
        app: ASGIApp,
        store: IdempotencyStore,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(app)
        self.store = store
        self._clock = clock

    async def filter(self, request: Request, call_next: Callable) -> Response:
        marker = resolve_idempotent_marker(request)
        if marker is None:
            return await call_next(request)

        idempotency_key = request.headers.get(IDEMPOTENCY_KEY_HEADER, "")
        if not idempotency_key.strip():
            raise IdempotencyKeyMissingError()

        cache_key = build_cache_key(request.method, request.url.path, idempotency_key)

        try:
            record = await self.store.get(cache_key)
        except StoreUnavailableError as exc:
            raise StoreUnavailableError(
                message=STORE_FAILURE_MESSAGE, store=exc.store
            ) from exc

        if record is not None and record.is_live(self._clock()):
            logger.info(
                "Idempotent replay",
                extra={
                    "correlation_id": getattr(request.state, "correlation_id", None),
                    "context": {
                        "method": request.method,
                        "path": request.url.path,
                        "status_code": record.status_code,
                    },
                },
            )
            return self._replay(record)

        context = IdempotentContext(
            cache_key=cache_key, expire_after=marker.expire_after
        )
        setattr(request.state, CONTEXT_STATE_ATTR, context)

        response = await call_next(request)
        return await self._capture(request, response)

    @staticmethod
    def _replay(record: IdempotencyRecord) -> Response:
        headers = dict(record.headers)
        headers[IDEMPOTENCY_STATUS_HEADER] = IDEMPOTENT_REPLAY
        return Response(
            content=record.body,
            status_code=record.status_code,
            headers=headers,
            media_type=record.media_type,
        )

    async def _capture(self, request: Request, response: Response) -> Response:
        context: IdempotentContext | None = getattr(
            request.state, CONTEXT_STATE_ATTR, None
        )
        if context is None or not 200 <= response.status_code < 300:
            return response

        body = b"".join([chunk async for chunk in response.body_iterator])
        record = IdempotencyRecord(
            status_code=response.status_code,
            body=body,
            media_type=response.headers.get("content-type"),
            headers={
                name: response.headers[name]
                for name in REPLAYED_HEADERS
                if name in response.headers
            },
            expiry=self._clock() + context.expire_after,
        )

        try:
            await self.store.put(context.cache_key, record)
        except StoreUnavailableError:
            # The handler already ran; the client still gets its response
            logger.error(
                "Failed to store idempotency record",
                extra={
                    "correlation_id": getattr(request.state, "correlation_id", None),
                    "context": {"method": request.method, "path": request.url.path},
                },
            )

        return Response(
            content=body,
            status_code=response.status_code,
            headers=dict(response.headers),
        )
