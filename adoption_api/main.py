"""FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from adoption_api.config import Settings, settings as default_settings
from adoption_api.exceptions import AdoptionAPIError
from adoption_api.handlers.exception_handler import (
    adoption_api_exception_handler,
    generic_exception_handler,
    validation_exception_handler,
)
from adoption_api.logging.config import configure_logging
from adoption_api.middleware import (
    AuthFilter,
    IdempotencyFilter,
    LoggingMiddleware,
    RateLimitFilter,
    RequestSizeValidationMiddleware,
)
from adoption_api.repositories.api_key_repository import ApiKeyStore
from adoption_api.repositories.catalog_repository import CatalogRepository
from adoption_api.repositories.idempotency_repository import IdempotencyStore
from adoption_api.routes import adocoes, api_keys, cachorros, racas, status
from adoption_api.services.catalog_service import CatalogService
from adoption_api.services.rate_limiter import RateLimiterService
from adoption_api.stores import build_stores, seed_bootstrap_key

DESCRIPTION = """
## Adoption API

Pet adoption service: breeds (raças), dogs (cachorros) and adoption
requests (adoções).

### Authentication

Read requests (GET) are public. Every mutating request needs an API key
with READ_WRITE access:

```
X-API-Key: YOUR_API_KEY
```

Keys are issued through `/admin/apikeys` or the management CLI.

### Rate Limits

- Fixed window per client (API key, or first X-Forwarded-For address)
- Every limited response carries X-RateLimit-Limit, X-RateLimit-Remaining
  and X-RateLimit-Reset
- 429 responses include a Retry-After header

### Idempotency

Mutations of `/v2/adocoes` require `X-Idempotency-Key`. Repeating a
successful request with the same key returns the original response with
`X-Idempotency-Status: IDEMPOTENT_REPLAY`.
"""


def create_app(
    app_settings: Settings | None = None,
    *,
    api_key_store: ApiKeyStore | None = None,
    limiter: RateLimiterService | None = None,
    idempotency_store: IdempotencyStore | None = None,
    catalog: CatalogService | None = None,
) -> FastAPI:
    """
    Build the application with its request pipeline.

    Stores not passed in are built for ``app_settings.storage_backend``.

    Args:
        app_settings: Settings to use (module settings if None)
        api_key_store: API key store override
        limiter: Rate limiter override
        idempotency_store: Idempotency store override
        catalog: Catalog service override

    Returns:
        Configured FastAPI application
    """
    app_settings = app_settings or default_settings
    stores = build_stores(app_settings)
    api_key_store = api_key_store or stores.api_keys
    idempotency_store = idempotency_store or stores.idempotency
    limiter = limiter or RateLimiterService(
        store=stores.rate_limits,
        window_seconds=app_settings.rate_limit_window_seconds,
        max_requests=app_settings.rate_limit_max_requests,
    )
    catalog = catalog or CatalogService(CatalogRepository())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await seed_bootstrap_key(api_key_store, app_settings)
        yield

    app = FastAPI(
        title=app_settings.api_title,
        version=app_settings.api_version,
        description=DESCRIPTION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.storage_backend = app_settings.storage_backend
    app.state.api_key_store = api_key_store
    app.state.idempotency_store = idempotency_store
    app.state.rate_limiter = limiter
    app.state.catalog_service = catalog

    # Register middleware (order matters: last added = outermost layer).
    # Request flow: Logging -> RequestSize -> Auth -> RateLimit -> Idempotency
    app.add_middleware(IdempotencyFilter, store=idempotency_store)
    app.add_middleware(RateLimitFilter, limiter=limiter)
    app.add_middleware(
        AuthFilter,
        api_key_store=api_key_store,
        enforce_expiry=app_settings.enforce_api_key_expiry,
    )
    app.add_middleware(
        RequestSizeValidationMiddleware,
        max_size=app_settings.max_request_size_bytes,
    )
    app.add_middleware(LoggingMiddleware)

    # Register exception handlers
    app.add_exception_handler(AdoptionAPIError, adoption_api_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Register routers
    app.include_router(racas.router)
    app.include_router(cachorros.router)
    app.include_router(adocoes.router)
    app.include_router(api_keys.router)
    app.include_router(status.router)

    @app.get("/", tags=["Root"])
    async def root() -> dict[str, str]:
        """
        Root endpoint with API information.

        Returns:
            Dict with welcome message and docs link
        """
        return {
            "message": f"Welcome to {app_settings.api_title}",
            "version": app_settings.api_version,
            "docs": "/docs",
            "health": "/status",
        }

    return app


# Configure logging before creating the app
configure_logging()

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("adoption_api.main:app", host="0.0.0.0", port=8000, reload=True)
