"""FastAPI dependencies for route handlers."""

from fastapi import Request

from adoption_api.middleware.auth import OWNER_STATE_ATTR
from adoption_api.repositories.api_key_repository import ApiKeyStore
from adoption_api.services.catalog_service import CatalogService


def get_api_key_store(request: Request) -> ApiKeyStore:
    """Return the API key store the application was built with."""
    return request.app.state.api_key_store


def get_catalog_service(request: Request) -> CatalogService:
    """Return the catalog service the application was built with."""
    return request.app.state.catalog_service


def get_current_owner(request: Request) -> str | None:
    """
    Owner name of the key that authenticated this request.

    Returns:
        The owner name, or None for requests that skipped authentication
    """
    return getattr(request.state, OWNER_STATE_ATTR, None)
