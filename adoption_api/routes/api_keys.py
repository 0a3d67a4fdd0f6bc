"""Admin routes for API key management."""

from typing import List

from fastapi import APIRouter, Depends, Request, Response, status

from adoption_api.auth.api_key import mask_key_value
from adoption_api.auth.dependencies import get_api_key_store, get_current_owner
from adoption_api.exceptions import NotFoundError
from adoption_api.logging.config import get_logger
from adoption_api.repositories.api_key_repository import ApiKeyStore
from adoption_api.schemas.api_key import (
    ApiKeySummary,
    CreatedApiKeyResponse,
    CreateApiKeyRequest,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/admin/apikeys", tags=["Admin"])


@router.get("", response_model=List[ApiKeySummary])
async def list_api_keys(
    store: ApiKeyStore = Depends(get_api_key_store),
) -> List[ApiKeySummary]:
    """List issued keys. Key values are never included."""
    return [ApiKeySummary.from_api_key(k) for k in await store.list_all()]


@router.post(
    "",
    response_model=CreatedApiKeyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Issue API Key",
    description=(
        "Issue a new API key. Requires a READ_WRITE key. The response is the "
        "only place the key value is ever returned."
    ),
)
async def create_api_key(
    request: Request,
    body: CreateApiKeyRequest,
    response: Response,
    store: ApiKeyStore = Depends(get_api_key_store),
    issued_by: str | None = Depends(get_current_owner),
) -> CreatedApiKeyResponse:
    """
    Issue a new API key.

    Args:
        request: FastAPI request object
        body: Owner, access level and optional expiry
        response: Used to set the Location header
        store: API key store
        issued_by: Owner of the key that made this request

    Returns:
        CreatedApiKeyResponse including the plaintext key value
    """
    api_key = await store.create(body.owner_name, body.access_level, body.expires_at)

    logger.info(
        "API key issued",
        extra={
            "correlation_id": getattr(request.state, "correlation_id", None),
            "context": {
                "key_id": api_key.id,
                "key_prefix": mask_key_value(api_key.key_value),
                "owner": api_key.owner_name,
                "access_level": api_key.access_level.value,
                "issued_by": issued_by,
            },
        },
    )

    response.headers["Location"] = f"{router.prefix}/{api_key.id}"
    return CreatedApiKeyResponse.from_api_key(api_key)


@router.delete(
    "/{key_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Chave de API não encontrada"}},
)
async def revoke_api_key(
    request: Request,
    key_id: int,
    store: ApiKeyStore = Depends(get_api_key_store),
) -> Response:
    """Revoke a key by id; it stops authenticating immediately."""
    if not await store.delete_by_id(key_id):
        raise NotFoundError(
            message=f"Chave de API com id {key_id} não encontrada",
            resource="api_key",
            resource_id=key_id,
        )

    logger.info(
        "API key revoked",
        extra={
            "correlation_id": getattr(request.state, "correlation_id", None),
            "context": {"key_id": key_id},
        },
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
