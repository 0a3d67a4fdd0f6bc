"""API routes for adoptions (adoções), version 2."""

from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from adoption_api.auth.dependencies import get_catalog_service
from adoption_api.exceptions import ServiceUnavailableError, StoreUnavailableError
from adoption_api.logging.config import get_logger
from adoption_api.middleware.idempotency import CREATE_EXPIRE_AFTER, idempotent
from adoption_api.models.catalog import AdocaoView
from adoption_api.schemas.catalog import AdocaoRequest
from adoption_api.services.catalog_service import CatalogService

logger = get_logger(__name__)

router = APIRouter(prefix="/v2/adocoes", tags=["Adoções"])

FALLBACK_HEADER = "X-Fallback"

IDEMPOTENCY_RESPONSES = {
    400: {
        "description": "X-Idempotency-Key ausente ou referência inválida",
        "content": {
            "application/json": {
                "example": {
                    "status": "error",
                    "error_code": "IDEMPOTENCY_KEY_REQUIRED",
                    "message": (
                        "O cabeçalho X-Idempotency-Key é obrigatório "
                        "para esta operação"
                    ),
                    "details": {"header": "X-Idempotency-Key"},
                }
            }
        },
    },
    401: {"description": "Chave de API ausente ou inválida"},
    403: {"description": "Chave de API sem permissão de escrita"},
    429: {"description": "Limite de requisições excedido"},
}


@router.get(
    "",
    response_model=List[AdocaoView],
    responses={
        200: {
            "description": (
                "Adoções, da mais recente para a mais antiga. Em modo degradado "
                "a lista vem vazia com o cabeçalho X-Fallback: true."
            )
        }
    },
)
async def list_adocoes(
    request: Request, service: CatalogService = Depends(get_catalog_service)
) -> List[AdocaoView] | JSONResponse:
    """
    List adoptions, most recent request first.

    When the catalog cannot be read the request still succeeds with an
    empty list, flagged by ``X-Fallback: true``.
    """
    # The in-process catalog never raises; this serves a persistent catalog backend
    try:
        return await service.list_adocoes()
    except StoreUnavailableError as exc:
        logger.warning(
            "Adoption listing degraded to fallback",
            extra={
                "correlation_id": getattr(request.state, "correlation_id", None),
                "context": {"store": exc.store},
            },
        )
        return JSONResponse(content=[], headers={FALLBACK_HEADER: "true"})


@router.get(
    "/{adocao_id}",
    response_model=AdocaoView,
    responses={404: {"description": "Adoção não encontrada"}},
)
async def get_adocao(
    adocao_id: int, service: CatalogService = Depends(get_catalog_service)
) -> AdocaoView:
    return await service.get_adocao(adocao_id)


@router.post(
    "",
    response_model=AdocaoView,
    status_code=status.HTTP_201_CREATED,
    responses={
        **IDEMPOTENCY_RESPONSES,
        503: {"description": "Persistência indisponível"},
    },
)
@idempotent(expire_after=CREATE_EXPIRE_AFTER)
async def create_adocao(
    body: AdocaoRequest,
    response: Response,
    service: CatalogService = Depends(get_catalog_service),
) -> AdocaoView:
    """
    Register an adoption request.

    Idempotent: requires X-Idempotency-Key, and a repeat of a successful
    request within two hours returns the original response.

    Args:
        body: Adoption data; ``cachorro`` and ``racas`` reference existing ids
        response: Used to set the Location header
        service: Catalog service

    Returns:
        The created adoption with its references resolved

    Raises:
        ValidationError: A referenced cachorro or raça does not exist
        ServiceUnavailableError: The catalog cannot be written
    """
    # Reached only with a catalog backend that can fail
    try:
        adocao = await service.create_adocao(body)
    except StoreUnavailableError as exc:
        raise ServiceUnavailableError(service=exc.store) from exc
    response.headers["Location"] = f"{router.prefix}/{adocao.id}"
    return adocao


@router.put(
    "/{adocao_id}",
    response_model=AdocaoView,
    responses={**IDEMPOTENCY_RESPONSES, 404: {"description": "Adoção não encontrada"}},
)
@idempotent()
async def update_adocao(
    adocao_id: int,
    body: AdocaoRequest,
    service: CatalogService = Depends(get_catalog_service),
) -> AdocaoView:
    return await service.update_adocao(adocao_id, body)


@router.delete(
    "/{adocao_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**IDEMPOTENCY_RESPONSES, 404: {"description": "Adoção não encontrada"}},
)
@idempotent()
async def delete_adocao(
    adocao_id: int, service: CatalogService = Depends(get_catalog_service)
) -> Response:
    await service.delete_adocao(adocao_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
