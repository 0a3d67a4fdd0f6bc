"""API routes for dogs (cachorros)."""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from adoption_api.auth.dependencies import get_catalog_service
from adoption_api.models.catalog import Cachorro
from adoption_api.schemas.catalog import CachorroRequest
from adoption_api.services.catalog_service import CatalogService

router = APIRouter(prefix="/cachorros", tags=["Cachorros"])


@router.get("", response_model=List[Cachorro])
async def list_cachorros(
    service: CatalogService = Depends(get_catalog_service),
) -> List[Cachorro]:
    return await service.list_cachorros()


@router.get(
    "/{cachorro_id}",
    response_model=Cachorro,
    responses={404: {"description": "Cachorro não encontrado"}},
)
async def get_cachorro(
    cachorro_id: int, service: CatalogService = Depends(get_catalog_service)
) -> Cachorro:
    return await service.get_cachorro(cachorro_id)


@router.post(
    "",
    response_model=Cachorro,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {
            "description": "Erro de validação",
            "content": {
                "application/json": {
                    "example": {
                        "status": "error",
                        "error_code": "VALIDATION_ERROR",
                        "title": "Erro de Validação: Dados de entrada inválidos.",
                        "details": ["Campo 'nome': campo obrigatório"],
                    }
                }
            },
        },
        401: {"description": "Chave de API ausente ou inválida"},
        403: {"description": "Chave de API sem permissão de escrita"},
    },
)
async def create_cachorro(
    body: CachorroRequest,
    response: Response,
    service: CatalogService = Depends(get_catalog_service),
) -> Cachorro:
    """
    Register a dog, optionally with its ficha.

    Args:
        body: Dog data
        response: Used to set the Location header
        service: Catalog service

    Returns:
        The created dog
    """
    cachorro = await service.create_cachorro(body)
    response.headers["Location"] = f"{router.prefix}/{cachorro.id}"
    return cachorro


@router.put("/{cachorro_id}", response_model=Cachorro)
async def update_cachorro(
    cachorro_id: int,
    body: CachorroRequest,
    service: CatalogService = Depends(get_catalog_service),
) -> Cachorro:
    """Replace a dog. A body without ``ficha`` removes the stored one."""
    return await service.update_cachorro(cachorro_id, body)


@router.delete(
    "/{cachorro_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        404: {"description": "Cachorro não encontrado"},
        409: {"description": "Cachorro vinculado a adoções existentes"},
    },
)
async def delete_cachorro(
    cachorro_id: int, service: CatalogService = Depends(get_catalog_service)
) -> Response:
    await service.delete_cachorro(cachorro_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
