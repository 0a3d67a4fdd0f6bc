"""API routes for breeds (raças)."""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from adoption_api.auth.dependencies import get_catalog_service
from adoption_api.models.catalog import Raca
from adoption_api.schemas.catalog import RacaRequest
from adoption_api.services.catalog_service import CatalogService

router = APIRouter(prefix="/racas", tags=["Raças"])

NOT_FOUND_RESPONSE = {
    404: {
        "description": "Raça não encontrada",
        "content": {
            "application/json": {
                "example": {
                    "status": "error",
                    "error_code": "NOT_FOUND",
                    "message": "Raça com id 1 não encontrada",
                    "details": {"resource": "raca", "id": 1},
                }
            }
        },
    }
}


@router.get("", response_model=List[Raca])
async def list_racas(
    service: CatalogService = Depends(get_catalog_service),
) -> List[Raca]:
    """List all breeds. Public."""
    return await service.list_racas()


@router.get("/{raca_id}", response_model=Raca, responses=NOT_FOUND_RESPONSE)
async def get_raca(
    raca_id: int, service: CatalogService = Depends(get_catalog_service)
) -> Raca:
    return await service.get_raca(raca_id)


@router.post("", response_model=Raca, status_code=status.HTTP_201_CREATED)
async def create_raca(
    body: RacaRequest,
    response: Response,
    service: CatalogService = Depends(get_catalog_service),
) -> Raca:
    """
    Create a breed.

    Requires a READ_WRITE key. The Location header points at the new breed.
    """
    raca = await service.create_raca(body)
    response.headers["Location"] = f"{router.prefix}/{raca.id}"
    return raca


@router.put("/{raca_id}", response_model=Raca, responses=NOT_FOUND_RESPONSE)
async def update_raca(
    raca_id: int,
    body: RacaRequest,
    service: CatalogService = Depends(get_catalog_service),
) -> Raca:
    return await service.update_raca(raca_id, body)


@router.delete(
    "/{raca_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        **NOT_FOUND_RESPONSE,
        409: {"description": "Raça vinculada a adoções existentes"},
    },
)
async def delete_raca(
    raca_id: int, service: CatalogService = Depends(get_catalog_service)
) -> Response:
    """
    Delete a breed.

    Fails with 409 while any adoption still references it.
    """
    await service.delete_raca(raca_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
