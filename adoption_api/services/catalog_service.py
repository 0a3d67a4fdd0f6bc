"""Catalog service layer with business rules for raças, cachorros and adoções."""

from typing import List, Optional

from adoption_api.exceptions import ConflictError, NotFoundError, ValidationError
from adoption_api.models.catalog import Adocao, AdocaoView, Cachorro, Raca
from adoption_api.repositories.catalog_repository import CatalogRepository
from adoption_api.schemas.catalog import (
    AdocaoRequest,
    CachorroRequest,
    EntityRef,
    RacaRequest,
)


class CatalogService:
    """
    Service layer for catalog operations.

    Resolves references between adoptions, dogs and breeds and enforces
    referential integrity on deletes.
    """

    def __init__(self, repository: CatalogRepository) -> None:
        self.repository = repository

    # Raças

    async def list_racas(self) -> List[Raca]:
        return await self.repository.racas.list()

    async def get_raca(self, raca_id: int) -> Raca:
        raca = await self.repository.racas.get(raca_id)
        if raca is None:
            raise NotFoundError(
                message=f"Raça com id {raca_id} não encontrada",
                resource="raca",
                resource_id=raca_id,
            )
        return raca

    async def create_raca(self, request: RacaRequest) -> Raca:
        return await self.repository.racas.insert(
            lambda new_id: Raca(id=new_id, **request.model_dump())
        )

    async def update_raca(self, raca_id: int, request: RacaRequest) -> Raca:
        await self.get_raca(raca_id)
        return await self.repository.racas.replace(
            Raca(id=raca_id, **request.model_dump())
        )

    async def delete_raca(self, raca_id: int) -> None:
        await self.get_raca(raca_id)
        linked = await self.repository.adocoes.count(
            lambda a: raca_id in a.raca_ids
        )
        if linked:
            raise ConflictError(
                message=(
                    "Não é possível deletar a raça. "
                    f"Existem {linked} adoção(ões) vinculada(s)."
                ),
                details={"adocoes_vinculadas": linked},
            )
        await self.repository.racas.delete(raca_id)

    # Cachorros

    async def list_cachorros(self) -> List[Cachorro]:
        return await self.repository.cachorros.list()

    async def get_cachorro(self, cachorro_id: int) -> Cachorro:
        cachorro = await self.repository.cachorros.get(cachorro_id)
        if cachorro is None:
            raise NotFoundError(
                message=f"Cachorro com id {cachorro_id} não encontrado",
                resource="cachorro",
                resource_id=cachorro_id,
            )
        return cachorro

    async def create_cachorro(self, request: CachorroRequest) -> Cachorro:
        return await self.repository.cachorros.insert(
            lambda new_id: Cachorro(id=new_id, **request.model_dump())
        )

    async def update_cachorro(
        self, cachorro_id: int, request: CachorroRequest
    ) -> Cachorro:
        await self.get_cachorro(cachorro_id)
        # A request without ficha clears the stored one
        return await self.repository.cachorros.replace(
            Cachorro(id=cachorro_id, **request.model_dump())
        )

    async def delete_cachorro(self, cachorro_id: int) -> None:
        await self.get_cachorro(cachorro_id)
        linked = await self.repository.adocoes.count(
            lambda a: a.cachorro_id == cachorro_id
        )
        if linked:
            raise ConflictError(
                message=(
                    "Não é possível deletar o cachorro. "
                    f"Existem {linked} adoção(ões) vinculada(s)."
                ),
                details={"adocoes_vinculadas": linked},
            )
        await self.repository.cachorros.delete(cachorro_id)

    # Adoções

    async def list_adocoes(self) -> List[AdocaoView]:
        """List adoptions, most recent request first."""
        adocoes = await self.repository.adocoes.list()
        adocoes.sort(key=lambda a: (a.data_solicitacao, a.id), reverse=True)
        return [await self._to_view(a) for a in adocoes]

    async def get_adocao(self, adocao_id: int) -> AdocaoView:
        return await self._to_view(await self._get_adocao(adocao_id))

    async def create_adocao(self, request: AdocaoRequest) -> AdocaoView:
        cachorro_id = await self._resolve_cachorro(request.cachorro)
        raca_ids = await self._resolve_racas(request.racas)
        adocao = await self.repository.adocoes.insert(
            lambda new_id: Adocao(
                id=new_id,
                data_solicitacao=request.data_solicitacao,
                justificativa=request.justificativa,
                status=request.status,
                cachorro_id=cachorro_id,
                raca_ids=raca_ids,
            )
        )
        return await self._to_view(adocao)

    async def update_adocao(
        self, adocao_id: int, request: AdocaoRequest
    ) -> AdocaoView:
        await self._get_adocao(adocao_id)
        cachorro_id = await self._resolve_cachorro(request.cachorro)
        raca_ids = await self._resolve_racas(request.racas)
        adocao = await self.repository.adocoes.replace(
            Adocao(
                id=adocao_id,
                data_solicitacao=request.data_solicitacao,
                justificativa=request.justificativa,
                status=request.status,
                cachorro_id=cachorro_id,
                raca_ids=raca_ids,
            )
        )
        return await self._to_view(adocao)

    async def delete_adocao(self, adocao_id: int) -> None:
        await self._get_adocao(adocao_id)
        await self.repository.adocoes.delete(adocao_id)

    async def _get_adocao(self, adocao_id: int) -> Adocao:
        adocao = await self.repository.adocoes.get(adocao_id)
        if adocao is None:
            raise NotFoundError(
                message=f"Adoção com id {adocao_id} não encontrada",
                resource="adocao",
                resource_id=adocao_id,
            )
        return adocao

    async def _resolve_cachorro(self, ref: Optional[EntityRef]) -> Optional[int]:
        if ref is None or ref.id is None:
            return None
        if await self.repository.cachorros.get(ref.id) is None:
            message = f"Cachorro com id {ref.id} não existe"
            raise ValidationError(
                message=message, violations=[("cachorro.id", message)]
            )
        return ref.id

    async def _resolve_racas(
        self, refs: Optional[List[Optional[EntityRef]]]
    ) -> List[int]:
        resolved: List[int] = []
        for ref in refs or []:
            if ref is None or ref.id is None:
                continue
            if await self.repository.racas.get(ref.id) is None:
                message = f"Raça com id {ref.id} não existe"
                raise ValidationError(
                    message=message, violations=[("racas.id", message)]
                )
            if ref.id not in resolved:
                resolved.append(ref.id)
        return resolved

    async def _to_view(self, adocao: Adocao) -> AdocaoView:
        cachorro = None
        if adocao.cachorro_id is not None:
            cachorro = await self.repository.cachorros.get(adocao.cachorro_id)
        racas = []
        for raca_id in adocao.raca_ids:
            raca = await self.repository.racas.get(raca_id)
            if raca is not None:
                racas.append(raca)
        return AdocaoView(
            id=adocao.id,
            data_solicitacao=adocao.data_solicitacao,
            justificativa=adocao.justificativa,
            status=adocao.status,
            cachorro=cachorro,
            racas=racas,
        )
