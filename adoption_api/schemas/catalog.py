"""Pydantic schemas for catalog request bodies."""

from datetime import date
from typing import List, Optional

from pydantic import Field, field_validator

from adoption_api.models.catalog import AdocaoStatus, CatalogModel, FichaCachorro


class RacaRequest(CatalogModel):
    """Request body for creating or replacing a breed."""

    nome: str = Field(..., min_length=1, max_length=100)
    descricao: Optional[str] = Field(None, max_length=500)

    @field_validator("nome")
    @classmethod
    def nome_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("não deve estar em branco")
        return v.strip()


class CachorroRequest(CatalogModel):
    """Request body for creating or replacing a dog."""

    nome: str = Field(..., min_length=1, max_length=100)
    data_de_nascimento: Optional[date] = None
    local_de_resgate: Optional[str] = Field(None, max_length=200)
    ficha: Optional[FichaCachorro] = None

    @field_validator("nome")
    @classmethod
    def nome_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("não deve estar em branco")
        return v.strip()

    @field_validator("data_de_nascimento")
    @classmethod
    def not_in_future(cls, v: Optional[date]) -> Optional[date]:
        if v is not None and v > date.today():
            raise ValueError("não pode estar no futuro")
        return v


class EntityRef(CatalogModel):
    """Reference to an existing entity by id."""

    id: Optional[int] = None


class AdocaoRequest(CatalogModel):
    """
    Request body for creating or replacing an adoption.

    ``cachorro`` and ``racas`` reference existing records by id; unknown ids
    are rejected by the service with 400.
    """

    data_solicitacao: date
    justificativa: Optional[str] = Field(None, max_length=500)
    status: AdocaoStatus = AdocaoStatus.SOLICITADA
    cachorro: Optional[EntityRef] = None
    racas: Optional[List[Optional[EntityRef]]] = None
