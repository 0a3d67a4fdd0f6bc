"""Domain models for breeds (raças), dogs (cachorros) and adoptions (adoções)."""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CatalogModel(BaseModel):
    """Base for catalog entities: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Raca(CatalogModel):
    """A dog breed."""

    id: int
    nome: str = Field(..., min_length=1, max_length=100)
    descricao: Optional[str] = Field(None, max_length=500)


class FichaCachorro(CatalogModel):
    """Background sheet attached to a dog."""

    descricao_historia: Optional[str] = Field(None, max_length=1000)
    temperamento_principal: Optional[str] = Field(None, max_length=100)
    habilidades_especiais: Optional[str] = Field(None, max_length=500)


class Cachorro(CatalogModel):
    """A dog available for adoption."""

    id: int
    nome: str = Field(..., min_length=1, max_length=100)
    data_de_nascimento: Optional[date] = None
    local_de_resgate: Optional[str] = Field(None, max_length=200)
    ficha: Optional[FichaCachorro] = None


class AdocaoStatus(str, Enum):
    """Lifecycle of an adoption request."""

    SOLICITADA = "SOLICITADA"
    APROVADA = "APROVADA"
    REJEITADA = "REJEITADA"
    CONCLUIDA = "CONCLUIDA"


class Adocao(CatalogModel):
    """
    Stored adoption record.

    References to the dog and breeds are kept by id; the service resolves
    them into an AdocaoView for responses.
    """

    id: int
    data_solicitacao: date
    justificativa: Optional[str] = Field(None, max_length=500)
    status: AdocaoStatus = AdocaoStatus.SOLICITADA
    cachorro_id: Optional[int] = None
    raca_ids: List[int] = Field(default_factory=list)


class AdocaoView(CatalogModel):
    """Adoption as returned to clients, with references resolved."""

    id: int
    data_solicitacao: date
    justificativa: Optional[str] = None
    status: AdocaoStatus
    cachorro: Optional[Cachorro] = None
    racas: List[Raca] = Field(default_factory=list)
