"""In-process persistence for catalog entities (raças, cachorros, adoções)."""

import itertools
import threading
from collections.abc import Callable
from typing import Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel

from adoption_api.models.catalog import Adocao, Cachorro, Raca

EntityT = TypeVar("EntityT", bound=BaseModel)


class EntityTable(Generic[EntityT]):
    """
    Auto-increment table of pydantic entities keyed by ``id``.

    Entities are copied on the way in and out so callers never hold a
    reference to stored state.
    """

    def __init__(self) -> None:
        self._rows: Dict[int, EntityT] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    async def insert(self, build: Callable[[int], EntityT]) -> EntityT:
        """Allocate the next id, build the entity with it and store it."""
        with self._lock:
            entity = build(next(self._ids))
            self._rows[entity.id] = entity.model_copy(deep=True)
        return entity

    async def get(self, entity_id: int) -> Optional[EntityT]:
        with self._lock:
            entity = self._rows.get(entity_id)
            return entity.model_copy(deep=True) if entity else None

    async def list(self) -> List[EntityT]:
        with self._lock:
            return [e.model_copy(deep=True) for e in self._rows.values()]

    async def replace(self, entity: EntityT) -> EntityT:
        with self._lock:
            self._rows[entity.id] = entity.model_copy(deep=True)
        return entity

    async def delete(self, entity_id: int) -> bool:
        with self._lock:
            return self._rows.pop(entity_id, None) is not None

    async def count(self, predicate: Callable[[EntityT], bool]) -> int:
        with self._lock:
            return sum(1 for e in self._rows.values() if predicate(e))


class CatalogRepository:
    """Tables of the adoption catalog."""

    def __init__(self) -> None:
        self.racas: EntityTable[Raca] = EntityTable()
        self.cachorros: EntityTable[Cachorro] = EntityTable()
        self.adocoes: EntityTable[Adocao] = EntityTable()
