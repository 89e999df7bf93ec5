"""In-memory entity store."""

from typing import Dict, Iterable, Iterator, Optional, Protocol

from ..core.entities import Entity


class EntityStore(Protocol):
    """Resolves entity ids to records. Unknown ids resolve to None."""

    def lookup(self, entity_id: str) -> Optional[Entity]: ...


class InMemoryEntityStore:
    """Entity store backed by a dictionary keyed case-insensitively."""

    def __init__(self, entities: Optional[Iterable[Entity]] = None):
        self._entities: Dict[str, Entity] = {}
        for entity in entities or []:
            self.add(entity)

    def add(self, entity: Entity) -> None:
        """Add an entity. The first entity registered for an id wins."""
        key = entity.id.strip().casefold()
        if key and key not in self._entities:
            self._entities[key] = entity

    def lookup(self, entity_id: str) -> Optional[Entity]:
        if not isinstance(entity_id, str):
            return None
        return self._entities.get(entity_id.strip().casefold())

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entities.values())
