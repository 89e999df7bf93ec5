"""
Cycle-safe traversal of a region's subordinate graph.

Regions may nest other regions, list the same settlement through several
paths, or list each other. The walker uses an explicit stack and a visited
set so every entity is looked up at most once per walk.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Protocol, Set

import structlog

from .entities import Entity

logger = structlog.get_logger()


class EntityLookup(Protocol):
    """Anything that can resolve an entity id."""

    def lookup(self, entity_id: str) -> Optional[Entity]: ...


@dataclass
class LeafCollection:
    """Leaves reached from a region, plus traversal bookkeeping."""

    settlements: List[Entity] = field(default_factory=list)
    unpopulated_areas: List[Entity] = field(default_factory=list)
    visited_ids: Set[str] = field(default_factory=set)
    missing_ids: List[str] = field(default_factory=list)


def _clean_id(entity_id) -> str:
    if not isinstance(entity_id, str):
        return ""
    return entity_id.strip()


def _push_all(stack: List[str], ids: Iterable[str]) -> None:
    # Reversed so entities pop in declared order
    for entity_id in reversed(list(ids)):
        cleaned = _clean_id(entity_id)
        if cleaned:
            stack.append(cleaned)


def collect_leaves(region: Entity, store: EntityLookup) -> LeafCollection:
    """
    Collect every settlement and unpopulated area reachable from a region.

    Nested regions are expanded through their subordinate lists, and every
    visited entity's map children are followed as well. Ids compare
    case-insensitively. Unknown ids are recorded as missing and skipped.

    Args:
        region: Region whose subordinates are walked
        store: Entity lookup

    Returns:
        LeafCollection with settlement and unpopulated leaves
    """
    result = LeafCollection()
    visited: Set[str] = set()

    root_id = _clean_id(region.id)
    if root_id:
        visited.add(root_id.casefold())

    stack: List[str] = []
    _push_all(stack, region.subordinate_ids)

    while stack:
        entity_id = stack.pop()
        key = entity_id.casefold()
        if key in visited:
            continue
        visited.add(key)

        entity = store.lookup(entity_id)
        if entity is None:
            logger.debug("Skipping unknown entity", entity_id=entity_id, region_id=region.id)
            result.missing_ids.append(entity_id)
            continue

        _push_all(stack, entity.child_ids)

        if entity.is_region:
            _push_all(stack, entity.subordinate_ids)
        elif entity.is_settlement:
            result.settlements.append(entity)
        elif entity.is_unpopulated:
            result.unpopulated_areas.append(entity)

    result.visited_ids = visited
    return result
