"""
Entity stores.

This package provides:
- The EntityStore protocol consumed by the aggregator
- An in-memory store for tooling and tests
- A store over world-data JSON directories
"""

from .memory import EntityStore, InMemoryEntityStore
from .json_store import JsonWorldStore, read_json
from .records import parse_entity, infer_kind

__all__ = [
    'EntityStore', 'InMemoryEntityStore',
    'JsonWorldStore', 'read_json',
    'parse_entity', 'infer_kind',
]
