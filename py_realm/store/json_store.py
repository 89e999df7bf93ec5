"""
Entity store over world-data JSON directories.

World data lives under one or two roots (the editor save-data folder and
the runtime save-data folder). A record for id "X" is the file "X.json" in
one of the record subdirectories. Roots are searched in order, so the
first root takes precedence.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import structlog

from ..core.entities import Entity
from .records import parse_entity

logger = structlog.get_logger()

PathLike = Union[str, Path]

DEFAULT_RECORD_SUBDIRS = ("MapData", "Regions", "Unpopulated")
DEFAULT_CHARACTERS_SUBDIR = "Characters"


def _file_name(entity_id: str) -> Optional[str]:
    """File name for an id, or None if the id would leave its directory."""
    if "/" in entity_id or "\\" in entity_id or ".." in entity_id:
        logger.warning("Rejected world-data id with a path component", entity_id=entity_id)
        return None
    return entity_id if entity_id.lower().endswith(".json") else f"{entity_id}.json"


def read_json(path: Path) -> Optional[Any]:
    """Read a JSON file, returning None if it is missing, empty or unparsable."""
    if not path.is_file():
        return None
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning("Failed to read world-data file", path=str(path), error=str(e))
        return None
    if not text.strip():
        return None
    try:
        return json.loads(text)
    except ValueError as e:
        logger.warning("Failed to parse world-data file", path=str(path), error=str(e))
        return None


class JsonWorldStore:
    """Entity store reading region, settlement and unpopulated-area JSON."""

    def __init__(
        self,
        roots: Iterable[Optional[PathLike]],
        record_subdirs: Sequence[str] = DEFAULT_RECORD_SUBDIRS,
        characters_subdir: str = DEFAULT_CHARACTERS_SUBDIR,
    ):
        """
        Initialize the store.

        Args:
            roots: World-data roots in search order; None entries are skipped
            record_subdirs: Subdirectories searched for entity records
            characters_subdir: Subdirectory holding character sheets
        """
        self.roots: List[Path] = []
        for root in roots:
            if root and Path(root) not in self.roots:
                self.roots.append(Path(root))
        self.record_subdirs = list(record_subdirs)
        self.characters_subdir = characters_subdir

        # Owned by this store; cleared explicitly by the caller
        self._entities: Dict[str, Optional[Entity]] = {}
        self._languages: Dict[str, List[str]] = {}

    @classmethod
    def from_settings(cls, settings) -> "JsonWorldStore":
        """Build a store from application settings."""
        return cls(
            settings.search_roots,
            record_subdirs=settings.record_subdirs,
            characters_subdir=settings.characters_subdir,
        )

    @property
    def available(self) -> bool:
        """Whether any world-data root exists."""
        return any(root.is_dir() for root in self.roots)

    def clear_cache(self) -> None:
        self._entities.clear()
        self._languages.clear()

    def record_paths(self, entity_id: str) -> List[Path]:
        """Candidate file paths for an entity id, in search order."""
        name = _file_name(entity_id)
        if name is None:
            return []
        return [root / subdir / name for root in self.roots for subdir in self.record_subdirs]

    def lookup(self, entity_id: str) -> Optional[Entity]:
        """
        Resolve an entity id to a record.

        Ids compare case-insensitively against the cache; missing records are
        cached as missing until clear_cache() is called.
        """
        if not isinstance(entity_id, str) or not entity_id.strip():
            return None
        entity_id = entity_id.strip()
        key = entity_id.casefold()
        if key in self._entities:
            return self._entities[key]

        entity = None
        for path in self.record_paths(entity_id):
            data = read_json(path)
            if data is None:
                continue
            entity = parse_entity(data, entity_id, self.languages_of)
            if entity is not None:
                logger.debug("Loaded world-data record", entity_id=entity_id, path=str(path))
                break

        self._entities[key] = entity
        return entity

    def languages_of(self, character_id: str) -> List[str]:
        """
        Languages spoken by a character, from its sheet's proficiencies.

        Unknown characters speak no languages.
        """
        character_id = character_id.strip()
        key = character_id.casefold()
        if key in self._languages:
            return self._languages[key]

        languages: List[str] = []
        name = _file_name(character_id)
        if name is None:
            self._languages[key] = languages
            return languages

        for root in self.roots:
            sheet = read_json(root / self.characters_subdir / name)
            if not isinstance(sheet, dict):
                continue
            proficiencies = sheet.get("proficiencies")
            if isinstance(proficiencies, dict) and isinstance(proficiencies.get("languages"), list):
                languages = [
                    lang.strip()
                    for lang in proficiencies["languages"]
                    if isinstance(lang, str) and lang.strip()
                ]
            break

        self._languages[key] = languages
        return languages
