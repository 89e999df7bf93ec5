"""
Culture to primary-language mapping.

The mapping is built once from culture catalog JSON files and then
queried per settlement. An empty mapper is a valid state: the language
statistics then fall back to resident character languages.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Union

import structlog

logger = structlog.get_logger()


class CategoryMapper(Protocol):
    """Resolves a culture id to its primary language id."""

    def primary_language_of(self, culture_id: str) -> Optional[str]: ...

    def __len__(self) -> int: ...


def _text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def primary_language_from_entry(entry: Mapping[str, Any]) -> Optional[str]:
    """
    Pick the primary language of a culture catalog entry.

    Explicit primaryLanguageId / primaryLanguage fields win; otherwise the
    first entry of the culture's languages list is used.
    """
    primary = _text(entry.get("primaryLanguageId")) or _text(entry.get("primaryLanguage"))
    if primary:
        return primary

    languages = entry.get("languages")
    if isinstance(languages, list) and languages:
        return _text(languages[0])
    return None


class CultureLanguageIndex:
    """Case-insensitive culture id -> primary language id index."""

    def __init__(self, mapping: Optional[Mapping[str, str]] = None):
        self._languages: Dict[str, str] = {}
        for culture_id, language_id in (mapping or {}).items():
            self.add(culture_id, language_id)

    def add(self, culture_id: Any, language_id: Any) -> bool:
        """Register a mapping. The first mapping for a culture wins."""
        culture = _text(culture_id)
        language = _text(language_id)
        if culture is None or language is None:
            return False

        key = culture.casefold()
        if key in self._languages:
            return False
        self._languages[key] = language
        return True

    def primary_language_of(self, culture_id: str) -> Optional[str]:
        culture = _text(culture_id)
        if culture is None:
            return None
        return self._languages.get(culture.casefold())

    def __len__(self) -> int:
        return len(self._languages)

    def __contains__(self, culture_id: str) -> bool:
        return self.primary_language_of(culture_id) is not None

    def load_catalog(self, data: Any) -> int:
        """
        Index the cultures of one parsed catalog document.

        Returns:
            Number of new mappings added
        """
        if not isinstance(data, dict):
            return 0
        cultures = data.get("cultures")
        if not isinstance(cultures, list):
            return 0

        added = 0
        for entry in cultures:
            if not isinstance(entry, dict):
                continue
            culture_id = _text(entry.get("id")) or _text(entry.get("cultureId"))
            if culture_id and self.add(culture_id, primary_language_from_entry(entry)):
                added += 1
        return added

    @classmethod
    def from_catalog_dirs(cls, directories: Iterable[Union[str, Path]]) -> "CultureLanguageIndex":
        """
        Build an index from every *.json catalog under the given directories.

        Directories are scanned in order, recursively. Missing directories and
        unreadable files are skipped.
        """
        index = cls()
        seen = set()

        for directory in directories:
            if not directory:
                continue
            path = Path(directory)
            resolved = path.resolve()
            if resolved in seen or not path.is_dir():
                continue
            seen.add(resolved)

            for file_path in sorted(path.rglob("*.json")):
                try:
                    data = json.loads(file_path.read_text(encoding="utf-8"))
                except (OSError, ValueError) as e:
                    logger.warning("Skipping unreadable culture catalog", path=str(file_path), error=str(e))
                    continue
                index.load_catalog(data)

        logger.info("Culture language index loaded", cultures=len(index))
        return index
