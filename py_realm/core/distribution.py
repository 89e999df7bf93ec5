"""
Per-leaf contribution rules for region statistics.

Each settlement contributes to the race, culture and language tables in
proportion to its population. Each unpopulated area contributes to the
terrain table in proportion to its area. Every category has a fallback
chain: an explicit distribution, then a single value, then nothing (or,
for languages, the languages of resident characters).
"""

from enum import Enum
from typing import List, Optional, Sequence

from .category_mapper import CategoryMapper
from .entities import Entity, PercentEntry, SettlementData, TerrainShare, UnpopulatedData
from .weights import WeightTable, WeightTables, fraction


class SourceKind(str, Enum):
    """Which representation an entity offers for a category."""

    DISTRIBUTION = "distribution"
    SINGLE = "single"
    NONE = "none"


def _has_text(value: Optional[str]) -> bool:
    return isinstance(value, str) and bool(value.strip())


def culture_source(data: SettlementData) -> SourceKind:
    if data.culture_distribution:
        return SourceKind.DISTRIBUTION
    if _has_text(data.single_culture):
        return SourceKind.SINGLE
    return SourceKind.NONE


def terrain_source(data: UnpopulatedData) -> SourceKind:
    if data.terrain_breakdown:
        return SourceKind.DISTRIBUTION
    if _has_text(data.single_terrain_type):
        return SourceKind.SINGLE
    return SourceKind.NONE


def add_weighted_entries(
    table: WeightTable, entries: Sequence[PercentEntry], weight: float
) -> bool:
    """
    Spread a weight across percent entries.

    Returns:
        True if at least one entry contributed
    """
    if weight <= 0:
        return False

    added = False
    for entry in entries:
        share = fraction(entry.percent)
        if share <= 0:
            continue
        if table.add_weight(entry.key, weight * share):
            added = True
    return added


def add_weighted_terrain(
    table: WeightTable, shares: Sequence[TerrainShare], weight: float
) -> bool:
    """Spread an area weight across a terrain breakdown."""
    if weight <= 0:
        return False

    added = False
    for share in shares:
        portion = fraction(share.percent)
        if portion <= 0:
            continue
        if table.add_weight(share.terrain_type, weight * portion):
            added = True
    return added


class DistributionResolver:
    """Feeds leaf entities into the weight tables."""

    def __init__(self, mapper: Optional[CategoryMapper] = None):
        self.mapper = mapper

    @property
    def has_language_map(self) -> bool:
        return self.mapper is not None and len(self.mapper) > 0

    def add_settlement(self, entity: Entity, tables: WeightTables) -> int:
        """
        Add one settlement's race, culture and language contributions.

        Returns:
            The settlement's population, for the region total
        """
        data = entity.settlement
        if data is None:
            return 0

        population = max(0, data.population)

        add_weighted_entries(tables.race, data.race_distribution, population)
        source = culture_source(data)
        self._add_culture(data, source, population, tables.culture)
        self._add_language(data, source, population, tables.language)

        return population

    def add_unpopulated(self, entity: Entity, tables: WeightTables) -> None:
        """Add one unpopulated area's terrain contribution."""
        data = entity.unpopulated
        if data is None:
            return

        weight = data.effective_area_weight
        source = terrain_source(data)

        if source == SourceKind.DISTRIBUTION:
            add_weighted_terrain(tables.terrain, data.terrain_breakdown, weight)
        elif source == SourceKind.SINGLE:
            tables.terrain.add_weight(data.single_terrain_type, weight)

    def _add_culture(
        self, data: SettlementData, source: SourceKind, population: int, table: WeightTable
    ) -> None:
        if source == SourceKind.DISTRIBUTION:
            add_weighted_entries(table, data.culture_distribution, population)
        elif source == SourceKind.SINGLE and population > 0:
            table.add_weight(data.single_culture, population)

    def _add_language(
        self, data: SettlementData, source: SourceKind, population: int, table: WeightTable
    ) -> None:
        if population <= 0:
            return

        if self.has_language_map:
            if source == SourceKind.DISTRIBUTION:
                if self._add_mapped_distribution(data.culture_distribution, population, table):
                    return
            elif source == SourceKind.SINGLE:
                language = self.mapper.primary_language_of(data.single_culture.strip())
                if table.add_weight(language, population):
                    return

        residents = max(len(data.character_ids), len(data.character_languages))
        self._add_character_languages(data.character_languages, residents, population, table)

    def _add_mapped_distribution(
        self, entries: Sequence[PercentEntry], population: int, table: WeightTable
    ) -> bool:
        added = False
        for entry in entries:
            if not _has_text(entry.key):
                continue
            language = self.mapper.primary_language_of(entry.key.strip())
            if not language:
                continue
            share = fraction(entry.percent)
            if share <= 0:
                continue
            if table.add_weight(language, population * share):
                added = True
        return added

    @staticmethod
    def _add_character_languages(
        languages_per_resident: List[List[str]], residents: int, population: int, table: WeightTable
    ) -> None:
        if residents <= 0:
            return

        share = population / residents
        for languages in languages_per_resident:
            for language in languages or []:
                table.add_weight(language, share)
