"""
World entity models used by the region statistics aggregator.

Entities form a graph keyed by string ids. Regions list their subordinate
entities; settlements and unpopulated areas carry the data that rolls up
into a region's derived statistics.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Ceiling for total population, matching a signed 32-bit counter
POPULATION_CEILING = 2_147_483_647


def coerce_float(value: Any) -> float:
    """Read a number, treating missing or malformed values as zero."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


class EntityKind(str, Enum):
    """Kinds of node in the region graph."""

    REGION = "Region"
    SETTLEMENT = "Settlement"
    POINT_OF_INTEREST = "PointOfInterest"
    UNPOPULATED = "Unpopulated"


class PercentEntry(BaseModel):
    """A keyed share. Input shares may be 0..1 or 0..100; output is a fraction."""

    key: str = Field(default="", description="Category key (race, culture, language, terrain)")
    percent: float = Field(default=0.0, description="Share of the whole")

    @field_validator("key", mode="before")
    @classmethod
    def _key_or_blank(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("percent", mode="before")
    @classmethod
    def _percent_or_zero(cls, value: Any) -> float:
        return coerce_float(value)


class TerrainShare(BaseModel):
    """Share of an unpopulated area covered by one terrain type."""

    model_config = ConfigDict(populate_by_name=True)

    terrain_type: str = Field(default="", alias="terrainType", description="Terrain type key")
    percent: float = Field(default=0.0, description="Share, 0..1 or 0..100")

    @field_validator("terrain_type", mode="before")
    @classmethod
    def _terrain_or_blank(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("percent", mode="before")
    @classmethod
    def _percent_or_zero(cls, value: Any) -> float:
        return coerce_float(value)


class SettlementData(BaseModel):
    """Population payload of a settlement or point of interest."""

    population: int = Field(default=0, description="Resident population")
    race_distribution: List[PercentEntry] = Field(default_factory=list)
    culture_distribution: List[PercentEntry] = Field(default_factory=list)
    single_culture: Optional[str] = Field(
        default=None, description="Culture used when no distribution is given"
    )
    character_ids: List[str] = Field(
        default_factory=list, description="Ids of resident characters"
    )
    character_languages: List[List[str]] = Field(
        default_factory=list,
        description=(
            "Languages spoken by each resident character; residents listed in "
            "character_ids without an entry here still take a share of the population"
        ),
    )

    @field_validator("population", mode="before")
    @classmethod
    def _population_non_negative(cls, value: Any) -> int:
        return max(0, int(coerce_float(value)))

    @field_validator("single_culture", mode="before")
    @classmethod
    def _culture_text(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("race_distribution", "culture_distribution", mode="before")
    @classmethod
    def _list_or_empty(cls, value: Any) -> list:
        if not isinstance(value, (list, tuple)):
            return []
        return [item for item in value if isinstance(item, (dict, BaseModel))]

    @field_validator("character_ids", mode="before")
    @classmethod
    def _ids_or_empty(cls, value: Any) -> list:
        if not isinstance(value, (list, tuple)):
            return []
        return [item for item in value if isinstance(item, str)]

    @field_validator("character_languages", mode="before")
    @classmethod
    def _languages_per_resident(cls, value: Any) -> list:
        if not isinstance(value, (list, tuple)):
            return []
        residents = []
        for languages in value:
            if not isinstance(languages, (list, tuple)):
                languages = []
            residents.append([lang for lang in languages if isinstance(lang, str)])
        return residents


class UnpopulatedData(BaseModel):
    """Geography payload of an unpopulated area."""

    terrain_breakdown: List[TerrainShare] = Field(default_factory=list)
    single_terrain_type: Optional[str] = Field(
        default=None, description="Terrain used when no breakdown is given"
    )
    area_weight: float = Field(
        default=1.0, description="Area in square miles; 0 means unknown"
    )

    @field_validator("terrain_breakdown", mode="before")
    @classmethod
    def _list_or_empty(cls, value: Any) -> list:
        if not isinstance(value, (list, tuple)):
            return []
        return [item for item in value if isinstance(item, (dict, BaseModel))]

    @field_validator("area_weight", mode="before")
    @classmethod
    def _area_or_zero(cls, value: Any) -> float:
        return coerce_float(value)

    @field_validator("single_terrain_type", mode="before")
    @classmethod
    def _terrain_text(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @property
    def effective_area_weight(self) -> float:
        """Area weight with unknown or non-positive areas counted as 1.0."""
        return self.area_weight if self.area_weight > 0 else 1.0


class DerivedStatistics(BaseModel):
    """Rolled-up statistics computed for a region."""

    total_population: int = Field(default=0, description="Sum of settlement populations")
    race_distribution: List[PercentEntry] = Field(default_factory=list)
    culture_distribution: List[PercentEntry] = Field(default_factory=list)
    language_distribution: List[PercentEntry] = Field(default_factory=list)
    terrain_breakdown: List[PercentEntry] = Field(default_factory=list)
    dominant_terrain: List[str] = Field(
        default_factory=list, description="Terrain keys, most common first"
    )


class Entity(BaseModel):
    """A node of the region graph."""

    id: str = Field(description="Stable entity key")
    kind: EntityKind = Field(description="Entity kind")
    display_name: str = Field(default="", description="Human readable name")
    subordinate_ids: List[str] = Field(
        default_factory=list, description="Declared subordinates (regions only)"
    )
    child_ids: List[str] = Field(
        default_factory=list, description="Map hierarchy children"
    )
    settlement: Optional[SettlementData] = None
    unpopulated: Optional[UnpopulatedData] = None
    derived: Optional[DerivedStatistics] = None

    @field_validator("subordinate_ids", "child_ids", mode="before")
    @classmethod
    def _ids_or_empty(cls, value: Any) -> list:
        if not isinstance(value, (list, tuple)):
            return []
        return [item for item in value if isinstance(item, str)]

    @property
    def is_region(self) -> bool:
        return self.kind == EntityKind.REGION

    @property
    def is_settlement(self) -> bool:
        return self.kind in (EntityKind.SETTLEMENT, EntityKind.POINT_OF_INTEREST)

    @property
    def is_unpopulated(self) -> bool:
        return self.kind == EntityKind.UNPOPULATED
