"""
World-data record parsing.

Region, settlement and unpopulated-area records are authored as camelCase
JSON by the editor tooling. These models describe the parts of each record
the aggregator reads; unknown keys are ignored and missing or malformed
values fall back to empty defaults.
"""

from typing import Any, Callable, Dict, List, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..core.entities import Entity, EntityKind, SettlementData, UnpopulatedData

logger = structlog.get_logger()

LanguageLookup = Callable[[str], List[str]]


def _tab_or_empty(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _text_or_none(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, str) and item.strip()]


class RecordModel(BaseModel):
    """Base for tolerant camelCase record models."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SettlementMainTab(RecordModel):
    population: Any = 0
    character_ids: Any = Field(default=None, alias="characterIds")


class CulturalTab(RecordModel):
    culture: Any = None
    race_distribution: Any = Field(default=None, alias="raceDistribution")
    culture_distribution: Any = Field(default=None, alias="cultureDistribution")


class SettlementRecord(RecordModel):
    settlement_id: Any = Field(default=None, alias="settlementId")
    display_name: Any = Field(default=None, alias="displayName")
    is_point_of_interest: bool = Field(default=False, alias="isPointOfInterest")
    character_ids: Any = Field(default=None, alias="characterIds")
    child_ids: Any = Field(default=None, alias="childIds")
    main: SettlementMainTab = Field(default_factory=SettlementMainTab)
    cultural: CulturalTab = Field(default_factory=CulturalTab)

    @field_validator("main", "cultural", mode="before")
    @classmethod
    def _tab(cls, value: Any) -> Dict[str, Any]:
        return _tab_or_empty(value)

    @field_validator("is_point_of_interest", mode="before")
    @classmethod
    def _flag(cls, value: Any) -> bool:
        return value is True

    def resident_ids(self) -> List[str]:
        """Resident character ids; the top-level list wins over main.characterIds."""
        ids = _string_list(self.character_ids)
        return ids if ids else _string_list(self.main.character_ids)


class UnpopulatedMainTab(RecordModel):
    vassals: Any = None


class UnpopulatedGeographyTab(RecordModel):
    area_sq_mi: Any = Field(default=0.0, alias="areaSqMi")
    terrain_type: Any = Field(default=None, alias="terrainType")
    terrain_breakdown: Any = Field(default=None, alias="terrainBreakdown")


class UnpopulatedRecord(RecordModel):
    area_id: Any = Field(default=None, alias="areaId")
    display_name: Any = Field(default=None, alias="displayName")
    child_ids: Any = Field(default=None, alias="childIds")
    main: UnpopulatedMainTab = Field(default_factory=UnpopulatedMainTab)
    geography: UnpopulatedGeographyTab = Field(default_factory=UnpopulatedGeographyTab)

    @field_validator("main", "geography", mode="before")
    @classmethod
    def _tab(cls, value: Any) -> Dict[str, Any]:
        return _tab_or_empty(value)


class RegionRecord(RecordModel):
    region_id: Any = Field(default=None, alias="regionId")
    display_name: Any = Field(default=None, alias="displayName")
    vassals: Any = None
    child_ids: Any = Field(default=None, alias="childIds")

    def vassal_ids(self) -> List[str]:
        """
        Subordinate ids from either vassal layout.

        Accepts a plain list of ids, a list of {"countryId": ...} objects, or
        an object with a "countries" list.
        """
        vassals = self.vassals
        if isinstance(vassals, dict):
            vassals = vassals.get("countries")
        if not isinstance(vassals, list):
            return []

        ids = []
        for vassal in vassals:
            if isinstance(vassal, dict):
                vassal = vassal.get("countryId")
            vassal_id = _text_or_none(vassal)
            if vassal_id:
                ids.append(vassal_id)
        return ids


def infer_kind(data: Dict[str, Any]) -> Optional[EntityKind]:
    """
    Work out what kind of entity a record describes.

    An explicit "kind" or "infoKind" field wins; otherwise the record's id
    field decides (regionId, settlementId, areaId).
    """
    explicit = _text_or_none(data.get("kind")) or _text_or_none(data.get("infoKind"))
    if explicit:
        for kind in EntityKind:
            if kind.value.casefold() == explicit.casefold():
                return kind
        logger.warning("Unrecognized entity kind", kind=explicit)
        return None

    if "regionId" in data:
        return EntityKind.REGION
    if "settlementId" in data:
        return EntityKind.POINT_OF_INTEREST if data.get("isPointOfInterest") is True else EntityKind.SETTLEMENT
    if "areaId" in data:
        return EntityKind.UNPOPULATED
    return None


def parse_entity(
    data: Any, fallback_id: str, languages_of: Optional[LanguageLookup] = None
) -> Optional[Entity]:
    """
    Build an Entity from a parsed world-data record.

    Args:
        data: Parsed JSON document
        fallback_id: Id used when the record does not name itself
        languages_of: Optional lookup of a character's spoken languages

    Returns:
        Entity, or None if the record's kind cannot be determined
    """
    if not isinstance(data, dict):
        return None

    kind = infer_kind(data)
    if kind is None:
        return None

    try:
        if kind == EntityKind.REGION:
            return _parse_region(RegionRecord.model_validate(data), fallback_id)
        if kind == EntityKind.UNPOPULATED:
            return _parse_unpopulated(UnpopulatedRecord.model_validate(data), fallback_id)
        return _parse_settlement(SettlementRecord.model_validate(data), kind, fallback_id, languages_of)
    except ValidationError as e:
        logger.warning("Malformed world-data record", entity_id=fallback_id, error=str(e))
        return None


def _parse_region(record: RegionRecord, fallback_id: str) -> Entity:
    return Entity(
        id=_text_or_none(record.region_id) or fallback_id,
        kind=EntityKind.REGION,
        display_name=_text_or_none(record.display_name) or "",
        subordinate_ids=record.vassal_ids(),
        child_ids=_string_list(record.child_ids),
    )


def _parse_settlement(
    record: SettlementRecord,
    kind: EntityKind,
    fallback_id: str,
    languages_of: Optional[LanguageLookup],
) -> Entity:
    residents = record.resident_ids()
    languages = [languages_of(resident) for resident in residents] if languages_of else []

    settlement = SettlementData(
        population=record.main.population,
        race_distribution=record.cultural.race_distribution,
        culture_distribution=record.cultural.culture_distribution,
        single_culture=_text_or_none(record.cultural.culture),
        character_ids=residents,
        character_languages=languages,
    )
    return Entity(
        id=_text_or_none(record.settlement_id) or fallback_id,
        kind=kind,
        display_name=_text_or_none(record.display_name) or "",
        child_ids=_string_list(record.child_ids),
        settlement=settlement,
    )


def _parse_unpopulated(record: UnpopulatedRecord, fallback_id: str) -> Entity:
    geography = record.geography
    unpopulated = UnpopulatedData(
        terrain_breakdown=geography.terrain_breakdown,
        single_terrain_type=_text_or_none(geography.terrain_type),
        area_weight=geography.area_sq_mi,
    )
    return Entity(
        id=_text_or_none(record.area_id) or fallback_id,
        kind=EntityKind.UNPOPULATED,
        display_name=_text_or_none(record.display_name) or "",
        child_ids=_string_list(record.main.vassals) + _string_list(record.child_ids),
        unpopulated=unpopulated,
    )
