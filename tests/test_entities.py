"""
Tests for the world entity Pydantic models.
"""

import pytest

from py_realm.core.entities import (
    DerivedStatistics,
    Entity,
    EntityKind,
    PercentEntry,
    SettlementData,
    TerrainShare,
    UnpopulatedData,
    coerce_float,
)


class TestCoerceFloat:
    """Test tolerant number reading."""

    def test_numbers_pass_through(self):
        assert coerce_float(3) == 3.0
        assert coerce_float(0.25) == 0.25
        assert coerce_float("40") == 40.0

    def test_missing_and_malformed_are_zero(self):
        assert coerce_float(None) == 0.0
        assert coerce_float("lots") == 0.0
        assert coerce_float([1, 2]) == 0.0
        assert coerce_float(True) == 0.0
        assert coerce_float(float("nan")) == 0.0
        assert coerce_float(float("inf")) == 0.0


class TestPercentModels:
    """Test percent entry models."""

    def test_percent_entry_defaults(self):
        entry = PercentEntry()
        assert entry.key == ""
        assert entry.percent == 0.0

    def test_percent_entry_malformed_percent(self):
        entry = PercentEntry(key="Human", percent="about half")
        assert entry.key == "Human"
        assert entry.percent == 0.0

    def test_percent_entry_null_fields(self):
        entry = PercentEntry.model_validate({"key": None, "percent": None})
        assert entry.key == ""
        assert entry.percent == 0.0

    def test_terrain_share_camel_case(self):
        share = TerrainShare.model_validate({"terrainType": "Forest", "percent": 60})
        assert share.terrain_type == "Forest"
        assert share.percent == 60.0

    def test_terrain_share_by_name(self):
        share = TerrainShare(terrain_type="Hills", percent=0.5)
        assert share.terrain_type == "Hills"


class TestSettlementData:
    """Test settlement payload coercion."""

    def test_defaults(self):
        data = SettlementData()
        assert data.population == 0
        assert data.race_distribution == []
        assert data.culture_distribution == []
        assert data.single_culture is None
        assert data.character_languages == []

    def test_negative_population_clamps_to_zero(self):
        assert SettlementData(population=-40).population == 0

    def test_malformed_population_is_zero(self):
        assert SettlementData(population="many").population == 0
        assert SettlementData(population=None).population == 0

    def test_null_lists_become_empty(self):
        data = SettlementData(race_distribution=None, culture_distribution="Human")
        assert data.race_distribution == []
        assert data.culture_distribution == []

    def test_null_entries_are_dropped(self):
        data = SettlementData(race_distribution=[None, {"key": "Elf", "percent": 100}, "junk"])
        assert len(data.race_distribution) == 1
        assert data.race_distribution[0].key == "Elf"

    def test_character_languages_tolerate_bad_residents(self):
        data = SettlementData(character_languages=[["Common"], None, ["Elvish", 3]])
        assert data.character_languages == [["Common"], [], ["Elvish"]]

    def test_non_string_single_culture(self):
        assert SettlementData(single_culture=7).single_culture is None


class TestUnpopulatedData:
    """Test unpopulated payload coercion."""

    def test_effective_area_weight_defaults_to_one(self):
        assert UnpopulatedData(area_weight=0).effective_area_weight == 1.0
        assert UnpopulatedData(area_weight=-5).effective_area_weight == 1.0
        assert UnpopulatedData(area_weight=None).effective_area_weight == 1.0

    def test_effective_area_weight_uses_area(self):
        assert UnpopulatedData(area_weight=30).effective_area_weight == 30.0


class TestEntity:
    """Test entity model."""

    def test_region_entity(self):
        region = Entity(id="north", kind=EntityKind.REGION, subordinate_ids=["a", "b"])
        assert region.is_region
        assert not region.is_settlement
        assert region.subordinate_ids == ["a", "b"]
        assert region.derived is None

    def test_kind_from_string(self):
        poi = Entity(id="shrine", kind="PointOfInterest")
        assert poi.kind == EntityKind.POINT_OF_INTEREST
        assert poi.is_settlement

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            Entity(id="x", kind="Castle")

    def test_null_id_lists(self):
        entity = Entity(id="x", kind=EntityKind.UNPOPULATED, subordinate_ids=None, child_ids=[None, "y"])
        assert entity.subordinate_ids == []
        assert entity.child_ids == ["y"]
        assert entity.is_unpopulated

    def test_derived_statistics_defaults(self):
        derived = DerivedStatistics()
        assert derived.total_population == 0
        assert derived.race_distribution == []
        assert derived.dominant_terrain == []
