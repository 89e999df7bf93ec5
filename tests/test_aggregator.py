"""
Tests for region derived-statistics recompute.
"""

import pytest
from unittest.mock import MagicMock

from py_realm.core.aggregator import RegionStatsAggregator, recompute_region
from py_realm.core.category_mapper import CultureLanguageIndex
from py_realm.core.entities import (
    POPULATION_CEILING,
    DerivedStatistics,
    Entity,
    EntityKind,
    SettlementData,
    UnpopulatedData,
)
from py_realm.core.errors import RegionNotFoundError
from py_realm.store.memory import InMemoryEntityStore


def region(entity_id, *subordinates):
    return Entity(id=entity_id, kind=EntityKind.REGION, subordinate_ids=list(subordinates))


def settlement(entity_id, population, **payload):
    return Entity(
        id=entity_id,
        kind=EntityKind.SETTLEMENT,
        settlement=SettlementData(population=population, **payload),
    )


def wilderness(entity_id, area_weight, terrain):
    return Entity(
        id=entity_id,
        kind=EntityKind.UNPOPULATED,
        unpopulated=UnpopulatedData(area_weight=area_weight, single_terrain_type=terrain),
    )


def as_dict(entries):
    return {entry.key: entry.percent for entry in entries}


class TestRecompute:
    """Test full recompute over region graphs."""

    def test_empty_region(self):
        store = InMemoryEntityStore([region("root")])
        derived = recompute_region("root", store)

        assert derived.total_population == 0
        assert derived.race_distribution == []
        assert derived.culture_distribution == []
        assert derived.language_distribution == []
        assert derived.terrain_breakdown == []
        assert derived.dominant_terrain == []

    def test_population_weighted_race_blend(self):
        store = InMemoryEntityStore([
            region("root", "a", "b"),
            settlement("a", 100, race_distribution=[{"key": "Human", "percent": 100}]),
            settlement("b", 300, race_distribution=[{"key": "Elf", "percent": 100}]),
        ])
        derived = recompute_region("root", store)

        assert derived.total_population == 400
        assert [entry.key for entry in derived.race_distribution] == ["Elf", "Human"]
        assert as_dict(derived.race_distribution) == {
            "Elf": pytest.approx(0.75),
            "Human": pytest.approx(0.25),
        }

    def test_culture_fallback(self):
        store = InMemoryEntityStore([region("root", "port"), settlement("port", 50, single_culture="Coastal")])
        derived = recompute_region("root", store)

        assert as_dict(derived.culture_distribution) == {"Coastal": pytest.approx(1.0)}

    def test_language_from_characters(self):
        store = InMemoryEntityStore([
            region("root", "village"),
            settlement("village", 50, character_languages=[["Common"], ["Common", "Elvish"]]),
        ])
        derived = recompute_region("root", store, CultureLanguageIndex())

        assert as_dict(derived.language_distribution) == {
            "Common": pytest.approx(2 / 3),
            "Elvish": pytest.approx(1 / 3),
        }

    def test_terrain_area_weighting(self):
        store = InMemoryEntityStore([
            region("root", "woods", "dunes"),
            wilderness("woods", 10, "Forest"),
            wilderness("dunes", 30, "Desert"),
        ])
        derived = recompute_region("root", store)

        assert [(entry.key, entry.percent) for entry in derived.terrain_breakdown] == [
            ("Desert", pytest.approx(0.75)),
            ("Forest", pytest.approx(0.25)),
        ]
        assert derived.dominant_terrain == ["Desert", "Forest"]

    def test_cycle_terminates(self):
        store = InMemoryEntityStore([
            region("A", "B", "town"),
            region("B", "A"),
            settlement("town", 120),
        ])
        assert recompute_region("A", store).total_population == 120
        assert recompute_region("B", store).total_population == 120

    def test_no_double_counting(self):
        store = InMemoryEntityStore([
            region("root", "north", "south"),
            region("north", "crossroads"),
            region("south", "crossroads"),
            settlement("crossroads", 250),
        ])
        assert recompute_region("root", store).total_population == 250

    def test_population_saturates(self):
        store = InMemoryEntityStore([
            region("root", "a", "b"),
            settlement("a", POPULATION_CEILING),
            settlement("b", 1000),
        ])
        assert recompute_region("root", store).total_population == POPULATION_CEILING

    def test_distributions_sum_to_one(self):
        store = InMemoryEntityStore([
            region("root", "a", "b", "c", "w1", "w2"),
            settlement("a", 137, race_distribution=[{"key": "Human", "percent": 33.3}, {"key": "Orc", "percent": 66.7}]),
            settlement("b", 911, race_distribution=[{"key": "Elf", "percent": 0.2}, {"key": "human", "percent": 0.8}]),
            settlement("c", 7, culture_distribution=[{"key": "River", "percent": 1}]),
            Entity(id="w1", kind=EntityKind.UNPOPULATED, unpopulated=UnpopulatedData(
                area_weight=12.5, terrain_breakdown=[{"terrainType": "Swamp", "percent": 40}, {"terrainType": "Lake", "percent": 60}])),
            wilderness("w2", 0, "Plains"),
        ])
        derived = recompute_region("root", store)

        for entries in (derived.race_distribution, derived.culture_distribution, derived.terrain_breakdown):
            assert sum(entry.percent for entry in entries) == pytest.approx(1.0, abs=1e-6)
        assert {key.casefold() for key in as_dict(derived.race_distribution)} == {"human", "orc", "elf"}

    def test_overflowing_contribution_is_dropped(self):
        store = InMemoryEntityStore([
            region("root", "a", "b"),
            settlement("a", 1_000_000_000, race_distribution=[{"key": "Human", "percent": 1e303}]),
            settlement("b", 10, race_distribution=[{"key": "Elf", "percent": 100}]),
        ])
        derived = recompute_region("root", store)

        assert [(e.key, e.percent) for e in derived.race_distribution] == [("Elf", pytest.approx(1.0))]

    def test_result_attached_to_region(self):
        root = region("root", "a")
        store = InMemoryEntityStore([root, settlement("a", 10)])

        derived = RegionStatsAggregator(store).recompute("root")
        assert root.derived is derived

    def test_recompute_is_idempotent_and_fresh(self):
        root = region("root", "a")
        store = InMemoryEntityStore([root, settlement("a", 10, race_distribution=[{"key": "Human", "percent": 100}])])
        aggregator = RegionStatsAggregator(store)

        first = aggregator.recompute("root")
        second = aggregator.recompute("root")
        assert first == second
        assert first is not second

    def test_coverage_reports_missing(self):
        root = region("root", "a", "lost")
        store = InMemoryEntityStore([root, settlement("a", 10)])

        derived, leaves = RegionStatsAggregator(store).compute_with_coverage(root)
        assert isinstance(derived, DerivedStatistics)
        assert leaves.missing_ids == ["lost"]
        assert len(leaves.settlements) == 1


class TestRecomputeErrors:
    """Test recompute error handling."""

    def test_unknown_region(self):
        with pytest.raises(RegionNotFoundError) as excinfo:
            recompute_region("nowhere", InMemoryEntityStore())
        assert excinfo.value.region_id == "nowhere"

    def test_not_a_region(self):
        store = InMemoryEntityStore([settlement("town", 10)])
        with pytest.raises(RegionNotFoundError, match="not a region"):
            recompute_region("town", store)

    def test_region_not_found_is_key_error(self):
        with pytest.raises(KeyError):
            recompute_region("nowhere", InMemoryEntityStore())

    def test_mapper_errors_propagate(self):
        mapper = MagicMock()
        mapper.__len__.return_value = 1
        mapper.primary_language_of.side_effect = RuntimeError("catalog corrupted")
        store = InMemoryEntityStore([region("root", "a"), settlement("a", 10, single_culture="Coastal")])

        with pytest.raises(RuntimeError, match="catalog corrupted"):
            recompute_region("root", store, mapper)
