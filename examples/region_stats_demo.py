"""
Example demonstrating region derived-statistics recompute.
"""

from py_realm.core import (
    CultureLanguageIndex,
    Entity, EntityKind, SettlementData, UnpopulatedData,
    RegionStatsAggregator,
)
from py_realm.store import InMemoryEntityStore


def main():
    # A kingdom with one duchy; the duchy lists the kingdom back
    entities = [
        Entity(id="kingdom", kind=EntityKind.REGION, subordinate_ids=["duchy", "capital", "highmoor"]),
        Entity(id="duchy", kind=EntityKind.REGION, subordinate_ids=["kingdom", "harbor", "capital"]),
        Entity(id="capital", kind=EntityKind.SETTLEMENT, settlement=SettlementData(
            population=12000,
            race_distribution=[{"key": "Human", "percent": 85}, {"key": "Dwarf", "percent": 15}],
            culture_distribution=[{"key": "Crownland", "percent": 100}],
        )),
        Entity(id="harbor", kind=EntityKind.SETTLEMENT, settlement=SettlementData(
            population=3000,
            race_distribution=[{"key": "Human", "percent": 0.6}, {"key": "Elf", "percent": 0.4}],
            single_culture="Coastal",
            character_languages=[["Common", "Elvish"], ["Common"]],
        )),
        Entity(id="highmoor", kind=EntityKind.UNPOPULATED, unpopulated=UnpopulatedData(
            area_weight=850,
            terrain_breakdown=[{"terrainType": "Moor", "percent": 70}, {"terrainType": "Hills", "percent": 30}],
        )),
    ]
    store = InMemoryEntityStore(entities)

    # Only Crownland has a catalog entry; the harbor falls back to its residents
    languages = CultureLanguageIndex({"Crownland": "Royal Common"})

    aggregator = RegionStatsAggregator(store, languages)
    derived = aggregator.recompute("kingdom")

    print(f"Total population: {derived.total_population}")
    for title, entries in [
        ("Races", derived.race_distribution),
        ("Cultures", derived.culture_distribution),
        ("Languages", derived.language_distribution),
        ("Terrain", derived.terrain_breakdown),
    ]:
        print(f"\n{title}:")
        for entry in entries:
            print(f"  {entry.key:<14} {entry.percent * 100:5.1f}%")

    print(f"\nDominant terrain: {', '.join(derived.dominant_terrain)}")


if __name__ == "__main__":
    main()
