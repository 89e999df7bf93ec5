"""
Region derived-statistics aggregator.

Recomputes a region's rolled-up statistics from the settlements and
unpopulated areas reachable through its subordinate graph:

1. collect_leaves() - Cycle-safe walk of nested regions
2. DistributionResolver - Weighted contributions per leaf
3. normalize() - Ranked percentage lists per category

Each call builds fresh tables and replaces the region's derived block
wholesale. Nothing is written to disk.
"""

from typing import Optional, Tuple

import structlog

from .category_mapper import CategoryMapper
from .distribution import DistributionResolver
from .entities import POPULATION_CEILING, DerivedStatistics, Entity
from .errors import RegionNotFoundError
from .graph_walker import EntityLookup, LeafCollection, collect_leaves
from .normalizer import normalize, ranked_keys
from .weights import WeightTables

logger = structlog.get_logger()


class RegionStatsAggregator:
    """Recomputes derived statistics for regions of one world."""

    def __init__(self, store: EntityLookup, mapper: Optional[CategoryMapper] = None):
        """
        Initialize the aggregator.

        Args:
            store: Entity lookup used to resolve subordinate ids
            mapper: Optional culture to primary-language mapping
        """
        self.store = store
        self.resolver = DistributionResolver(mapper)

    def find_region(self, region_id: str) -> Entity:
        """
        Resolve a region id.

        Raises:
            RegionNotFoundError: if the id is unknown or not a region
        """
        region = self.store.lookup(region_id)
        if region is None:
            raise RegionNotFoundError(region_id)
        if not region.is_region:
            raise RegionNotFoundError(region_id, reason=f"entity is a {region.kind.value}, not a region")
        return region

    def recompute(self, region_id: str) -> DerivedStatistics:
        """Recompute and attach derived statistics for a region id."""
        return self.compute(self.find_region(region_id))

    def compute(self, region: Entity) -> DerivedStatistics:
        """Recompute and attach derived statistics for a loaded region."""
        derived, _ = self.compute_with_coverage(region)
        return derived

    def compute_with_coverage(self, region: Entity) -> Tuple[DerivedStatistics, LeafCollection]:
        """
        Recompute derived statistics and report which leaves were reached.

        Returns:
            Tuple of (derived statistics, leaf collection)
        """
        logger.info("Recomputing region statistics", region_id=region.id)

        leaves = collect_leaves(region, self.store)
        tables = WeightTables()

        total_population = 0
        for settlement in leaves.settlements:
            total_population += self.resolver.add_settlement(settlement, tables)
        for area in leaves.unpopulated_areas:
            self.resolver.add_unpopulated(area, tables)

        terrain = normalize(tables.terrain)
        derived = DerivedStatistics(
            total_population=min(total_population, POPULATION_CEILING),
            race_distribution=normalize(tables.race),
            culture_distribution=normalize(tables.culture),
            language_distribution=normalize(tables.language),
            terrain_breakdown=terrain,
            dominant_terrain=ranked_keys(terrain),
        )
        region.derived = derived

        logger.info(
            "Region statistics recomputed",
            region_id=region.id,
            settlements=len(leaves.settlements),
            unpopulated_areas=len(leaves.unpopulated_areas),
            missing=len(leaves.missing_ids),
            total_population=derived.total_population,
        )
        return derived, leaves


def recompute_region(
    region_id: str, store: EntityLookup, mapper: Optional[CategoryMapper] = None
) -> DerivedStatistics:
    """Recompute a region's derived statistics with a one-off aggregator."""
    return RegionStatsAggregator(store, mapper).recompute(region_id)
