"""
Core region statistics functionality.
"""

from .entities import (
    EntityKind, Entity, PercentEntry, TerrainShare, SettlementData,
    UnpopulatedData, DerivedStatistics, POPULATION_CEILING,
)
from .errors import RealmError, RegionNotFoundError
from .weights import WeightTable, WeightTables, fraction
from .normalizer import normalize
from .graph_walker import LeafCollection, collect_leaves
from .category_mapper import CategoryMapper, CultureLanguageIndex
from .distribution import DistributionResolver, SourceKind
from .aggregator import RegionStatsAggregator, recompute_region

__all__ = ['EntityKind', 'Entity', 'PercentEntry', 'TerrainShare', 'SettlementData',
           'UnpopulatedData', 'DerivedStatistics', 'POPULATION_CEILING',
           'RealmError', 'RegionNotFoundError',
           'WeightTable', 'WeightTables', 'fraction', 'normalize',
           'LeafCollection', 'collect_leaves',
           'CategoryMapper', 'CultureLanguageIndex',
           'DistributionResolver', 'SourceKind',
           'RegionStatsAggregator', 'recompute_region']
