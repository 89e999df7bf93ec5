"""
Weight tables for region statistics.

A weight table maps a category key (race, culture, language or terrain) to
an accumulated contribution. Keys compare case-insensitively; the first
spelling seen is the one reported.
"""

import math
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .entities import coerce_float


def fraction(percent: Any) -> float:
    """
    Convert a share expressed as 0..1 or 0..100 to a fraction.

    Values above 1.0 are read as percentages, anything else as an
    already fractional share. Exactly 1.0 therefore means 100%.

    Args:
        percent: Raw share value, possibly missing or malformed

    Returns:
        Fraction of the whole, 0.0 for missing or non-positive input
    """
    value = coerce_float(percent)
    if value <= 0.0:
        return 0.0
    if value > 1.0:
        return value / 100.0
    return value


def _normalize_key(key: Any) -> Optional[str]:
    if not isinstance(key, str):
        return None
    key = key.strip()
    return key or None


class WeightTable:
    """Accumulates non-negative weights per category key."""

    def __init__(self, name: str = ""):
        self.name = name
        self._weights: Dict[str, float] = {}
        self._labels: Dict[str, str] = {}

    def add_weight(self, key: Any, weight: float) -> bool:
        """
        Add weight under a key.

        Blank keys and non-positive or non-finite weights are ignored.

        Returns:
            True if the table changed
        """
        label = _normalize_key(key)
        if label is None:
            return False
        if weight is None or not math.isfinite(weight) or weight <= 0:
            return False

        folded = label.casefold()
        if folded in self._weights:
            total = self._weights[folded] + weight
            if not math.isfinite(total):
                return False
            self._weights[folded] = total
        else:
            self._weights[folded] = weight
            self._labels[folded] = label
        return True

    def get(self, key: str, default: float = 0.0) -> float:
        label = _normalize_key(key)
        if label is None:
            return default
        return self._weights.get(label.casefold(), default)

    def items(self) -> List[Tuple[str, float]]:
        """Keys and weights in insertion order."""
        return [(self._labels[folded], weight) for folded, weight in self._weights.items()]

    @property
    def total(self) -> float:
        return sum(self._weights.values())

    def __contains__(self, key: str) -> bool:
        label = _normalize_key(key)
        return label is not None and label.casefold() in self._weights

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels[folded] for folded in self._weights)

    def __len__(self) -> int:
        return len(self._weights)

    def __repr__(self) -> str:
        return f"WeightTable({self.name!r}, {dict(self.items())!r})"


class WeightTables:
    """The four independent tables filled during one recompute."""

    def __init__(self):
        self.race = WeightTable("race")
        self.culture = WeightTable("culture")
        self.language = WeightTable("language")
        self.terrain = WeightTable("terrain")
