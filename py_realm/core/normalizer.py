"""Normalization of weight tables into ranked percentage lists."""

from typing import List

import numpy as np

from .entities import PercentEntry
from .weights import WeightTable


def normalize(table: WeightTable) -> List[PercentEntry]:
    """
    Convert accumulated weights into fractions of their total.

    Entries are sorted by descending fraction; equal fractions keep the
    order in which their keys were first added.

    Args:
        table: Weight table to normalize

    Returns:
        List of PercentEntry summing to 1.0, or empty if nothing was added
    """
    items = [(key, weight) for key, weight in table.items() if np.isfinite(weight) and weight > 0]
    if not items:
        return []

    # Scaled by the largest weight so the sum cannot overflow
    weights = np.array([weight for _, weight in items], dtype=np.float64)
    weights = weights / weights.max()
    fractions = weights / weights.sum()
    order = np.argsort(-fractions, kind="stable")

    return [
        PercentEntry(key=items[i][0], percent=float(fractions[i])) for i in order
    ]


def ranked_keys(entries: List[PercentEntry]) -> List[str]:
    """Keys of a normalized list, in rank order."""
    return [entry.key for entry in entries if entry.key and entry.key.strip()]
