"""
Per-field statistics over institution raw scores.

Only contributors count: a field's mean is taken over institutions with a
positive score in that field, not over the whole table.
"""

import logging
from typing import Dict, Iterable, List, Sequence

import numpy as np

from .config import DEFAULT_TARGET_TOTAL
from .models import FieldStats, InstitutionRecord

logger = logging.getLogger(__name__)

# Numeric-stability floor for sums and divisors
EPS = 1e-9


def contributor_scores(institutions: Iterable[InstitutionRecord], field: str) -> List[float]:
    """Finite raw scores strictly greater than zero for one field."""
    values = []
    for inst in institutions:
        raw = inst.scores.get(field)
        if raw is not None and raw > 0:
            values.append(raw)
    return values


def stats_from_values(values: Sequence[float], target_total: float = DEFAULT_TARGET_TOTAL) -> FieldStats:
    """Build FieldStats from already-filtered contributor scores."""
    if not values:
        return FieldStats()

    arr = np.asarray(values, dtype=float)
    count = int(arr.size)
    total = float(arr.sum())
    mean = total / count
    std = float(arr.std(ddof=1)) if count > 1 else 0.0
    scale = target_total / total if total > EPS else 0.0

    return FieldStats(count=count, sum=total, mean=mean, std=std, scale=scale)


def compute_field_stats(
    institutions: Sequence[InstitutionRecord],
    fields: Iterable[str],
    target_total: float = DEFAULT_TARGET_TOTAL
) -> Dict[str, FieldStats]:
    """
    Compute FieldStats for each requested field.

    Args:
        institutions: Parsed institution rows
        fields: Field names to summarize
        target_total: Mass each field is rescaled to under target-sum

    Returns:
        New mapping field -> FieldStats. Fields with no contributors get
        an all-zero FieldStats.
    """
    stats: Dict[str, FieldStats] = {}
    for field in fields:
        stats[field] = stats_from_values(contributor_scores(institutions, field), target_total)
        logger.debug(
            "Field stats %s: count=%d sum=%.4f scale=%.6f",
            field, stats[field].count, stats[field].sum, stats[field].scale
        )
    return stats
