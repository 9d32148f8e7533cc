"""
Cross-field score normalization.

One normalizer class per NormalizationPolicy. The policy is resolved once
(get_normalizer) and the resulting object is reused for every score, so
the per-score path never branches on the policy name.
"""

import math
from abc import ABC, abstractmethod
from typing import Dict, Mapping, Optional

from .config import NormalizationPolicy
from .field_stats import EPS
from .models import FieldStats


class Normalizer(ABC):
    """Base class: maps a raw score in a field to a comparable value."""

    policy: NormalizationPolicy

    def __call__(self, raw: float, field: str, stats: Mapping[str, FieldStats]) -> float:
        if raw is None or not math.isfinite(raw) or raw <= 0:
            return 0.0
        return self.scale(raw, stats.get(field))

    @abstractmethod
    def scale(self, raw: float, field_stats: Optional[FieldStats]) -> float:
        """Scale a positive raw score using the field's stats (None if unknown)."""


class TargetSumNormalizer(Normalizer):
    """raw * (target_total / field sum); unknown or empty fields contribute 0."""

    policy = NormalizationPolicy.TARGET_SUM

    def scale(self, raw: float, field_stats: Optional[FieldStats]) -> float:
        if field_stats is None or field_stats.scale <= EPS:
            return 0.0
        return raw * field_stats.scale


class UnitVarianceNormalizer(Normalizer):
    """raw / field standard deviation (divisor 1 when undefined)."""

    policy = NormalizationPolicy.UNIT_VARIANCE

    def scale(self, raw: float, field_stats: Optional[FieldStats]) -> float:
        std = field_stats.std if field_stats is not None else 0.0
        return raw / (std if std > EPS else 1.0)


class MeanBasedNormalizer(Normalizer):
    """raw / field contributor mean (divisor 1 when undefined)."""

    policy = NormalizationPolicy.MEAN_BASED

    def scale(self, raw: float, field_stats: Optional[FieldStats]) -> float:
        mean = field_stats.mean if field_stats is not None else 0.0
        return raw / (mean if mean > EPS else 1.0)


_NORMALIZERS: Dict[NormalizationPolicy, Normalizer] = {
    NormalizationPolicy.TARGET_SUM: TargetSumNormalizer(),
    NormalizationPolicy.UNIT_VARIANCE: UnitVarianceNormalizer(),
    NormalizationPolicy.MEAN_BASED: MeanBasedNormalizer(),
}


def get_normalizer(policy=NormalizationPolicy.TARGET_SUM) -> Normalizer:
    """
    Resolve a policy (enum member or name) to its normalizer.

    Raises:
        ConfigError: If the policy name is unknown
    """
    return _NORMALIZERS[NormalizationPolicy.from_name(policy)]


def normalize(
    raw: float,
    field: str,
    stats: Mapping[str, FieldStats],
    policy=NormalizationPolicy.TARGET_SUM
) -> float:
    """Normalize a single raw score. Negative, zero and missing scores give 0.0."""
    return get_normalizer(policy)(raw, field, stats)
