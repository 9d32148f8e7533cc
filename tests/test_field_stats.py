"""
Tests for src/rankings/field_stats.py - per-field contributor statistics.
"""

import pytest

from src.rankings.field_stats import compute_field_stats, stats_from_values
from src.rankings.models import FieldStats, InstitutionRecord


def make_inst(name, **scores):
    row = {"University": name}
    row.update({k: str(v) for k, v in scores.items()})
    return InstitutionRecord.from_row(row)


class TestComputeFieldStats:
    """Tests for compute_field_stats()"""

    def test_basic_stats(self):
        """Count, sum, mean and scale over positive values."""
        institutions = [make_inst("X", ML=10), make_inst("Y", ML=5)]

        stats = compute_field_stats(institutions, ["ML"], target_total=500)

        assert stats["ML"].count == 2
        assert stats["ML"].sum == pytest.approx(15.0)
        assert stats["ML"].mean == pytest.approx(7.5)
        assert stats["ML"].scale == pytest.approx(500 / 15)

    def test_non_positive_values_excluded(self):
        """Zero, negative and non-numeric entries are not contributors."""
        institutions = [
            make_inst("A", ML=4),
            make_inst("B", ML=0),
            make_inst("C", ML=-2),
            InstitutionRecord.from_row({"University": "D", "ML": "n/a"}),
            make_inst("E", ML=8),
        ]

        stats = compute_field_stats(institutions, ["ML"])

        assert stats["ML"].count == 2
        assert stats["ML"].sum == pytest.approx(12.0)
        # Mean is over contributors only, not all five rows
        assert stats["ML"].mean == pytest.approx(6.0)

    def test_sample_std(self):
        """std is the sample standard deviation of contributors."""
        institutions = [make_inst("A", ML=2), make_inst("B", ML=4), make_inst("C", ML=6)]

        stats = compute_field_stats(institutions, ["ML"])

        assert stats["ML"].std == pytest.approx(2.0)

    def test_field_without_contributors(self):
        """Fields nobody scores in get all-zero stats."""
        stats = compute_field_stats([make_inst("A", ML=1)], ["ML", "CV"])

        assert stats["CV"] == FieldStats()
        assert stats["CV"].scale == 0.0

    def test_returns_new_mapping(self):
        """Each call returns a fresh mapping."""
        institutions = [make_inst("A", ML=1)]

        first = compute_field_stats(institutions, ["ML"])
        second = compute_field_stats(institutions, ["ML"])

        assert first == second
        assert first is not second


class TestStatsFromValues:
    """Tests for stats_from_values()"""

    def test_single_value_has_zero_std(self):
        stats = stats_from_values([3.0])
        assert stats.std == 0.0
        assert stats.mean == 3.0

    def test_tiny_sum_has_zero_scale(self):
        """Sums below the stability epsilon do not produce a scale."""
        stats = stats_from_values([1e-12])
        assert stats.count == 1
        assert stats.scale == 0.0
