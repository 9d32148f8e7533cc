"""
Tests for src/rankings/faculty.py - faculty roll-up and main-field classification.
"""

import pytest

from src.rankings.aggregator import build_context
from src.rankings.config import RankingConfig
from src.rankings.faculty import classify_main_fields, faculty_for_institution
from src.rankings.models import FacultyRecord, InstitutionRecord


def make_context(faculty_rows, institution_rows=None, **config):
    institution_rows = institution_rows or [
        {"University": "X", "ML": "10", "CV": "2"},
        {"University": "Y", "ML": "10", "CV": "8"},
    ]
    config.setdefault("default_fields", ("ML", "CV"))
    return build_context(
        [InstitutionRecord.from_row(r) for r in institution_rows],
        [FacultyRecord.from_row(r) for r in faculty_rows],
        RankingConfig(**config),
    )


def contribution(name, university, category, score):
    return {"Faculty Name": name, "University": university, "Category": category, "Score": str(score)}


class TestClassifyMainFields:
    """Tests for classify_main_fields()"""

    def test_relative_threshold(self):
        """Fields within 30% of the best field are main fields."""
        assert classify_main_fields({"A": 10, "B": 4, "C": 2.9}) == frozenset({"A", "B"})

    def test_threshold_is_inclusive(self):
        assert classify_main_fields({"A": 10, "B": 3.0}) == frozenset({"A", "B"})

    def test_ties_at_max(self):
        assert classify_main_fields({"A": 5, "B": 5, "C": 0}) == frozenset({"A", "B"})

    def test_all_zero_keeps_max_ties(self):
        """With every score at zero, each field equals the max."""
        assert classify_main_fields({"A": 0.0, "B": 0.0}) == frozenset({"A", "B"})

    def test_empty_uses_fallback(self):
        assert classify_main_fields({}, fallback=["ML"]) == frozenset({"ML"})

    def test_custom_ratio(self):
        assert classify_main_fields({"A": 10, "B": 4}, ratio=0.5) == frozenset({"A"})


class TestFacultyForInstitution:
    """Tests for faculty_for_institution()"""

    def test_selected_fields_filter_totals_not_profile(self):
        """Totals count selected fields only; main fields use the full profile."""
        context = make_context([
            contribution("A", "X", "ML", 10),
            contribution("A", "X", "CV", 2),
        ])

        people = faculty_for_institution(context, "X", ["ML"])

        assert len(people) == 1
        person = people[0]
        ml_scale = context.stats["ML"].scale
        cv_scale = context.stats["CV"].scale
        assert person.total_score == pytest.approx(10 * ml_scale)
        assert person.raw_score == pytest.approx(10)
        assert person.paper_count == 1
        assert person.all_fields == frozenset({"ML", "CV"})
        # CV: 2 * 50 = 100 vs ML: 10 * 25 = 250 -> 100 >= 75
        assert 2 * cv_scale >= 0.3 * 10 * ml_scale
        assert person.main_fields == frozenset({"ML", "CV"})

    def test_main_fields_independent_of_selection(self):
        context = make_context([
            contribution("A", "X", "ML", 10),
            contribution("A", "X", "CV", 2),
        ])

        ml_only = faculty_for_institution(context, "X", ["ML"])[0]
        cv_only = faculty_for_institution(context, "X", ["CV"])[0]

        assert ml_only.main_fields == cv_only.main_fields
        assert ml_only.total_score != cv_only.total_score

    def test_person_without_selected_contribution_excluded(self):
        context = make_context([
            contribution("A", "X", "ML", 10),
            contribution("B", "X", "CV", 5),
        ])

        names = [p.name for p in faculty_for_institution(context, "X", ["ML"])]

        assert names == ["A"]

    def test_empty_selection_counts_everything(self):
        context = make_context([
            contribution("A", "X", "ML", 10),
            contribution("A", "X", "CV", 2),
            contribution("B", "X", "CV", 5),
        ])

        people = {p.name: p for p in faculty_for_institution(context, "X", [])}

        assert set(people) == {"A", "B"}
        assert people["A"].paper_count == 2
        assert people["A"].raw_score == pytest.approx(12)

    def test_groups_multiple_papers(self):
        context = make_context([
            contribution("A", "X", "ML", 1),
            contribution("A", "X", "ML", 2),
            contribution("A", "X", "ML", 3),
        ])

        person = faculty_for_institution(context, "X", ["ML"])[0]

        assert person.paper_count == 3
        assert person.total_score == pytest.approx(6 * context.stats["ML"].scale)

    def test_sorted_by_total_score(self):
        context = make_context([
            contribution("Low", "X", "ML", 1),
            contribution("High", "X", "ML", 5),
            contribution("Mid", "X", "ML", 3),
        ])

        names = [p.name for p in faculty_for_institution(context, "X", ["ML"])]

        assert names == ["High", "Mid", "Low"]

    def test_other_institutions_ignored(self):
        context = make_context([
            contribution("A", "X", "ML", 1),
            contribution("A", "Y", "ML", 100),
        ])

        person = faculty_for_institution(context, "X", ["ML"])[0]

        assert person.raw_score == pytest.approx(1)

    def test_unknown_institution_is_empty(self):
        context = make_context([contribution("A", "X", "ML", 1)])
        assert faculty_for_institution(context, "Nowhere", ["ML"]) == []

    def test_invalid_scores_count_as_papers(self):
        """Unparseable scores are 0 but still a contribution."""
        context = make_context([
            {"Faculty Name": "A", "University": "X", "Category": "ML", "Score": "n/a"},
        ])

        person = faculty_for_institution(context, "X", ["ML"])[0]

        assert person.paper_count == 1
        assert person.total_score == 0.0
        assert person.main_fields == frozenset({"ML"})

    def test_category_outside_stats_normalizes_to_zero(self):
        context = make_context([
            contribution("A", "X", "ML", 4),
            contribution("A", "X", "Robotics", 50),
        ])

        person = faculty_for_institution(context, "X", [])[0]

        assert person.total_score == pytest.approx(4 * context.stats["ML"].scale)
        assert person.main_fields == frozenset({"ML"})
        assert "Robotics" in person.all_fields

    def test_ratio_from_config(self):
        context = make_context([
            contribution("A", "X", "ML", 10),
            contribution("A", "X", "CV", 2),
        ], main_field_ratio=0.5)

        person = faculty_for_institution(context, "X", [])[0]

        # CV normalized 100 < 0.5 * 250
        assert person.main_fields == frozenset({"ML"})
