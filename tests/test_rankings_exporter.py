"""
Tests for src/rankings/exporter.py - CSV export and report formatting.
"""

import csv
import json
import tempfile
from datetime import date
from pathlib import Path

from src.rankings import exporter
from src.rankings.models import FacultyAggregate, FieldBreakdown, RankedEntry, RankingSummary


RANKED = [
    RankedEntry(institution="Y", continent="Europe", score=666.6666666),
    RankedEntry(institution="X", continent="Unknown", score=333.3333333),
]


class TestExportRows:
    """Tests for export_rows() and write_csv()"""

    def test_rows_have_rank_and_two_decimals(self):
        rows = exporter.export_rows(RANKED)

        assert rows[0] == ["Rank", "University", "Continent", "Impact Score"]
        assert rows[1] == ["1", "Y", "Europe", "666.67"]
        assert rows[2] == ["2", "X", "Unknown", "333.33"]

    def test_write_csv_quotes_commas(self):
        ranked = [RankedEntry(institution="University of California, Berkeley", continent="North America", score=1.0)]
        with tempfile.TemporaryDirectory() as tmpdir:
            path = exporter.write_csv(ranked, Path(tmpdir) / "out" / "rankings.csv")
            with open(path, newline='') as f:
                rows = list(csv.reader(f))

        assert rows[1] == ["1", "University of California, Berkeley", "North America", "1.00"]

    def test_default_export_name(self):
        assert exporter.default_export_name(date(2025, 3, 9)) == "ai-rankings-2025-03-09.csv"


class TestJson:
    """Tests for JSON helpers."""

    def test_ranking_to_json(self):
        data = exporter.ranking_to_json(RANKED, RankingSummary(2, 5, 3))

        assert data["rankings"][0] == {"institution": "Y", "continent": "Europe", "score": 666.6666666, "rank": 1}
        assert data["summary"] == {"institution_count": 2, "author_count": 5, "active_filters": 3}
        json.loads(exporter.dumps(data))

    def test_faculty_sets_become_sorted_lists(self):
        person = FacultyAggregate(
            name="A", total_score=1.0, paper_count=1, raw_score=1.0,
            main_fields=frozenset({"NLP", "ML"}), all_fields=frozenset({"ML", "NLP", "CV"}),
        )

        data = exporter.faculty_to_json([person])[0]

        assert data["main_fields"] == ["ML", "NLP"]
        assert data["all_fields"] == ["CV", "ML", "NLP"]


class TestMarkdown:
    """Tests for markdown formatting."""

    def test_leaderboard(self):
        md = exporter.format_leaderboard_md(RANKED)

        assert "## Institution Rankings" in md
        assert "| 1 | Y | Europe | 666.67 |" in md

    def test_leaderboard_limit(self):
        md = exporter.format_leaderboard_md(RANKED, limit=1)

        assert "| 2 | X" not in md
        assert "1 more not shown" in md

    def test_empty_leaderboard(self):
        assert "No data available" in exporter.format_leaderboard_md([])

    def test_faculty_table(self):
        person = FacultyAggregate("Ada", 12.3456, 3, 4.0, frozenset({"ML"}), frozenset({"ML"}))
        md = exporter.format_faculty_md("MIT", [person])

        assert "| Ada | 12.35 | 3 | ML |" in md

    def test_breakdown_table(self):
        item = FieldBreakdown(field="ML", raw=10.0, score=125.0, field_max=250.0, share=50.0)
        md = exporter.format_breakdown_md("Beta", [item])

        assert "| ML | 10.00 | 125.00 | 250.00 | 50% |" in md
