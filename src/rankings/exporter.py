"""
Leaderboard export and report formatting.

Scores arrive unrounded from the pipeline; all rounding happens here.
"""

import csv
import json
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .models import FacultyAggregate, FieldBreakdown, RankedEntry, RankingSummary

EXPORT_HEADER = ["Rank", "University", "Continent", "Impact Score"]


def export_rows(ranked: Sequence[RankedEntry], decimals: int = 2) -> List[List[str]]:
    """CSV rows (header first) for a ranked leaderboard."""
    rows = [list(EXPORT_HEADER)]
    for i, entry in enumerate(ranked, start=1):
        rows.append([str(i), entry.institution, entry.continent, f"{entry.score:.{decimals}f}"])
    return rows


def default_export_name(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"ai-rankings-{today.isoformat()}.csv"


def write_csv(ranked: Sequence[RankedEntry], path: Path) -> Path:
    """
    Write the leaderboard as CSV.

    Returns:
        Path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', newline='', encoding='utf-8') as f:
        csv.writer(f).writerows(export_rows(ranked))
    return path


def _jsonable(record: Any) -> Dict[str, Any]:
    data = asdict(record)
    for key, value in data.items():
        if isinstance(value, (set, frozenset)):
            data[key] = sorted(value)
    return data


def ranking_to_json(
    ranked: Sequence[RankedEntry],
    summary: Optional[RankingSummary] = None
) -> Dict[str, Any]:
    """Plain-dict form of a ranking, with 1-based ranks."""
    entries = []
    for i, entry in enumerate(ranked, start=1):
        data = _jsonable(entry)
        data["rank"] = i
        entries.append(data)
    result: Dict[str, Any] = {"rankings": entries}
    if summary is not None:
        result["summary"] = _jsonable(summary)
    return result


def faculty_to_json(faculty: Sequence[FacultyAggregate]) -> List[Dict[str, Any]]:
    return [_jsonable(person) for person in faculty]


def dumps(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def format_leaderboard_md(
    ranked: Sequence[RankedEntry],
    limit: Optional[int] = None,
    summary: Optional[RankingSummary] = None
) -> str:
    """
    Format a leaderboard as a markdown table.

    Args:
        ranked: Entries in rank order
        limit: Show only the first N entries
        summary: Optional headline counts shown above the table

    Returns:
        Markdown string
    """
    if not ranked:
        return "## Institution Rankings\n\n*No data available*\n"

    lines = ["## Institution Rankings", ""]

    if summary is not None:
        lines.append(
            f"{summary.institution_count} institutions, "
            f"{summary.author_count} authors, "
            f"{summary.active_filters} active filters"
        )
        lines.append("")

    lines.append("| Rank | Institution | Continent | Score |")
    lines.append("|------|-------------|-----------|-------|")

    shown = ranked[:limit] if limit else ranked
    for i, entry in enumerate(shown, start=1):
        lines.append(f"| {i} | {entry.institution} | {entry.continent} | {entry.score:.2f} |")

    if limit and len(ranked) > limit:
        lines.append("")
        lines.append(f"*{len(ranked) - limit} more not shown*")

    return "\n".join(lines)


def format_faculty_md(institution: str, faculty: Sequence[FacultyAggregate]) -> str:
    """Markdown table of an institution's faculty roll-up."""
    if not faculty:
        return f"### {institution}\n\n*No faculty in the selected fields*\n"

    lines = [f"### {institution}", ""]
    lines.append("| Faculty | Score | Papers | Main Fields |")
    lines.append("|---------|-------|--------|-------------|")
    for person in faculty:
        fields = ", ".join(sorted(person.main_fields)) or "-"
        lines.append(f"| {person.name} | {person.total_score:.2f} | {person.paper_count} | {fields} |")
    return "\n".join(lines)


def format_breakdown_md(institution: str, breakdown: Sequence[FieldBreakdown]) -> str:
    """Markdown table of per-field scores relative to each field's leader."""
    if not breakdown:
        return f"### {institution}\n\n*No scores in the selected fields*\n"

    lines = [f"### {institution}: Field Statistics", ""]
    lines.append("| Field | Raw | Score | Field Max | Share |")
    lines.append("|-------|-----|-------|-----------|-------|")
    for item in breakdown:
        lines.append(
            f"| {item.field} | {item.raw:.2f} | {item.score:.2f} | "
            f"{item.field_max:.2f} | {item.share:.0f}% |"
        )
    return "\n".join(lines)
