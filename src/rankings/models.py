"""
Value records for the rankings pipeline.

Rows come in as string-keyed dicts (one per CSV line). Parsing here is
tolerant: empty cells, non-numeric strings and missing keys become
"no value" instead of raising.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Optional

# Column names in the institution table
UNIVERSITY_COLUMN = "University"
CONTINENT_COLUMN = "Continent"
COUNTRY_COLUMN = "Country"

# Column names in the faculty table
FACULTY_NAME_COLUMN = "Faculty Name"
CATEGORY_COLUMN = "Category"
SCORE_COLUMN = "Score"

INSTITUTION_META_COLUMNS = (UNIVERSITY_COLUMN, CONTINENT_COLUMN, COUNTRY_COLUMN)

UNKNOWN = "Unknown"


def parse_score(value: Any) -> Optional[float]:
    """
    Parse a raw cell into a finite float.

    Returns None for None, empty/whitespace strings, non-numeric strings,
    NaN and infinities.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


def _text(row: Mapping[str, Any], key: str) -> str:
    value = row.get(key)
    if value is None:
        return ""
    return str(value).strip()


@dataclass(frozen=True)
class InstitutionRecord:
    """One row of the institution table."""
    name: str
    continent: str = UNKNOWN
    country: str = UNKNOWN
    scores: Mapping[str, float] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "InstitutionRecord":
        scores: Dict[str, float] = {}
        for key, value in row.items():
            if key in INSTITUTION_META_COLUMNS:
                continue
            parsed = parse_score(value)
            if parsed is not None:
                scores[key] = parsed

        return cls(
            name=_text(row, UNIVERSITY_COLUMN),
            continent=_text(row, CONTINENT_COLUMN) or UNKNOWN,
            country=_text(row, COUNTRY_COLUMN) or UNKNOWN,
            scores=scores,
        )

    def raw_score(self, field_name: str) -> float:
        """Raw score for a field, 0.0 when absent."""
        return self.scores.get(field_name, 0.0)


@dataclass(frozen=True)
class FacultyRecord:
    """One (faculty member, contribution) row of the faculty table."""
    faculty_name: str
    university: str
    category: str
    score: float = 0.0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "FacultyRecord":
        score = parse_score(row.get(SCORE_COLUMN))
        return cls(
            faculty_name=_text(row, FACULTY_NAME_COLUMN) or UNKNOWN,
            university=_text(row, UNIVERSITY_COLUMN),
            category=_text(row, CATEGORY_COLUMN) or UNKNOWN,
            score=score if score is not None else 0.0,
        )


@dataclass(frozen=True)
class FieldStats:
    """Aggregate statistics over the positive raw scores of one field."""
    count: int = 0
    sum: float = 0.0
    mean: float = 0.0
    std: float = 0.0
    scale: float = 0.0


@dataclass(frozen=True)
class RankedEntry:
    institution: str
    continent: str
    score: float


@dataclass(frozen=True)
class FacultyAggregate:
    name: str
    total_score: float
    paper_count: int
    raw_score: float
    main_fields: FrozenSet[str]
    all_fields: FrozenSet[str]


@dataclass(frozen=True)
class FieldBreakdown:
    """Per-field contribution of one institution, scaled against the field leader."""
    field: str
    raw: float
    score: float
    field_max: float
    share: float


@dataclass(frozen=True)
class RankingSummary:
    institution_count: int
    author_count: int
    active_filters: int
