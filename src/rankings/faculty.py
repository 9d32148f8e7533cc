"""
Faculty roll-up for a single institution.

Each faculty row is one contribution (person, field, raw score). A person's
"main" fields come from their full profile across every field, while the
totals shown in the leaderboard only count the currently selected fields.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Set

from .aggregator import RankingContext
from .config import DEFAULT_MAIN_FIELD_RATIO
from .models import FacultyAggregate

logger = logging.getLogger(__name__)


@dataclass
class _FacultyAccumulator:
    """Running totals for one person during a single roll-up pass."""
    name: str
    total_score: float = 0.0
    paper_count: int = 0
    raw_score: float = 0.0
    field_scores: Dict[str, float] = field(default_factory=lambda: defaultdict(float))
    categories: Set[str] = field(default_factory=set)
    has_selected_category: bool = False


def classify_main_fields(
    field_scores: Mapping[str, float],
    ratio: float = DEFAULT_MAIN_FIELD_RATIO,
    fallback: Iterable[str] = ()
) -> FrozenSet[str]:
    """
    Fields where a person's score is within ``ratio`` of their best field.

    A field qualifies if it equals the maximum, or the maximum is positive
    and the score is at least maximum * ratio. When nothing qualifies the
    fallback fields are returned instead.

    >>> sorted(classify_main_fields({"A": 10, "B": 4, "C": 2.9}))
    ['A', 'B']
    """
    if field_scores:
        max_score = max(field_scores.values())
        threshold = max_score * ratio
        main = frozenset(
            f for f, score in field_scores.items()
            if score == max_score or (max_score > 0 and score >= threshold)
        )
        if main:
            return main
    return frozenset(fallback)


def faculty_for_institution(
    context: RankingContext,
    institution_name: str,
    selected_fields: Optional[Iterable[str]] = None
) -> List[FacultyAggregate]:
    """
    Group an institution's contributions by person and classify main fields.

    Args:
        context: Ranking context (field stats and normalizer)
        institution_name: Exact institution name
        selected_fields: Fields counted toward totals; empty/None counts all

    Returns:
        People with at least one contribution in the selected fields,
        sorted by total normalized score descending.
    """
    selected = set(selected_fields or ())
    people: Dict[str, _FacultyAccumulator] = {}

    for rec in context.faculty:
        if rec.university != institution_name:
            continue

        normalized = context.normalize(rec.score, rec.category)

        person = people.get(rec.faculty_name)
        if person is None:
            person = people[rec.faculty_name] = _FacultyAccumulator(name=rec.faculty_name)

        # Full profile: every field, selected or not
        person.categories.add(rec.category)
        person.field_scores[rec.category] += normalized

        if not selected or rec.category in selected:
            person.total_score += normalized
            person.raw_score += rec.score
            person.paper_count += 1
            person.has_selected_category = True

    ratio = context.config.main_field_ratio
    results = [
        FacultyAggregate(
            name=p.name,
            total_score=p.total_score,
            paper_count=p.paper_count,
            raw_score=p.raw_score,
            main_fields=classify_main_fields(p.field_scores, ratio, fallback=p.categories),
            all_fields=frozenset(p.categories),
        )
        for p in people.values()
        if p.has_selected_category
    ]
    results.sort(key=lambda a: a.total_score, reverse=True)

    logger.debug(
        "Faculty roll-up for %s: %d of %d people match the selected fields",
        institution_name, len(results), len(people)
    )
    return results
