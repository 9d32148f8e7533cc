"""
Institution leaderboard aggregation.

All state needed for a ranking pass lives in a RankingContext built once per
dataset/config. Ranking functions take the context explicitly and never
mutate it, so the same context can serve any number of filter combinations.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .config import RankingConfig
from .field_stats import compute_field_stats
from .models import (
    FacultyRecord,
    FieldBreakdown,
    FieldStats,
    InstitutionRecord,
    RankedEntry,
    RankingSummary,
    UNKNOWN,
)
from .normalizer import Normalizer, get_normalizer

logger = logging.getLogger(__name__)

ALL = "all"


@dataclass(frozen=True)
class RankingContext:
    institutions: Tuple[InstitutionRecord, ...]
    faculty: Tuple[FacultyRecord, ...]
    config: RankingConfig
    fields: Tuple[str, ...]
    stats: Mapping[str, FieldStats]
    normalizer: Normalizer

    def normalize(self, raw: float, field: str) -> float:
        return self.normalizer(raw, field, self.stats)


def available_fields(columns: Iterable[str], default_fields: Iterable[str]) -> List[str]:
    """Default fields that appear as a column in the institution table, in default order."""
    present = set(columns)
    return [f for f in default_fields if f in present]


def build_context(
    institutions: Sequence[InstitutionRecord],
    faculty: Sequence[FacultyRecord] = (),
    config: Optional[RankingConfig] = None,
    columns: Optional[Iterable[str]] = None
) -> RankingContext:
    """
    Compute field stats and resolve the normalizer for a dataset.

    Args:
        institutions: Parsed institution rows
        faculty: Parsed faculty contribution rows
        config: Ranking config (defaults to RankingConfig())
        columns: Field columns of the institution table, if known. When
            omitted, the fields are inferred from the parsed scores.

    Returns:
        Frozen RankingContext
    """
    config = config or RankingConfig()
    institutions = tuple(institutions)

    if columns is None:
        columns = {f for inst in institutions for f in inst.scores}

    fields = tuple(available_fields(columns, config.default_fields))
    if not fields:
        logger.warning("None of the configured fields exist in the data; using all configured fields")
        fields = tuple(config.default_fields)

    stats = compute_field_stats(institutions, fields, target_total=config.target_total)
    context = RankingContext(
        institutions=institutions,
        faculty=tuple(faculty),
        config=config,
        fields=fields,
        stats=stats,
        normalizer=get_normalizer(config.policy),
    )
    logger.info(
        "Built ranking context: %d institutions, %d faculty records, %d fields, policy=%s",
        len(context.institutions), len(context.faculty), len(fields), config.policy.value
    )
    return context


def resolve_selected_fields(
    selected: Optional[Iterable[str]],
    known_fields: Sequence[str]
) -> List[str]:
    """
    Restrict a selection to known fields.

    Unknown names are dropped, order is kept and duplicates removed. An empty
    or entirely unknown selection falls back to every known field.
    """
    known = set(known_fields)
    resolved = []
    for name in selected or ():
        if name in known and name not in resolved:
            resolved.append(name)
    return resolved or list(known_fields)


def first_by_name(institutions: Iterable[InstitutionRecord]) -> List[InstitutionRecord]:
    """
    De-duplicate institutions by name, keeping the first row of each.

    Pass 1 groups rows by name (dicts keep insertion order), pass 2 takes
    the head of every group.
    """
    groups: Dict[str, List[InstitutionRecord]] = {}
    for inst in institutions:
        groups.setdefault(inst.name, []).append(inst)

    dropped = sum(len(rows) - 1 for rows in groups.values())
    if dropped:
        logger.debug("Ignoring %d duplicate institution row(s)", dropped)

    return [rows[0] for rows in groups.values()]


def matches_region(inst: InstitutionRecord, region: str) -> bool:
    if region == ALL:
        return True
    return inst.continent.strip().lower() == region.strip().lower()


def matches_country(inst: InstitutionRecord, country: str) -> bool:
    if country == ALL:
        return True
    value = inst.country.strip()
    return bool(value) and value == country.strip()


def total_score(context: RankingContext, inst: InstitutionRecord, fields: Iterable[str]) -> float:
    """Sum of normalized scores of an institution over the given fields."""
    return sum(context.normalize(inst.raw_score(f), f) for f in fields)


def rank(
    context: RankingContext,
    selected_fields: Optional[Iterable[str]] = None,
    region: str = ALL,
    country: str = ALL
) -> List[RankedEntry]:
    """
    Rank institutions by total normalized score over the selected fields.

    Institutions outside the region/country filter, with a total <= 0, or
    repeating an earlier name are left out. Sorted by score descending.
    """
    fields = resolve_selected_fields(selected_fields, context.fields)

    entries = []
    for inst in first_by_name(context.institutions):
        if not matches_region(inst, region) or not matches_country(inst, country):
            continue

        score = total_score(context, inst, fields)
        if score <= 0:
            continue

        entries.append(RankedEntry(
            institution=inst.name,
            continent=inst.continent or UNKNOWN,
            score=score,
        ))

    entries.sort(key=lambda e: e.score, reverse=True)

    logger.debug(
        "Ranked %d institution(s) for fields=%s region=%s country=%s",
        len(entries), fields, region, country
    )
    return entries


def country_options(institutions: Iterable[InstitutionRecord], region: str = ALL) -> List[str]:
    """Sorted distinct countries available under a region filter."""
    countries = set()
    for inst in institutions:
        if not matches_region(inst, region):
            continue
        country = inst.country.strip()
        if country and country.lower() != "unknown":
            countries.add(country)
    return sorted(countries)


def reconcile_country(country: str, options: Sequence[str]) -> str:
    """Reset a country selection that the current options no longer offer."""
    if country != ALL and country not in options:
        return ALL
    return country


def find_institution(context: RankingContext, name: str) -> Optional[InstitutionRecord]:
    for inst in context.institutions:
        if inst.name == name:
            return inst
    return None


def field_maxima(context: RankingContext, fields: Iterable[str]) -> Dict[str, float]:
    """Highest normalized score of any institution, per field."""
    maxima = {f: 0.0 for f in fields}
    for inst in context.institutions:
        for f in maxima:
            maxima[f] = max(maxima[f], context.normalize(inst.raw_score(f), f))
    return maxima


def field_breakdown(
    context: RankingContext,
    institution_name: str,
    selected_fields: Optional[Iterable[str]] = None
) -> List[FieldBreakdown]:
    """
    Per-field scores of one institution, each scaled against the field leader.

    Only fields where the institution has a positive raw score are listed.
    share is score / field_max * 100, capped at 100.
    """
    inst = find_institution(context, institution_name)
    if inst is None:
        return []

    fields = resolve_selected_fields(selected_fields, context.fields)
    maxima = field_maxima(context, fields)

    breakdown = []
    for f in fields:
        raw = inst.raw_score(f)
        if not raw > 0:
            continue
        score = context.normalize(raw, f)
        cap = maxima[f] or 1.0
        breakdown.append(FieldBreakdown(
            field=f,
            raw=raw,
            score=score,
            field_max=maxima[f],
            share=min(100.0, score / cap * 100.0),
        ))
    return breakdown


def summarize(
    context: RankingContext,
    ranked: Sequence[RankedEntry],
    selected_fields: Optional[Iterable[str]] = None,
    region: str = ALL,
    country: str = ALL
) -> RankingSummary:
    """Headline counts for a ranking: institutions, unique authors, active filters."""
    fields = resolve_selected_fields(selected_fields, context.fields)
    selected = set(fields)
    ranked_names = {e.institution for e in ranked}

    authors = set()
    for rec in context.faculty:
        if rec.university in ranked_names and rec.category in selected and rec.faculty_name != UNKNOWN:
            authors.add(rec.faculty_name)

    active = len(fields)
    if region != ALL:
        active += 1
    if country != ALL:
        active += 1

    return RankingSummary(
        institution_count=len(ranked),
        author_count=len(authors),
        active_filters=active,
    )
