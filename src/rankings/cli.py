"""
Command-line interface for the research impact rankings.

Provides subcommands for ranking institutions, rolling up faculty,
inspecting field statistics, listing countries, and exporting CSV.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from src.logging_config import configure_logging

from . import aggregator
from . import config as config_module
from . import exporter
from . import faculty as faculty_module
from . import loader

logger = logging.getLogger(__name__)


def _split_fields(value: Optional[str]) -> List[str]:
    """Parse a ';'-separated field list (field names may contain commas)."""
    if not value:
        return []
    return [f.strip() for f in value.split(";") if f.strip()]


def build_context_from_args(args: argparse.Namespace) -> aggregator.RankingContext:
    """Load config and both tables, then compute field stats."""
    cfg = config_module.load_ranking_config(
        Path(args.config) if args.config else None
    )
    table = loader.load_institutions(Path(args.institutions))
    faculty = loader.load_faculty(Path(args.faculty)) if args.faculty else ()
    return aggregator.build_context(table.records, faculty, cfg, columns=table.field_columns)


def cmd_rank(args: argparse.Namespace) -> int:
    """Print the institution leaderboard."""
    try:
        context = build_context_from_args(args)
        fields = _split_fields(args.fields)
        ranked = aggregator.rank(context, fields, region=args.region, country=args.country)
        summary = aggregator.summarize(context, ranked, fields, args.region, args.country)

        if args.format == "json":
            print(exporter.dumps(exporter.ranking_to_json(ranked[:args.limit] if args.limit else ranked, summary)))
        else:
            print(exporter.format_leaderboard_md(ranked, limit=args.limit, summary=summary))
        return 0

    except (config_module.ConfigError, loader.LoaderError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_faculty(args: argparse.Namespace) -> int:
    """Print the faculty roll-up for one institution."""
    try:
        context = build_context_from_args(args)
        fields = _split_fields(args.fields)
        people = faculty_module.faculty_for_institution(context, args.institution, fields)

        if args.format == "json":
            print(exporter.dumps(exporter.faculty_to_json(people)))
        else:
            print(exporter.format_faculty_md(args.institution, people))
        return 0

    except (config_module.ConfigError, loader.LoaderError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_breakdown(args: argparse.Namespace) -> int:
    """Print per-field scores for one institution."""
    try:
        context = build_context_from_args(args)
        breakdown = aggregator.field_breakdown(context, args.institution, _split_fields(args.fields))
        print(exporter.format_breakdown_md(args.institution, breakdown))
        return 0

    except (config_module.ConfigError, loader.LoaderError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_stats(args: argparse.Namespace) -> int:
    """Show per-field statistics used for normalization."""
    try:
        context = build_context_from_args(args)

        print(f"Normalization policy: {context.config.policy.value}")
        print(f"Target total:         {context.config.target_total:g}")
        print()
        print(f"{'Field':<40} {'Count':>6} {'Sum':>12} {'Mean':>10} {'Std':>10} {'Scale':>10}")
        print("-" * 93)
        for field in context.fields:
            s = context.stats[field]
            print(f"{field:<40} {s.count:>6} {s.sum:>12.2f} {s.mean:>10.3f} {s.std:>10.3f} {s.scale:>10.4f}")
        return 0

    except (config_module.ConfigError, loader.LoaderError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_countries(args: argparse.Namespace) -> int:
    """List countries selectable under a region."""
    try:
        table = loader.load_institutions(Path(args.institutions))
        for country in aggregator.country_options(table.records, args.region):
            print(country)
        return 0

    except loader.LoaderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_export(args: argparse.Namespace) -> int:
    """Export the leaderboard as CSV."""
    try:
        context = build_context_from_args(args)
        ranked = aggregator.rank(context, _split_fields(args.fields), region=args.region, country=args.country)
        if not ranked:
            print("No data to export", file=sys.stderr)
            return 1

        output = Path(args.output) if args.output else Path(exporter.default_export_name())
        exporter.write_csv(ranked, output)
        print(f"Exported {len(ranked)} institution(s) to {output}")
        return 0

    except (config_module.ConfigError, loader.LoaderError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a ranking config file."""
    path = Path(args.config) if args.config else config_module.DEFAULT_CONFIG_PATH
    try:
        raw = config_module.load_config(path)
    except FileNotFoundError:
        print(f"Error: config not found: {path}", file=sys.stderr)
        return 1
    except config_module.ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    errors = config_module.validate_config(raw)
    if errors:
        print(f"Validation failed: {path}", file=sys.stderr)
        for e in errors:
            print(f"  - {e}", file=sys.stderr)
        return 1

    cfg = config_module.config_from_dict(raw)
    print(f"Config valid: {path}")
    print(f"  Policy: {cfg.policy.value}")
    print(f"  Target total: {cfg.target_total:g}")
    print(f"  Fields: {len(cfg.default_fields)}")
    if args.verbose:
        for field in cfg.default_fields:
            print(f"    {field}")
    return 0


def _add_filter_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--fields", help="';'-separated fields (default: all configured fields)")
    parser.add_argument("--region", default=aggregator.ALL, help="Continent filter")
    parser.add_argument("--country", default=aggregator.ALL, help="Country filter")


def main(argv: Optional[list] = None) -> int:
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        prog="rankings",
        description="AI Research Impact Rankings"
    )

    # Global options
    parser.add_argument(
        "--institutions",
        default="data/institutions.csv",
        help="Path to institution score table"
    )
    parser.add_argument(
        "--faculty",
        default=None,
        help="Path to faculty contribution table"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to ranking config (YAML); built-in defaults if omitted"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    rank_parser = subparsers.add_parser("rank", help="Rank institutions")
    _add_filter_args(rank_parser)
    rank_parser.add_argument("--limit", type=int, help="Show only the top N")
    rank_parser.add_argument("--format", choices=["md", "json"], default="md")
    rank_parser.set_defaults(func=cmd_rank)

    faculty_parser = subparsers.add_parser("faculty", help="Faculty roll-up for an institution")
    faculty_parser.add_argument("institution", help="Exact institution name")
    faculty_parser.add_argument("--fields", help="';'-separated fields (default: all)")
    faculty_parser.add_argument("--format", choices=["md", "json"], default="md")
    faculty_parser.set_defaults(func=cmd_faculty)

    breakdown_parser = subparsers.add_parser("breakdown", help="Per-field scores for an institution")
    breakdown_parser.add_argument("institution", help="Exact institution name")
    breakdown_parser.add_argument("--fields", help="';'-separated fields (default: all configured fields)")
    breakdown_parser.set_defaults(func=cmd_breakdown)

    stats_parser = subparsers.add_parser("stats", help="Show field normalization statistics")
    stats_parser.set_defaults(func=cmd_stats)

    countries_parser = subparsers.add_parser("countries", help="List countries for a region")
    countries_parser.add_argument("--region", default=aggregator.ALL, help="Continent filter")
    countries_parser.set_defaults(func=cmd_countries)

    export_parser = subparsers.add_parser("export", help="Export leaderboard as CSV")
    _add_filter_args(export_parser)
    export_parser.add_argument("--output", "-o", help="Output CSV path (default: ai-rankings-<date>.csv)")
    export_parser.set_defaults(func=cmd_export)

    validate_parser = subparsers.add_parser("validate", help="Validate ranking config")
    validate_parser.set_defaults(func=cmd_validate)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
