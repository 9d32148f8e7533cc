"""
Research impact rankings - score normalization and aggregation.

Turns per-institution, per-field raw impact scores and per-faculty
contribution records into a filterable institution leaderboard and
per-institution faculty roll-ups.

Modules:
    models - Value records and tolerant row parsing
    config - Normalization policy and YAML config validation
    field_stats - Per-field contributor statistics
    normalizer - One normalizer per normalization policy
    aggregator - Ranking context, filters, leaderboard and field breakdown
    faculty - Faculty roll-up and main-field classification
    loader - CSV loading for institution and faculty tables
    exporter - CSV export and markdown/JSON formatting
    cli - Command-line interface entrypoints
"""

from . import models
from . import config
from . import field_stats
from . import normalizer
from . import aggregator
from . import faculty
from . import loader
from . import exporter
from . import cli

__version__ = "1.0.0"
