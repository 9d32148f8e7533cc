"""
CSV loading for institution and faculty tables.

Every cell is read as text (no NA inference) and trimmed, then handed to the
tolerant record parsers in models.py.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from .models import (
    CATEGORY_COLUMN,
    FACULTY_NAME_COLUMN,
    INSTITUTION_META_COLUMNS,
    SCORE_COLUMN,
    UNIVERSITY_COLUMN,
    FacultyRecord,
    InstitutionRecord,
)

logger = logging.getLogger(__name__)

INSTITUTION_REQUIRED_COLUMNS = (UNIVERSITY_COLUMN,)
FACULTY_REQUIRED_COLUMNS = (FACULTY_NAME_COLUMN, UNIVERSITY_COLUMN, CATEGORY_COLUMN, SCORE_COLUMN)


class LoaderError(Exception):
    """Raised when an input table is missing or malformed."""
    pass


@dataclass(frozen=True)
class InstitutionTable:
    records: Tuple[InstitutionRecord, ...]
    field_columns: Tuple[str, ...]


def read_table(path: Path, required: Sequence[str] = ()) -> Tuple[List[str], List[Dict[str, str]]]:
    """
    Read a CSV file into its header and a list of string-valued rows.

    Raises:
        LoaderError: If the file is missing, empty, or lacks required columns
    """
    path = Path(path)
    if not path.exists():
        raise LoaderError(f"Input file not found: {path}")

    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, skipinitialspace=True)
    except pd.errors.EmptyDataError:
        raise LoaderError(f"Input file is empty: {path}")
    except pd.errors.ParserError as e:
        raise LoaderError(f"Could not parse {path}: {e}")
    except UnicodeDecodeError as e:
        raise LoaderError(f"Could not decode {path} as UTF-8: {e}")

    df.columns = [str(c).strip() for c in df.columns]
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise LoaderError(f"{path} is missing required column(s): {', '.join(missing)}")

    # Short rows leave NaN even with keep_default_na=False
    df = df.fillna("")
    if not df.empty:
        df = df.apply(lambda col: col.str.strip())
    rows = df.to_dict(orient="records")
    logger.info("Loaded %d row(s) from %s", len(rows), path)
    return list(df.columns), rows


def load_institutions(path: Path) -> InstitutionTable:
    """Load the institution table; every non-metadata column is a field."""
    columns, rows = read_table(path, INSTITUTION_REQUIRED_COLUMNS)
    records = tuple(InstitutionRecord.from_row(row) for row in rows)
    field_columns = tuple(c for c in columns if c not in INSTITUTION_META_COLUMNS)
    return InstitutionTable(records=records, field_columns=field_columns)


def load_faculty(path: Path) -> Tuple[FacultyRecord, ...]:
    """Load the faculty contribution table."""
    _, rows = read_table(path, FACULTY_REQUIRED_COLUMNS)
    return tuple(FacultyRecord.from_row(row) for row in rows)
