from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, datetime

import pandas as pd

from ..models.table import Cell, Row, cell_at, column_index, stringify
from ..models.view_state import DateBound, DateRange, FilterCriteria

"""Row filtering and column projection.

apply_filters() runs three stages in a fixed order:

1. text filter      - any cell contains the text (case-insensitive)
2. date-range filter - on the first column whose name mentions date/time
3. projection       - keep only the selected columns, in selection order

Projection changes the row shape, so it always runs last; the first two
stages see rows in header order.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "apply_filters",
    "filter_text",
    "filter_date_range",
    "find_date_column",
    "parse_date",
    "project_columns",
    "visible_header",
]

_DATE_HINTS = ("date", "time")


def filter_text(rows: Sequence[Row], text: str) -> list[Row]:
    if not text:
        return list(rows)
    needle = text.lower()
    return [r for r in rows if any(needle in stringify(c).lower() for c in r)]


def find_date_column(header: Sequence[str]) -> int | None:
    """Index of the first column whose name contains "date" or "time"."""
    for i, col in enumerate(header):
        lowered = str(col).lower()
        if any(h in lowered for h in _DATE_HINTS):
            return i
    return None


def parse_date(value: Cell | DateBound) -> pd.Timestamp | None:
    """Parse a cell or bound into a naive Timestamp; None if unparsable.

    Numbers are read as epoch milliseconds. Timezone-aware values are
    converted to UTC before the zone is dropped so that they compare against
    naive bounds.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (datetime, date)):
            ts = pd.Timestamp(value)
        elif isinstance(value, (int, float)):
            ts = pd.to_datetime(value, unit="ms", errors="coerce")
        else:
            text = str(value).strip()
            if not text:
                return None
            ts = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError) as e:
        logger.debug(f"date parse failed value={value!r}: {e}")
        return None
    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts


def _in_range(value: pd.Timestamp, start: pd.Timestamp | None, end: pd.Timestamp | None) -> bool:
    if start is not None and value < start:
        return False
    if end is not None and value > end:
        return False
    return True


def filter_date_range(rows: Sequence[Row], date_range: DateRange, header: Sequence[str]) -> list[Row]:
    """Keep rows whose date cell falls inside the (inclusive) range.

    No-op when the header has no date-like column or no bound is set.
    Rows whose date cell cannot be parsed are kept.
    """
    if date_range.is_open:
        return list(rows)
    idx = find_date_column(header)
    if idx is None:
        return list(rows)

    start = parse_date(date_range.start) if date_range.has_start else None
    end = parse_date(date_range.end) if date_range.has_end else None
    if date_range.has_start and start is None:
        logger.debug(f"unparsable start bound ignored: {date_range.start!r}")
    if date_range.has_end and end is None:
        logger.debug(f"unparsable end bound ignored: {date_range.end!r}")

    kept: list[Row] = []
    for row in rows:
        value = parse_date(cell_at(row, idx))
        if value is None:
            kept.append(row)  # fail-open
            continue
        try:
            if _in_range(value, start, end):
                kept.append(row)
        except TypeError:
            kept.append(row)
    return kept


def project_columns(rows: Sequence[Row], selected: Sequence[str], header: Sequence[str]) -> list[Row]:
    """Re-map rows to the selected columns in selection order.

    Applies only when the selection is non-empty and narrower than the
    header. Unknown column names project to None cells.
    """
    if not selected or len(selected) >= len(header):
        return list(rows)
    indices = [column_index(header, name) for name in selected]
    return [tuple(cell_at(r, i) for i in indices) for r in rows]


def visible_header(header: Sequence[str], criteria: FilterCriteria) -> list[str]:
    """Header matching the shape produced by project_columns()."""
    selected = criteria.selected_columns
    if selected and len(selected) < len(header):
        return list(selected)
    return list(header)


def apply_filters(rows: Sequence[Row], criteria: FilterCriteria, header: Sequence[str]) -> list[Row]:
    out = filter_text(rows, criteria.text)
    out = filter_date_range(out, criteria.date_range, header)
    return project_columns(out, criteria.selected_columns, header)
