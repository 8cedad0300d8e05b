from __future__ import annotations

import io
from datetime import date, datetime
from pathlib import Path
from typing import Any

import pandas as pd

from ..errors import ParseFailure
from ..models.table import Table

"""Upload parsing: CSV / XLSX file -> Table.

The first row of the file is the header, every following row is data.

- CSV: every cell is kept as text, exactly as written. Blank lines are
  skipped; empty cells stay "".
- XLSX: first sheet only. Numbers keep their type, empty cells become None and
  date cells are rendered as ISO strings.

Any read problem surfaces as ParseFailure; the caller keeps its previous
Table.
"""

__all__ = [
    "SUPPORTED_SUFFIXES",
    "read_table",
    "read_csv_table",
    "read_xlsx_table",
    "frame_to_table",
]

SUPPORTED_SUFFIXES = (".csv", ".xlsx")


def _decode(raw: bytes) -> str:
    for enc in ("utf-8-sig", "latin-1"):
        try:
            return raw.decode(enc)
        except UnicodeDecodeError:
            continue
    return raw.decode("utf-8", errors="replace")  # pragma: no cover (latin-1 decodes anything)


def _normalize_cell(val: Any) -> Any:
    if val is None or pd.isna(val):
        return None
    if isinstance(val, (pd.Timestamp, datetime)):
        if val.hour == 0 and val.minute == 0 and val.second == 0 and val.microsecond == 0:
            return val.strftime("%Y-%m-%d")
        return val.isoformat()
    if isinstance(val, date):
        return val.isoformat()
    # numpy scalars -> python scalars
    if hasattr(val, "item"):
        return val.item()
    return val


def frame_to_table(df: pd.DataFrame) -> Table:
    """Convert a header-less DataFrame (row 0 = header) into a Table."""
    records = [[_normalize_cell(v) for v in row] for row in df.itertuples(index=False, name=None)]
    if not records:
        raise ParseFailure("file contains no rows")
    return Table.from_records(records)


def read_csv_table(source: Path | bytes) -> Table:
    raw = source if isinstance(source, bytes) else source.read_bytes()
    text = _decode(raw)
    if not text.strip():
        raise ParseFailure("file contains no rows")
    try:
        df = pd.read_csv(
            io.StringIO(text),
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as e:
        raise ParseFailure(f"error parsing CSV file: {e}") from e
    return frame_to_table(df)


def read_xlsx_table(source: Path | bytes) -> Table:
    handle: Any = io.BytesIO(source) if isinstance(source, bytes) else source
    try:
        xls = pd.ExcelFile(handle)
        if not xls.sheet_names:
            raise ParseFailure("workbook has no sheets")
        df = xls.parse(xls.sheet_names[0], header=None)
    except ParseFailure:
        raise
    except Exception as e:
        raise ParseFailure(f"error parsing XLSX file: {e}") from e
    # drop fully empty trailing rows left by formatted but blank cells
    df = df.dropna(how="all")
    return frame_to_table(df)


def read_table(path: Path) -> Table:
    """Read an uploaded file into a Table based on its suffix.

    Raises:
        ParseFailure: unsupported suffix, unreadable or empty file
    """
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ParseFailure("Please upload a CSV or XLSX file")
    if not path.exists():
        raise ParseFailure(f"file not found: {path}")
    try:
        if suffix == ".csv":
            return read_csv_table(path)
        return read_xlsx_table(path)
    except OSError as e:
        raise ParseFailure(f"error reading file: {e}") from e
