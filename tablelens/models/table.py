from __future__ import annotations

import math
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Union

"""Table model and cell coercion rules.

A Table is the canonical in-memory dataset: an ordered header plus ordered
rows of untyped cells. Cells are whatever the upload parser produced (str,
int, float, bool) or empty (None / ""). Rows may be shorter than the header;
a missing cell reads as None.

Coercion helpers never raise. They return NaN when a value cannot be read as
a number, and callers decide the default.
"""

__all__ = [
    "Cell",
    "Row",
    "Table",
    "cell_at",
    "column_index",
    "parse_float",
    "parse_int",
    "to_number",
    "stringify",
]

Cell = Union[str, int, float, bool, None]
Row = tuple[Cell, ...]

NAN = float("nan")

# Leading numeric prefix, e.g. "12.5kg" -> 12.5, "  -3e2 units" -> -300
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))")
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
# Whole-value numeric literal
_DECIMAL = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_RADIX = re.compile(r"^0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")


@dataclass(frozen=True)
class Table:
    """Parsed dataset: header plus data rows (header row excluded)."""
    header: tuple[str, ...]
    rows: tuple[Row, ...]

    @staticmethod
    def from_records(records: Sequence[Sequence[Any]]) -> Table:
        """Build a Table from a 2D array whose first row is the header.

        An empty array yields an empty Table.
        """
        if not records:
            return Table.empty()
        header = tuple(stringify(c) for c in records[0])
        rows = tuple(tuple(r) for r in records[1:])
        return Table(header=header, rows=rows)

    @staticmethod
    def empty() -> Table:
        return Table(header=(), rows=())

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def has_data(self) -> bool:
        return bool(self.header) and bool(self.rows)

    def index_of(self, name: str) -> int | None:
        return column_index(self.header, name)

    def column(self, name: str) -> list[Cell] | None:
        """Values of a column across all data rows, or None if absent."""
        idx = self.index_of(name)
        if idx is None:
            return None
        return [cell_at(r, idx) for r in self.rows]


def column_index(header: Sequence[str], name: str) -> int | None:
    """Position of the first column named exactly ``name``."""
    for i, col in enumerate(header):
        if col == name:
            return i
    return None


def cell_at(row: Sequence[Cell], index: int | None) -> Cell:
    """Cell at ``index``; None for a missing column or a short row."""
    if index is None or index < 0 or index >= len(row):
        return None
    return row[index]


def _is_real(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_float(value: Cell) -> float:
    """Read the leading decimal number of a cell ("12.5kg" -> 12.5)."""
    if _is_real(value):
        return float(value)
    if value is None or isinstance(value, bool):
        return NAN
    m = _FLOAT_PREFIX.match(str(value))
    if not m:
        return NAN
    return float(m.group(1).replace("Infinity", "inf"))


def parse_int(value: Cell) -> float:
    """Read the leading integer of a cell; floats truncate toward zero.

    Returns a float so that NaN can signal "not a number".
    """
    if _is_real(value):
        f = float(value)
        if not math.isfinite(f):
            return NAN
        return float(math.trunc(f))
    if value is None or isinstance(value, bool):
        return NAN
    m = _INT_PREFIX.match(str(value))
    if not m:
        return NAN
    return float(int(m.group(1)))


def to_number(value: Cell) -> float:
    """Coerce a whole cell to a number.

    Blank text is 0, a missing cell is NaN, booleans are 1/0. Text must be a
    complete numeric literal (decimal, exponent, 0x/0o/0b, Infinity).
    """
    if value is None:
        return NAN
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if _is_real(value):
        return float(value)
    text = str(value).strip()
    if text == "":
        return 0.0
    if _DECIMAL.match(text):
        return float(text)
    if text in ("Infinity", "+Infinity"):
        return math.inf
    if text == "-Infinity":
        return -math.inf
    if _RADIX.match(text):
        return float(int(text, 0))
    return NAN


def stringify(value: Cell) -> str:
    """Display form of a cell."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    return str(value)
