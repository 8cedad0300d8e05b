from __future__ import annotations

import math
from collections.abc import Sequence
from functools import cmp_to_key

from ..models.table import Cell, Row, cell_at, stringify, to_number
from ..models.view_state import SortSpec

"""Row ordering by one column.

Two cells compare numerically when both coerce to a number, otherwise as
strings in a locale-like order: case-insensitive first, then lower case
before upper case. Python's sort is stable, so tied rows keep their
relative order in both directions.
"""

__all__ = [
    "compare_cells",
    "sort_rows",
]


def _text_key(value: Cell) -> tuple[str, str]:
    s = stringify(value)
    return (s.casefold(), s.swapcase())


def compare_cells(a: Cell, b: Cell) -> int:
    na, nb = to_number(a), to_number(b)
    if not math.isnan(na) and not math.isnan(nb):
        return (na > nb) - (na < nb)
    ka, kb = _text_key(a), _text_key(b)
    return (ka > kb) - (ka < kb)


def sort_rows(rows: Sequence[Row], spec: SortSpec) -> list[Row]:
    """Return a sorted copy of ``rows``; the input is left untouched."""
    if spec.column_index is None:
        return list(rows)
    idx = spec.column_index
    sign = -1 if spec.direction == "desc" else 1

    def _cmp(ra: Row, rb: Row) -> int:
        return sign * compare_cells(cell_at(ra, idx), cell_at(rb, idx))

    return sorted(rows, key=cmp_to_key(_cmp))
