from __future__ import annotations

import math
from collections.abc import Sequence

from ..models.table import Row
from ..models.view_result import PageView

"""Fixed-size pagination with a sliding window of page numbers."""

__all__ = [
    "DEFAULT_WINDOW",
    "page_window",
    "paginate",
    "total_pages",
]

DEFAULT_WINDOW = 5


def total_pages(row_count: int, page_size: int) -> int:
    if row_count <= 0 or page_size <= 0:
        return 0
    return math.ceil(row_count / page_size)


def page_window(page: int, pages: int, width: int = DEFAULT_WINDOW) -> list[int]:
    """Up to ``width`` consecutive page numbers centred on ``page``.

    The window is clamped to [1, pages]; when it hits the last page it slides
    back so that it stays ``width`` wide if enough pages exist.
    """
    start = max(1, page - width // 2)
    end = min(pages, start + width - 1)
    if end - start < width - 1:
        start = max(1, end - width + 1)
    return list(range(start, end + 1))


def paginate(rows: Sequence[Row], page: int, page_size: int, window: int = DEFAULT_WINDOW) -> PageView:
    """Slice one page out of ``rows``.

    A page outside [1, total_pages] yields an empty slice; it is not moved
    back into range.
    """
    pages = total_pages(len(rows), page_size)
    if page < 1 or page_size <= 0:
        page_rows: list[Row] = []
    else:
        start = (page - 1) * page_size
        page_rows = list(rows[start:start + page_size])
    return PageView(
        page_rows=page_rows,
        total_pages=pages,
        visible_pages=page_window(page, pages, window),
        current_page=page,
    )
