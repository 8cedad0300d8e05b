from __future__ import annotations

from dataclasses import dataclass

from .table import Row

"""Results of running the filter -> sort -> paginate pipeline."""

__all__ = [
    "PageView",
    "ViewResult",
]


@dataclass(frozen=True)
class PageView:
    """One page of an ordered row set plus the page-number window."""
    page_rows: list[Row]
    total_pages: int
    visible_pages: list[int]
    current_page: int


@dataclass(frozen=True)
class ViewResult:
    """Full derived view for one directive state.

    ``header`` matches the shape of ``rows`` after column projection;
    ``rows`` is the complete filtered and sorted sequence (the export
    source) while ``page`` holds the visible slice.
    """
    header: list[str]
    rows: list[Row]
    page: PageView
    source_row_count: int = 0

    @property
    def filtered_count(self) -> int:
        return len(self.rows)
