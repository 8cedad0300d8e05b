from __future__ import annotations

import logging

from ..models.table import Table
from ..models.view_result import ViewResult
from ..models.view_state import ViewState
from .filtering import apply_filters, visible_header
from .pagination import DEFAULT_WINDOW, paginate
from .sorting import sort_rows

"""Pure view pipeline: Table + ViewState -> ViewResult.

Always recomputed from the Table snapshot; nothing is cached or mutated.
An unexpected failure in any stage degrades to an empty view so that the
rest of the dashboard (metrics, chart) still renders.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "compute_view",
]


def compute_view(table: Table, state: ViewState, *, window: int = DEFAULT_WINDOW) -> ViewResult:
    criteria = state.criteria
    header = visible_header(table.header, criteria)
    try:
        rows = apply_filters(table.rows, criteria, table.header)
        rows = sort_rows(rows, state.sort)
    except Exception as e:
        logger.warning(f"view: filtering/sorting failed, showing no rows: {e}")
        rows = []
    page = paginate(rows, state.page.current_page, state.page.rows_per_page, window)
    return ViewResult(
        header=header,
        rows=rows,
        page=page,
        source_row_count=table.row_count,
    )
