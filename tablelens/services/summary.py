from __future__ import annotations

import math

from ..models.metrics import Metrics
from ..models.view_result import ViewResult

"""SUMMARY line rendering for the CLI."""


def _fmt_number(value: float) -> str:
    """Integers without a fraction, other values with two decimals."""
    if not math.isfinite(value):
        return str(value)
    if value == int(value):
        return str(int(value))
    return f"{value:.2f}"


def render_summary_line(view: ViewResult, metrics: Metrics) -> str:
    """Render a one-line summary of the view and the metrics.

    Format:
    SUMMARY rows={filtered}/{total} page={page}/{pages} revenue={r}
    users={u} conversions={c} growth={g}

    Examples:
        >>> from tablelens.models.view_result import PageView, ViewResult
        >>> view = ViewResult(
        ...     header=["Date"], rows=[("2024-01-02",)],
        ...     page=PageView(page_rows=[("2024-01-02",)], total_pages=1,
        ...                   visible_pages=[1], current_page=1),
        ...     source_row_count=2,
        ... )
        >>> render_summary_line(view, Metrics(revenue=300.0, users=15))
        'SUMMARY rows=1/2 page=1/1 revenue=300 users=15 conversions=0 growth=0'
    """
    return (
        f"SUMMARY rows={view.filtered_count}/{view.source_row_count} "
        f"page={view.page.current_page}/{view.page.total_pages} "
        f"revenue={_fmt_number(metrics.revenue)} "
        f"users={metrics.users} "
        f"conversions={metrics.conversions} "
        f"growth={_fmt_number(metrics.growth)}"
    )
