from __future__ import annotations

import logging

from ..models.chart import ChartSelection, Dataset, Series
from ..models.table import Table, to_number

"""Chart projection: Table + ChartSelection -> Series.

The chart type only picks the rendering shape; extraction is identical for
bar, line, pie and donut. Columns missing from the header give empty labels
or data instead of an error.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "project_chart",
]


def project_chart(table: Table, selection: ChartSelection) -> Series:
    labels: list = []
    data: list[float] = []

    if selection.x_column:
        xs = table.column(selection.x_column)
        if xs is not None:
            labels = xs
        else:
            logger.debug(f"chart: x column not in header: {selection.x_column!r}")
    if selection.y_column:
        ys = table.column(selection.y_column)
        if ys is not None:
            data = [to_number(v) for v in ys]
        else:
            logger.debug(f"chart: y column not in header: {selection.y_column!r}")

    return Series(
        chart_type=selection.chart_type,
        labels=labels,
        datasets=[Dataset(label=selection.y_column, data=data)],
    )
