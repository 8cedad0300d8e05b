"""Domain models for the tablelens dashboard engine.

Immutable value types shared by the view pipeline, the chart projector and
the instruction resolver.
"""

from .chart import ChartSelection, ChartType, Dataset, Series
from .error_record import ErrorRecord
from .metrics import Metrics
from .table import Cell, Row, Table
from .view_result import PageView, ViewResult
from .view_state import DateRange, FilterCriteria, PageState, SortSpec, ViewState

__all__ = [
    # Dataset
    "Cell",
    "Row",
    "Table",
    # Directives
    "DateRange",
    "FilterCriteria",
    "PageState",
    "SortSpec",
    "ViewState",
    # Derived
    "Metrics",
    "PageView",
    "ViewResult",
    # Charts
    "ChartSelection",
    "ChartType",
    "Dataset",
    "Series",
    # Logging
    "ErrorRecord",
]
