from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Literal, Union

"""Interactive directive state for the table view.

Every directive (typing a filter, clicking a sort header, changing page,
picking columns) produces a new ViewState; nothing here is mutated in place.
"""

__all__ = [
    "DateBound",
    "DateRange",
    "FilterCriteria",
    "SortSpec",
    "PageState",
    "ViewState",
    "DEFAULT_ROWS_PER_PAGE",
]

DEFAULT_ROWS_PER_PAGE = 10

SortDirection = Literal["asc", "desc"]
# "" is treated as an unset bound, as delivered by an empty date input
DateBound = Union[str, date, datetime, None]


def _is_set(bound: DateBound) -> bool:
    if bound is None:
        return False
    if isinstance(bound, str):
        return bound.strip() != ""
    return True


@dataclass(frozen=True)
class DateRange:
    start: DateBound = None
    end: DateBound = None

    @property
    def has_start(self) -> bool:
        return _is_set(self.start)

    @property
    def has_end(self) -> bool:
        return _is_set(self.end)

    @property
    def is_open(self) -> bool:
        """True when neither bound is set (range filter is a no-op)."""
        return not (self.has_start or self.has_end)


@dataclass(frozen=True)
class FilterCriteria:
    """Row predicates plus column projection.

    ``selected_columns`` keeps the order in which columns were selected; the
    projected rows follow that order, not the header order.
    """
    text: str = ""
    date_range: DateRange = field(default_factory=DateRange)
    selected_columns: tuple[str, ...] = ()


@dataclass(frozen=True)
class SortSpec:
    column_index: int | None = None
    direction: SortDirection = "asc"

    def toggled(self, column_index: int) -> SortSpec:
        """Same column flips direction; a new column starts ascending."""
        if self.column_index == column_index:
            return SortSpec(column_index, "desc" if self.direction == "asc" else "asc")
        return SortSpec(column_index, "asc")


@dataclass(frozen=True)
class PageState:
    current_page: int = 1
    rows_per_page: int = DEFAULT_ROWS_PER_PAGE


@dataclass(frozen=True)
class ViewState:
    criteria: FilterCriteria = field(default_factory=FilterCriteria)
    sort: SortSpec = field(default_factory=SortSpec)
    page: PageState = field(default_factory=PageState)

    # Directive helpers. The current page is never re-clamped here; a page
    # past the end after a filter change renders empty until moved.
    def with_text(self, text: str) -> ViewState:
        return replace(self, criteria=replace(self.criteria, text=text))

    def with_date_range(self, start: DateBound = None, end: DateBound = None) -> ViewState:
        return replace(self, criteria=replace(self.criteria, date_range=DateRange(start, end)))

    def with_selected_columns(self, columns: tuple[str, ...] | list[str]) -> ViewState:
        return replace(self, criteria=replace(self.criteria, selected_columns=tuple(columns)))

    def with_sort_toggled(self, column_index: int) -> ViewState:
        return replace(self, sort=self.sort.toggled(column_index))

    def with_page(self, page: int) -> ViewState:
        return replace(self, page=replace(self.page, current_page=page))
