from __future__ import annotations

import pytest

from tablelens.models.view_state import DateRange, FilterCriteria, PageState, SortSpec, ViewState


def test_sort_toggle_same_column_flips_direction():
    spec = SortSpec(column_index=1, direction="asc")
    assert spec.toggled(1) == SortSpec(1, "desc")
    assert spec.toggled(1).toggled(1) == SortSpec(1, "asc")


def test_sort_toggle_new_column_resets_to_ascending():
    spec = SortSpec(column_index=1, direction="desc")
    assert spec.toggled(2) == SortSpec(2, "asc")


def test_sort_toggle_from_unsorted():
    assert SortSpec().toggled(0) == SortSpec(0, "asc")


@pytest.mark.parametrize(
    "start,end,is_open",
    [(None, None, True), ("", "", True), ("  ", None, True), ("2024-01-02", "", False), (None, "2024-01-02", False)],
)
def test_date_range_open_detection(start, end, is_open):
    assert DateRange(start, end).is_open is is_open


def test_view_state_directives_return_new_instances():
    base = ViewState()
    changed = base.with_text("north").with_page(3).with_sort_toggled(2)
    assert base.criteria.text == ""
    assert base.page.current_page == 1
    assert base.sort.column_index is None
    assert changed.criteria.text == "north"
    assert changed.page.current_page == 3
    assert changed.sort == SortSpec(2, "asc")


def test_view_state_keeps_rows_per_page_when_changing_page():
    state = ViewState(page=PageState(rows_per_page=25)).with_page(4)
    assert state.page == PageState(current_page=4, rows_per_page=25)


def test_selected_columns_keep_selection_order():
    state = ViewState().with_selected_columns(["Users", "Date"])
    assert state.criteria.selected_columns == ("Users", "Date")


def test_view_state_is_frozen():
    with pytest.raises(AttributeError):
        ViewState().criteria = FilterCriteria(text="x")
