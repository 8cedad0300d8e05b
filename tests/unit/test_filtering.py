from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from tablelens.models.table import Table
from tablelens.models.view_state import DateRange, FilterCriteria
from tablelens.services.filtering import (
    apply_filters,
    filter_date_range,
    filter_text,
    find_date_column,
    parse_date,
    project_columns,
    visible_header,
)


@pytest.fixture
def people() -> Table:
    return Table.from_records([
        ["Name", "City", "Signup Date", "Score"],
        ["Alice", "Berlin", "2024-01-05", 10],
        ["bob", "PARIS", "2024-02-10", 20],
        ["Carol", "berlin", "not a date", 30],
        ["Dave", "Rome", "2024-03-15", None],
    ])


def test_empty_text_keeps_all_rows(people):
    assert filter_text(people.rows, "") == list(people.rows)


def test_text_filter_is_case_insensitive_substring(people):
    rows = filter_text(people.rows, "BERL")
    assert [r[0] for r in rows] == ["Alice", "Carol"]


def test_text_filter_matches_any_cell_including_numbers(people):
    rows = filter_text(people.rows, "20")
    # parsed dates all contain "20"; Carol has neither a date nor a matching score
    assert [r[0] for r in rows] == ["Alice", "bob", "Dave"]
    rows = filter_text(people.rows, "30")
    assert [r[0] for r in rows] == ["Carol"]


def test_text_filter_never_grows_the_row_set(people):
    for needle in ["a", "e", "zzz", "2024"]:
        assert len(filter_text(people.rows, needle)) <= len(people.rows)


def test_find_date_column_first_date_or_time_name():
    assert find_date_column(["Name", "Signup DATE", "Timestamp"]) == 1
    assert find_date_column(["Name", "Runtime"]) == 1
    assert find_date_column(["Name", "Score"]) is None


def test_date_range_open_is_noop(people):
    assert filter_date_range(people.rows, DateRange(), people.header) == list(people.rows)


def test_date_range_start_only(people):
    rows = filter_date_range(people.rows, DateRange(start="2024-02-10"), people.header)
    # inclusive start; unparsable date kept (fail-open)
    assert [r[0] for r in rows] == ["bob", "Carol", "Dave"]


def test_date_range_end_only(people):
    rows = filter_date_range(people.rows, DateRange(end="2024-02-10"), people.header)
    assert [r[0] for r in rows] == ["Alice", "bob", "Carol"]


def test_date_range_both_bounds(people):
    rows = filter_date_range(people.rows, DateRange("2024-01-06", "2024-03-01"), people.header)
    assert [r[0] for r in rows] == ["bob", "Carol"]


def test_date_range_accepts_date_objects(people):
    rows = filter_date_range(people.rows, DateRange(start=date(2024, 3, 1)), people.header)
    assert [r[0] for r in rows] == ["Carol", "Dave"]


def test_date_range_without_date_column_is_noop():
    table = Table.from_records([["Name"], ["x"], ["y"]])
    assert filter_date_range(table.rows, DateRange(start="2030-01-01"), table.header) == list(table.rows)


def test_date_range_keeps_short_rows():
    table = Table.from_records([["Name", "Date"], ["x"], ["y", "2020-01-01"]])
    rows = filter_date_range(table.rows, DateRange(start="2024-01-01"), table.header)
    assert rows == [("x",)]


def test_parse_date_variants():
    assert parse_date("2024-01-02") == datetime(2024, 1, 2)
    assert parse_date(datetime(2024, 1, 2, tzinfo=timezone.utc)) == datetime(2024, 1, 2)
    assert parse_date("") is None
    assert parse_date(None) is None
    assert parse_date("garbage") is None
    assert parse_date(0) == datetime(1970, 1, 1)


def test_projection_uses_selection_order(people):
    rows = project_columns(people.rows, ["Score", "Name"], people.header)
    assert rows[0] == (10, "Alice")
    assert rows[3] == (None, "Dave")


def test_projection_skipped_for_full_or_empty_selection(people):
    assert project_columns(people.rows, [], people.header) == list(people.rows)
    full = list(people.header)
    assert project_columns(people.rows, full, people.header) == list(people.rows)


def test_projection_unknown_column_yields_none(people):
    rows = project_columns(people.rows, ["Name", "Ghost"], people.header)
    assert rows[0] == ("Alice", None)


def test_visible_header_matches_projection(people):
    assert visible_header(people.header, FilterCriteria(selected_columns=("City", "Name"))) == ["City", "Name"]
    assert visible_header(people.header, FilterCriteria()) == list(people.header)


def test_apply_filters_evaluates_predicates_before_projection(people):
    # the text matches a column that is projected away; the row must still pass
    criteria = FilterCriteria(text="paris", selected_columns=("Name",))
    assert apply_filters(people.rows, criteria, people.header) == [("bob",)]


def test_apply_filters_date_uses_original_shape(people):
    criteria = FilterCriteria(
        date_range=DateRange(start="2024-03-01"),
        selected_columns=("Score", "Name"),
    )
    assert apply_filters(people.rows, criteria, people.header) == [(30, "Carol"), (None, "Dave")]


def test_apply_filters_does_not_mutate_input(people):
    before = list(people.rows)
    apply_filters(people.rows, FilterCriteria(text="a", selected_columns=("Name",)), people.header)
    assert list(people.rows) == before
