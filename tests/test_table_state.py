from __future__ import annotations

from tablekit.models import ProcessingState, SortDirection, SortState
from tablekit.services import table_state as ts
from tests.factories import payment_columns


def test_initial_state_defaults():
    s = ts.initial_state()
    assert s == ProcessingState()
    assert s.page == 1
    assert not s.sort.active
    s2 = ts.initial_state("date", SortDirection.DESC)
    assert s2.sort == SortState("date", SortDirection.DESC)


def test_search_change_resets_page():
    s = ProcessingState(page=4)
    s2 = ts.on_search_change(s, "villa")
    assert s2.search_term == "villa"
    assert s2.page == 1
    assert s.search_term == ""  # original untouched
    assert ts.on_search_change(s2, "villa") is s2


def test_column_filter_set_and_clear():
    s = ProcessingState(page=3)
    s2 = ts.on_column_filter_change(s, "status", "paid")
    assert s2.column_filters == {"status": "paid"}
    assert s2.page == 1
    s3 = ts.on_column_filter_change(s2, "status", "")
    assert s3.column_filters == {}
    assert s2.column_filters == {"status": "paid"}
    assert ts.on_column_filter_change(s3, "status", None) is s3


def test_range_filter_set_and_clear():
    s = ts.on_range_filter_change(ProcessingState(page=2), "amount", 100, None)
    assert s.range_filters == {"amount": (100.0, None)}
    assert s.page == 1
    assert ts.on_range_filter_change(s, "amount").range_filters == {}


def test_clear_filters_keeps_sort():
    s = ProcessingState(
        search_term="x",
        column_filters={"status": "paid"},
        range_filters={"amount": (1.0, None)},
        sort=SortState("tenant", SortDirection.DESC),
        page=2,
    )
    cleared = ts.clear_filters(s)
    assert cleared.search_term == ""
    assert cleared.column_filters == {}
    assert cleared.range_filters == {}
    assert cleared.sort == s.sort
    assert cleared.page == 1
    assert ts.clear_filters(cleared) is cleared


def test_sort_toggle_sequence():
    cols = payment_columns()
    s = ts.initial_state()
    s = ts.on_sort_toggle(s, cols, "date")
    assert s.sort == SortState("date", SortDirection.ASC)
    s = ts.on_sort_toggle(s, cols, "date")
    assert s.sort == SortState("date", SortDirection.DESC)
    s = ts.on_sort_toggle(s, cols, "date")
    assert s.sort == SortState()
    s = ts.on_sort_toggle(ts.on_sort_toggle(s, cols, "date"), cols, "tenant")
    assert s.sort == SortState("tenant", SortDirection.ASC)


def test_sort_toggle_on_actions_or_unknown_is_noop():
    cols = payment_columns()
    s = ts.on_sort_toggle(ts.initial_state(), cols, "tenant")
    assert ts.on_sort_toggle(s, cols, "actions") is s
    assert ts.on_sort_toggle(s, cols, "missing") is s


def test_page_change_and_clamp():
    s = ProcessingState()
    assert ts.on_page_change(s, 5).page == 5
    assert ts.on_page_change(s, 5, pages=3).page == 3
    assert ts.on_page_change(s, 1) is s
    assert ts.clamp_page(ProcessingState(page=9), 5, 2).page == 3
    assert ts.clamp_page(ProcessingState(page=9), 0, 2).page == 1
