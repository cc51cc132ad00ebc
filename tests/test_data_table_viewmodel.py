from __future__ import annotations

from tablekit.models import FilterOption, SortDirection, SortState
from tablekit.services.diagnostics import DiagnosticsCollector
from tablekit.viewmodels.data_table_viewmodel import DataTableViewModel, PageSummary
from tests.factories import make_payments, payment_columns


def _ids(view):
    return [r["id"] for r in view.visible_records]


def _vm(**kwargs):
    return DataTableViewModel(payment_columns(), make_payments(), page_size=2, **kwargs)


def test_initial_view_and_summary():
    vm = _vm()
    view = vm.view()
    assert view.total_pages == 3
    assert _ids(view) == [1, 2]
    assert vm.summary().as_text() == "Showing 1-2 of 5"


def test_initial_sort_applied():
    vm = _vm(initial_sort="tenant", initial_direction=SortDirection.DESC)
    assert vm.state.sort == SortState("tenant", SortDirection.DESC)
    assert _ids(vm.view()) == [5, 4]


def test_filter_change_resets_page():
    vm = _vm()
    vm.on_page_change(3)
    assert vm.state.page == 3
    vm.on_column_filter_change("status", "paid")
    assert vm.state.page == 1
    assert vm.view().total_filtered_count == 3


def test_page_change_is_clamped():
    vm = _vm()
    state = vm.on_page_change(99)
    assert state.page == 3
    assert _ids(vm.view()) == [5]
    assert vm.summary() == PageSummary(first=5, last=5, total=5)


def test_data_refresh_keeps_state_and_reclamps_page():
    vm = _vm()
    vm.on_search_change("e")
    vm.on_sort_toggle("tenant")
    vm.on_page_change(2)
    vm.set_records(make_payments()[:2])
    assert vm.state.search_term == "e"
    assert vm.state.sort == SortState("tenant", SortDirection.ASC)
    assert vm.state.page == 1


def test_actions_column_click_is_ignored():
    vm = _vm()
    before = vm.state
    assert vm.on_sort_toggle("actions") is before


def test_range_filter_and_clear():
    vm = _vm()
    vm.on_range_filter_change("amount", 100, 200)
    assert _ids(vm.view()) == [2]
    vm.clear_filters()
    assert vm.view().total_filtered_count == 5


def test_filter_options_from_unfiltered_data():
    vm = _vm()
    vm.on_search_change("alice")
    assert vm.filter_options("status") == [
        FilterOption("paid", "paid"),
        FilterOption("pending", "pending"),
        FilterOption("failed", "failed"),
    ]
    assert vm.filter_options("nope") == []


def test_empty_summary_and_page_size_change():
    vm = _vm()
    vm.on_search_change("no such tenant")
    assert vm.summary().as_text() == "No records"
    vm.clear_filters()
    vm.set_page_size(None)
    assert vm.view().total_pages == 1
    assert len(vm.view().visible_records) == 5


def test_diagnostics_are_forwarded():
    diag = DiagnosticsCollector()
    vm = DataTableViewModel(payment_columns() * 2, make_payments(), diagnostics=diag)
    view = vm.view()
    assert view.degraded
    assert diag.count("pipeline") >= 1
