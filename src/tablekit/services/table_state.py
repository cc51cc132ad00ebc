"""Processing state transitions.

Every entry point takes the current ``ProcessingState`` and returns a new
one; nothing is mutated in place. Search and filter changes jump back to
page 1. Sort toggles on a column that is not sortable (including the
reserved actions column) return the very same state object.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Optional, Sequence

from tablekit.models import Column, ProcessingState, SortDirection, SortState
from tablekit.services.paginator import clamp_page_number, total_pages
from tablekit.services.sort_engine import next_sort_state

__all__ = [
    "initial_state",
    "on_search_change",
    "on_column_filter_change",
    "on_range_filter_change",
    "clear_filters",
    "on_sort_toggle",
    "on_page_change",
    "clamp_page",
]


def initial_state(
    sort_key: Optional[str] = None, direction: SortDirection = SortDirection.ASC
) -> ProcessingState:
    sort = SortState(column_key=sort_key, direction=direction) if sort_key else SortState()
    return ProcessingState(sort=sort)


def on_search_change(state: ProcessingState, text: str) -> ProcessingState:
    text = text or ""
    if text == state.search_term:
        return state
    return replace(state, search_term=text, page=1)


def on_column_filter_change(state: ProcessingState, key: str, value: Any) -> ProcessingState:
    filters = dict(state.column_filters)
    if value is None or str(value) == "":
        if key not in filters:
            return state
        filters.pop(key)
    else:
        if filters.get(key) == str(value):
            return state
        filters[key] = str(value)
    return replace(state, column_filters=filters, page=1)


def on_range_filter_change(
    state: ProcessingState,
    key: str,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
) -> ProcessingState:
    ranges = dict(state.range_filters)
    if minimum is None and maximum is None:
        if key not in ranges:
            return state
        ranges.pop(key)
    else:
        bounds = (
            None if minimum is None else float(minimum),
            None if maximum is None else float(maximum),
        )
        if ranges.get(key) == bounds:
            return state
        ranges[key] = bounds
    return replace(state, range_filters=ranges, page=1)


def clear_filters(state: ProcessingState) -> ProcessingState:
    """Drop search text, column filters and range filters (sort is kept)."""
    if not state.search_term and not state.column_filters and not state.range_filters:
        return state
    return replace(state, search_term="", column_filters={}, range_filters={}, page=1)


def on_sort_toggle(state: ProcessingState, columns: Sequence[Column], key: str) -> ProcessingState:
    column = next((c for c in columns if c.key == key), None)
    if column is None or not column.is_sortable:
        return state
    return replace(state, sort=next_sort_state(state.sort, column))


def on_page_change(
    state: ProcessingState, page: int, pages: Optional[int] = None
) -> ProcessingState:
    """Move to ``page``; clamped to ``[1, pages]`` when ``pages`` is known."""
    target = max(1, int(page)) if pages is None else clamp_page_number(page, pages)
    if target == state.page:
        return state
    return replace(state, page=target)


def clamp_page(
    state: ProcessingState, filtered_count: int, page_size: Optional[int]
) -> ProcessingState:
    target = clamp_page_number(state.page, total_pages(filtered_count, page_size))
    if target == state.page:
        return state
    return replace(state, page=target)
