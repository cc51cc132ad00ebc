"""ViewModel for generic data tables.

Owns the record collection, the column list and the current
``ProcessingState`` for one list view, and re-runs the pipeline on demand.
The page number is clamped after every state change and after data
refreshes, so ``state.page`` always points at an existing page.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence

from tablekit.config.settings import DEFAULT_PAGE_SIZE
from tablekit.models import Column, FilterOption, ProcessedView, ProcessingState, SortDirection
from tablekit.services import table_state
from tablekit.services.diagnostics import DiagnosticSink
from tablekit.services.filter_engine import filter_options_for
from tablekit.services.pipeline import process

__all__ = ["DataTableViewModel", "PageSummary"]


@dataclass
class PageSummary:
    first: int = 0
    last: int = 0
    total: int = 0

    def as_text(self) -> str:
        if self.total == 0:
            return "No records"
        return f"Showing {self.first}-{self.last} of {self.total}"


class DataTableViewModel:
    def __init__(
        self,
        columns: Sequence[Column],
        records: Iterable[Any] = (),
        *,
        page_size: Optional[int] = DEFAULT_PAGE_SIZE,
        initial_sort: Optional[str] = None,
        initial_direction: SortDirection = SortDirection.ASC,
        searchable: bool = True,
        diagnostics: Optional[DiagnosticSink] = None,
    ):
        self._columns: List[Column] = list(columns)
        self._records: tuple = tuple(records)
        self._page_size = page_size
        self._searchable = searchable
        self._diagnostics = diagnostics
        self.state: ProcessingState = table_state.initial_state(initial_sort, initial_direction)

    # Data ----------------------------------------------------------------
    @property
    def columns(self) -> List[Column]:  # pragma: no cover - trivial
        return list(self._columns)

    @property
    def records(self) -> tuple:  # pragma: no cover - trivial
        return self._records

    @property
    def page_size(self) -> Optional[int]:  # pragma: no cover - trivial
        return self._page_size

    def set_records(self, records: Iterable[Any]) -> None:
        """Replace the data; search, filters and sort survive the refresh."""
        self._records = tuple(records)
        self._clamp()

    def set_page_size(self, page_size: Optional[int]) -> None:
        self._page_size = page_size
        self._clamp()

    # Processing ----------------------------------------------------------
    def view(self) -> ProcessedView:
        return process(
            self._records,
            self._columns,
            self.state,
            self._page_size,
            searchable=self._searchable,
            diagnostics=self._diagnostics,
        )

    def filter_options(self, key: str) -> List[FilterOption]:
        column = next((c for c in self._columns if c.key == key), None)
        if column is None:
            return []
        return filter_options_for(self._records, column, diagnostics=self._diagnostics)

    def summary(self) -> PageSummary:
        v = self.view()
        if v.total_filtered_count == 0:
            return PageSummary()
        size = v.page_size or v.total_filtered_count
        first = (v.page - 1) * size + 1
        return PageSummary(first=first, last=first + len(v.visible_records) - 1, total=v.total_filtered_count)

    # Entry points --------------------------------------------------------
    def on_search_change(self, text: str) -> ProcessingState:
        return self._apply(table_state.on_search_change(self.state, text))

    def on_column_filter_change(self, key: str, value: Any) -> ProcessingState:
        return self._apply(table_state.on_column_filter_change(self.state, key, value))

    def on_range_filter_change(
        self, key: str, minimum: Optional[float] = None, maximum: Optional[float] = None
    ) -> ProcessingState:
        return self._apply(table_state.on_range_filter_change(self.state, key, minimum, maximum))

    def clear_filters(self) -> ProcessingState:
        return self._apply(table_state.clear_filters(self.state))

    def on_sort_toggle(self, key: str) -> ProcessingState:
        return self._apply(table_state.on_sort_toggle(self.state, self._columns, key))

    def on_page_change(self, page: int) -> ProcessingState:
        return self._apply(table_state.on_page_change(self.state, page))

    # Internal ------------------------------------------------------------
    def _apply(self, new_state: ProcessingState) -> ProcessingState:
        if new_state is not self.state:
            self.state = new_state
            self._clamp()
        return self.state

    def _clamp(self) -> None:
        v = self.view()
        self.state = table_state.clamp_page(self.state, v.total_filtered_count, self._page_size)
