"""Free-text search and per-column filters.

All predicates compose conjunctively: a record survives when it matches the
search term (if any) AND every active column filter AND every active range
filter.

Matching rules:
 - search: case-insensitive substring of any column's normalized value
   rendered as text; only the actions column is skipped
 - select: equality in the normalized domain (both sides normalized)
 - text / number / date: case-insensitive substring of the raw value's
   display text
 - range: inclusive numeric bounds on the normalized value

A column whose value cannot be computed for a record only fails that
column's predicate; the rest of the filter keeps going.
"""

from __future__ import annotations

from numbers import Number
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from tablekit.models import Column, FilterKind, FilterOption, ProcessingState, RangeBounds
from tablekit.services.diagnostics import FILTER, DiagnosticEvent, DiagnosticSink, report
from tablekit.services.value_normalizer import display_text, normalize, to_text
from tablekit.services.value_resolver import FILTER as FILTER_PURPOSE
from tablekit.services.value_resolver import ValueResolver

__all__ = [
    "FilterEngine",
    "apply_filters",
    "apply_search",
    "apply_column_filters",
    "apply_range_filters",
    "derive_filter_options",
    "filter_options_for",
]


class FilterEngine:
    """Predicate evaluation bound to one resolver / diagnostics sink."""

    def __init__(
        self,
        *,
        resolver: Optional[ValueResolver] = None,
        diagnostics: Optional[DiagnosticSink] = None,
    ) -> None:
        self._diagnostics = diagnostics
        self._resolver = resolver or ValueResolver(diagnostics=diagnostics)

    # Predicates ----------------------------------------------------------
    def _raw(self, record: Any, column: Column) -> Any:
        return self._resolver.resolve(record, column, FILTER_PURPOSE)

    def _guarded(self, column: Column, stage: str, func, *args) -> bool:
        try:
            return bool(func(*args))
        except Exception as exc:  # noqa: BLE001
            report(
                self._diagnostics,
                DiagnosticEvent.from_exception(FILTER, exc, column_key=column.key, strategy=stage),
            )
            return False

    def _search_hit(self, record: Any, column: Column, needle: str) -> bool:
        text = to_text(normalize(self._raw(record, column)))
        return needle in text.lower()

    def _column_hit(self, record: Any, column: Column, wanted: str) -> bool:
        raw = self._raw(record, column)
        if column.filter_kind == FilterKind.SELECT:
            return to_text(normalize(raw)) == to_text(normalize(wanted))
        return str(wanted).lower() in display_text(raw).lower()

    def _range_hit(self, record: Any, column: Column, bounds: RangeBounds) -> bool:
        value = normalize(self._raw(record, column))
        if isinstance(value, bool) or not isinstance(value, Number):
            return False
        lo, hi = bounds
        if lo is not None and value < lo:
            return False
        if hi is not None and value > hi:
            return False
        return True

    # Stages --------------------------------------------------------------
    def search(self, records: Iterable[Any], term: str, columns: Sequence[Column]) -> List[Any]:
        needle = (term or "").lower()
        if not needle:
            return list(records)
        searchable = [c for c in columns if not c.is_actions]
        return [
            r
            for r in records
            if any(self._guarded(c, "search", self._search_hit, r, c, needle) for c in searchable)
        ]

    def column_filters(
        self, records: Iterable[Any], filters: Mapping[str, str], columns: Sequence[Column]
    ) -> List[Any]:
        active = _active_columns(filters, columns)
        if not active:
            return list(records)
        return [
            r
            for r in records
            if all(self._guarded(c, "column_filter", self._column_hit, r, c, v) for c, v in active)
        ]

    def range_filters(
        self, records: Iterable[Any], ranges: Mapping[str, RangeBounds], columns: Sequence[Column]
    ) -> List[Any]:
        active = _active_columns(ranges, columns)
        if not active:
            return list(records)
        return [
            r
            for r in records
            if all(self._guarded(c, "range_filter", self._range_hit, r, c, b) for c, b in active)
        ]

    def apply(
        self,
        records: Iterable[Any],
        state: ProcessingState,
        columns: Sequence[Column],
        *,
        searchable: bool = True,
    ) -> List[Any]:
        out = list(records)
        if searchable:
            out = self.search(out, state.search_term, columns)
        out = self.column_filters(out, state.active_column_filters(), columns)
        out = self.range_filters(out, state.active_range_filters(), columns)
        return out

    # Options -------------------------------------------------------------
    def derive_options(self, records: Iterable[Any], column: Column) -> List[FilterOption]:
        seen: Dict[str, FilterOption] = {}
        for r in records:
            try:
                text = to_text(normalize(self._raw(r, column)))
            except Exception as exc:  # noqa: BLE001
                report(
                    self._diagnostics,
                    DiagnosticEvent.from_exception(FILTER, exc, column_key=column.key, strategy="options"),
                )
                continue
            if text and text not in seen:
                seen[text] = FilterOption(value=text, label=text)
        return list(seen.values())


def _active_columns(values: Mapping[str, Any], columns: Sequence[Column]) -> List[tuple]:
    by_key = {c.key: c for c in columns}
    out = []
    for key, val in values.items():
        column = by_key.get(key)
        # Unknown or non-filterable columns are ignored
        if column is None or not column.is_filterable:
            continue
        out.append((column, val))
    return out


def apply_search(
    records: Iterable[Any],
    term: str,
    columns: Sequence[Column],
    *,
    diagnostics: Optional[DiagnosticSink] = None,
) -> List[Any]:
    return FilterEngine(diagnostics=diagnostics).search(records, term, columns)


def apply_column_filters(
    records: Iterable[Any],
    filters: Mapping[str, str],
    columns: Sequence[Column],
    *,
    diagnostics: Optional[DiagnosticSink] = None,
) -> List[Any]:
    active = {k: v for k, v in filters.items() if v is not None and str(v) != ""}
    return FilterEngine(diagnostics=diagnostics).column_filters(records, active, columns)


def apply_range_filters(
    records: Iterable[Any],
    ranges: Mapping[str, RangeBounds],
    columns: Sequence[Column],
    *,
    diagnostics: Optional[DiagnosticSink] = None,
) -> List[Any]:
    return FilterEngine(diagnostics=diagnostics).range_filters(records, ranges, columns)


def apply_filters(
    records: Iterable[Any],
    state: ProcessingState,
    columns: Sequence[Column],
    *,
    searchable: bool = True,
    diagnostics: Optional[DiagnosticSink] = None,
) -> List[Any]:
    return FilterEngine(diagnostics=diagnostics).apply(records, state, columns, searchable=searchable)


def derive_filter_options(
    records: Iterable[Any], column: Column, *, diagnostics: Optional[DiagnosticSink] = None
) -> List[FilterOption]:
    """Distinct non-empty normalized values, first-seen order."""
    return FilterEngine(diagnostics=diagnostics).derive_options(records, column)


def filter_options_for(
    records: Iterable[Any], column: Column, *, diagnostics: Optional[DiagnosticSink] = None
) -> List[FilterOption]:
    """Explicit ``filter_options`` when given, otherwise derived ones."""
    if column.filter_options is not None:
        return list(column.filter_options)
    return derive_filter_options(records, column, diagnostics=diagnostics)
