"""Column sorting.

Stable sorting of records by a column's normalized value. Keys are derived
through ``ValueResolver`` + ``normalize`` so that the order matches what the
filter engine considers equal.

Ordering rules:
 - Missing values (None / "") always go last, in both directions.
 - Values of different kinds (number vs text) compare by their text form.
 - A comparison that raises counts as equal, keeping input order. So does a
   record whose sort key cannot be computed.

``sort_multi`` applies several (column, direction) keys from lowest
precedence to highest, relying on sort stability to keep the logic simple.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cmp_to_key
from numbers import Number
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from tablekit.models import Column, SortDirection, SortState
from tablekit.services.diagnostics import COMPARISON, DiagnosticEvent, DiagnosticSink, report
from tablekit.services.value_normalizer import Comparable, is_missing, normalize, to_text
from tablekit.services.value_resolver import SORT, ValueResolver

__all__ = ["SortKey", "compare_values", "sort_records", "sort_multi", "next_sort_state"]


@dataclass(frozen=True)
class SortKey:
    column: Column
    direction: SortDirection = SortDirection.ASC


# Key for a record whose sort value could not be computed; equal to everything.
_UNKEYED = object()


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def compare_values(a: Comparable, b: Comparable, direction: SortDirection = SortDirection.ASC) -> int:
    """Three-way compare two normalized values honoring missing-last."""
    a_missing, b_missing = is_missing(a), is_missing(b)
    if a_missing or b_missing:
        if a_missing and b_missing:
            return 0
        return 1 if a_missing else -1
    both_numbers = isinstance(a, Number) and isinstance(b, Number)
    both_text = isinstance(a, str) and isinstance(b, str)
    if both_numbers or both_text:
        result = _cmp(a, b)
    else:
        result = _cmp(to_text(a), to_text(b))
    return -result if direction == SortDirection.DESC else result


def sort_records(
    records: Iterable[Any],
    column: Column,
    direction: SortDirection = SortDirection.ASC,
    *,
    resolver: Optional[ValueResolver] = None,
    diagnostics: Optional[DiagnosticSink] = None,
) -> List[Any]:
    """Return a new list of ``records`` sorted by ``column``.

    The input is never mutated. Python's sort is stable, so records with
    equal keys keep their relative order.
    """
    resolver = resolver or ValueResolver(diagnostics=diagnostics)

    def key_for(record: Any) -> Any:
        try:
            return normalize(resolver.resolve(record, column, SORT))
        except Exception as exc:  # noqa: BLE001
            report(
                diagnostics,
                DiagnosticEvent.from_exception(COMPARISON, exc, column_key=column.key, strategy="key"),
            )
            return _UNKEYED

    keyed: List[Tuple[Any, Any]] = [(key_for(r), r) for r in records]

    def compare(x: Tuple[Any, Any], y: Tuple[Any, Any]) -> int:
        if x[0] is _UNKEYED or y[0] is _UNKEYED:
            return 0
        try:
            return compare_values(x[0], y[0], direction)
        except Exception as exc:  # noqa: BLE001
            report(
                diagnostics,
                DiagnosticEvent.from_exception(COMPARISON, exc, column_key=column.key, strategy="compare"),
            )
            return 0

    keyed.sort(key=cmp_to_key(compare))
    return [r for _, r in keyed]


def sort_multi(
    records: Iterable[Any],
    keys: Sequence[SortKey],
    *,
    resolver: Optional[ValueResolver] = None,
    diagnostics: Optional[DiagnosticSink] = None,
) -> List[Any]:
    """Sort by several keys; ``keys[0]`` has the highest precedence."""
    resolver = resolver or ValueResolver(diagnostics=diagnostics)
    result = list(records)
    # Apply from lowest precedence to highest for stability
    for sk in reversed(keys):
        result = sort_records(result, sk.column, sk.direction, resolver=resolver, diagnostics=diagnostics)
    return result


def next_sort_state(current: SortState, column: Column) -> SortState:
    """Three-state header toggle: none -> asc -> desc -> none.

    Clicking a different column starts over at ascending. Columns that are
    not sortable leave ``current`` untouched.
    """
    if not column.is_sortable:
        return current
    if current.column_key != column.key:
        return SortState(column_key=column.key, direction=SortDirection.ASC)
    if current.direction == SortDirection.ASC:
        return SortState(column_key=column.key, direction=SortDirection.DESC)
    return SortState()
