"""Processing pipeline.

Composes the table services into one pure transform::

    search -> column filters -> range filters -> sort -> paginate

Sorting runs on the already filtered set, so page indices refer to positions
in the filtered-and-sorted result. No cache is kept between calls; callers
re-run ``process`` whenever the state or the data changes.

If a stage fails for reasons the per-record guards do not cover (typically a
malformed column list), the pipeline logs a warning, reports a ``pipeline``
diagnostic and returns the input records unprocessed so that the table still
shows something.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Sequence

from tablekit.models import Column, ColumnDescriptorError, ProcessedView, ProcessingState, SortState
from tablekit.services.diagnostics import PIPELINE, DiagnosticEvent, DiagnosticSink, report
from tablekit.services.filter_engine import FilterEngine
from tablekit.services.paginator import paginate
from tablekit.services.sort_engine import sort_records
from tablekit.services.value_resolver import Accessor, ValueResolver

__all__ = ["validate_columns", "process"]

logger = logging.getLogger(__name__)


def validate_columns(columns: Sequence[Column]) -> List[Column]:
    """Check a column list can drive the pipeline.

    Raises
    ------
    ColumnDescriptorError
        On a non-column entry, an empty or duplicate key, or a render
        function that is not callable.
    """
    if columns is None or isinstance(columns, (str, bytes)):
        raise ColumnDescriptorError("columns must be a sequence of Column")
    seen: set[str] = set()
    out: List[Column] = []
    for idx, column in enumerate(columns):
        if not isinstance(column, Column):
            raise ColumnDescriptorError(f"column #{idx} is {type(column).__name__}, not Column")
        if not isinstance(column.key, str) or not column.key:
            raise ColumnDescriptorError(f"column #{idx} has an empty key")
        if column.key in seen:
            raise ColumnDescriptorError(f"duplicate column key {column.key!r}")
        if not callable(column.render_cell):
            raise ColumnDescriptorError(f"column {column.key!r} render_cell is not callable")
        seen.add(column.key)
        out.append(column)
    return out


def process(
    records: Iterable[Any],
    columns: Sequence[Column],
    state: ProcessingState,
    page_size: Optional[int] = None,
    *,
    searchable: bool = True,
    diagnostics: Optional[DiagnosticSink] = None,
    accessor: Optional[Accessor] = None,
) -> ProcessedView:
    """Run the full pipeline and return a read-only ``ProcessedView``.

    Any failure outside the per-record guards yields a degraded view holding
    the unprocessed records. Input that cannot be iterated at all degrades
    to an empty view.
    """
    source: tuple = ()
    try:
        source = tuple(records)
        cols = validate_columns(columns)
        resolver = ValueResolver(accessor=accessor, diagnostics=diagnostics)
        engine = FilterEngine(resolver=resolver, diagnostics=diagnostics)

        rows = engine.apply(source, state, cols, searchable=searchable)
        sort = state.sort
        if sort.active:
            column = next((c for c in cols if c.key == sort.column_key), None)
            if column is not None and column.is_sortable:
                rows = sort_records(
                    rows, column, sort.direction, resolver=resolver, diagnostics=diagnostics
                )
        page = paginate(rows, state.page, page_size)
        return ProcessedView(
            visible_records=page.page_records,
            total_filtered_count=page.total_count,
            total_pages=page.total_pages,
            page=page.page,
            page_size=page_size if page_size and page_size > 0 else None,
            sort=sort,
        )
    except Exception as exc:  # noqa: BLE001
        logger.warning("table pipeline failed, showing unprocessed records: %s", exc)
        report(diagnostics, DiagnosticEvent.from_exception(PIPELINE, exc, strategy="process"))
        sort = getattr(state, "sort", None)
        if not isinstance(sort, SortState):
            sort = SortState()
        return ProcessedView(
            visible_records=source,
            total_filtered_count=len(source),
            total_pages=1,
            page=1,
            page_size=None,
            sort=sort,
            degraded=True,
        )
