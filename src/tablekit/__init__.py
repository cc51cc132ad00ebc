"""tablekit public API.

Generic sort / filter / search / paginate engine for list views over
heterogeneous records. Kept free of Qt imports; the optional Qt adapter
lives in ``tablekit.views``.
"""

from .models import (  # noqa: F401
    Column,
    ColumnDescriptorError,
    Container,
    FilterKind,
    FilterOption,
    ProcessedView,
    ProcessingState,
    SortDirection,
    SortState,
    TextLeaf,
)
from .services.diagnostics import DiagnosticEvent, DiagnosticsCollector  # noqa: F401
from .services.pipeline import process  # noqa: F401
from .services.table_state import (  # noqa: F401
    clamp_page,
    clear_filters,
    initial_state,
    on_column_filter_change,
    on_page_change,
    on_range_filter_change,
    on_search_change,
    on_sort_toggle,
)
from .viewmodels.data_table_viewmodel import DataTableViewModel  # noqa: F401

__all__ = [
    "Column",
    "ColumnDescriptorError",
    "Container",
    "FilterKind",
    "FilterOption",
    "ProcessedView",
    "ProcessingState",
    "SortDirection",
    "SortState",
    "TextLeaf",
    "DiagnosticEvent",
    "DiagnosticsCollector",
    "process",
    "clamp_page",
    "clear_filters",
    "initial_state",
    "on_column_filter_change",
    "on_page_change",
    "on_range_filter_change",
    "on_search_change",
    "on_sort_toggle",
    "DataTableViewModel",
]
