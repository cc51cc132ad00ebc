"""Table engine models.

Column descriptors, processing state and processed view containers shared by
the resolver, filter, sort and pagination services. Records themselves are
opaque; nothing here assumes a fixed record shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple, Union

from tablekit.config.settings import ACTIONS_COLUMN_KEY

__all__ = [
    "FilterKind",
    "SortDirection",
    "FilterOption",
    "TextLeaf",
    "Container",
    "DisplayNode",
    "Column",
    "ColumnDescriptorError",
    "SortState",
    "ProcessingState",
    "PageResult",
    "ProcessedView",
]

RenderFunc = Callable[[Any, int], Any]
ExtractFunc = Callable[[Any], Any]
RangeBounds = Tuple[Optional[float], Optional[float]]


class FilterKind(str, Enum):
    TEXT = "text"
    SELECT = "select"
    DATE = "date"
    NUMBER = "number"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ColumnDescriptorError(ValueError):
    """Raised when a column list cannot drive the pipeline (caller bug)."""


@dataclass(frozen=True)
class FilterOption:
    value: str
    label: str


# Display tree --------------------------------------------------------------


@dataclass(frozen=True)
class TextLeaf:
    text: str


@dataclass(frozen=True, init=False)
class Container:
    children: Tuple[Any, ...] = ()

    def __init__(self, *children: Any):
        # Accept Container(a, b) as well as Container([a, b])
        if len(children) == 1 and isinstance(children[0], (list, tuple)):
            children = tuple(children[0])
        object.__setattr__(self, "children", tuple(children))


DisplayNode = Union[TextLeaf, Container]


# Columns -------------------------------------------------------------------


@dataclass(frozen=True)
class Column:
    """Describes one table column.

    ``render_cell`` is the only guaranteed way to obtain a value; ``key`` may
    or may not name a property on the record. ``sortable`` / ``filterable``
    default to True, except for the reserved actions column which is never
    either.
    """

    key: str
    header: Any
    render_cell: RenderFunc
    sortable: Optional[bool] = None
    filterable: Optional[bool] = None
    filter_kind: FilterKind = FilterKind.TEXT
    filter_options: Optional[Sequence[FilterOption]] = None
    sort_value: Optional[ExtractFunc] = None
    filter_value: Optional[ExtractFunc] = None

    @property
    def is_actions(self) -> bool:
        return self.key == ACTIONS_COLUMN_KEY

    @property
    def is_sortable(self) -> bool:
        if self.is_actions:
            return False
        return True if self.sortable is None else bool(self.sortable)

    @property
    def is_filterable(self) -> bool:
        if self.is_actions:
            return False
        return True if self.filterable is None else bool(self.filterable)


# State ---------------------------------------------------------------------


@dataclass(frozen=True)
class SortState:
    column_key: Optional[str] = None
    direction: SortDirection = SortDirection.ASC

    @property
    def active(self) -> bool:
        return self.column_key is not None


@dataclass(frozen=True)
class ProcessingState:
    """User-driven parameters of the pipeline.

    Instances are never mutated; the ``table_state`` transitions return new
    ones via ``dataclasses.replace``.
    """

    search_term: str = ""
    column_filters: Mapping[str, str] = field(default_factory=dict)
    range_filters: Mapping[str, RangeBounds] = field(default_factory=dict)
    sort: SortState = field(default_factory=SortState)
    page: int = 1

    def active_column_filters(self) -> Dict[str, str]:
        return {k: v for k, v in self.column_filters.items() if v is not None and str(v) != ""}

    def active_range_filters(self) -> Dict[str, RangeBounds]:
        return {
            k: (lo, hi)
            for k, (lo, hi) in self.range_filters.items()
            if lo is not None or hi is not None
        }


# Output --------------------------------------------------------------------


@dataclass(frozen=True)
class PageResult:
    page_records: Tuple[Any, ...]
    total_pages: int
    total_count: int
    page: int


@dataclass(frozen=True)
class ProcessedView:
    visible_records: Tuple[Any, ...]
    total_filtered_count: int
    total_pages: int
    page: int = 1
    page_size: Optional[int] = None
    sort: SortState = field(default_factory=SortState)
    degraded: bool = False  # pipeline fell back to the unprocessed input

    @property
    def is_empty(self) -> bool:
        return self.total_filtered_count == 0
