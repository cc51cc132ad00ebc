"""Diagnostics sink for recoverable engine failures.

The engine degrades instead of raising: a value that cannot be extracted
becomes "missing", a comparison that blows up counts as equal, a broken
pipeline returns the raw records. Each of those recoveries is reported as a
``DiagnosticEvent`` to an optional sink (any callable) so callers and tests
can observe them without losing the resilience contract.

``DiagnosticsCollector`` is the stock sink:
 - Ring buffer of recent events (capacity bound)
 - Per-kind counters
 - Grouping of repeated events by (kind, column, strategy)
"""

from __future__ import annotations

import logging
from collections import Counter, deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, List, Optional

from tablekit.config.settings import DIAGNOSTICS_CAPACITY

__all__ = [
    "EXTRACTION",
    "COMPARISON",
    "FILTER",
    "PIPELINE",
    "DiagnosticEvent",
    "DiagnosticGroup",
    "DiagnosticSink",
    "DiagnosticsCollector",
    "report",
]

logger = logging.getLogger(__name__)

EXTRACTION = "extraction"
COMPARISON = "comparison"
FILTER = "filter"
PIPELINE = "pipeline"


@dataclass(frozen=True)
class DiagnosticEvent:
    """One recovered failure.

    Attributes
    ----------
    kind: str
        One of ``extraction``, ``comparison``, ``filter``, ``pipeline``.
    column_key: str | None
        Column being processed, when known.
    strategy: str | None
        Resolver strategy or pipeline stage that failed.
    message: str
        ``str()`` of the underlying exception.
    exc_type: str
        Exception class name.
    """

    kind: str
    column_key: Optional[str]
    strategy: Optional[str]
    message: str
    exc_type: str

    @classmethod
    def from_exception(
        cls,
        kind: str,
        exc: BaseException,
        *,
        column_key: Optional[str] = None,
        strategy: Optional[str] = None,
    ) -> "DiagnosticEvent":
        return cls(
            kind=kind,
            column_key=column_key,
            strategy=strategy,
            message=str(exc),
            exc_type=type(exc).__name__,
        )

    @property
    def group_key(self) -> str:
        return f"{self.kind}|{self.column_key or '-'}|{self.strategy or '-'}"


DiagnosticSink = Callable[[DiagnosticEvent], None]


@dataclass
class DiagnosticGroup:
    key: str
    first: DiagnosticEvent
    count: int


def report(sink: Optional[DiagnosticSink], event: DiagnosticEvent) -> None:
    """Deliver ``event`` to ``sink``; a sink that raises is ignored."""
    if sink is None:
        return
    try:
        sink(event)
    except Exception:  # noqa: BLE001
        logger.debug("diagnostic sink raised for %s", event.group_key, exc_info=True)


class DiagnosticsCollector:
    """Callable sink retaining recent events.

    Usage:
        diag = DiagnosticsCollector()
        view = process(records, columns, state, diagnostics=diag)
        assert diag.count(EXTRACTION) == 0
    """

    def __init__(self, capacity: int = DIAGNOSTICS_CAPACITY) -> None:
        self._capacity = max(1, capacity)
        self._events: Deque[DiagnosticEvent] = deque(maxlen=self._capacity)
        self._counts: Counter[str] = Counter()
        self._groups: Dict[str, DiagnosticGroup] = {}
        self._group_order: List[str] = []

    def __call__(self, event: DiagnosticEvent) -> None:
        self._events.append(event)
        self._counts[event.kind] += 1
        group = self._groups.get(event.group_key)
        if group is None:
            self._groups[event.group_key] = DiagnosticGroup(key=event.group_key, first=event, count=1)
            self._group_order.append(event.group_key)
        else:
            group.count += 1

    # Introspection -----------------------------------------------------
    def recent(self, limit: Optional[int] = None) -> List[DiagnosticEvent]:
        data = list(self._events)
        return data[-limit:] if limit is not None else data

    def count(self, kind: Optional[str] = None) -> int:
        """Total events seen (all kinds when ``kind`` is None).

        Counters are not bounded by the ring buffer capacity.
        """
        if kind is None:
            return sum(self._counts.values())
        return self._counts.get(kind, 0)

    def groups(self) -> List[DiagnosticGroup]:
        """Aggregated groups in first-seen order."""
        return [self._groups[k] for k in self._group_order]

    def clear(self) -> None:
        self._events.clear()
        self._counts.clear()
        self._groups.clear()
        self._group_order.clear()
