"""Column value resolution.

Records come in arbitrary shapes and a column's value is only guaranteed to
be reachable through its ``render_cell`` function. ``ValueResolver`` tries an
ordered chain of strategies and returns the first value found:

 1. ``override``      - column.sort_value / column.filter_value for the purpose
 2. ``direct``        - ``column.key`` as a property of the record
 3. ``dotted_path``   - ``a.b[0].c`` walk when the key contains a dot
 4. ``rendered``      - ``render_cell(record, 0)``, flattening display trees
 5. ``key_variants``  - snake_case, underscore-stripped, Name/Value/Text suffixes

Each strategy is a plain function ``(record, column, context) -> value`` that
returns ``MISSING`` when it has nothing to offer. Exceptions raised inside a
strategy are reported to the diagnostic sink and the chain moves on, so
``resolve`` itself never raises.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from numbers import Number
from typing import Any, Callable, List, Mapping, Optional, Protocol, Sequence, Tuple

from tablekit.config.settings import KEY_VARIANT_SUFFIXES
from tablekit.models import Column, Container, TextLeaf
from tablekit.services.diagnostics import EXTRACTION, DiagnosticEvent, DiagnosticSink, report

__all__ = [
    "MISSING",
    "SORT",
    "FILTER",
    "Accessor",
    "DefaultAccessor",
    "ResolveContext",
    "ValueResolver",
    "flatten_display_text",
    "key_variants",
    "resolve",
]

SORT = "sort"
FILTER = "filter"


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

_BRACKET_SEGMENT_RE = re.compile(r"^([^\[\]]+)\[(\d+)\]$")
_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])([A-Z])")


class Accessor(Protocol):  # pragma: no cover - structural
    def try_get(self, record: Any, name: str) -> Any: ...


class DefaultAccessor:
    """Property lookup over mappings, sequences and plain objects.

    Mappings are looked up by key, sequences by integer index (when ``name``
    is digits), everything else by attribute. Returns ``MISSING`` when
    absent; callables found on objects (methods) do not count as values.
    """

    def try_get(self, record: Any, name: str) -> Any:
        if record is None:
            return MISSING
        if isinstance(record, Mapping):
            return record[name] if name in record else MISSING
        if isinstance(record, Sequence) and not isinstance(record, (str, bytes)):
            if name.isdigit():
                idx = int(name)
                return record[idx] if idx < len(record) else MISSING
            return MISSING
        if not name.isidentifier():
            return MISSING
        value = getattr(record, name, MISSING)
        if callable(value) and not isinstance(value, type):
            return MISSING
        return value


@dataclass
class ResolveContext:
    purpose: str
    accessor: Accessor


Strategy = Callable[[Any, Column, ResolveContext], Any]


# Display tree flattening ---------------------------------------------------


def _is_primitive(value: Any) -> bool:
    return isinstance(value, (str, Number, date))


def _collect_text(node: Any, out: List[str]) -> None:
    if node is None or isinstance(node, bool):
        return
    if isinstance(node, TextLeaf):
        node = node.text
    if isinstance(node, str):
        text = node.strip()
        if text:
            out.append(text)
        return
    if _is_primitive(node):
        out.append(str(node))
        return
    if isinstance(node, Container):
        children: Any = node.children
    elif isinstance(node, (list, tuple)):
        children = node
    else:
        return
    for child in children:
        _collect_text(child, out)


def flatten_display_text(node: Any) -> str:
    """Concatenate the text leaves of a display tree with single spaces."""
    parts: List[str] = []
    _collect_text(node, parts)
    return " ".join(parts)


# Key variants --------------------------------------------------------------


def key_variants(key: str) -> Tuple[str, ...]:
    """Alternative property names for ``key`` in lookup order."""
    snake = _CAMEL_BOUNDARY_RE.sub(r"_\1", key).lower()
    stripped = key.replace("_", "")
    candidates = [snake, stripped] + [f"{key}{suffix}" for suffix in KEY_VARIANT_SUFFIXES]
    out: List[str] = []
    for cand in candidates:
        if cand and cand != key and cand not in out:
            out.append(cand)
    return tuple(out)


# Strategies ----------------------------------------------------------------


def _override(record: Any, column: Column, ctx: ResolveContext) -> Any:
    func = column.sort_value if ctx.purpose == SORT else column.filter_value
    if func is None:
        return MISSING
    return func(record)


def _direct(record: Any, column: Column, ctx: ResolveContext) -> Any:
    value = ctx.accessor.try_get(record, column.key)
    return MISSING if value is None else value


def _dotted_path(record: Any, column: Column, ctx: ResolveContext) -> Any:
    if "." not in column.key:
        return MISSING
    current = record
    for segment in column.key.split("."):
        m = _BRACKET_SEGMENT_RE.match(segment)
        if m:
            current = ctx.accessor.try_get(current, m.group(1))
            if current is MISSING or current is None:
                return MISSING
            current = ctx.accessor.try_get(current, m.group(2))
        else:
            current = ctx.accessor.try_get(current, segment)
        if current is MISSING or current is None:
            return MISSING
    return current


def _rendered(record: Any, column: Column, ctx: ResolveContext) -> Any:
    rendered = column.render_cell(record, 0)
    if rendered is None:
        return MISSING
    if _is_primitive(rendered):
        if isinstance(rendered, str) and not rendered.strip():
            return MISSING
        return rendered
    text = flatten_display_text(rendered)
    return text if text else MISSING


def _key_variants(record: Any, column: Column, ctx: ResolveContext) -> Any:
    for name in key_variants(column.key):
        value = ctx.accessor.try_get(record, name)
        if value is not MISSING and value is not None:
            return value
    return MISSING


DEFAULT_STRATEGIES: Tuple[Tuple[str, Strategy], ...] = (
    ("override", _override),
    ("direct", _direct),
    ("dotted_path", _dotted_path),
    ("rendered", _rendered),
    ("key_variants", _key_variants),
)


class ValueResolver:
    """Runs the strategy chain for one (record, column, purpose)."""

    def __init__(
        self,
        *,
        accessor: Optional[Accessor] = None,
        diagnostics: Optional[DiagnosticSink] = None,
        strategies: Sequence[Tuple[str, Strategy]] = DEFAULT_STRATEGIES,
    ) -> None:
        self._accessor = accessor or DefaultAccessor()
        self._diagnostics = diagnostics
        self._strategies = tuple(strategies)

    @property
    def strategy_names(self) -> List[str]:
        return [name for name, _ in self._strategies]

    def resolve(self, record: Any, column: Column, purpose: str = SORT) -> Any:
        """Return the raw value for ``column`` or None when nothing matched."""
        ctx = ResolveContext(purpose=purpose, accessor=self._accessor)
        for name, strategy in self._strategies:
            try:
                value = strategy(record, column, ctx)
            except Exception as exc:  # noqa: BLE001
                report(
                    self._diagnostics,
                    DiagnosticEvent.from_exception(
                        EXTRACTION, exc, column_key=column.key, strategy=name
                    ),
                )
                continue
            if value is not MISSING:
                return value
        return None


def resolve(
    record: Any,
    column: Column,
    purpose: str = SORT,
    *,
    diagnostics: Optional[DiagnosticSink] = None,
) -> Any:
    return ValueResolver(diagnostics=diagnostics).resolve(record, column, purpose)
