"""Table engine services.

Leaves first: diagnostics, value resolution and normalization, then the
sort / filter / paginate stages and the pipeline composing them.
"""

from .diagnostics import DiagnosticEvent, DiagnosticsCollector  # noqa: F401
from .pipeline import process, validate_columns  # noqa: F401
from .value_normalizer import normalize  # noqa: F401
from .value_resolver import ValueResolver, resolve  # noqa: F401

__all__ = [
    "DiagnosticEvent",
    "DiagnosticsCollector",
    "process",
    "validate_columns",
    "normalize",
    "ValueResolver",
    "resolve",
]
