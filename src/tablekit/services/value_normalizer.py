"""Value normalization.

Maps loosely typed raw values (strings, numbers, dates, booleans, nested
mappings) into a single comparable domain of ``str | int | float`` so that
sorting and filtering agree on what "equal" means.

Rules, in order:
 - None -> "" (treated as missing)
 - bool -> 1 / 0
 - numbers -> unchanged
 - datetime / date and ISO-like date strings -> epoch milliseconds (naive = UTC)
 - numeric-looking strings -> parsed number
 - mappings / dataclasses -> name, title, label or value field, else
   lowercase sorted-key JSON
 - anything else -> lowercase ``str()``
"""

from __future__ import annotations

import dataclasses
import json
import math
import re
from datetime import date, datetime, timezone
from numbers import Number
from typing import Any, Mapping, Optional, Union

__all__ = [
    "Comparable",
    "normalize",
    "parse_iso_date",
    "parse_number",
    "to_text",
    "display_text",
    "is_missing",
]

Comparable = Union[str, int, float]

_ISO_DATE_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}"
    r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d{1,6})?)?(?:Z|[+-]\d{2}:?\d{2})?)?$"
)
_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]")
_OBJECT_TEXT_FIELDS = ("name", "title", "label")


def is_missing(value: Any) -> bool:
    return value is None or value == ""


def _epoch_ms(value: Union[date, datetime]) -> int:
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(round(value.timestamp() * 1000))


def parse_iso_date(text: str) -> Optional[int]:
    """Return epoch milliseconds for an ISO-like date string, else None."""
    candidate = text.strip()
    if not _ISO_DATE_RE.match(candidate):
        return None
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        return _epoch_ms(datetime.fromisoformat(candidate))
    except ValueError:
        return None


def parse_number(text: str) -> Optional[float]:
    """Parse a numeric-looking string ("1,200.50", "$30", "-4").

    A string is numeric-looking when it holds at least one digit and no
    letters; everything except digits, ``.`` and ``-`` is then stripped.
    """
    if not any(ch.isdigit() for ch in text) or any(ch.isalpha() for ch in text):
        return None
    stripped = _NON_NUMERIC_RE.sub("", text)
    try:
        number = float(stripped)
    except ValueError:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _normalize_object(obj: Mapping[str, Any]) -> Comparable:
    for name in _OBJECT_TEXT_FIELDS:
        val = obj.get(name)
        if val is not None:
            return str(val).lower()
    if obj.get("value") is not None:
        return normalize(obj["value"])
    try:
        return json.dumps(obj, sort_keys=True, default=str).lower()
    except (TypeError, ValueError):
        # Non-string keys that cannot be sorted
        return str(obj).lower()


def normalize(value: Any) -> Comparable:
    if value is None:
        return ""
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, Number) and not isinstance(value, complex):
        return value  # type: ignore[return-value]
    if isinstance(value, (datetime, date)):
        return _epoch_ms(value)
    if isinstance(value, str):
        ts = parse_iso_date(value)
        if ts is not None:
            return ts
        number = parse_number(value)
        if number is not None:
            return number
        return value.lower()
    if isinstance(value, Mapping):
        return _normalize_object(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _normalize_object(dataclasses.asdict(value))
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value).lower()
    return str(value).lower()


def to_text(value: Comparable) -> str:
    """Stringify a normalized value; integral floats drop the ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def display_text(value: Any) -> str:
    """Stringify a raw value roughly the way it reads on screen."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, float):
        return to_text(value)
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping) or (dataclasses.is_dataclass(value) and not isinstance(value, type)):
        return to_text(normalize(value))
    return str(value)
