"""Result set pagination."""

from __future__ import annotations

import math
from typing import Any, Optional, Sequence

from tablekit.models import PageResult

__all__ = ["total_pages", "clamp_page_number", "paginate"]


def total_pages(total_count: int, page_size: Optional[int]) -> int:
    if not page_size or page_size <= 0:
        return 1
    return max(1, math.ceil(total_count / page_size))


def clamp_page_number(page: int, pages: int) -> int:
    return min(max(1, int(page)), max(1, pages))


def paginate(records: Sequence[Any], page: int, page_size: Optional[int]) -> PageResult:
    """Slice ``records`` to one page; ``page`` is clamped into range.

    A missing or non-positive ``page_size`` disables paging and returns the
    whole collection as page 1.
    """
    count = len(records)
    if not page_size or page_size <= 0:
        return PageResult(page_records=tuple(records), total_pages=1, total_count=count, page=1)
    pages = total_pages(count, page_size)
    current = clamp_page_number(page, pages)
    start = (current - 1) * page_size
    return PageResult(
        page_records=tuple(records[start : start + page_size]),
        total_pages=pages,
        total_count=count,
        page=current,
    )
