"""
Page assembly.

Items are built in fetch order from the primary row, its resolved references
and its translation bundle, in that order. Row order is never changed: the
next cursor is the sort key of the last fetched row, so reordering here
would skip or repeat rows on the following page.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Mapping

from . import cursor
from .cursor import SortKey
from .fetcher import FetchResult
from .references import References
from .translations import Bundle

Shape = Callable[[dict[str, Any], References, "Bundle | None"], dict[str, Any]]


def assemble(
    rows: list[dict[str, Any]],
    shape: Shape,
    *,
    references: References | None = None,
    translations: Mapping[Any, Bundle] | None = None,
    key: str = "id",
) -> list[dict[str, Any]]:
    refs = references or References()
    bundles = translations or {}
    return [shape(row, refs, bundles.get(row.get(key))) for row in rows]


def next_cursor(result: FetchResult, sort_key: SortKey) -> str | None:
    # A full page is taken to mean "maybe more"; an exact multiple of the
    # limit therefore ends with one empty page.
    if not result.used_full_limit or not result.rows:
        return None
    return cursor.encode(sort_key, sort_key.value_of(result.rows[-1]))


def cursor_page(result: FetchResult, items: list[dict[str, Any]], *, sort_key: SortKey) -> dict[str, Any]:
    return {"data": items, "nextCursor": next_cursor(result, sort_key)}


def assemble_cursor_page(
    result: FetchResult,
    shape: Shape,
    *,
    sort_key: SortKey,
    references: References | None = None,
    translations: Mapping[Any, Bundle] | None = None,
    key: str = "id",
) -> dict[str, Any]:
    items = assemble(result.rows, shape, references=references, translations=translations, key=key)
    return cursor_page(result, items, sort_key=sort_key)


def empty_cursor_page() -> dict[str, Any]:
    return {"data": [], "nextCursor": None}


def offset_page(items: list[dict[str, Any]], *, page: int, page_size: int, total: int) -> dict[str, Any]:
    total_pages = math.ceil(total / page_size) if page_size > 0 else 0
    return {
        "data": items,
        "pagination": {
            "page": page,
            "limit": page_size,
            "total": total,
            "totalPages": total_pages,
            "hasNext": page < total_pages,
            "hasPrev": page > 1,
        },
    }
