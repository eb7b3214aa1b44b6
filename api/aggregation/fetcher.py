"""
Primary-row reads: keyset pages, offset pages and single-row lookups.

No retries happen here; store errors propagate unchanged so the request's
error handler can classify them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from core.store import And, Compare, In, Or, Order, Predicate, Select, Store, all_of

from .cursor import SortKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    rows: list[dict[str, Any]]
    used_full_limit: bool


def keyset_predicate(key: SortKey, after: tuple[Any, ...]) -> Predicate:
    """
    Strict "comes after" predicate for the row whose sort-key value is `after`.

    Descending `(A, B)`: A < a OR (A = a AND B < b). Ascending mirrors it.
    """
    op = "<" if key.descending else ">"
    if len(key.fields) == 1:
        return Compare(key.fields[0].name, op, after[0])
    first, second = key.fields
    return Or(
        (
            Compare(first.name, op, after[0]),
            And((Compare(first.name, "=", after[0]), Compare(second.name, op, after[1]))),
        )
    )


def _order_for(key: SortKey) -> tuple[Order, ...]:
    return tuple(Order(name, descending=key.descending) for name in key.names)


def _with_sort_columns(columns: tuple[str, ...], key: SortKey) -> tuple[str, ...]:
    if columns == ("*",):
        return columns
    missing = tuple(name for name in key.names if name not in columns)
    return columns + missing


async def fetch_page(
    store: Store,
    collection: str,
    *,
    sort_key: SortKey,
    limit: int,
    after: tuple[Any, ...] | None = None,
    where: Predicate | None = None,
    columns: tuple[str, ...] = ("*",),
) -> FetchResult:
    """
    Fetch at most `limit` rows ordered by `sort_key`, strictly after `after`.

    Caller filters are applied first; the keyset predicate narrows them.
    """
    keyset = keyset_predicate(sort_key, after) if after is not None else None
    query = Select(
        collection=collection,
        columns=_with_sort_columns(columns, sort_key),
        where=all_of(where, keyset),
        order=_order_for(sort_key),
        limit=limit,
    )
    rows = await store.select(query)
    logger.debug("page_fetched collection=%s rows=%s limit=%s", collection, len(rows), limit)
    return FetchResult(rows=rows, used_full_limit=len(rows) == limit)


async def fetch_offset_page(
    store: Store,
    collection: str,
    *,
    order: tuple[Order, ...],
    page: int,
    page_size: int,
    where: Predicate | None = None,
    columns: tuple[str, ...] = ("*",),
) -> tuple[list[dict[str, Any]], int]:
    """
    Fetch one numbered page plus the total row count for the same filter.
    """
    base = Select(collection=collection, columns=columns, where=where)
    total = await store.count(base)
    rows = await store.select(
        Select(
            collection=collection,
            columns=columns,
            where=where,
            order=order,
            limit=page_size,
            offset=(page - 1) * page_size,
        )
    )
    return rows, total


async def fetch_one(
    store: Store,
    collection: str,
    *,
    where: Predicate | None = None,
    columns: tuple[str, ...] = ("*",),
    order: tuple[Order, ...] = (),
) -> dict[str, Any] | None:
    rows = await store.select(
        Select(collection=collection, columns=columns, where=where, order=order, limit=1)
    )
    return rows[0] if rows else None


async def fetch_all(
    store: Store,
    collection: str,
    *,
    where: Predicate | None = None,
    columns: tuple[str, ...] = ("*",),
    order: tuple[Order, ...] = (),
) -> list[dict[str, Any]]:
    return await store.select(Select(collection=collection, columns=columns, where=where, order=order))


async def fetch_in(
    store: Store,
    collection: str,
    *,
    key: str,
    values: list[Any],
    columns: tuple[str, ...] = ("*",),
    order: tuple[Order, ...] = (),
) -> list[dict[str, Any]]:
    """
    One `key in (...)` read. An empty id list never reaches the store.
    """
    if not values:
        return []
    return await store.select(
        Select(collection=collection, columns=columns, where=In(key, tuple(values)), order=order)
    )
