"""
Batched foreign-key resolution for one page of rows.

For each `ReferenceSpec` the distinct keys present on the page are fetched in
a single `IN` read, never one read per row. Nested specs are resolved from
the records their parent returned, again one batch per level. Specs at the
same level run concurrently.

A secondary read that fails is logged and treated as "nothing found": a
broken reference (say, a deleted team) must not hide the primary content.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Iterable

from core.store import Order, Store

from . import fetcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferenceSpec:
    name: str
    field: str
    collection: str
    target: str = "id"
    columns: tuple[str, ...] = ("*",)
    many: bool = False
    order: tuple[Order, ...] = ()
    nested: tuple["ReferenceSpec", ...] = ()


class References:
    """
    Lookup tables built for one page: spec name -> (key -> record).
    """

    def __init__(self, tables: dict[str, dict[Any, dict[str, Any]]] | None = None) -> None:
        self.tables = tables or {}

    def table(self, name: str) -> dict[Any, dict[str, Any]]:
        return self.tables.get(name, {})

    def get(self, name: str, key: Any) -> dict[str, Any] | None:
        if key is None:
            return None
        return self.table(name).get(key)

    def get_many(self, name: str, keys: Iterable[Any] | None) -> list[dict[str, Any]]:
        table = self.table(name)
        return [table[k] for k in (keys or []) if k in table]

    def value(self, name: str, key: Any, column: str, default: Any = None) -> Any:
        record = self.get(name, key)
        if record is None:
            return default
        return record.get(column, default)


def distinct_keys(rows: Iterable[dict[str, Any]], field: str, *, many: bool = False) -> list[Any]:
    """
    Distinct non-null key values in first-seen order.
    """
    seen: dict[Any, None] = {}
    for row in rows:
        raw = row.get(field)
        values = (raw or []) if many else [raw]
        for value in values:
            if value is not None:
                seen.setdefault(value, None)
    return list(seen)


def _columns_for(spec: ReferenceSpec) -> tuple[str, ...]:
    if spec.columns == ("*",):
        return spec.columns
    needed = [spec.target] + [child.field for child in spec.nested]
    return spec.columns + tuple(c for c in dict.fromkeys(needed) if c not in spec.columns)


async def _fetch_table(store: Store, spec: ReferenceSpec, keys: list[Any]) -> dict[Any, dict[str, Any]]:
    if not keys:
        return {}
    try:
        records = await fetcher.fetch_in(
            store,
            spec.collection,
            key=spec.target,
            values=keys,
            columns=_columns_for(spec),
            order=spec.order,
        )
    except Exception:
        logger.warning(
            "reference_fetch_failed name=%s collection=%s ids=%s",
            spec.name,
            spec.collection,
            len(keys),
            exc_info=True,
        )
        return {}

    table: dict[Any, dict[str, Any]] = {}
    for record in records:
        # Several records can share a non-primary target key; the first one wins.
        table.setdefault(record.get(spec.target), record)
    missing = len(keys) - len(table)
    if missing:
        logger.debug("reference_keys_missing name=%s missing=%s", spec.name, missing)
    return table


async def _resolve(store: Store, rows: list[dict[str, Any]], spec: ReferenceSpec) -> dict[str, dict]:
    keys = distinct_keys(rows, spec.field, many=spec.many)
    table = await _fetch_table(store, spec, keys)
    tables = {spec.name: table}
    if spec.nested:
        parents = list(table.values())
        children = await asyncio.gather(*(_resolve(store, parents, child) for child in spec.nested))
        for child_tables in children:
            tables.update(child_tables)
    return tables


async def resolve_references(
    store: Store,
    rows: list[dict[str, Any]],
    specs: Iterable[ReferenceSpec],
) -> References:
    """
    Build every lookup table the page needs, fanning out across specs.
    """
    results = await asyncio.gather(*(_resolve(store, rows, spec) for spec in specs))
    tables: dict[str, dict] = {}
    for result in results:
        tables.update(result)
    return References(tables)
