"""
Query shapes the API needs from the relational store, and the Postgres
implementation that runs them.

The aggregation code never writes SQL. It describes a read as a `Select`
(collection, columns, predicate tree, ordering, limit/offset) and hands it to
a `Store`. `PostgresStore` compiles that into one parameterised statement and
runs it through the asyncpg pool; tests swap in an in-memory store that
evaluates the same objects.

Two shapes cover every endpoint:
- select with filter, order and limit/offset (plus its count)
- select where <key> in (...)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, Union

from fastapi import Depends

from auth import dependencies as auth_dependencies

from . import db

logger = logging.getLogger(__name__)

COMPARISON_OPERATORS = ("=", "!=", "<", ">", "<=", ">=")


@dataclass(frozen=True)
class Compare:
    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in COMPARISON_OPERATORS:
            raise ValueError(f"Unsupported operator: {self.op}")


@dataclass(frozen=True)
class In:
    field: str
    values: tuple[Any, ...]


@dataclass(frozen=True)
class And:
    parts: tuple["Predicate", ...]


@dataclass(frozen=True)
class Or:
    parts: tuple["Predicate", ...]


Predicate = Union[Compare, In, And, Or]


def eq(name: str, value: Any) -> Compare:
    return Compare(name, "=", value)


def neq(name: str, value: Any) -> Compare:
    return Compare(name, "!=", value)


def in_(name: str, values: Any) -> In:
    return In(name, tuple(values))


def all_of(*parts: Predicate | None) -> Predicate | None:
    present = tuple(p for p in parts if p is not None)
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return And(present)


@dataclass(frozen=True)
class Order:
    field: str
    descending: bool = False


@dataclass(frozen=True)
class Select:
    collection: str
    columns: tuple[str, ...] = ("*",)
    where: Predicate | None = None
    order: tuple[Order, ...] = ()
    limit: int | None = None
    offset: int | None = None


class Store(Protocol):
    async def select(self, query: Select) -> list[dict[str, Any]]: ...

    async def count(self, query: Select) -> int: ...


def quote_ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


@dataclass
class _Params:
    values: list[Any] = field(default_factory=list)

    def add(self, value: Any) -> str:
        self.values.append(value)
        return f"${len(self.values)}"


def _compile_predicate(pred: Predicate, params: _Params) -> str:
    if isinstance(pred, Compare):
        return f"{quote_ident(pred.field)} {pred.op} {params.add(pred.value)}"
    if isinstance(pred, In):
        if not pred.values:
            return "FALSE"
        return f"{quote_ident(pred.field)} = ANY({params.add(list(pred.values))})"
    if isinstance(pred, And):
        return "(" + " AND ".join(_compile_predicate(p, params) for p in pred.parts) + ")"
    if isinstance(pred, Or):
        return "(" + " OR ".join(_compile_predicate(p, params) for p in pred.parts) + ")"
    raise TypeError(f"Unsupported predicate: {pred!r}")


def _from_where(query: Select, params: _Params) -> str:
    sql = f"FROM {quote_ident(query.collection)}"
    if query.where is not None:
        sql += f" WHERE {_compile_predicate(query.where, params)}"
    return sql


def compile_select(query: Select) -> tuple[str, list[Any]]:
    """
    Render a `Select` as SQL with $n placeholders and its argument list.
    """
    params = _Params()
    if query.columns == ("*",):
        columns = "*"
    else:
        columns = ", ".join(quote_ident(c) for c in query.columns)
    sql = f"SELECT {columns} {_from_where(query, params)}"
    if query.order:
        parts = [f"{quote_ident(o.field)} {'DESC' if o.descending else 'ASC'}" for o in query.order]
        sql += " ORDER BY " + ", ".join(parts)
    if query.limit is not None:
        sql += f" LIMIT {params.add(int(query.limit))}"
    if query.offset:
        sql += f" OFFSET {params.add(int(query.offset))}"
    return sql, params.values


def compile_count(query: Select) -> tuple[str, list[Any]]:
    params = _Params()
    sql = f"SELECT count(*) {_from_where(query, params)}"
    return sql, params.values


class PostgresStore:
    """
    Runs `Select`s against the asyncpg pool under the caller's JWT claims.
    """

    def __init__(self, claims: dict[str, Any] | None = None) -> None:
        self.claims = claims

    async def select(self, query: Select) -> list[dict[str, Any]]:
        sql, args = compile_select(query)
        logger.debug("store_select collection=%s sql=%s", query.collection, sql)
        return await db.fetch_all(sql, *args, claims=self.claims)

    async def count(self, query: Select) -> int:
        sql, args = compile_count(query)
        logger.debug("store_count collection=%s sql=%s", query.collection, sql)
        value = await db.fetch_value(sql, *args, claims=self.claims)
        return int(value or 0)


async def get_store(claims: dict = Depends(auth_dependencies.get_claims)) -> Store:
    return PostgresStore(claims)
