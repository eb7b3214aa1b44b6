"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`).

Every read runs in a short transaction that first publishes the caller's JWT
claims (`request.jwt.claims`) and, for allowed roles, switches role with
`SET LOCAL ROLE`, so row-level security policies in the database apply to the
caller rather than to the pool's login role.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import json
import os
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from . import config

_pool: asyncpg.Pool | None = None


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    _pool = await asyncpg.create_pool(
        dsn=database_url(),
        min_size=config.db_pool_min_size(),
        max_size=config.db_pool_max_size(),
        command_timeout=config.db_command_timeout_s(),
    )


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


def _quote_role(role: str) -> str:
    return '"' + role.replace('"', '""') + '"'


async def _apply_claims(conn: asyncpg.Connection, claims: dict[str, Any] | None) -> None:
    if not claims:
        return None
    await conn.execute(
        "SELECT set_config('request.jwt.claims', $1, true)",
        json.dumps(claims, default=str),
    )
    role = str(claims.get("role") or "").strip()
    if role and role in config.db_allowed_roles():
        # Roles cannot be bound as parameters; only allow-listed names get here.
        await conn.execute(f"SET LOCAL ROLE {_quote_role(role)}")


async def fetch_all(sql: str, *args: Any, claims: dict[str, Any] | None = None) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    async with pool().acquire() as conn:
        async with conn.transaction(readonly=True):
            await _apply_claims(conn, claims)
            rows = await conn.fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


async def fetch_value(sql: str, *args: Any, claims: dict[str, Any] | None = None) -> Any:
    """
    Run a query and return the first column of the first row (or None).
    """
    async with pool().acquire() as conn:
        async with conn.transaction(readonly=True):
            await _apply_claims(conn, claims)
            return await conn.fetchval(sql, *args)
