"""
Request parameter checks shared by endpoints.

All failures are `BadRequest`s naming the parameter.
"""

from __future__ import annotations

from typing import Any

from core.errors import BadRequest, FormatError

from . import cursor
from .cursor import SortKey


def page_limit(raw: int | None, *, default: int, maximum: int, name: str = "limit") -> int:
    """
    Requested page size, clamped to `maximum`. Zero or negative is rejected.
    """
    if raw is None:
        return default
    if raw < 1:
        raise BadRequest(f"Invalid {name} parameter (must be 1-{maximum})")
    return min(raw, maximum)


def page_number(raw: int | None, *, name: str = "page") -> int:
    if raw is None:
        return 1
    if raw < 1:
        raise BadRequest(f"Invalid {name} parameter")
    return raw


def decode_cursor(key: SortKey, token: str | None) -> tuple[Any, ...] | None:
    """
    Sort-key values after which the page starts, or None for the first page.
    """
    if token is None or not token.strip():
        return None
    try:
        return cursor.decode(key, token)
    except FormatError as exc:
        raise BadRequest(str(exc) or "Invalid cursor parameter") from exc


def require(value: str | None, name: str) -> str:
    text = (value or "").strip()
    if not text:
        raise BadRequest(f"Missing required parameter: {name}")
    return text


def require_int(value: str | None, name: str) -> int:
    text = require(value, name)
    try:
        return int(text)
    except ValueError as exc:
        raise BadRequest(f"Invalid parameter: {name} must be a number") from exc
