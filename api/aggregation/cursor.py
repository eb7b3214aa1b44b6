"""
Opaque pagination cursors.

A cursor is the sort-key value of the last row of the previous page. A
single-field key encodes to the field's canonical string form; a two-field
key joins both forms with `_`, which never occurs in integers, UTC
timestamps or UUIDs.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from core.errors import FormatError

DELIMITER = "_"

INT = "int"
TEXT = "text"
TIMESTAMP = "timestamp"
UUID = "uuid"
FIELD_KINDS = (INT, TEXT, TIMESTAMP, UUID)

# Largest value a bigint column can be compared against.
MAX_INT = 2**63 - 1


@dataclass(frozen=True)
class SortField:
    name: str
    kind: str = INT

    def __post_init__(self) -> None:
        if self.kind not in FIELD_KINDS:
            raise ValueError(f"Unknown sort field kind: {self.kind}")


@dataclass(frozen=True)
class SortKey:
    """
    An ordered tuple of one or two fields that totally orders a collection.

    The last field must be unique (usually the primary key) so rows sharing
    the leading value still have a strict order.
    """

    fields: tuple[SortField, ...]
    descending: bool = True

    def __post_init__(self) -> None:
        if not 1 <= len(self.fields) <= 2:
            raise ValueError("A sort key has one or two fields.")

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def value_of(self, row: dict[str, Any]) -> tuple[Any, ...]:
        return tuple(row[name] for name in self.names)


def sort_key(*fields: SortField, descending: bool = True) -> SortKey:
    return SortKey(tuple(fields), descending=descending)


def _encode_field(field: SortField, value: Any) -> str:
    if value is None:
        raise ValueError(f"Cannot encode a null {field.name} into a cursor.")
    if field.kind == INT:
        if isinstance(value, bool) or int(value) < 0:
            raise ValueError(f"Cursor field {field.name} must be a non-negative integer.")
        return str(int(value))
    if field.kind == TIMESTAMP:
        ts = value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
        if ts.tzinfo is not None:
            # UTC with a trailing Z keeps '+' (a space in query strings) out of tokens.
            return ts.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
        return ts.isoformat()
    if field.kind == UUID:
        return str(uuid.UUID(str(value)))
    text = str(value)
    if not text:
        raise ValueError(f"Cannot encode an empty {field.name} into a cursor.")
    return text


def _decode_field(field: SortField, raw: str) -> Any:
    if field.kind == INT:
        if not raw.isdigit() or not raw.isascii() or int(raw) > MAX_INT:
            raise FormatError("Invalid cursor parameter")
        return int(raw)
    if field.kind == TIMESTAMP:
        try:
            return datetime.fromisoformat(raw)
        except ValueError as exc:
            raise FormatError("Invalid cursor parameter") from exc
    if field.kind == UUID:
        try:
            return str(uuid.UUID(raw))
        except ValueError as exc:
            raise FormatError("Invalid cursor parameter") from exc
    return raw


def encode(key: SortKey, value: tuple[Any, ...]) -> str:
    if len(value) != len(key.fields):
        raise ValueError("Cursor value does not match the sort key.")
    parts = [_encode_field(f, v) for f, v in zip(key.fields, value)]
    if len(parts) == 2 and DELIMITER in parts[0] + parts[1]:
        raise ValueError(f"Cursor fields may not contain {DELIMITER!r}.")
    return DELIMITER.join(parts)


def decode(key: SortKey, token: str) -> tuple[Any, ...]:
    """
    Parse a token back into sort-key values, or raise `FormatError`.
    """
    raw = (token or "").strip()
    if not raw:
        raise FormatError("Invalid cursor parameter")
    if len(key.fields) == 1:
        return (_decode_field(key.fields[0], raw),)

    parts = raw.split(DELIMITER)
    if len(parts) != 2 or not all(parts):
        raise FormatError("Invalid cursor format")
    return tuple(_decode_field(f, p) for f, p in zip(key.fields, parts))
