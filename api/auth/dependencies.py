"""
Auth dependencies for FastAPI routes.

Every endpoint is readable anonymously; a bearer token only changes which
rows the store lets the caller see.
"""

from __future__ import annotations

import logging

from fastapi import Header

from core import errors

from . import security

logger = logging.getLogger(__name__)


def _extract_bearer_token(authorization: str | None) -> str | None:
    raw = (authorization or "").strip()
    if not raw:
        return None

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise errors.AuthFailure("Invalid Authorization header format.")

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise errors.AuthFailure("Authorization must be: Bearer <token>.")
    return token


def claims_from_header(authorization: str | None) -> dict:
    token = _extract_bearer_token(authorization)
    if token is None:
        return security.anonymous_claims()
    try:
        return security.decode_access_token(token)
    except security.AuthSecurityError as exc:
        logger.info("token_rejected reason=%s", exc)
        raise errors.AuthFailure() from exc


async def get_claims(authorization: str | None = Header(default=None)) -> dict:
    return claims_from_header(authorization)
