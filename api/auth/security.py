"""
Bearer token validation.

Tokens are issued elsewhere; this module only checks the signature and expiry
and hands the claims on so the store can evaluate row-level security for the
caller.
"""

from __future__ import annotations

import os
from typing import Any

import jwt

ANONYMOUS_ROLE = "anon"
AUTHENTICATED_ROLE = "authenticated"


class AuthSecurityError(RuntimeError):
    pass


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return os.environ.get("JWT_SECRET", "dev-change-this-secret").strip() or "dev-change-this-secret"


def jwt_algorithm() -> str:
    return os.environ.get("JWT_ALG", "HS256").strip() or "HS256"


def anonymous_claims() -> dict[str, Any]:
    return {"role": ANONYMOUS_ROLE}


def decode_access_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    try:
        payload = jwt.decode(
            raw,
            jwt_secret(),
            algorithms=[jwt_algorithm()],
            options={"verify_aud": False},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthSecurityError("Access token is expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid access token.") from exc

    role = str(payload.get("role") or "").strip()
    if not role:
        payload["role"] = AUTHENTICATED_ROLE if payload.get("sub") else ANONYMOUS_ROLE
    return payload
