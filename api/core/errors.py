"""
Error taxonomy and classification.

Every failure a request can hit ends up as exactly one `ApiError`:

- `BadRequest` (400): malformed cursor, out-of-range limit, missing parameter
- `AuthFailure` (401/403): the store or token layer rejected the caller
- `NotFound` (404): a required single-entity lookup returned nothing
- `UpstreamFailure` (500): anything else raised while talking to the store

`classify()` is the only place that inspects raw exceptions. Auth and upstream
messages are generic so store internals never reach the client; bad-request
and not-found messages may name the offending parameter.
"""

from __future__ import annotations

import logging
from typing import Any

import asyncpg
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

AUTH_FAILURE_MESSAGE = "Authorization error."
UPSTREAM_FAILURE_MESSAGE = "Server error processing request."

# SQLSTATEs the store uses for credential/permission problems.
_UNAUTHORIZED_SQLSTATES = frozenset({"28000", "28P01"})
_FORBIDDEN_SQLSTATES = frozenset({"42501"})
_AUTH_MESSAGE_MARKERS = ("JWT", "security barrier")

JSON_MEDIA_TYPE = "application/json; charset=utf-8"


class FormatError(ValueError):
    """A pagination cursor that does not decode for the endpoint's sort key."""


class ApiError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    category = "UpstreamFailure"

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message}


class BadRequest(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    category = "BadRequest"


class AuthFailure(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    category = "AuthFailure"

    def __init__(self, message: str = AUTH_FAILURE_MESSAGE, *, status_code: int | None = None) -> None:
        super().__init__(message, status_code=status_code)


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    category = "NotFound"


class UpstreamFailure(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    category = "UpstreamFailure"

    def __init__(self, message: str = UPSTREAM_FAILURE_MESSAGE, *, status_code: int | None = None) -> None:
        super().__init__(message, status_code=status_code)


def _classify_postgres(exc: asyncpg.PostgresError) -> ApiError:
    sqlstate = getattr(exc, "sqlstate", None) or ""
    if sqlstate in _FORBIDDEN_SQLSTATES:
        return AuthFailure(status_code=status.HTTP_403_FORBIDDEN)
    if sqlstate in _UNAUTHORIZED_SQLSTATES:
        return AuthFailure()
    text = str(exc.args[0]) if exc.args else ""
    if any(marker in text for marker in _AUTH_MESSAGE_MARKERS):
        return AuthFailure(status_code=status.HTTP_403_FORBIDDEN)
    return UpstreamFailure()


def classify(exc: BaseException) -> ApiError:
    """
    Map any caught failure to its outward-facing category.
    """
    if isinstance(exc, ApiError):
        return exc
    if isinstance(exc, FormatError):
        return BadRequest(str(exc) or "Invalid cursor parameter")
    if isinstance(exc, asyncpg.PostgresError):
        return _classify_postgres(exc)
    return UpstreamFailure()


def error_response(error: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content=error.to_body(),
        media_type=JSON_MEDIA_TYPE,
    )


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed path=%s category=%s", request.url.path, exc.category)
    return error_response(exc)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # FastAPI reports bad query values as 422; clients get a 400 naming the parameter.
    names: list[str] = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("query", "body", "header")]
        if loc:
            names.append(".".join(loc))
    if names:
        message = "Invalid " + ", ".join(dict.fromkeys(names)) + " parameter"
    else:
        message = "Invalid request parameters."
    return error_response(BadRequest(message))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = classify(exc)
    logger.error(
        "request_failed path=%s category=%s error_type=%s",
        request.url.path,
        error.category,
        type(exc).__name__,
        exc_info=exc,
    )
    return error_response(error)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(FormatError, unhandled_error_handler)
    app.add_exception_handler(asyncpg.PostgresError, unhandled_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
