"""
Environment-driven settings.

Every setting is read lazily through a small function so tests can patch the
environment without reloading modules. Malformed numbers fall back to the
default instead of failing startup.
"""

from __future__ import annotations

import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return list(default)
    return [part.strip() for part in raw.split(",") if part.strip()]


def db_pool_min_size() -> int:
    return _env_int("DB_POOL_MIN_SIZE", 1)


def db_pool_max_size() -> int:
    return _env_int("DB_POOL_MAX_SIZE", 5)


def db_command_timeout_s() -> float:
    return _env_float("DB_COMMAND_TIMEOUT_S", 30.0)


def db_allowed_roles() -> list[str]:
    # Roles a caller's JWT may switch into via SET LOCAL ROLE.
    return _env_list("DB_ALLOWED_ROLES", ["anon", "authenticated"])


def base_locale() -> str:
    return os.environ.get("BASE_LOCALE", "en").strip() or "en"


def cors_allow_origins() -> list[str]:
    return _env_list("CORS_ALLOW_ORIGINS", ["*"])


def log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
