"""
Shared fixtures.

Endpoint tests run the real app over `httpx.ASGITransport` (no lifespan, so no
database pool) with the store dependency swapped for an in-memory one. The
token dependency still runs, so auth behaviour is exercised end to end.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
from fastapi import Depends
from httpx import ASGITransport, AsyncClient

from auth import dependencies as auth_dependencies
from core import store as store_module
from fakes import MemoryStore

TEST_JWT_SECRET = "test-secret-with-enough-length-for-hs256"


@pytest.fixture(autouse=True)
def _settings(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setenv("JWT_ALG", "HS256")
    monkeypatch.setenv("BASE_LOCALE", "en")


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def app(memory_store):
    from main import app as fastapi_app

    async def _store(claims: dict = Depends(auth_dependencies.get_claims)) -> MemoryStore:
        memory_store.claims = claims
        return memory_store

    fastapi_app.dependency_overrides[store_module.get_store] = _store
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
