"""
tests/conftest.py -- Shared test fixtures for the Todo API test suite.

This module provides:
  - engine: an isolated named shared-memory SQLite database per test
  - user_store / todo_store: stores bound to that engine
  - client: TestClient over the real app with a patched lifespan
  - register_and_login(): helper returning a bearer header for a new user
  - rate_limited: turns the shared slowapi limiter on for a single test

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.
A raw sqlite3 "keeper" connection pins the database for the test's lifetime.

Environment must be set before any core/auth/api import: DEBUG lets
get_settings() auto-generate SECRET_KEY, BCRYPT_ROUNDS=4 keeps hashing fast,
rate limiting is disabled (with low limits for the tests that switch it on),
and TestClient's "testserver" host is allowed.
"""

from __future__ import annotations

import os
import sqlite3
import uuid
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

# CRITICAL: Set env before any core/auth/api import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOGIN_RATE_LIMIT", "3/minute")
os.environ.setdefault("REGISTER_RATE_LIMIT", "2/minute")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver"]')

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from api.limiter import limiter
from api.main import app
from auth.store import UserStore
from core.database import create_db_engine
from todos.store import TodoStore

# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Fresh shared-memory database with the full schema, unique per test."""
    name = f"test_todo_{uuid.uuid4().hex}"
    keeper = sqlite3.connect(f"file:{name}?mode=memory&cache=shared", uri=True)
    eng = create_db_engine(f"sqlite:///file:{name}?mode=memory&cache=shared&uri=true")
    yield eng
    eng.dispose()
    keeper.close()


@pytest.fixture
def user_store(engine: Engine) -> UserStore:
    return UserStore(engine)


@pytest.fixture
def todo_store(engine: Engine) -> TodoStore:
    return TodoStore(engine)


# ---------------------------------------------------------------------------
# App fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(engine: Engine):
    """Return an async context manager that replaces the real lifespan.

    Wires the test engine and stores into app.state so TestClient routes
    see the isolated test DB rather than the configured DATABASE_URL.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.engine = engine
        app.state.user_store = UserStore(engine)
        app.state.todo_store = TodoStore(engine)
        yield

    return test_lifespan


@pytest.fixture
def client(engine: Engine) -> Generator[TestClient, None, None]:
    """TestClient over the real app (routing, gate, handlers) on an isolated DB."""
    app.router.lifespan_context = _patch_lifespan(engine)
    with TestClient(app, raise_server_exceptions=True) as test_client:
        yield test_client


@pytest.fixture
def register_and_login(client: TestClient) -> Callable[..., dict[str, str]]:
    """Return a helper that registers a user, logs in, and returns auth headers."""

    def _register_and_login(id: str, username: str, email: str, password: str = "secret") -> dict[str, str]:
        resp = client.post(
            "/register/",
            json={"id": id, "username": username, "email": email, "password": password},
        )
        assert resp.status_code == 200, resp.text
        resp = client.post("/login/", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['jwtToken']}"}

    return _register_and_login


@pytest.fixture
def rate_limited(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Switch the shared limiter on for one test, with empty counters."""
    limiter.reset()
    monkeypatch.setattr(limiter, "enabled", True)
    yield
    limiter.reset()
