"""
tests/conftest.py -- Shared test fixtures for QuantumEdge tests.

This module provides:
  - engine: a fresh in-memory Engine per test for store unit tests
  - _patch_lifespan(): wires test components into app.state, bypassing real startup
  - api_client: TestClient over the real app with an isolated database
  - register_user() / use_session(): helpers for driving the cookie session

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
the API client because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread. The named URI format shares one in-memory instance across
all connections in the same process.

SECRET_KEY and ENVIRONMENT must be set before any api/ import, because
api/main.py reads settings at import time.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# Set before any core/api import so get_settings() sees a stable key.
os.environ.setdefault("SECRET_KEY", "quantumedge-test-secret-key-0123456789abcdef")
os.environ.setdefault("ENVIRONMENT", "development")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from api.main import app
from auth.store import UserStore
from auth.tokens import SessionCookie, TokenSigner
from core.config import get_settings
from core.database import create_db_engine
from jobs.store import JobStore

# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """A private in-memory database, discarded after the test."""
    eng = create_db_engine("sqlite:///:memory:")
    yield eng
    eng.dispose()


@pytest.fixture
def user_store(engine: Engine) -> UserStore:
    return UserStore(engine)


@pytest.fixture
def job_store(engine: Engine) -> JobStore:
    return JobStore(engine)


# ---------------------------------------------------------------------------
# App wiring
# ---------------------------------------------------------------------------


def _patch_lifespan(engine: Engine):
    """Return an async context manager that replaces the real lifespan.

    Mirrors api.main.lifespan but uses the test engine instead of
    DATABASE_URL, so route handlers see an isolated database.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        settings = get_settings()
        app.state.engine = engine
        app.state.user_store = UserStore(engine)
        app.state.job_store = JobStore(engine)
        app.state.token_signer = TokenSigner(settings.secret_key, expire_seconds=settings.token_expire_seconds)
        app.state.session_cookie = SessionCookie(production=False, max_age=settings.token_expire_seconds)
        app.state.verify_user_on_request = False
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client() -> Generator[TestClient, None, None]:
    """Yield a TestClient over the real app with an isolated database.

    One client (and one database) per test module. Tests use unique emails
    so they do not depend on each other's state.
    """
    db_name = f"test_api_{uuid.uuid4().hex}"
    engine = create_db_engine(f"sqlite:///file:{db_name}?mode=memory&cache=shared&uri=true")

    app.router.lifespan_context = _patch_lifespan(engine)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    engine.dispose()


# ---------------------------------------------------------------------------
# Session helpers
# ---------------------------------------------------------------------------


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:10]}@example.com"


def register_user(client: TestClient, name: str = "Test User", email: str | None = None, password: str = "pw-123"):
    """Register an account and return (response, session token).

    The client's cookie jar is cleared afterwards so each test chooses its
    session explicitly via use_session().
    """
    email = email or unique_email()
    resp = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
    token = resp.cookies.get("token")
    client.cookies.clear()
    return resp, token


def use_session(client: TestClient, token: str | None) -> None:
    """Make subsequent requests carry the given session token (or none)."""
    client.cookies.clear()
    if token:
        client.cookies.set("token", token)
