"""
Todo API - Test Configuration (conftest.py)
===========================================

What:  Shared pytest fixtures for the backend suite.
How:   Environment variables are set at the top of this module, before any
       `todo_api` import, so the settings singleton and the engine are built
       against a throwaway SQLite file and an HS256 test key.

Fixture Hierarchy:
    Function-scoped:
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── database:        fresh schema on the SQLite test file
    ├── client:          HTTPX AsyncClient over ASGITransport (needs database)
    ├── make_headers:    factory for Authorization headers of any subject
    ├── alice / bob:     headers for two users already synced via the API
    └── sample_user:     an unsaved User for service tests
"""

import os
import tempfile
import time
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup (must run before todo_api is imported)
# ══════════════════════════════════════════════════════════════════════════

TEST_JWT_KEY = "test-signing-secret-not-for-production"

_db_dir = tempfile.mkdtemp(prefix="todo_api_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_db_dir}/test.db"
os.environ["AUTH_JWT_KEY"] = TEST_JWT_KEY
os.environ["AUTH_JWT_ALGORITHMS"] = "HS256"
os.environ["AUTH_AUTHORIZED_PARTIES"] = "http://localhost:3000"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"


def make_token(subject: str = "user_alice", expires_in: int = 3600, **claims: Any) -> str:
    """Sign a session token the way the identity provider would."""
    now = int(time.time())
    payload: Dict[str, Any] = {
        "sub": subject,
        "iat": now,
        "nbf": now - 5,
        "exp": now + expires_in,
        "sid": f"sess_{subject}",
    }
    payload.update(claims)
    return jwt.encode(payload, TEST_JWT_KEY, algorithm="HS256")


def bearer(subject: str = "user_alice", **claims: Any) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(subject, **claims)}"}


# ══════════════════════════════════════════════════════════════════════════
# Unit-test fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = row
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_user():
    from todo_api.models.user import User

    return User(id=uuid4(), external_auth_id="user_alice")


# ══════════════════════════════════════════════════════════════════════════
# API fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database():
    """Drop and recreate every table so each test starts from an empty database."""
    import todo_api.models  # noqa: F401
    from todo_api.database import Base, engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    # Pooled connections must not outlive this test's event loop
    await engine.dispose()


@pytest_asyncio.fixture
async def client(database):
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
    """
    from todo_api.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_jwt():
    return make_token


@pytest.fixture
def make_headers():
    return bearer


@pytest_asyncio.fixture
async def alice(client):
    headers = bearer("user_alice")
    response = await client.post("/api/sync-user", headers=headers)
    assert response.status_code == 200
    return headers


@pytest_asyncio.fixture
async def bob(client):
    headers = bearer("user_bob")
    response = await client.post("/api/sync-user", headers=headers)
    assert response.status_code == 200
    return headers
