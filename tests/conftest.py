"""
Bookshelf Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped, fresh per test):
    ├── mock_db_session: AsyncMock session for pure unit tests (no database)
    ├── test_settings:   Settings pointing at a temp-file SQLite database
    ├── app:             create_app(test_settings) with tables created
    ├── db_session:      Real AsyncSession on the app's database
    ├── test_client:     HTTPX AsyncClient routed straight into the app
    └── auth_headers:    Authorization header for a freshly registered user

Why a temp *file* instead of :memory: SQLite:
    Each connection to :memory: gets its own empty database. A file lets
    several sessions (the concurrency tests) see the same tables.
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Must run BEFORE importing bookshelf: bookshelf.main builds a default app at
# import time from environment settings
_env_dir = tempfile.mkdtemp(prefix="bookshelf_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_env_dir}/default.db"
os.environ["JWT_SECRET"] = "test-secret-not-for-production-0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SEED_DATA"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from bookshelf.config import Settings  # noqa: E402
from bookshelf.main import create_app  # noqa: E402

TEST_JWT_SECRET = "test-secret-not-for-production-0123456789"


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_result = MagicMock()
        mock_result.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = mock_result
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def test_settings(tmp_path):
    """Settings for an isolated database; bcrypt at its cheapest work factor."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'bookshelf.db'}",
        jwt_secret=TEST_JWT_SECRET,
        jwt_ttl_seconds=3600,
        bcrypt_rounds=4,
        seed_data=False,
        admin_username="admin",
        admin_password="admin123",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(test_settings):
    """
    A fully wired application with an empty schema.

    ASGITransport does not run lifespan events, so tables are created here.
    """
    application = create_app(test_settings)
    await application.state.database.create_all()
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def db_session(app):
    """A real session on the test database. Tests commit explicitly."""
    async with app.state.database.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient configured to talk to the app without a server.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def auth_headers(test_client):
    """Registers alice/pw1 and returns a bearer header for her token."""
    response = await test_client.post(
        "/api/auth/register", json={"username": "alice", "password": "pw1"}
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}
