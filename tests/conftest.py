"""
Shared test fixtures for the SalesTrackr test suite.

Each test gets its own file-backed SQLite database (aiosqlite) so that
concurrent requests run on separate connections with real locking.
"""

import os
import sys
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["RATE_LIMIT_ENABLED"] = "false"
# Minimum bcrypt cost keeps the suite fast
os.environ["BCRYPT_ROUNDS"] = "4"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from salestrackr.api.v1.deps import get_db
from salestrackr.core.config import settings
from salestrackr.db.base import Base
from salestrackr.db.session import engine_options
from salestrackr.main import app

API = settings.API_V1_PREFIX
COOKIE = settings.SESSION_COOKIE_NAME
PASSWORD = "secret123"


@pytest.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh database per test, wired into the app's ``get_db`` dependency."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'salestrackr.db'}"
    engine = create_async_engine(url, **engine_options(url))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    yield factory
    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app. Keeps cookies between calls."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def other_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """A second browser with its own cookie jar."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


# ── Helpers ─────────────────────────────────────────────────────────
async def register(
    client: AsyncClient,
    name: str = "Alice",
    email: str = "alice@example.com",
    password: str = PASSWORD,
    role: str | None = None,
):
    payload = {"name": name, "email": email, "password": password}
    if role is not None:
        payload["role"] = role
    return await client.post(f"{API}/auth/register", json=payload)


async def create_client(client: AsyncClient, name: str = "Corner Shop", region: str = "North", **extra):
    payload = {
        "name": name,
        "address": "1 High Street",
        "lat": 51.5,
        "lng": -0.12,
        "region": region,
        **extra,
    }
    resp = await client.post(f"{API}/clients", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()["client"]


@pytest.fixture
async def agent_client(async_client: AsyncClient) -> AsyncClient:
    """``async_client`` logged in as a freshly registered agent (Alice)."""
    resp = await register(async_client)
    assert resp.status_code == 201, resp.text
    return async_client


@pytest.fixture
async def admin_client(other_client: AsyncClient) -> AsyncClient:
    """``other_client`` logged in as an admin."""
    resp = await register(other_client, name="Root", email="root@example.com", role="admin")
    assert resp.status_code == 201, resp.text
    return other_client
