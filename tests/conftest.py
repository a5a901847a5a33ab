"""Test fixtures — a fresh in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Required settings are set in the environment before any gatehouse
   import, since the settings singleton is built at import time.
2. Each test gets its own aiosqlite in-memory engine. StaticPool keeps
   one connection alive so every session sees the same database.
3. The app's get_db dependency is overridden to hand out sessions from
   that engine, one per request, exactly like production.

bcrypt runs at 4 rounds here so hashing doesn't dominate test time.
"""

import os

os.environ.setdefault("GATEHOUSE_JWT_SECRET", "test-secret-key-for-gatehouse-tests")
os.environ.setdefault("GATEHOUSE_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("GATEHOUSE_BCRYPT_ROUNDS", "4")
os.environ.setdefault("GATEHOUSE_LOG_JSON", "false")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from gatehouse.db.engine import get_db  # noqa: E402
from gatehouse.db.models import Base  # noqa: E402
from gatehouse.main import app  # noqa: E402


@pytest_asyncio.fixture()
async def db_engine():
    """Per-test in-memory database with the schema created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """Session for driving the store/service layer directly."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(session_factory):
    """HTTP client with the app's get_db pointed at the test database.

    Learn: Auth is NOT overridden — protected routes run the real
    bearer-token guard, so tests obtain tokens via /auth/login or
    /auth/token-demo like a real client would.
    """

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
