"""
Edward Backend — Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures: an in-memory SQLite database, sessions,
       seeded users and an HTTP client bound to the app.
Why:   The upsert engine and the order reconciler are only meaningful against
       a real database with real unique constraints; SQLite through aiosqlite
       supports the same INSERT ... ON CONFLICT DO NOTHING RETURNING path as
       PostgreSQL.

Fixture Hierarchy (all function-scoped):
    engine ─┬─ session_factory ─┬─ db_session ─┬─ premium_user ── storage ── document
            │                   │              └─ limited_user
            │                   └─ api_client (dependency override of get_db_session)
"""

import os

# Override settings for testing BEFORE any edward imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import edward.models  # noqa: F401
from edward.database import Base, get_db_session
from edward.models.document import Document
from edward.models.user import AccountType, User
from edward.services.storage import ServerStorage


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test; StaticPool keeps one shared connection."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Data Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def premium_user(db_session) -> User:
    user = User(email="writer@example.com", account_type=AccountType.PREMIUM, verified=True)
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def limited_user(db_session) -> User:
    user = User(email="reader@example.com", account_type=AccountType.LIMITED, verified=True)
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
def storage(db_session, premium_user) -> ServerStorage:
    return ServerStorage(db=db_session, user_id=premium_user.id)


@pytest_asyncio.fixture
async def document(db_session, premium_user) -> Document:
    doc = Document(guid="doc-1", user_id=premium_user.id, name="Novel")
    db_session.add(doc)
    await db_session.commit()
    return doc


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def api_client(session_factory):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    Each request gets its own session from the test database with the same
    commit-or-rollback behaviour as the production dependency.
    """
    from edward.main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
