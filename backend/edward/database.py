"""
Edward Backend — Database Session Management
==============================================

What:  Async SQLAlchemy engine, session factory, declarative base and the
       FastAPI session dependency.
Why:   Every content operation is a multi-statement sequence (read order,
       upsert row, heal order, write bindings). Running a whole request in one
       session means those statements commit together or not at all.
How:   One AsyncSession per request; commit on success, rollback on any error.
"""

from datetime import datetime, timezone
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from edward.config import settings


def _engine_options() -> dict:
    # SQLite (tests, local runs) does not take the QueuePool sizing arguments
    if settings.is_sqlite:
        return {}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": settings.db_pool_pre_ping,
        "pool_recycle": 3600,
    }


engine = create_async_engine(
    settings.database_url,
    echo=settings.log_level == "DEBUG",
    **_engine_options(),
)

# expire_on_commit=False: response models are built from ORM rows after commit
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all Edward ORM models (shared metadata for Alembic)."""
    pass


def utcnow() -> datetime:
    """Timezone-aware UTC now, used for created_at/updated_at columns."""
    return datetime.now(timezone.utc)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits every write made during the request
        4. On error: rolls back, so a rejected reorder or an unknown topic
           leaves no partial rows behind
        5. Always: closes the session (returns connection to pool)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def dispose_engine() -> None:
    """Closes all pooled connections. Called from the lifespan on shutdown."""
    await engine.dispose()
