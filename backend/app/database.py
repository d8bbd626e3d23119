"""
Sparkz Backend: Database Session Management
============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   Creates an async engine with a bounded connection pool and provides a
       session dependency that commits on success and rolls back on error.
Who:   Used by route handlers and dependencies via FastAPI's Depends().
When:  Engine is created at module import; sessions are created per request.

Connection Pooling:
    pool_size:     Persistent connections shared by all concurrent requests
    max_overflow:  Temporary connections for bursts
    pool_timeout:  How long a request waits for a free connection; on expiry
                   SQLAlchemy raises TimeoutError inside that request only
    pool_pre_ping: Validates connections before use (stale after DB restart)
"""

from typing import AsyncGenerator

from sqlalchemy import make_url
from sqlalchemy.pool import NullPool
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import settings


# ── Engine Configuration ──────────────────────────────────────────────────
def _engine_options(database_url: str) -> dict:
    """Pool sizing applies to server databases; SQLite (tests) gets NullPool."""
    options = {
        "pool_pre_ping": settings.db_pool_pre_ping,
        "echo": settings.log_level == "DEBUG",
    }
    if make_url(database_url).get_backend_name() == "sqlite":
        options["poolclass"] = NullPool
    else:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_recycle=3600,
        )
    return options


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: ORM objects stay readable after the dependency commits
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers with this metadata, which `create_tables()` uses to
    bootstrap the schema at startup.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler (and to any dependency that also
           asks for it; FastAPI caches it for the request)
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handlers
        5. Always: closes the session (returns the connection to the pool)

    Services only `flush()`; the commit for the whole request happens here.
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


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_tables() -> None:
    """
    Create any missing tables for the registered models.

    Existing tables are left untouched; this is a bootstrap, not a migration.
    """
    # Import models so they register with Base.metadata
    from app import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Closes all pooled connections. Called during application shutdown."""
    await engine.dispose()
