"""
HomeStock Backend — Database Engine & Session Management
==========================================================

What:  Async SQLAlchemy engine wrapper, declarative base, and FastAPI session
       dependency.
Why:   Centralizes all database connection logic in one place.
How:   `Database` owns one async engine and its session factory. The app
       lifespan builds it from settings and stores it on `app.state`;
       `get_db_session` hands each request its own session.
Who:   Used by route handlers via FastAPI's dependency injection system, and
       directly by tests (in-memory SQLite).
When:  Engine is created at startup; sessions are created per-request.

Why an explicit object instead of a module-level engine:
    The engine is constructed once from the settings the app was created
    with, and tests can hand the app a different `Database` (SQLite) without
    patching module globals.
"""

import logging
import secrets
from typing import Any, AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from homestock.config import Settings

logger = logging.getLogger(__name__)


def generate_id() -> str:
    """24 hex characters, the same shape as a document-store object id."""
    return secrets.token_hex(12)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, used by Alembic for migrations and by
    the test-suite to create tables.
    """
    pass


class Database:
    """
    Owns the async engine and session factory for one database URL.

    Args:
        url:            Async SQLAlchemy URL (postgresql+asyncpg://, sqlite+aiosqlite://)
        engine_kwargs:  Passed through to `create_async_engine`
    """

    def __init__(self, url: str, **engine_kwargs: Any):
        self.url = url
        self.engine = create_async_engine(url, **engine_kwargs)
        # expire_on_commit=False: attributes stay readable after commit, so a
        # committed record can still be serialized into the response
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Builds the engine with pool tuning for server databases."""
        kwargs: dict = {"echo": settings.log_level == "DEBUG"}
        if not settings.database_url.startswith("sqlite"):
            kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )
        return cls(settings.database_url, **kwargs)

    async def ping(self) -> None:
        """Runs SELECT 1; raises whatever the driver raises when unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_all(self) -> None:
        """Creates every table registered on Base.metadata (tests, local dev)."""
        # Import models so they register with Base.metadata
        from homestock.models import stock, user  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Closes all pooled connections. Called on application shutdown."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the app's Database
        2. Yields it to the route handler
        3. On error: rolls back the transaction (discards changes)
        4. Always: closes the session (returns connection to pool)

    Services commit explicitly once a write succeeds, so the response is
    only sent for data that is already durable.
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
