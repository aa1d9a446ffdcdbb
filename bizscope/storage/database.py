# Copyright (c) 2026 BizScope Contributors. All Rights Reserved.

"""
Database Access — async engine for the business record store.

BizScope only reads business records. Sessions never commit, and each
request's session is closed when the request ends.
"""

from __future__ import annotations

from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from bizscope.core.config import settings


class Base(DeclarativeBase):
    pass


_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def _bind(engine: AsyncEngine) -> None:
    global _engine, _session_factory
    _engine = engine
    _session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_engine() -> AsyncEngine:
    """Engine singleton, created from DATABASE_URL on first use."""
    if _engine is None:
        _bind(create_async_engine(settings.DATABASE_URL, pool_pre_ping=True))
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        get_engine()
    return _session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one read-only session per request."""
    async with get_session_factory()() as session:
        yield session


# ── Lifecycle ───────────────────────────────────────────────

async def init_db() -> None:
    """Fail startup early when the record store is unreachable."""
    async with get_engine().connect() as conn:
        await conn.execute(text("SELECT 1"))


async def close_db() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


async def create_all_tables() -> None:
    """Create the schema from ORM metadata (local development and tests)."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def override_engine_for_test(engine: AsyncEngine) -> None:
    """Bind the module to `engine`, e.g. an in-memory SQLite engine."""
    _bind(engine)
