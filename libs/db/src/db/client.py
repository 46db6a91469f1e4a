"""SQLAlchemy async engine/session helpers for the workspace.

There is no module-level engine: entrypoints (the web app lifespan, CLI
commands, tests) create one and hand it to whatever needs database access.

Usage
-----
from db.client import create_engine, session_factory, session_scope

engine = create_engine(database_url="sqlite:///finance.db")
sessions = session_factory(engine)
async with session_scope(sessions) as s:
    await s.execute(...)
await engine.dispose()
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .models.finance import Base

# Plain driver prefixes upgraded to their asyncio counterparts.
_ASYNC_DRIVERS = {
    "postgresql://": "postgresql+asyncpg://",
    "postgres://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}


def resolve_database_url(override: str | None = None) -> str:
    url = override or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set; cannot initialize database client")
    return url


def to_async_url(url: str) -> str:
    """Return ``url`` with a sync driver prefix swapped for its async driver.

    URLs that already name a driver (``postgresql+asyncpg://``,
    ``sqlite+aiosqlite://``) are returned unchanged.
    """

    for prefix, replacement in _ASYNC_DRIVERS.items():
        if url.startswith(prefix):
            return replacement + url[len(prefix) :]
    return url


def create_engine(*, database_url: str | None = None) -> AsyncEngine:
    """Create a new async engine; the caller owns it and must ``dispose()`` it."""

    url = to_async_url(resolve_database_url(database_url))
    return create_async_engine(url, pool_pre_ping=True)


def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@asynccontextmanager
async def session_scope(
    sessions: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Provide a transactional scope around a series of operations."""

    session = sessions()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables declared on ``Base`` that do not exist yet."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


__all__ = [
    "create_engine",
    "create_schema",
    "resolve_database_url",
    "session_factory",
    "session_scope",
    "to_async_url",
]
