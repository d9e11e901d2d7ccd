"""Async engine and per-request sessions for the support database.

Users, conversations and messages all hang off the single declarative
``Base`` in ``models.base``; the application lifespan creates their tables
from ``Base.metadata`` on this engine. Test runs set ``TESTING=true`` and
point ``TEST_DATABASE_URL`` at a throwaway SQLite file.
"""
import os
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings


def _resolve_database_url() -> str:
    if os.getenv("TESTING") == "true":
        url = os.getenv("TEST_DATABASE_URL") or settings.test_database_url
    else:
        url = settings.database_url

    url = (url or "").strip()
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not configured, e.g. "
            "DATABASE_URL=postgresql+asyncpg://<user>:<pass>@<host>/<db>"
        )
    return url


engine = create_async_engine(_resolve_database_url(), echo=settings.debug)

# Rows stay readable after commit; services return them to controllers
AsyncSessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request, closed when the response is sent."""
    async with AsyncSessionLocal() as session:
        yield session
