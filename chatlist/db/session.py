from __future__ import annotations

from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from chatlist.core.config import get_settings

from .utils import is_sqlite_url, normalize_database_url


def build_async_engine(url: str) -> AsyncEngine:
    database_url = normalize_database_url(url)
    if is_sqlite_url(database_url):
        # In-memory SQLite must share one connection across sessions.
        return create_async_engine(database_url, poolclass=StaticPool)
    return create_async_engine(database_url, pool_pre_ping=True)


settings = get_settings()
async_engine = build_async_engine(settings.database_dsn)
AsyncSessionLocal = async_sessionmaker(bind=async_engine, expire_on_commit=False)


async def get_db_session() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        yield session
