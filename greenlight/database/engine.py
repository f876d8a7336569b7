"""
Database engine and session management

SQLAlchemy 2.0 async engine; asyncpg for PostgreSQL, aiosqlite for SQLite

Pool settings:
- pool_size: connections kept open in the pool (default 5)
- max_overflow: extra connections allowed beyond pool_size (default 10)
- pool_timeout: seconds to wait for a free connection
- pool_recycle: seconds before a connection is recycled
- pool_pre_ping: check the connection before handing it out
"""

from typing import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool

from greenlight.core.config import settings


def _get_pool_config(database_url: str) -> dict:
    """
    Pool configuration per environment

    - test: NullPool, a fresh connection per checkout
    - SQLite: driver defaults
    - otherwise: queue pool sized from settings
    """
    if settings.ENV == "test":
        return {"poolclass": NullPool}

    if make_url(database_url).get_backend_name() == "sqlite":
        return {}

    return {
        "poolclass": AsyncAdaptedQueuePool,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
    }


def build_engine(database_url: str) -> AsyncEngine:
    return create_async_engine(
        database_url,
        echo=settings.DEBUG,
        pool_pre_ping=True,
        **_get_pool_config(database_url),
    )


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine: AsyncEngine = build_engine(settings.DATABASE_URL)

async_session_maker = build_session_maker(engine)


def get_engine() -> AsyncEngine:
    """Engine dependency; overridden in tests"""
    return engine


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Database session dependency

    Repository methods commit their own units of work; anything left open
    when the request ends is rolled back
    """
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def close_db() -> None:
    """
    Dispose of the connection pool

    Called on application shutdown
    """
    await engine.dispose()
