"""Database configuration and session management.

Provides the async SQLAlchemy engine and session factory. Both are built
lazily so that importing the application never requires a database driver.
"""

from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.infrastructure.config import get_settings


@lru_cache
def get_engine(database_url: str | None = None) -> AsyncEngine:
    """Get (and cache) the async engine for a database URL.

    Args:
        database_url: SQLAlchemy URL. Defaults to the configured one.

    Returns:
        AsyncEngine for the URL.
    """
    settings = get_settings()
    return create_async_engine(
        database_url or settings.database_url,
        echo=settings.debug,
        pool_pre_ping=True,
    )


def get_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to an engine.

    Args:
        engine: Async engine.

    Returns:
        Session factory producing AsyncSession objects.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
