"""
Database connection management with SQLAlchemy async.
Provides session dependency injection and connection pooling.

If the database cannot be reached at startup the service keeps running and
every request that needs persistence fails fast with UpstreamFailure.
"""
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from storefront.core.config import settings
from storefront.core.errors import UpstreamFailure
from storefront.core.logging import get_logger

logger = get_logger(__name__)

# Flag to track if database is available
_db_available: bool = False

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all models."""
    pass


def create_engine() -> AsyncEngine:
    """Create async database engine with proper configuration."""
    database_url = settings.database_url
    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    engine_kwargs: dict[str, Any] = {"echo": settings.database_echo}
    if not settings.is_sqlite:
        engine_kwargs.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,  # Verify connections before use
        )

    return create_async_engine(database_url, **engine_kwargs)


# Global engine and session factory
engine = create_engine()
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session with automatic cleanup.

    Commits when the request handler returns, rolls back on any error.
    """
    if not _db_available:
        raise UpstreamFailure("Database unavailable")

    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except (OperationalError, InterfaceError) as e:
            await session.rollback()
            logger.error("Database operation failed", error=str(e))
            raise UpstreamFailure("Database unavailable") from e
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create tables; marks the database unavailable when the connection fails."""
    global _db_available
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        _db_available = True
        logger.info("Database initialized")
    except (OperationalError, InterfaceError, OSError) as e:
        _db_available = False
        logger.error(
            "Database connection failed - persistence requests will return 503",
            error=str(e),
        )


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
    logger.info("Database connections closed")
