"""
Database configuration and session management.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from timekeep.config import Settings


# Create declarative base
Base = declarative_base()


def create_engine_from_settings(settings: Settings) -> Optional[AsyncEngine]:
    """
    Create the async engine for the Supabase Postgres database.
    Returns None when no database URL is configured.
    """
    if not settings.database_url_async:
        return None
    return create_async_engine(
        settings.database_url_async,
        poolclass=NullPool,
        echo=settings.debug,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory bound to ``engine``."""
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )


@asynccontextmanager
async def session_scope(factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Provide a session that commits on success and rolls back on error."""
    session = factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
