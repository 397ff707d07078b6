"""
Database connection and session management.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from app.core.config import get_settings

settings = get_settings()

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    future=True,
)


def make_session_factory(bind: AsyncEngine) -> sessionmaker:
    return sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async_session_factory = make_session_factory(engine)


async def init_db(bind: AsyncEngine = engine):
    """Create all tables (development and tests; production uses migrations)."""
    import app.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


def get_session_factory() -> sessionmaker:
    """FastAPI dependency for the store session factory.

    Stores open one short-lived session per call so that concurrent lookups
    within a request never share a session.
    """
    return async_session_factory


@asynccontextmanager
async def get_session_context(
    factory: sessionmaker = async_session_factory,
) -> AsyncGenerator[AsyncSession, None]:
    """Transactional session: commits on success, rolls back on error."""
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
