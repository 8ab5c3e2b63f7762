"""
Async SQLAlchemy engine and sessions.

The engine is built lazily from DATABASE_URL. Postgres runs on asyncpg with a
pooled connection; SQLite (local dev, tests) runs on aiosqlite without one.
A turn reads and writes the tenant, kernel and conversation rows in a single
session, so one session_scope() is one unit of work: it commits on success
and rolls everything back if the turn raises.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from .config import get_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


_engine = None
_session_factory = None


def async_url(url: str) -> str:
    """Point bare Postgres URLs (including the postgres:// form) at asyncpg."""
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+asyncpg://" + url[len(prefix):]
    return url


def get_engine():
    global _engine
    if _engine is None:
        settings = get_settings()
        url = async_url(settings.database_url)

        kwargs = {}
        if not url.startswith("sqlite"):
            kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=True,
            )

        _engine = create_async_engine(url, **kwargs)
        logger.info("Database engine created (%s)", url.split(":", 1)[0])
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


@asynccontextmanager
async def session_scope(
    factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> AsyncIterator[AsyncSession]:
    """One unit of work: commit when the block exits cleanly, roll back if it raises."""
    factory = factory or get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db():
    """Create the tenant, kernel and conversation tables if missing."""
    from .. import models  # noqa: F401  (registers every table on Base.metadata)

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables verified: %s", ", ".join(sorted(Base.metadata.tables)))


async def close_db():
    global _engine, _session_factory
    if _engine:
        await _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("Database engine disposed")
