"""PostgreSQL access for the submission store.

With DATABASE_URL set (``postgresql+asyncpg://...``) this module owns one
async engine per process and a session factory; each submit runs in a
single session via ``session_scope()``, so the attempt-number retries and
the final commit share one transaction.

Without DATABASE_URL both are None and the API wires in the in-memory
repositories instead.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from quiz_service.core.config import SETTINGS

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by every quiz table."""


engine: AsyncEngine | None = None
async_session_factory: async_sessionmaker[AsyncSession] | None = None

if SETTINGS.database_url:
    engine = create_async_engine(
        SETTINGS.database_url,
        echo=SETTINGS.is_dev,
        pool_size=5,
        max_overflow=10,
        # Drop connections that died while the pool was idle.
        pool_pre_ping=True,
    )
    # Rows are converted to dataclasses after commit.
    async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Yield a session; commit when the block exits cleanly, else roll back."""
    if async_session_factory is None:
        raise RuntimeError("DATABASE_URL is not configured; no database session")
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def lifespan_db():
    if engine is None:
        logger.info("No DATABASE_URL configured, quiz data lives in memory")
        yield
        return

    logger.info("Quiz database engine ready: %s", engine.url.render_as_string())
    try:
        yield
    finally:
        await engine.dispose()
        logger.info("Quiz database engine disposed")
