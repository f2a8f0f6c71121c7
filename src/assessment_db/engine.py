"""Process-wide async engine for the assessments database.

``get_engine()`` builds the asyncpg engine on first call from
:func:`assessment_db.config.get_async_url`; request handlers and the
startup seeder open sessions through :func:`transaction`, which owns the
commit / rollback.  ``dispose_engine()`` closes the pool at shutdown so the
next ``get_engine()`` starts fresh (tests rely on that).

Pool tuning:
    PG_POOL_SIZE      persistent connections (default 5)
    PG_MAX_OVERFLOW   extra connections under load (default 10)
    PG_POOL_RECYCLE   seconds before a connection is replaced (default 1800)
    PG_ECHO           "1" / "true" logs every SQL statement
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from assessment_db.config import get_async_url

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _engine_options() -> dict:
    return {
        "pool_size": int(os.getenv("PG_POOL_SIZE", "5")),
        "max_overflow": int(os.getenv("PG_MAX_OVERFLOW", "10")),
        "pool_recycle": int(os.getenv("PG_POOL_RECYCLE", "1800")),
        "echo": os.getenv("PG_ECHO", "").strip().lower() in ("1", "true", "yes"),
        "pool_pre_ping": True,
    }


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        options = _engine_options()
        _engine = create_async_engine(get_async_url(), **options)
        logger.info(
            "database engine created: pool_size=%d max_overflow=%d",
            options["pool_size"], options["max_overflow"],
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Sessions keep loaded documents readable after commit."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _session_factory


@asynccontextmanager
async def transaction() -> AsyncIterator[AsyncSession]:
    """One session, committed when the block exits cleanly, rolled back otherwise."""
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
