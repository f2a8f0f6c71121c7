"""Database configuration — reads connection parameters from environment.

Supports two modes:
1. A single ``DATABASE_URL`` env var (takes precedence).
2. Individual ``PG_HOST``, ``PG_PORT``, ``PG_USER``, ``PG_PASSWORD``,
   ``PG_DATABASE`` env vars (convenient for docker-compose).

``get_sync_url()`` is used by Alembic migrations and ``get_async_url()``
by the async SQLAlchemy engine at runtime.
"""

import os

_SYNC_PREFIX = "postgresql://"
_ASYNC_PREFIX = "postgresql+asyncpg://"


def _build_url_from_parts() -> str:
    """Construct a PostgreSQL connection string from individual env vars."""
    host = os.getenv("PG_HOST", "localhost")
    port = os.getenv("PG_PORT", "5432")
    user = os.getenv("PG_USER", "assessments")
    password = os.getenv("PG_PASSWORD", "assessments")
    database = os.getenv("PG_DATABASE", "assessments")
    return f"{_SYNC_PREFIX}{user}:{password}@{host}:{port}/{database}"


def get_sync_url() -> str:
    """Return a synchronous (libpq) connection URL for Alembic."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url.replace(_ASYNC_PREFIX, _SYNC_PREFIX, 1)
    return _build_url_from_parts()


def get_async_url() -> str:
    """Return an asyncpg connection URL for the async SQLAlchemy engine."""
    url = os.getenv("DATABASE_URL") or _build_url_from_parts()
    if url.startswith(_SYNC_PREFIX):
        return url.replace(_SYNC_PREFIX, _ASYNC_PREFIX, 1)
    return url
