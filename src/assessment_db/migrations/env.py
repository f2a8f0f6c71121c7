"""Alembic environment for the assessments schema.

The database URL comes from ``DATABASE_URL`` / ``PG_*`` (see
:mod:`assessment_db.config`) unless one is passed explicitly with
``alembic -x url=postgresql://... upgrade head``.  Migrations run over a
plain libpq connection; only the application uses asyncpg.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from assessment_db.config import get_sync_url
from assessment_db.models import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("url") or get_sync_url()


def _skip_empty_autogenerate(context_, revision, directives) -> None:
    # `alembic revision --autogenerate` with no model changes writes nothing
    if config.cmd_opts is not None and getattr(config.cmd_opts, "autogenerate", False):
        script = directives[0]
        if script.upgrade_ops.is_empty():
            directives[:] = []


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        process_revision_directives=_skip_empty_autogenerate,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Write the migration SQL to stdout instead of applying it."""
    _configure(url=_database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(_database_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()
    engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
