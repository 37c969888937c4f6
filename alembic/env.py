"""Alembic environment: migrations for the forum schema (authors, sessions, invites, content).

Design Decisions:
    - DATABASE_URL wins over alembic.ini; both go through config.async_database_url so
      migrations and the app agree on the asyncpg driver
    - The pepper is not needed here, so Settings is not loaded
    - SQLite (local development) migrates in batch mode; column types are compared
      on autogenerate so length changes to names and codes are picked up
"""

import asyncio
import os
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

from backalley.config import async_database_url
from backalley.db.base import Base
import backalley.models  # noqa: F401  (populates Base.metadata)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    return async_database_url(
        os.environ.get("DATABASE_URL") or config.get_main_option("sqlalchemy.url"),
    )


def run_migrations_offline() -> None:
    """Emit SQL for the forum schema without connecting."""
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = _database_url()
    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
