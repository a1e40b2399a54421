"""Alembic environment — migrates the campaign / projects / investments schema.

Design Decisions:
    - DATABASE_URL goes through seedchain.config.Settings, so migrations and the API
      apply the same postgresql:// → postgresql+asyncpg:// conversion;
      alembic.ini is used only when DATABASE_URL is unset
    - compare_type=True: amounts live in NUMERIC(39,0) columns and autogenerate
      must notice precision changes
    - render_as_batch on SQLite: local ledgers need ALTER TABLE emulation
"""

import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

import seedchain.models  # noqa: F401  (campaign, projects, investments)
from seedchain.config import get_settings
from seedchain.db.base import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def ledger_database_url() -> str:
    if os.environ.get("DATABASE_URL"):
        return get_settings().database_url
    return config.get_main_option("sqlalchemy.url")


def _configure(url: str, **kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        render_as_batch=url.startswith("sqlite"),
        **kwargs,
    )


def _apply_on(connection: Connection, url: str) -> None:
    _configure(url, connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def _apply_online(url: str) -> None:
    engine = create_async_engine(url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_apply_on, url)
    finally:
        await engine.dispose()


url = ledger_database_url()
if context.is_offline_mode():
    _configure(url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()
else:
    asyncio.run(_apply_online(url))
