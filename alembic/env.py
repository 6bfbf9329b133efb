"""Migrations for the ledger tables, run through the async engine."""
import asyncio
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel import SQLModel

from poker_ledger.config import Settings
from poker_ledger.schemas import events, games, players, season_players, seasons  # noqa: F401
from poker_ledger.schemas.base import Money, UTCDateTime
from poker_ledger.utils.db_async import prepare_connection

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Exported variables beat the repo-root .env.
load_dotenv(Path(__file__).resolve().parent.parent / ".env", override=False)

# Same DATABASE_URL resolution as the app, SQLite file included.
DB_URL, connect_args = prepare_connection(Settings().database_url)

config.set_main_option("sqlalchemy.url", DB_URL)

target_metadata = SQLModel.metadata


def render_item(type_, obj, autogen_context):
    """Emit the ledger column types by name in autogenerated revisions."""
    if type_ == "type" and isinstance(obj, (Money, UTCDateTime)):
        autogen_context.imports.add(
            "from poker_ledger.schemas.base import Money, UTCDateTime"
        )
        return f"{type(obj).__name__}()"
    return False


def run_migrations_offline() -> None:
    """Emit SQL for the ledger revisions without connecting."""
    context.configure(
        url=DB_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        render_item=render_item,
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        render_item=render_item,
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Apply the ledger revisions over an async connection."""
    connectable: AsyncEngine = create_async_engine(
        DB_URL,
        poolclass=pool.NullPool,
        future=True,
        connect_args=connect_args,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
