"""Pytest fixtures for the ledger: a fresh schema per test.

Runs against ``TEST_DATABASE_URL`` when configured (Postgres in CI), and
otherwise against a throwaway SQLite file through aiosqlite.
"""

import os
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel
from dotenv import load_dotenv

from poker_ledger.utils.db_async import build_engine, build_sessionmaker, create_schema

load_dotenv()


def _load_database_url(tmp_path: Path) -> str:
    """Resolve the database URL for tests, enforcing an explicit opt-in."""
    test_db_url = os.getenv("TEST_DATABASE_URL")
    if not test_db_url:
        return f"sqlite+aiosqlite:///{tmp_path / 'ledger_test.db'}"
    if int(os.getenv("PYTEST_ALLOW_DB", "0")) != 1:
        raise RuntimeError(
            "Running tests against TEST_DATABASE_URL requires setting PYTEST_ALLOW_DB=1"
            " to confirm the configured database is safe to mutate."
        )
    return test_db_url


@pytest.fixture()
def database_url(tmp_path: Path) -> str:
    """Return the database URL the test should target."""
    return _load_database_url(tmp_path)


@pytest_asyncio.fixture()
async def async_engine(database_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Yield an engine with every ledger table freshly created."""
    engine = build_engine(database_url)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await create_schema(engine)
    try:
        yield engine
    finally:
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.drop_all)
        await engine.dispose()


@pytest.fixture()
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_sessionmaker(async_engine)


@pytest_asyncio.fixture()
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide a session; ledger operations commit through it as in production."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def app_client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Provide an HTTP client whose requests each get a session on the test DB."""
    from poker_ledger.main import app
    from poker_ledger.utils.db_async import get_session

    async def _get_session_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _get_session_override
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.pop(get_session, None)
