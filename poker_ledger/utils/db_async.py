"""Async SQLAlchemy engine and session helpers."""

import ssl
from typing import Any, AsyncGenerator, Dict, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel

from poker_ledger.config import settings


def _normalize_db_url(url: str) -> str:
    """Select an async driver for bare Postgres and SQLite URLs.

    "postgresql://..." and "postgres://..." become "postgresql+asyncpg://...",
    "sqlite://..." becomes "sqlite+aiosqlite://...". Explicit drivers are kept.
    """
    try:
        u = make_url(url)
        driver = (u.drivername or "").lower()
        if "+" in driver:
            return u.render_as_string(hide_password=False)
        if driver in ("postgres", "postgresql"):
            u = u.set(drivername="postgresql+asyncpg")
        elif driver == "sqlite":
            u = u.set(drivername="sqlite+aiosqlite")
        return u.render_as_string(hide_password=False)
    except Exception:
        # Fallback string-level normalization for odd/partial URLs
        if url.startswith("postgresql://"):
            return "postgresql+asyncpg://" + url.split("://", 1)[1]
        if url.startswith("postgres://"):
            return "postgresql+asyncpg://" + url.split("://", 1)[1]
        if url.startswith("sqlite://"):
            return "sqlite+aiosqlite://" + url.split("://", 1)[1]
        return url


def prepare_connection(url: str) -> Tuple[str, Dict[str, Any]]:
    """Strip query args asyncpg rejects and derive driver connect kwargs."""

    normalized_url = _normalize_db_url(url)
    if normalized_url.startswith("sqlite"):
        return normalized_url, {}

    split = urlsplit(normalized_url)
    query_pairs = parse_qsl(split.query, keep_blank_values=True)

    sslmode = None
    filtered_pairs = []
    for key, value in query_pairs:
        if key == "sslmode":
            sslmode = value
            continue
        if key == "channel_binding":
            # asyncpg does not accept this kwarg; drop it.
            continue
        filtered_pairs.append((key, value))

    cleaned_query = urlencode(filtered_pairs, doseq=True)
    cleaned_url = urlunsplit(split._replace(query=cleaned_query)).rstrip("?")

    connect_args: Dict[str, Any] = {}
    if sslmode:
        mode = sslmode.lower()
        if mode == "disable":
            connect_args["ssl"] = False
        elif mode in {"allow", "prefer"}:
            pass
        elif mode == "require":
            ssl_context = ssl.create_default_context()
            ssl_context.check_hostname = False
            ssl_context.verify_mode = ssl.CERT_NONE
            connect_args["ssl"] = ssl_context
        elif mode == "verify-ca":
            ssl_context = ssl.create_default_context()
            ssl_context.check_hostname = False
            connect_args["ssl"] = ssl_context
        else:
            connect_args["ssl"] = ssl.create_default_context()

    return cleaned_url, connect_args


def _configure_sqlite(engine: AsyncEngine) -> None:
    """Turn on foreign keys and let SQLAlchemy own BEGIN so savepoints work."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):  # type: ignore[no-untyped-def]
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):  # type: ignore[no-untyped-def]
        conn.exec_driver_sql("BEGIN")


def build_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine for ``url`` with driver-specific setup applied."""
    cleaned_url, connect_args = prepare_connection(url)
    if cleaned_url.startswith("sqlite"):
        engine = create_async_engine(cleaned_url, echo=echo)
        _configure_sqlite(engine)
        return engine
    return create_async_engine(
        cleaned_url,
        echo=echo,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


DATABASE_URL, _ = prepare_connection(settings.database_url)

# SQL output is routed through logging_config when sql_echo is set
engine = build_engine(settings.database_url)
SessionLocal = build_sessionmaker(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session."""
    async with SessionLocal() as session:
        yield session


async def create_schema(target: AsyncEngine) -> None:
    """Create every ledger table on ``target``."""
    # Import locally so metadata is populated without circular imports
    from poker_ledger.schemas import events, games, players, season_players, seasons  # noqa: F401

    async with target.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def init_db():
    """Initialize the database (create tables)."""
    await create_schema(engine)


async def dispose_engine() -> None:
    """Dispose of the async engine and its connection pool."""
    await engine.dispose()


def describe_database_url(url: str) -> str:
    """Return a sanitized, human-readable description of the DB URL for logging.

    Example: "postgresql+asyncpg://user@host:5432/dbname"
    Passwords are never included.
    """
    try:
        u = make_url(url)
        if u.drivername.startswith("sqlite"):
            return f"{u.drivername}:///{u.database or ':memory:'}"
        auth = u.username or "?"
        host = u.host or "?"
        port = f":{u.port}" if u.port else ""
        db = u.database or "?"
        return f"{u.drivername}://{auth}@{host}{port}/{db}"
    except Exception:
        return "<unparseable database URL>"
