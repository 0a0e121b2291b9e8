"""Database engine and session factory creation."""

import os
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from idgate.config import Config


def _expand_sqlite_path(url: str) -> str:
    """Expand ~ in SQLite URLs and ensure parent directory exists."""
    if not url.startswith("sqlite") or ":memory:" in url:
        return url

    prefix_end = url.index("///") + 3
    prefix = url[:prefix_end]
    path = url[prefix_end:]

    abs_path = os.path.abspath(os.path.expanduser(path))
    Path(abs_path).parent.mkdir(parents=True, exist_ok=True)

    return f"{prefix}{abs_path}"


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy own BEGIN so SAVEPOINT (begin_nested) works under pysqlite.

    The sqlite3 driver otherwise starts transactions lazily on its own and
    breaks nested transactions.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")


def create_db_engine(config: Config) -> AsyncEngine:
    """Create async database engine.

    Handles SQLite and PostgreSQL with appropriate settings.
    """
    url = _expand_sqlite_path(config.database.url)

    if url.startswith("sqlite"):
        kwargs: dict[str, Any] = {}
        if ":memory:" in url:
            # An in-memory database lives only as long as its single connection
            kwargs = {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
        engine = create_async_engine(url, echo=config.database.echo, **kwargs)
        _enable_sqlite_savepoints(engine)
        return engine

    return create_async_engine(
        url,
        echo=config.database.echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory for dependency injection."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
