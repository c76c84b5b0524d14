"""
clipstore.database

Shared SQLAlchemy declarative base and session management for the record store.

Overview:
- Provides a single `declarative_base()` instance (`Base`) inherited by all ORM entities.
- Includes a session generator bound to a pooled SQLite engine that every
    collaborator (watcher, command layer, garbage collector) shares.

Contents:
- Base:
    Singleton `declarative_base` instance.

- DatabaseSessionGenerator:
    - __init__(settings: DatabaseSettings):
        Creates the pooled engine and installs the SQLite connection hooks.
    - get_session() -> Session:
        Creates a plain session (deferred transaction).
    - read_session():
        Context manager yielding a session for reads; always rolled back.
    - write_session():
        Context manager yielding a session whose transaction starts with
        BEGIN IMMEDIATE, committed on success and rolled back on error.
    - init_db():
        Creates all tables defined in the ORM models.
    - dispose():
        Closes every pooled connection.

Design Notes:
- pysqlite's own transaction handling is disabled on connect so the `begin`
    event decides how each transaction starts. Readers use a deferred BEGIN
    and never block writers under WAL; writers take the write lock up front so
    a check-then-insert-then-evict sequence cannot interleave with another writer.
- Lock waits are bounded by the configured busy timeout.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool

from clipstore.config import DatabaseSettings


Base = declarative_base()
"""Singleton `declarative_base` instance for ORM models."""

SQLITE_BEGIN_OPTION = "sqlite_begin_mode"
"""Execution option selecting DEFERRED or IMMEDIATE transactions."""


def _install_sqlite_hooks(engine: Engine, busy_timeout: float) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout * 1000)}")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        mode = conn.get_execution_options().get(SQLITE_BEGIN_OPTION, "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")


class DatabaseSessionGenerator:
    """
    Utility class to generate SQLAlchemy sessions bound to a pooled SQLite engine.

    Attributes:
        engine (sqlalchemy.engine.Engine): The SQLAlchemy engine to bind sessions to.
    """

    def __init__(self, settings: DatabaseSettings):
        self.settings = settings
        if settings.db_path is not None:
            Path(settings.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.engine = create_engine(
            settings.database_url,
            poolclass=QueuePool,
            pool_size=settings.pool_size,
            echo=settings.echo,
            connect_args={
                "check_same_thread": False,
                "timeout": settings.busy_timeout,
            },
        )
        _install_sqlite_hooks(self.engine, settings.busy_timeout)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def get_session(self) -> Session:
        """
        Creates a new SQLAlchemy session bound to the configured engine.

        Returns:
            sqlalchemy.orm.Session: A new session instance.
        """
        return self._session_factory()

    @contextmanager
    def read_session(self) -> Iterator[Session]:
        session = self.get_session()
        try:
            yield session
        finally:
            session.close()

    @contextmanager
    def write_session(self) -> Iterator[Session]:
        """
        Yields a session holding the database write lock for its whole transaction.

        Yields:
            sqlalchemy.orm.Session: Committed when the block exits cleanly.
        """
        session = self.get_session()
        try:
            session.connection(execution_options={SQLITE_BEGIN_OPTION: "IMMEDIATE"})
            yield session
            session.commit()
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    def init_db(self) -> None:
        """
        Initializes the database by creating all tables defined in the ORM models.
        """
        from clipstore import models  # noqa: F401

        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
