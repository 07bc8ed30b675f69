"""
Engine and session factory construction.

SQLite connections are switched to explicit ``BEGIN IMMEDIATE`` transactions so
that concurrent booking transactions are serialized at the database level.
Connections carrying the ``DEFERRED_BEGIN`` execution option open a plain
``BEGIN`` instead, so read-only work does not queue behind writers.
PostgreSQL relies on row locks taken by the conflict query and on the
reservation table's unique index and overlap exclusion constraint.
"""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

_DEFAULT_POOL_KWARGS: dict[str, Any] = {
    "pool_size": 5,
    "max_overflow": 10,
    "pool_timeout": 10,
    "pool_recycle": 1800,
    "pool_pre_ping": True,
}

# Seconds a SQLite writer waits for the database lock before failing.
SQLITE_BUSY_TIMEOUT = 30

# Execution option marking a connection whose transaction only reads.
DEFERRED_BEGIN = "acadlab_deferred_begin"


def _is_memory_database(database: str | None) -> bool:
    return database in (None, "", ":memory:")


def _install_sqlite_listeners(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _sqlite_on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        # Disable pysqlite's implicit transaction handling so BEGIN is ours.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
        connection_record.info["connect_time"] = datetime.now()
        logger.debug("SQLite connection established")

    @event.listens_for(engine, "begin")
    def _sqlite_on_begin(conn: Any) -> None:
        if conn.get_execution_options().get(DEFERRED_BEGIN):
            conn.exec_driver_sql("BEGIN")
        else:
            conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(db_url: str, *, echo: bool = False) -> Engine:
    """Create an engine for the reservation store."""
    url = make_url(db_url)

    if url.get_backend_name() == "sqlite":
        kwargs: dict[str, Any] = {
            "connect_args": {"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT},
        }
        if _is_memory_database(url.database):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(db_url, echo=echo, **kwargs)
        _install_sqlite_listeners(engine)
        return engine

    engine = create_engine(db_url, echo=echo, **_DEFAULT_POOL_KWARGS)

    @event.listens_for(engine, "checkout")
    def receive_checkout(dbapi_connection: Any, connection_record: Any, connection_proxy: Any) -> None:
        logger.debug("Connection checked out from pool")

    return engine


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
