"""
core/database.py -- Engine factory and table definitions.

SQLAlchemy Core (not ORM): the dataclasses in auth/models.py and
todos/models.py stay the domain representation, and each store maps rows
onto them. Swapping SQLite for PostgreSQL is a connection-string change.

One Engine is built per process in the API lifespan and handed to every
store, so both tables always live in the same database and the user-delete
cascade can run in a single transaction.

Schema notes:
  todos.user_id deliberately has no FOREIGN KEY. Ownership is enforced by
  the stores in the same statement as each write (see todos/store.py).
  Primary keys are caller-supplied opaque strings, not autoincrement ints.

Layer rule: core/ is the kernel. No imports from api/, auth/, or todos/.
"""

from __future__ import annotations

import logging

from sqlalchemy import Column, Index, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger("todoapi.database")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)

todos = Table(
    "todos",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("user_id", String(64), nullable=False),
    Column("title", Text, nullable=False),
    Column("priority", String(32), nullable=False),
    Column("status", String(32), nullable=False),
    Column("category", String(64), nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
    Index("ix_todos_user_id", "user_id"),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Engine factory
# ---------------------------------------------------------------------------


def create_db_engine(db_url: str, busy_timeout_ms: int = 5000) -> Engine:
    """Build the process-wide Engine and create any missing tables.

    For SQLite, check_same_thread is disabled because FastAPI runs sync route
    handlers in a threadpool, and the driver's busy timeout bounds how long a
    writer waits on a locked database instead of failing immediately.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        connect_args["timeout"] = busy_timeout_ms / 1000
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    metadata.create_all(engine)
    logger.debug("Schema ready on %s", engine.url.render_as_string(hide_password=True))
    return engine


def check_connection(engine: Engine) -> bool:
    """Return True if the database answers a trivial query. Used by /health."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        return False
    return True
