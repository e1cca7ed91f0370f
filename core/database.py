"""
core/database.py -- Shared SQLAlchemy engine construction and id helpers.

One Engine is created per process in the API lifespan and handed to every
store. The stores own their table definitions; this module only knows how to
open (and later dispose) the connection pool.

SQLAlchemy keeps the stores database-agnostic: swapping SQLite for PostgreSQL
is a connection string change, not a rewrite.
"""

import re
import uuid

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine

# Store-assigned record ids: 32 lowercase hex chars (uuid4().hex).
_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def create_db_engine(db_url: str) -> Engine:
    """Create the process-wide Engine and verify the database is reachable.

    Raises sqlalchemy.exc.OperationalError (or a driver error) when the
    database cannot be reached, which aborts application startup.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        # FastAPI runs sync handlers in a thread pool, so a pooled SQLite
        # connection may be used from a thread other than its creator.
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    ping(engine)
    return engine


def ping(engine: Engine) -> bool:
    """Run a trivial query. Raises if the database is unreachable."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return True


def new_id() -> str:
    return uuid.uuid4().hex


def is_valid_id(value: str) -> bool:
    """Return True if value has the shape of a store-assigned id."""
    return isinstance(value, str) and bool(_ID_RE.match(value))
