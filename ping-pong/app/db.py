"""Database-backed counter storage for ping-pong service."""

import os

from db_counter import Counter, PersistenceError, create_counter_table, get_engine, get_logger

logger = get_logger(__name__)


def get_database_url() -> str:
    """Get database URL from environment (defaults to a local SQLite file)."""
    return os.getenv("DATABASE_URL", "sqlite:///./ping-pong.db")


def get_tablename() -> str:
    return os.getenv("PING_PONG_TABLENAME", "counters")


def init_db() -> None:
    """Create the counter table if it is missing."""
    create_counter_table(get_engine(get_database_url()), get_tablename())


def get_counter(counter_id: str) -> Counter:
    """Return a handle on ``counter_id``, creating its row at 0 on first use.

    Handles share one pooled engine, so every pod sees the same counters.
    Two first requests for a new id can race on the INSERT; the loser
    retries once and finds the winner's row.
    """
    try:
        return Counter(counter_id, dsn=get_database_url(), tablename=get_tablename())
    except PersistenceError as exc:
        logger.info("Retrying counter %s after failed creation: %s", counter_id, exc)
        return Counter(counter_id, dsn=get_database_url(), tablename=get_tablename())
