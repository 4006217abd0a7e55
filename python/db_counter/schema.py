"""Table definition for counter rows.

Column names are fixed; only the table name varies. The equivalent DDL is::

    CREATE TABLE counters (
        counter_id  VARCHAR(64) PRIMARY KEY,
        value       INTEGER NOT NULL DEFAULT 0
    );
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy import Column, Integer, MetaData, String, Table, text
from sqlalchemy.engine import Connection, Engine

from .database import transaction
from .logger import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=None)
def counter_table(tablename: str) -> Table:
    """Return the Core table for ``tablename``.

    A dotted name such as ``"reporting.counters"`` is read as
    ``schema.table``. The same :class:`Table` object is returned for a given
    name so that statements built against it hit SQLAlchemy's compiled cache.
    """

    schema, _, name = tablename.rpartition(".")
    return Table(
        name,
        MetaData(),
        Column("counter_id", String(64), primary_key=True),
        Column(
            "value", Integer, nullable=False, default=0, server_default=text("0")
        ),
        schema=schema or None,
    )


def create_counter_table(bind: Engine | Connection, tablename: str = "counters") -> Table:
    """Create the counter table if it does not exist yet."""

    table = counter_table(tablename)
    with transaction(bind) as conn:
        table.create(conn, checkfirst=True)
    logger.debug("Ensured counter table %s exists", tablename)
    return table
