"""Named integer counters persisted in a database table."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import func, insert, select, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from .config import get_defaults
from .database import get_engine, transaction
from .errors import ConfigurationError, PersistenceError
from .logger import get_logger
from .schema import counter_table

logger = get_logger(__name__)


class Counter:
    """Handle on one named counter row.

    The row is created on first construction for an unseen name, seeded
    with ``initial``. Increments and decrements are single ``UPDATE``
    statements, so concurrent handles on the same name, in this process or
    any other, never lose updates on engines with atomic row updates.

    Connection settings fall back to the process-wide defaults (see
    :func:`db_counter.config.configure_defaults`)::

        counter = Counter("page views", dsn="sqlite:///counters.db")
        counter.increment()
        print(counter.value())

        gauge = Counter("gauge", 42, bind=engine, tablename="gauges")

    ``counter += n`` and ``counter -= n`` issue the same single ``UPDATE``
    with delta ``n``; ``str(counter)`` and ``int(counter)`` read
    :meth:`value`.
    """

    def __init__(
        self,
        name: str,
        initial: int = 0,
        *,
        bind: Engine | Connection | None = None,
        dsn: str | None = None,
        login: str | None = None,
        password: str | None = None,
        tablename: str | None = None,
    ):
        """Bind to counter ``name``, creating its row if it does not exist yet.

        Args:
            name: Counter identifier, stored in ``counter_id``.
            initial: Starting value, used only when the row is created.
            bind: Pre-existing engine or connection. Borrowed, never closed.
            dsn: SQLAlchemy URL, used when ``bind`` is not supplied.
            login: Database user folded into ``dsn``.
            password: Database password folded into ``dsn``.
            tablename: Counter table, defaults to the configured table or ``counters``.

        Raises:
            ConfigurationError: If ``name`` is empty, or neither ``bind`` nor
                                a DSN is available.
            PersistenceError: If the counter row cannot be read or created.
        """
        if not name:
            raise ConfigurationError("No counter name supplied")

        defaults = get_defaults()
        dsn = dsn or defaults.dsn
        login = login or defaults.login
        password = password or defaults.password

        if bind is None and not dsn:
            raise ConfigurationError(
                "Unable to connect to database: no connection supplied and no DSN "
                "configured. Pass bind= or dsn=, or call configure_defaults()."
            )

        self._name = name
        self._initial = initial or 0
        self._tablename = tablename or defaults.tablename
        self._table = counter_table(self._tablename)
        self._bind = bind if bind is not None else get_engine(dsn, login, password)

        self._init()

    @property
    def name(self) -> str:
        return self._name

    @property
    def tablename(self) -> str:
        return self._tablename

    def _init(self) -> None:
        # Two handles creating the same new name at once race on the INSERT;
        # the primary key rejects the loser and construction fails.
        table = self._table
        try:
            with transaction(self._bind) as conn:
                exists = conn.execute(
                    select(func.count())
                    .select_from(table)
                    .where(table.c.counter_id == self._name)
                ).scalar_one()
                if not exists:
                    conn.execute(
                        insert(table).values(
                            counter_id=self._name, value=self._initial
                        )
                    )
                    logger.debug(
                        "Created counter %s in %s with value %s",
                        self._name,
                        self._tablename,
                        self._initial,
                    )
        except SQLAlchemyError as exc:
            logger.error("Error creating counter record %s: %s", self._name, exc)
            raise PersistenceError(
                f"Error creating counter record {self._name!r} in {self._tablename!r}: {exc}",
                cause=exc,
            ) from exc

    def _execute(self, statement: Any, action: str, *, fetch: bool = False) -> Any:
        """Run one statement; return the first row when ``fetch``, else the rowcount."""
        try:
            with transaction(self._bind) as conn:
                result = conn.execute(statement)
                return result.first() if fetch else result.rowcount
        except SQLAlchemyError as exc:
            logger.error("Failed to %s counter %s: %s", action, self._name, exc)
            raise PersistenceError(
                f"Failed to {action} counter {self._name!r}: {exc}", cause=exc
            ) from exc

    def _add(self, delta: int) -> None:
        table = self._table
        rowcount = self._execute(
            update(table)
            .where(table.c.counter_id == self._name)
            .values(value=table.c.value + delta),
            "update",
        )
        if rowcount == 0:
            logger.debug("Counter %s has no row; update skipped", self._name)

    def increment(self) -> None:
        """Increase the counter by one."""
        self._add(1)

    def decrement(self) -> None:
        """Decrease the counter by one."""
        self._add(-1)

    def value(self) -> Optional[int]:
        """Return the current value, or ``None`` if the row is missing."""
        table = self._table
        row = self._execute(
            select(table.c.value).where(table.c.counter_id == self._name),
            "read",
            fetch=True,
        )
        if row is None:
            return None
        return row[0]

    # File-counter compatibility: there is nothing to lock.
    def lock(self) -> bool:
        return False

    def unlock(self) -> bool:
        return False

    def locked(self) -> bool:
        return False

    def __iadd__(self, other: Any) -> "Counter":
        if not isinstance(other, int) or isinstance(other, bool):
            return NotImplemented
        self._add(other)
        return self

    def __isub__(self, other: Any) -> "Counter":
        if not isinstance(other, int) or isinstance(other, bool):
            return NotImplemented
        self._add(-other)
        return self

    def __int__(self) -> int:
        current = self.value()
        if current is None:
            raise PersistenceError(
                f"Counter {self._name!r} has no row in {self._tablename!r}"
            )
        return current

    def __str__(self) -> str:
        current = self.value()
        return "" if current is None else str(current)

    def __repr__(self) -> str:
        return f"<Counter(name={self._name!r}, tablename={self._tablename!r})>"
