"""Engine resolution shared by every counter that connects through a DSN."""

from __future__ import annotations

from contextlib import contextmanager
from threading import Lock
from typing import Any, Dict, Iterator, Optional, Tuple

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Connection, Engine, make_url
from sqlalchemy.exc import ArgumentError

from .errors import ConfigurationError
from .logger import get_logger

logger = get_logger(__name__)

EngineKey = Tuple[str, Optional[str], Optional[str]]


def _psycopg_available() -> bool:
    try:
        import psycopg  # noqa: F401  # psycopg3 - import to register with SQLAlchemy
    except ImportError:
        return False
    return True


@contextmanager
def transaction(bind: Engine | Connection) -> Iterator[Connection]:
    """Yield a connection whose work is committed when the block exits.

    An engine checks out a pooled connection for the block. A borrowed
    connection that is already inside a transaction is used as-is and left
    for its owner to commit; otherwise the block is committed on its own.
    """

    if isinstance(bind, Engine):
        with bind.begin() as conn:
            yield conn
    elif bind.in_transaction():
        yield bind
    else:
        with bind.begin():
            yield bind


def build_url(dsn: str, login: str | None = None, password: str | None = None) -> URL:
    """Parse ``dsn`` and fold the login/password into it.

    Raises:
        ConfigurationError: If ``dsn`` is not a valid SQLAlchemy URL.
    """

    try:
        url = make_url(dsn)
    except ArgumentError as exc:
        raise ConfigurationError(f"Invalid database DSN {dsn!r}: {exc}") from exc

    # SQLite has no users; credentials only matter to server backends
    if url.get_backend_name() != "sqlite":
        if login:
            url = url.set(username=login)
        if password:
            url = url.set(password=password)

    # SQLAlchemy no longer accepts the bare "postgres" dialect name
    drivername = url.drivername
    if drivername == "postgres":
        drivername = "postgresql"
    if drivername in ("postgresql", "postgresql+psycopg2") and _psycopg_available():
        drivername = "postgresql+psycopg"
    if drivername != url.drivername:
        url = url.set(drivername=drivername)

    return url


class EngineCache:
    """Provides cached SQLAlchemy engines keyed by ``(dsn, login, password)``.

    Counters built from the same connection settings share one engine, so
    connection pooling and statement caching happen once per database rather
    than once per counter. Engines handed out here belong to the cache; call
    :meth:`dispose` at shutdown to release them.
    """

    def __init__(self) -> None:
        self._engines: Dict[EngineKey, Engine] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._engines)

    def get_engine(
        self,
        dsn: str,
        login: str | None = None,
        password: str | None = None,
        **engine_kwargs: Any,
    ) -> Engine:
        """Return the cached engine for these settings, creating it on first use."""

        key: EngineKey = (dsn, login, password)
        with self._lock:
            engine = self._engines.get(key)
            if engine is not None:
                return engine

            url = build_url(dsn, login, password)
            if url.get_backend_name() != "sqlite":
                pool_defaults = {
                    "pool_size": 2,
                    "max_overflow": 3,
                    "pool_timeout": 30,
                    "pool_recycle": 1800,
                }
                for pool_key, pool_value in pool_defaults.items():
                    engine_kwargs.setdefault(pool_key, pool_value)

            logger.info(
                "Creating SQLAlchemy engine for %s",
                url.render_as_string(hide_password=True),
            )
            try:
                engine = create_engine(url, pool_pre_ping=True, **engine_kwargs)
            except ArgumentError as exc:
                raise ConfigurationError(
                    f"Invalid database settings for {url.render_as_string(hide_password=True)}: {exc}"
                ) from exc
            except ImportError as exc:
                raise ConfigurationError(
                    f"Database driver for {url.drivername!r} is not installed: {exc}"
                ) from exc
            self._engines[key] = engine
            return engine

    def dispose(self) -> None:
        """Dispose all cached engines (useful for graceful shutdown)."""

        with self._lock:
            for key, engine in list(self._engines.items()):
                try:
                    engine.dispose()
                    logger.info(
                        "Disposed engine %s",
                        engine.url.render_as_string(hide_password=True),
                    )
                except Exception as exc:  # pragma: no cover
                    logger.warning("Failed to dispose engine for %s: %s", key[0], exc)
            self._engines.clear()


_engine_cache = EngineCache()


def get_engine(
    dsn: str, login: str | None = None, password: str | None = None
) -> Engine:
    """Connect, or reuse the already-open engine for the same settings."""

    return _engine_cache.get_engine(dsn, login, password)


def dispose_engines() -> None:
    """Dispose every engine handed out by :func:`get_engine`."""

    _engine_cache.dispose()
