"""Process-wide default settings for counters."""

from __future__ import annotations

import os
from dataclasses import dataclass
from threading import Lock
from typing import Any

from .errors import ConfigurationError

DEFAULT_TABLENAME = "counters"

_defaults: "CounterDefaults | None" = None
_defaults_configured = False
_defaults_lock = Lock()


def _read_str(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


@dataclass(frozen=True)
class CounterDefaults:
    """Typed container for the connection settings shared by all counters."""

    dsn: str | None = None
    login: str | None = None
    password: str | None = None
    tablename: str = DEFAULT_TABLENAME

    @classmethod
    def from_env(cls) -> "CounterDefaults":
        """Build defaults from ``DB_COUNTER_*`` environment variables.

        Blank values are treated as unset, so an empty ``DB_COUNTER_TABLENAME``
        still yields the ``counters`` table.
        """

        return cls(
            dsn=_read_str(os.environ.get("DB_COUNTER_DSN")),
            login=_read_str(os.environ.get("DB_COUNTER_LOGIN")),
            password=os.environ.get("DB_COUNTER_PASSWORD") or None,
            tablename=_read_str(os.environ.get("DB_COUNTER_TABLENAME"))
            or DEFAULT_TABLENAME,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a dict suitable for logging/debugging (password redacted)."""

        return {
            "dsn": self.dsn,
            "login": self.login,
            "password_set": bool(self.password),
            "tablename": self.tablename,
        }


def configure_defaults(
    *,
    dsn: str | None = None,
    login: str | None = None,
    password: str | None = None,
    tablename: str | None = None,
    force: bool = False,
) -> CounterDefaults:
    """Install the defaults read by every counter that doesn't override them.

    Call this once at application startup, before the first counter is
    built. A second call raises :class:`ConfigurationError` unless ``force``
    is set.
    """

    global _defaults, _defaults_configured

    with _defaults_lock:
        if _defaults_configured and not force:
            raise ConfigurationError(
                "Counter defaults are already configured. "
                "Pass force=True to replace them."
            )
        _defaults = CounterDefaults(
            dsn=dsn,
            login=login,
            password=password,
            tablename=tablename or DEFAULT_TABLENAME,
        )
        _defaults_configured = True
        return _defaults


def get_defaults() -> CounterDefaults:
    """Return the configured defaults, loading them from the environment on first use."""

    global _defaults

    with _defaults_lock:
        if _defaults is None:
            _defaults = CounterDefaults.from_env()
        return _defaults


def reset_defaults() -> None:
    """Forget configured defaults so the next read reloads from the environment."""

    global _defaults, _defaults_configured

    with _defaults_lock:
        _defaults = None
        _defaults_configured = False
