"""Custom exceptions for database-backed counters."""

from __future__ import annotations


class CounterError(RuntimeError):
    """Base error for counter operations."""


class ConfigurationError(CounterError):
    """Raised when a counter cannot be built from the supplied settings."""


class PersistenceError(CounterError):
    """Raised when the database rejects a counter read or write."""

    def __init__(self, message: str, *, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause
