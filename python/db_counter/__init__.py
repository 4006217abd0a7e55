"""Named integer counters stored in a relational database."""

from .config import CounterDefaults, configure_defaults, get_defaults, reset_defaults
from .counter import Counter
from .database import EngineCache, dispose_engines, get_engine
from .errors import ConfigurationError, CounterError, PersistenceError
from .logger import get_logger
from .schema import counter_table, create_counter_table

__all__ = [
    # Counters
    "Counter",
    # Config
    "CounterDefaults",
    "configure_defaults",
    "get_defaults",
    "reset_defaults",
    # Database
    "EngineCache",
    "get_engine",
    "dispose_engines",
    "counter_table",
    "create_counter_table",
    # Errors
    "CounterError",
    "ConfigurationError",
    "PersistenceError",
    # Logging
    "get_logger",
]
