"""Ping-pong test service for Hit platform.

A simple counter service to validate the full pipeline:
- Local development
- Multi-pod deployment sharing one database
- SDK integration

Counters are rows in the ``counters`` table (see ``DATABASE_URL``), so every
pod instance reads and updates the same values when scaled.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, status

from app.db import get_counter, init_db
from app.schemas import CounterResponse
from db_counter import ConfigurationError, PersistenceError, dispose_engines, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield
    dispose_engines()


app = FastAPI(
    title="Hit Ping-Pong Service",
    description="Test service with database-backed counters",
    version="1.1.0",
    lifespan=lifespan,
)


def _unavailable(exc: Exception) -> HTTPException:
    logger.warning("Counter storage unavailable: %s", exc)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=str(exc),
    )


@app.get("/")
def root():
    """Health check endpoint."""
    return {
        "service": "hit-ping-pong",
        "version": "1.1.0",
        "status": "ok",
        "storage": "database",
    }


@app.get("/counter/{counter_id}", response_model=CounterResponse)
def read_counter(counter_id: str):
    """Get current counter value.

    Args:
        counter_id: Counter identifier

    Returns:
        Counter value (initialized to 0 if doesn't exist)
    """
    try:
        counter = get_counter(counter_id)
        return CounterResponse(id=counter_id, value=counter.value() or 0)
    except (ConfigurationError, PersistenceError) as exc:
        raise _unavailable(exc) from exc


@app.post("/counter/{counter_id}/increment", response_model=CounterResponse)
def increment_counter(counter_id: str):
    """Increment counter and return new value.

    Args:
        counter_id: Counter identifier

    Returns:
        Updated counter value
    """
    try:
        counter = get_counter(counter_id)
        counter.increment()
        return CounterResponse(id=counter_id, value=counter.value() or 0)
    except (ConfigurationError, PersistenceError) as exc:
        raise _unavailable(exc) from exc


@app.post("/counter/{counter_id}/decrement", response_model=CounterResponse)
def decrement_counter(counter_id: str):
    try:
        counter = get_counter(counter_id)
        counter.decrement()
        return CounterResponse(id=counter_id, value=counter.value() or 0)
    except (ConfigurationError, PersistenceError) as exc:
        raise _unavailable(exc) from exc
