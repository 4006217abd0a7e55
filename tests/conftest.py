from __future__ import annotations

import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT / "python", REPO_ROOT / "ping-pong"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from sqlalchemy import create_engine

from db_counter import create_counter_table, dispose_engines, reset_defaults

ENV_VARS = (
    "DB_COUNTER_DSN",
    "DB_COUNTER_LOGIN",
    "DB_COUNTER_PASSWORD",
    "DB_COUNTER_TABLENAME",
)


@pytest.fixture(autouse=True)
def _isolated_defaults(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_defaults()
    yield
    reset_defaults()
    dispose_engines()


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'counters.db'}"


@pytest.fixture
def engine(db_url):
    engine = create_engine(db_url)
    create_counter_table(engine)
    yield engine
    engine.dispose()
