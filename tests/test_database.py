from __future__ import annotations

import pytest
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import ArgumentError

from db_counter import database
from db_counter.database import EngineCache, build_url, transaction
from db_counter.errors import ConfigurationError
from db_counter.schema import counter_table, create_counter_table


def test_build_url_folds_credentials():
    url = build_url("mysql+pymysql://db.internal/app", "counter", "s3cret")

    assert url.username == "counter"
    assert url.password == "s3cret"
    assert url.host == "db.internal"


def test_build_url_keeps_embedded_credentials():
    url = build_url("mysql+pymysql://owner:pw@db.internal/app")

    assert url.username == "owner"
    assert url.password == "pw"


def test_build_url_rejects_garbage():
    with pytest.raises(ConfigurationError):
        build_url("definitely not a url")


@pytest.mark.parametrize(
    "dsn",
    [
        "postgres://db.internal/app",
        "postgresql://db.internal/app",
        "postgresql+psycopg2://db.internal/app",
    ],
)
def test_postgres_urls_use_psycopg3_when_available(monkeypatch, dsn):
    monkeypatch.setattr(database, "_psycopg_available", lambda: True)

    assert build_url(dsn).drivername == "postgresql+psycopg"


def test_postgres_alias_normalised_without_psycopg3(monkeypatch):
    monkeypatch.setattr(database, "_psycopg_available", lambda: False)

    assert build_url("postgres://db.internal/app").drivername == "postgresql"
    assert build_url("postgresql+psycopg2://db.internal/app").drivername == (
        "postgresql+psycopg2"
    )


def test_engine_cache_reuses_engines(tmp_path):
    cache = EngineCache()
    url = f"sqlite:///{tmp_path / 'a.db'}"

    first = cache.get_engine(url)
    assert cache.get_engine(url) is first
    assert cache.get_engine(f"sqlite:///{tmp_path / 'b.db'}") is not first
    assert len(cache) == 2

    cache.dispose()
    assert len(cache) == 0
    assert cache.get_engine(url) is not first
    cache.dispose()


def test_engine_cache_keys_on_credentials(tmp_path):
    cache = EngineCache()
    url = f"sqlite:///{tmp_path / 'a.db'}"

    assert cache.get_engine(url, "alice") is not cache.get_engine(url, "bob")
    cache.dispose()


def test_create_counter_table_is_idempotent(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'schema.db'}")
    try:
        create_counter_table(engine, "gauges")
        create_counter_table(engine, "gauges")

        columns = {col["name"]: col for col in inspect(engine).get_columns("gauges")}
        assert set(columns) == {"counter_id", "value"}
        assert columns["counter_id"]["primary_key"] == 1
        assert columns["value"]["nullable"] is False
    finally:
        engine.dispose()


def test_counter_table_is_shared_per_name():
    assert counter_table("counters") is counter_table("counters")
    assert counter_table("counters") is not counter_table("gauges")


def test_transaction_commits_on_idle_connection(engine):
    with engine.connect() as conn:
        with transaction(conn) as inner:
            inner.execute(text("INSERT INTO counters VALUES ('a', 1)"))
        assert not conn.in_transaction()

    with engine.connect() as conn:
        assert conn.execute(text("SELECT value FROM counters")).scalar_one() == 1


def test_transaction_leaves_open_transaction_to_owner(engine):
    with engine.connect() as conn:
        conn.begin()
        with transaction(conn) as inner:
            inner.execute(text("INSERT INTO counters VALUES ('a', 1)"))
        assert conn.in_transaction()
        conn.rollback()

    with engine.connect() as conn:
        assert conn.execute(text("SELECT COUNT(*) FROM counters")).scalar_one() == 0


def test_build_url_ignores_credentials_for_sqlite(tmp_path):
    url = build_url(f"sqlite:///{tmp_path / 'a.db'}", "app", "pw")

    assert url.username is None
    assert url.password is None


def test_missing_driver_raises_configuration_error(monkeypatch):
    def _no_driver(*args, **kwargs):
        raise ModuleNotFoundError("No module named 'MySQLdb'")

    monkeypatch.setattr(database, "create_engine", _no_driver)
    cache = EngineCache()

    with pytest.raises(ConfigurationError, match="not installed") as excinfo:
        cache.get_engine("mysql+mysqldb://u:p@127.0.0.1/app")

    assert isinstance(excinfo.value.__cause__, ModuleNotFoundError)
    assert len(cache) == 0


def test_rejected_engine_settings_raise_configuration_error(monkeypatch):
    def _reject(*args, **kwargs):
        raise ArgumentError("Invalid argument(s) 'pool_size'")

    monkeypatch.setattr(database, "create_engine", _reject)

    with pytest.raises(ConfigurationError, match="pool_size"):
        EngineCache().get_engine("mysql+pymysql://db.internal/app")


def test_counter_table_reads_schema_from_dotted_name():
    table = counter_table("reporting.counters")

    assert table.schema == "reporting"
    assert table.name == "counters"
    assert counter_table("counters").schema is None
