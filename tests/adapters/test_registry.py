"""Test lazy adapter registry and connection strings."""

import pytest

from agentproxy.adapters._base import DatabaseType
from agentproxy.adapters._registry import _ADAPTER_MAP, get_adapter, parse_db
from agentproxy.errors import ConfigError


def test_get_sqlite_adapter():
    cls = get_adapter(DatabaseType.SQLITE)
    assert cls.__name__ == "SQLiteAdapter"


def test_get_duckdb_adapter():
    """DuckDB adapter class can be loaded (duckdb may or may not be installed)."""
    try:
        cls = get_adapter(DatabaseType.DUCKDB)
        assert cls.__name__ == "DuckDBAdapter"
    except ConfigError as e:
        assert "Missing driver" in str(e)
        assert "agentproxy[duckdb]" in str(e)


def test_get_postgres_adapter():
    """Postgres adapter class can be loaded (psycopg may or may not be installed)."""
    try:
        cls = get_adapter(DatabaseType.POSTGRES)
        assert cls.__name__ == "PostgresAdapter"
    except ConfigError as e:
        assert "Missing driver" in str(e)
        assert "agentproxy[postgres]" in str(e)


def test_every_type_registered():
    assert set(_ADAPTER_MAP) == set(DatabaseType)


def test_parse_db():
    config = parse_db("duckdb:path=/tmp/x.duckdb")
    assert config.db_type == DatabaseType.DUCKDB
    assert config.params == {"path": "/tmp/x.duckdb"}


def test_parse_db_dsn_keeps_equals():
    config = parse_db("postgres:dsn=postgresql://u:p@localhost/db?sslmode=require")
    assert config.db_type == DatabaseType.POSTGRES
    assert config.params["dsn"] == "postgresql://u:p@localhost/db?sslmode=require"


def test_parse_db_without_params():
    assert parse_db("sqlite:").params == {}


@pytest.mark.parametrize(
    "value,match",
    [
        ("duckdb", "type:key=val"),
        ("oracle:dsn=x", "Unknown database type"),
        ("sqlite:path", "key=value"),
    ],
)
def test_parse_db_invalid(value, match):
    with pytest.raises(ConfigError, match=match):
        parse_db(value)
