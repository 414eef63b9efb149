"""Lazy adapter loading — imports driver modules only when needed."""

from __future__ import annotations

import importlib

from agentproxy.adapters._base import ConnectionConfig, DatabaseType, ExecutionAdapter
from agentproxy.errors import ConfigError

_ADAPTER_MAP: dict[DatabaseType, tuple[str, str]] = {
    DatabaseType.DUCKDB: ("agentproxy.adapters.duckdb", "DuckDBAdapter"),
    DatabaseType.POSTGRES: ("agentproxy.adapters.postgres", "PostgresAdapter"),
    DatabaseType.SQLITE: ("agentproxy.adapters.sqlite", "SQLiteAdapter"),
}

_EXTRAS: dict[DatabaseType, str] = {
    DatabaseType.DUCKDB: "duckdb",
    DatabaseType.POSTGRES: "postgres",
}


def get_adapter(db_type: DatabaseType) -> type[ExecutionAdapter]:
    """Lazy-load an adapter class by database type.

    Raises ConfigError with install hint if the driver package is missing.
    """
    entry = _ADAPTER_MAP.get(db_type)
    if entry is None:
        raise ConfigError(f"No adapter registered for {db_type.value}")

    module_path, class_name = entry
    try:
        mod = importlib.import_module(module_path)
    except ImportError as e:
        extra = _EXTRAS.get(db_type, "all")
        raise ConfigError(
            f"Missing driver for {db_type.value}. "
            f"Install with: pip install 'agentproxy[{extra}]'"
        ) from e

    return getattr(mod, class_name)


def parse_db(value: str) -> ConnectionConfig:
    """Parse a connection string of the form 'type:key=val,key=val'."""
    if ":" not in value:
        raise ConfigError(f"Connection '{value}' is not in 'type:key=val' format")
    db_type_str, params_str = value.split(":", 1)

    try:
        db_type = DatabaseType(db_type_str)
    except ValueError as e:
        valid = ", ".join(t.value for t in DatabaseType)
        raise ConfigError(f"Unknown database type '{db_type_str}'. Valid: {valid}") from e

    params: dict[str, str] = {}
    if params_str:
        for part in params_str.split(","):
            if "=" not in part:
                raise ConfigError(f"Expected key=value pair, got '{part}'")
            k, v = part.split("=", 1)
            params[k.strip()] = v.strip()

    return ConnectionConfig(name=db_type_str, db_type=db_type, params=params)


async def connect_adapter(config: ConnectionConfig) -> ExecutionAdapter:
    """Instantiate and connect the adapter for a connection config."""
    adapter = get_adapter(config.db_type)()
    await adapter.connect(config)
    return adapter
