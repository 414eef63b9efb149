"""Execution adapters — implementations of the ExecutionAdapter protocol."""

from agentproxy.adapters._base import (
    ColumnInfo,
    ConnectionConfig,
    DatabaseType,
    ExecutionAdapter,
    ExecutionResult,
    IntrospectionLevel,
    SchemaMetadata,
    TableInfo,
)
from agentproxy.adapters._registry import connect_adapter, get_adapter, parse_db

__all__ = [
    "ColumnInfo",
    "ConnectionConfig",
    "DatabaseType",
    "ExecutionAdapter",
    "ExecutionResult",
    "IntrospectionLevel",
    "SchemaMetadata",
    "TableInfo",
    "connect_adapter",
    "get_adapter",
    "parse_db",
]
