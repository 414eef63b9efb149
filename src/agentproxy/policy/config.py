"""Policy model and policy-file loading.

A policy document looks like::

    tenant_column: tenant_id        # optional
    tables:
      orders:
        allow_ops: [select, update]
        required_filters:
          - column: tenant_id
          - column: created_at
            operator: ">="
        deny_columns: [card_number]

YAML (``.yaml``/``.yml``) and JSON (``.json``) are recognised by extension;
any other extension is tried as JSON first, then YAML.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

import yaml

from agentproxy.errors import ConfigError
from agentproxy.policy._types import Operation

DEFAULT_TENANT_COLUMN = "tenant_id"
# Operator spellings accepted in required_filters, mapped to their canonical form.
OPERATORS: dict[str, str] = {
    "=": "=",
    "==": "=",
    "!=": "!=",
    "<>": "!=",
    "<": "<",
    "<=": "<=",
    ">": ">",
    ">=": ">=",
    "in": "in",
    "like": "like",
    "ilike": "ilike",
    "is": "is",
    "between": "between",
}


@dataclass(frozen=True)
class RequiredFilter:
    """A column that must be filtered on. No operator means any predicate counts."""

    column: str
    operator: str | None = None

    def to_dict(self) -> dict[str, str]:
        if self.operator is None:
            return {"column": self.column}
        return {"column": self.column, "operator": self.operator}


@dataclass(frozen=True)
class TablePolicy:
    allow_ops: tuple[Operation, ...] = ()
    required_filters: tuple[RequiredFilter, ...] = ()
    deny_columns: tuple[str, ...] = ()

    def allows(self, operation: Operation) -> bool:
        """Empty allow_ops means no restriction."""
        return not self.allow_ops or operation in self.allow_ops

    def to_dict(self) -> dict[str, list]:
        return {
            "allow_ops": [op.value for op in self.allow_ops],
            "required_filters": [f.to_dict() for f in self.required_filters],
            "deny_columns": list(self.deny_columns),
        }


@dataclass(frozen=True)
class PolicyConfig:
    tables: Mapping[str, TablePolicy] = field(default_factory=lambda: MappingProxyType({}))
    tenant_column: str = DEFAULT_TENANT_COLUMN

    def table_policy(self, table: str) -> TablePolicy | None:
        """Look up by exact name, then by the unqualified table name."""
        policy = self.tables.get(table)
        if policy is None and "." in table:
            policy = self.tables.get(table.rsplit(".", 1)[1])
        return policy

    def to_dict(self) -> dict:
        return {
            "tenant_column": self.tenant_column,
            "tables": {name: tp.to_dict() for name, tp in self.tables.items()},
        }


def parse_policy(data: object) -> PolicyConfig:
    """Build a frozen PolicyConfig from a decoded policy document."""
    if not isinstance(data, dict):
        raise ConfigError("policy document must be a mapping")
    tables_raw = data.get("tables")
    if not isinstance(tables_raw, dict):
        raise ConfigError("policy document requires a 'tables' mapping")

    tenant_column = data.get("tenant_column", DEFAULT_TENANT_COLUMN)
    if not isinstance(tenant_column, str) or not tenant_column:
        raise ConfigError("'tenant_column' must be a non-empty string")

    tables = {
        str(name): _parse_table_policy(str(name), entry)
        for name, entry in tables_raw.items()
    }
    return PolicyConfig(tables=MappingProxyType(tables), tenant_column=tenant_column)


def _parse_table_policy(name: str, entry: object) -> TablePolicy:
    if entry is None:
        return TablePolicy()
    if not isinstance(entry, dict):
        raise ConfigError(f"policy for table '{name}' must be a mapping")

    allow_ops: list[Operation] = []
    for op in _string_list(entry.get("allow_ops"), f"tables.{name}.allow_ops"):
        try:
            allow_ops.append(Operation(op.lower()))
        except ValueError as e:
            valid = ", ".join(o.value for o in Operation)
            raise ConfigError(
                f"unknown operation '{op}' in tables.{name}.allow_ops (valid: {valid})"
            ) from e

    filters: list[RequiredFilter] = []
    for item in entry.get("required_filters") or []:
        if isinstance(item, str):
            item = {"column": item}
        if not isinstance(item, dict) or not item.get("column"):
            raise ConfigError(f"tables.{name}.required_filters entries need a 'column'")
        operator = item.get("operator")
        if operator is not None:
            operator = str(operator).strip().lower()
            if operator not in OPERATORS:
                raise ConfigError(
                    f"unknown operator '{operator}' in tables.{name}.required_filters"
                )
            operator = OPERATORS[operator]
        filters.append(RequiredFilter(column=str(item["column"]), operator=operator))

    deny = _string_list(entry.get("deny_columns"), f"tables.{name}.deny_columns")
    return TablePolicy(
        allow_ops=tuple(allow_ops),
        required_filters=tuple(filters),
        deny_columns=tuple(deny),
    )


def _string_list(value: object, where: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{where} must be a list of strings")
    return value


def load_policy(path: str | Path) -> PolicyConfig:
    """Read and parse a policy file. Any failure raises ConfigError."""
    path = Path(path)
    try:
        content = path.read_text()
    except OSError as e:
        raise ConfigError(f"failed to read policy file: {e}") from e

    suffix = path.suffix.lower()
    try:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content)
        elif suffix == ".json":
            data = json.loads(content)
        else:
            try:
                data = json.loads(content)
            except json.JSONDecodeError:
                data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"failed to parse policy file: {e}") from e

    return parse_policy(data)
