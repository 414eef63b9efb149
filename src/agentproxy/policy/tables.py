"""CTE-aware table extraction and name normalization."""

from __future__ import annotations

from sqlglot import exp


def extract_tables(statement: exp.Expression) -> list[str]:
    """Extract the physical tables a statement reads or writes.

    CTE names are resolved away. Names are returned in the order they are
    first met while walking the tree, without duplicates.
    """
    cte_names = {cte.alias_or_name for cte in statement.find_all(exp.CTE)}
    tables: list[str] = []
    for table in statement.find_all(exp.Table, bfs=False):
        if not table.name:
            continue  # table-valued functions
        if not table.db and table.name in cte_names:
            continue
        name = qualified_name(table)
        if name not in tables:
            tables.append(name)
    return tables


def target_table(node: exp.Expression | None) -> str | None:
    """Resolve the table a DML statement targets (INSERT INTO t (a, b) included)."""
    if node is None:
        return None
    if isinstance(node, exp.Table):
        return qualified_name(node) if node.name else None
    table = node.find(exp.Table)
    return qualified_name(table) if table is not None and table.name else None


def qualified_name(table: exp.Table) -> str:
    """Join catalog, schema and table identifiers with '.', quotes stripped."""
    return ".".join(part.name for part in table.parts)
