"""Structural column and predicate extraction.

Rules ask "is this column filtered on" or "is this column referenced". Both
are answered from the parsed tree, so identifiers inside string literals or
comments never count.
"""

from __future__ import annotations

from sqlglot import exp

_BINARY_OPERATORS: dict[type[exp.Expression], str] = {
    exp.EQ: "=",
    exp.NEQ: "!=",
    exp.LT: "<",
    exp.LTE: "<=",
    exp.GT: ">",
    exp.GTE: ">=",
    exp.Like: "like",
    exp.ILike: "ilike",
    exp.Is: "is",
}

_UNARY_OPERATORS: dict[type[exp.Expression], str] = {
    exp.In: "in",
    exp.Between: "between",
}

# Operator as seen from the column when the column is the right operand.
_MIRRORED = {"<": ">", "<=": ">=", ">": "<", ">=": "<="}


def filter_conditions(statement: exp.Expression) -> list[exp.Expression]:
    """Every WHERE condition and JOIN ... ON condition in the tree."""
    conditions = [where.this for where in statement.find_all(exp.Where)]
    for join in statement.find_all(exp.Join):
        on = join.args.get("on")
        if on is not None:
            conditions.append(on)
    return conditions


def filtered_columns(statement: exp.Expression) -> dict[str, set[str]]:
    """Map lowercase column name -> operators it is compared with in filters."""
    found: dict[str, set[str]] = {}

    def record(node: exp.Expression | None, op: str) -> None:
        node = _unwrap(node)
        if isinstance(node, exp.Column) and node.name:
            found.setdefault(node.name.lower(), set()).add(op)

    for condition in filter_conditions(statement):
        for node in condition.find_all(*_BINARY_OPERATORS, *_UNARY_OPERATORS):
            op = _BINARY_OPERATORS.get(type(node))
            if op is not None:
                record(node.left, op)
                record(node.right, _MIRRORED.get(op, op))
            else:
                record(node.this, _UNARY_OPERATORS[type(node)])
    return found


def inserted_columns(statement: exp.Expression) -> list[str]:
    """Lowercase names from an INSERT column list; empty for anything else."""
    if not isinstance(statement, exp.Insert) or not isinstance(statement.this, exp.Schema):
        return []
    return [e.name.lower() for e in statement.this.expressions if e.name]


def referenced_columns(statement: exp.Expression) -> set[str]:
    """Lowercase names of every column the statement mentions."""
    names = {c.name.lower() for c in statement.find_all(exp.Column) if c.name}
    names.update(inserted_columns(statement))
    return names


def _unwrap(node: exp.Expression | None) -> exp.Expression | None:
    while isinstance(node, exp.Paren):
        node = node.this
    return node
