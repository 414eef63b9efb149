"""Statement analysis: parse one statement and classify it.

Security-critical: anything we can't positively identify as one of the four
supported operations is rejected. Reads that hide a write (writable CTE) or
create a table (SELECT INTO) are rejected too.
"""

from __future__ import annotations

import sqlglot
from sqlglot import exp
from sqlglot.optimizer.normalize_identifiers import normalize_identifiers

from agentproxy.diagnostics import Diagnostic, Span, codes
from agentproxy.errors import error_for
from agentproxy.policy._types import Operation, ParsedQuery
from agentproxy.policy.tables import extract_tables, target_table

DEFAULT_DIALECT = "postgres"

_READ_TYPES = (exp.Select, exp.Union, exp.Intersect, exp.Except)
_DML_TYPES = (exp.Insert, exp.Update, exp.Delete, exp.Merge)
_DESTRUCTIVE_TYPES = (exp.Drop, exp.Alter, exp.TruncateTable)


def parse_single(sql: str, *, dialect: str | None = DEFAULT_DIALECT) -> exp.Expression:
    """Parse SQL text that must hold exactly one statement."""
    try:
        statements = sqlglot.parse(sql, dialect=dialect)
    except sqlglot.errors.SqlglotError as e:
        raise error_for(
            Diagnostic.error(codes.SYNTAX_ERROR, f"SQL parse error: {e}")
        ) from e

    # Trailing semicolons parse as None.
    statements = [s for s in statements if s is not None]
    if len(statements) != 1:
        raise error_for(_statement_count_diagnostic(sql, len(statements)))
    return statements[0]


def _statement_count_diagnostic(sql: str, count: int) -> Diagnostic:
    if count == 0:
        return (
            Diagnostic.error(codes.MULTIPLE_STATEMENTS, "no SQL statement found")
            .note("only single-statement SQL is supported")
        )
    diag = Diagnostic.error(
        codes.MULTIPLE_STATEMENTS, f"only single-statement SQL is supported (got {count})"
    )
    semi_pos = sql.find(";")
    if semi_pos != -1:
        diag.span(Span(semi_pos, semi_pos + 1), "second statement starts here")
    return diag.note("submit each statement as its own preview so policy sees every action")


def analyze(sql: str, *, dialect: str | None = DEFAULT_DIALECT) -> ParsedQuery:
    """Parse and classify one statement into a ParsedQuery.

    Unquoted identifiers are folded the way the dialect resolves them, so
    `ORDERS` and `orders` name the same table. Quoted names keep their case.
    """
    statement = parse_single(sql.strip(), dialect=dialect)
    statement = normalize_identifiers(statement, dialect=dialect)

    if isinstance(statement, _DESTRUCTIVE_TYPES):
        raise error_for(
            Diagnostic.error(
                codes.DESTRUCTIVE_DDL,
                f"destructive DDL statements are not allowed ({statement.key.upper()})",
            ).note("DROP, ALTER and TRUNCATE cannot be previewed or rolled back")
        )

    if isinstance(statement, _READ_TYPES):
        _reject_hidden_writes(statement)
        return ParsedQuery(
            operation=Operation.SELECT,
            tables=extract_tables(statement),
            has_where=True,
            statement=statement,
        )

    if isinstance(statement, exp.Insert):
        return ParsedQuery(
            operation=Operation.INSERT,
            tables=_single(target_table(statement.this)),
            has_where=True,
            statement=statement,
        )

    if isinstance(statement, exp.Update):
        return ParsedQuery(
            operation=Operation.UPDATE,
            tables=_single(target_table(statement.this)),
            has_where=statement.args.get("where") is not None,
            statement=statement,
        )

    if isinstance(statement, exp.Delete):
        # DELETE t1, t2 FROM ... keeps its targets in "tables"; the first wins.
        source = statement.this or next(iter(statement.args.get("tables") or []), None)
        return ParsedQuery(
            operation=Operation.DELETE,
            tables=_single(target_table(source)),
            has_where=statement.args.get("where") is not None,
            statement=statement,
        )

    raise error_for(
        Diagnostic.error(
            codes.UNSUPPORTED_STATEMENT,
            f"statement type not supported ({statement.key.upper()})",
        ).note("only SELECT, INSERT, UPDATE and DELETE are accepted")
    )


def _reject_hidden_writes(statement: exp.Expression) -> None:
    for cte in statement.find_all(exp.CTE):
        if isinstance(cte.this, _DML_TYPES):
            raise error_for(
                Diagnostic.error(
                    codes.UNSUPPORTED_STATEMENT,
                    "data-modifying statements inside WITH are not supported",
                ).note("submit the write as its own INSERT, UPDATE or DELETE")
            )
    if isinstance(statement, exp.Select) and statement.args.get("into") is not None:
        raise error_for(
            Diagnostic.error(
                codes.UNSUPPORTED_STATEMENT, "SELECT INTO creates a table and is not supported"
            )
        )


def _single(name: str | None) -> list[str]:
    return [name] if name else []
