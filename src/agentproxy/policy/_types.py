"""Internal types for the policy engine."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from sqlglot import exp


class Operation(enum.Enum):
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class ParsedQuery:
    operation: Operation
    tables: list[str]
    has_where: bool
    statement: exp.Expression = field(repr=False, compare=False)

    @property
    def is_mutation(self) -> bool:
        return self.operation in (Operation.UPDATE, Operation.DELETE)
