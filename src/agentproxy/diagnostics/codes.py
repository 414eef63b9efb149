"""Stable, searchable error code registry.

Ranges:
- Q00xx      — Parsing (syntax errors, statement count)
- Q01xx      — Statement classification
- Q02xx      — Global safety rules
- Q03xx      — Per-table policy
- Q04xx      — Preview / commit lifecycle
- Q05xx      — Backend execution
- Q09xx      — Configuration
"""

from __future__ import annotations

from dataclasses import dataclass

@dataclass(frozen=True)
class DiagnosticCode:
    value: int

    def __str__(self) -> str:
        return f"Q{self.value:04d}"

# Parsing
SYNTAX_ERROR = DiagnosticCode(1)
MULTIPLE_STATEMENTS = DiagnosticCode(2)

# Classification (Q01xx)
DESTRUCTIVE_DDL = DiagnosticCode(101)
UNSUPPORTED_STATEMENT = DiagnosticCode(102)

# Global safety rules (Q02xx)
MISSING_WHERE = DiagnosticCode(201)
MISSING_TENANT_FILTER = DiagnosticCode(202)

# Per-table policy (Q03xx)
OPERATION_NOT_ALLOWED = DiagnosticCode(301)
REQUIRED_FILTER_MISSING = DiagnosticCode(302)
DENIED_COLUMN = DiagnosticCode(303)

# Preview / commit lifecycle (Q04xx)
PREVIEW_NOT_FOUND = DiagnosticCode(401)
PREVIEW_ALREADY_COMMITTED = DiagnosticCode(402)
PREVIEW_MISMATCH = DiagnosticCode(403)

# Backend execution (Q05xx)
BACKEND_ERROR = DiagnosticCode(501)
BACKEND_UNAVAILABLE = DiagnosticCode(502)

# Configuration (Q09xx)
CONFIG_ERROR = DiagnosticCode(901)
