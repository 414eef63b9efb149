"""Diagnostic system: types, codes, rendering."""

from agentproxy.diagnostics.codes import DiagnosticCode
from agentproxy.diagnostics.types import (
    Diagnostic,
    Level,
    Span,
    SpanLabel,
    Suggestion,
)

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "Level",
    "Span",
    "SpanLabel",
    "Suggestion",
]
