"""Rust compiler-inspired diagnostic values for SQL policy decisions.

Every check in the policy pipeline produces a Diagnostic (or None). The
pipeline stops at the first diagnostic and raises the matching
typed error from ``agentproxy.errors``; the diagnostic travels with the
error so callers see the code, notes and suggestions, not just a message.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from agentproxy.diagnostics.codes import DiagnosticCode


class Level(enum.Enum):
    ERROR = "error"


@dataclass(frozen=True)
class Span:
    start: int
    end: int

    def slice(self, sql: str) -> str:
        return sql[self.start : self.end]


@dataclass
class SpanLabel:
    span: Span
    label: str | None = None


@dataclass
class Suggestion:
    message: str


@dataclass
class Diagnostic:
    level: Level
    code: DiagnosticCode
    message: str
    spans: list[SpanLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    suggestions: list[Suggestion] = field(default_factory=list)

    # -- Builder classmethods ---------------------------------------------------

    @classmethod
    def error(cls, code: DiagnosticCode, message: str) -> Diagnostic:
        return cls(level=Level.ERROR, code=code, message=message)

    # -- Builder chain methods --------------------------------------------------

    def span(self, span: Span, label: str) -> Diagnostic:
        self.spans.append(SpanLabel(span=span, label=label))
        return self

    def note(self, note: str) -> Diagnostic:
        self.notes.append(note)
        return self

    def suggest(self, message: str) -> Diagnostic:
        self.suggestions.append(Suggestion(message=message))
        return self
