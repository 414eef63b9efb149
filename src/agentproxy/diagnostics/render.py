"""Render diagnostics for terminal (text) and agent (JSON) output."""

from __future__ import annotations

from agentproxy.diagnostics.types import Diagnostic


def render_json(d: Diagnostic) -> dict:
    """Render a Diagnostic as a JSON-serializable dict."""
    doc: dict = {
        "level": d.level.name.lower(),
        "code": str(d.code),
        "message": d.message,
        "notes": d.notes,
    }
    if d.suggestions:
        doc["help"] = [s.message for s in d.suggestions]
    return doc


def render_text(d: Diagnostic, sql: str | None = None) -> str:
    """Render a Diagnostic as human-readable text."""
    lines = [f"{d.level.name.lower()}[{d.code}]: {d.message}"]
    if sql is not None:
        for label in d.spans:
            lines.append(f"  --> {label.span.start}: {label.span.slice(sql)!r}")
            if label.label:
                lines.append(f"  = {label.label}")
    for note in d.notes:
        lines.append(f"  = note: {note}")
    for s in d.suggestions:
        lines.append(f"  = help: {s.message}")
    return "\n".join(lines)
