"""Error taxonomy surfaced to callers of the preview/commit pipeline.

Every error carries a Diagnostic with a stable code. ``category`` tells the
transport bindings which response class to use.
"""

from __future__ import annotations

import enum

from agentproxy.diagnostics import Diagnostic, DiagnosticCode, codes


class ErrorCategory(enum.Enum):
    CLIENT = "client"
    NOT_FOUND = "not_found"
    SERVER = "server"
    CONFIG = "config"


class AgentProxyError(Exception):
    """Base class. Construct from a message or from a Diagnostic."""

    code: DiagnosticCode = codes.UNSUPPORTED_STATEMENT
    category: ErrorCategory = ErrorCategory.CLIENT

    def __init__(self, message: str, diagnostic: Diagnostic | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.diagnostic = diagnostic or Diagnostic.error(self.code, message)

    @classmethod
    def from_diagnostic(cls, diagnostic: Diagnostic) -> AgentProxyError:
        return cls(diagnostic.message, diagnostic)


# -- Parsing ------------------------------------------------------------------


class ParseError(AgentProxyError):
    code = codes.SYNTAX_ERROR


class SqlParseError(ParseError):
    """The SQL text could not be parsed."""


class MultiStatementError(ParseError):
    """Zero or more than one statement was submitted."""

    code = codes.MULTIPLE_STATEMENTS


class UnsupportedStatementError(AgentProxyError):
    """Destructive DDL or a statement kind outside select/insert/update/delete."""

    code = codes.UNSUPPORTED_STATEMENT


# -- Policy -------------------------------------------------------------------


class PolicyViolationError(AgentProxyError):
    pass


class MissingWhereClauseError(PolicyViolationError):
    code = codes.MISSING_WHERE


class MissingTenantFilterError(PolicyViolationError):
    code = codes.MISSING_TENANT_FILTER


class OperationNotAllowedError(PolicyViolationError):
    code = codes.OPERATION_NOT_ALLOWED


class RequiredFilterMissingError(PolicyViolationError):
    code = codes.REQUIRED_FILTER_MISSING


class DeniedColumnError(PolicyViolationError):
    code = codes.DENIED_COLUMN


# -- Lifecycle ----------------------------------------------------------------


class PreviewMismatchError(AgentProxyError):
    """A commit presented a preview id recorded for a different statement."""

    code = codes.PREVIEW_MISMATCH


class PreviewAlreadyCommittedError(AgentProxyError):
    code = codes.PREVIEW_ALREADY_COMMITTED


class NotFoundError(AgentProxyError):
    code = codes.PREVIEW_NOT_FOUND
    category = ErrorCategory.NOT_FOUND


class PreviewNotFoundError(NotFoundError):
    pass


# -- Backend / config ---------------------------------------------------------


class BackendExecutionError(AgentProxyError):
    """Raised by adapters for connection/execution failures."""

    code = codes.BACKEND_ERROR
    category = ErrorCategory.SERVER


class BackendUnavailableError(BackendExecutionError):
    """The operation needs a database but none is configured."""

    code = codes.BACKEND_UNAVAILABLE


class ConfigError(AgentProxyError):
    """Policy file unreadable or invalid. Fatal at startup."""

    code = codes.CONFIG_ERROR
    category = ErrorCategory.CONFIG


_ERROR_FOR_CODE: dict[DiagnosticCode, type[AgentProxyError]] = {
    codes.SYNTAX_ERROR: SqlParseError,
    codes.MULTIPLE_STATEMENTS: MultiStatementError,
    codes.DESTRUCTIVE_DDL: UnsupportedStatementError,
    codes.UNSUPPORTED_STATEMENT: UnsupportedStatementError,
    codes.MISSING_WHERE: MissingWhereClauseError,
    codes.MISSING_TENANT_FILTER: MissingTenantFilterError,
    codes.OPERATION_NOT_ALLOWED: OperationNotAllowedError,
    codes.REQUIRED_FILTER_MISSING: RequiredFilterMissingError,
    codes.DENIED_COLUMN: DeniedColumnError,
}


def error_for(diagnostic: Diagnostic) -> AgentProxyError:
    """Build the typed error for a diagnostic."""
    cls = _ERROR_FOR_CODE.get(diagnostic.code, PolicyViolationError)
    return cls.from_diagnostic(diagnostic)
