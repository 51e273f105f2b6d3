"""Custom exceptions for spec tools.

Each exception maps onto the diagnostic rule it is reported under, so
callers that collect diagnostics instead of raising can convert a caught
error with :meth:`SpecError.to_diagnostic`.
"""

from __future__ import annotations

from .diagnostics import DiagnosticMessage, RuleId, Severity


class SpecError(Exception):
    """Base exception for specification-related errors."""

    rule_id: RuleId = RuleId.SERVER_PARSING_ERROR

    def __init__(self, message: str, source_path: str | None = None) -> None:
        self.message = message
        self.source_path = source_path
        full_message = f"{message}" if not source_path else f"[{source_path}] {message}"
        super().__init__(full_message)

    @property
    def context(self) -> str | None:
        return None

    def to_diagnostic(
        self,
        severity: Severity = Severity.ERROR,
        source_file: str | None = None,
    ) -> DiagnosticMessage:
        """Convert the error into a diagnostic under its rule.

        ``source_file`` is used when the error itself carries no path.
        """
        return DiagnosticMessage(
            severity=severity,
            rule_id=self.rule_id,
            message=str(self),
            source_file=self.source_path or source_file,
            context=self.context,
        )


class SpecParseError(SpecError):
    """Raised when a specification file cannot be read or parsed."""

    rule_id = RuleId.SERVER_PARSING_ERROR


class ConfigurationError(SpecError):
    """Raised when a multi-part configuration value is invalid."""

    rule_id = RuleId.INVALID_MULTIPART_CONFIGURATION

    def __init__(
        self,
        message: str,
        source_path: str | None = None,
        field: str | None = None,
    ) -> None:
        self.field = field
        if field:
            message = f"Field '{field}': {message}"
        super().__init__(message, source_path)

    @property
    def context(self) -> str | None:
        return self.field
