"""Diagnostic messages shared by the composer, partitioner and identifier layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class RuleId(str, Enum):
    """Stable identifiers for every diagnostic the tools can emit."""

    BASE_FILE_NOT_FOUND = "BaseFileNotFound"
    SERVER_PARSING_ERROR = "ServerParsingError"
    DUPLICATE_PATH_IN_PART = "DuplicatePathInPart"
    DUPLICATE_SCHEMA_IN_PART = "DuplicateSchemaInPart"
    DUPLICATE_PARAMETER_IN_PART = "DuplicateParameterInPart"
    PART_FILE_CONTAINS_PROHIBITED_SECTION = "PartFileContainsProhibitedSection"
    PART_FILE_HAS_VERSIONED_INFO = "PartFileHasVersionedInfo"
    PART_FILE_NOT_FOUND = "PartFileNotFound"
    INVALID_MULTIPART_CONFIGURATION = "InvalidMultiPartConfiguration"
    UNRESOLVED_REFERENCE_AFTER_MERGE = "UnresolvedReferenceAfterMerge"
    MULTIPART_MERGE_SUCCESSFUL = "MultiPartMergeSuccessful"
    PATH_SPANS_MULTIPLE_GROUPS = "PathSpansMultipleGroups"
    SCHEMA_NOT_ASSIGNED = "SchemaNotAssigned"
    IDENTIFIER_COLLISION = "IdentifierCollision"
    RESERVED_IDENTIFIER_CONFLICT = "ReservedIdentifierConflict"


@dataclass(frozen=True, slots=True)
class DiagnosticMessage:
    """A single error, warning or informational message."""

    severity: Severity
    rule_id: RuleId
    message: str
    source_file: str | None = None
    context: str | None = None

    def __str__(self) -> str:
        location = f" ({self.source_file})" if self.source_file else ""
        return f"{self.severity.value.upper()} {self.rule_id.value}: {self.message}{location}"


@dataclass
class DiagnosticsLog:
    """Ordered, append-only collection of diagnostics for one run.

    A log is created per operation call and handed back inside the result;
    it is never shared between runs.
    """

    messages: list[DiagnosticMessage] = field(default_factory=list)

    def add(self, message: DiagnosticMessage) -> DiagnosticMessage:
        self.messages.append(message)
        return message

    def error(
        self,
        rule_id: RuleId,
        message: str,
        source_file: str | None = None,
        context: str | None = None,
    ) -> DiagnosticMessage:
        return self.add(DiagnosticMessage(Severity.ERROR, rule_id, message, source_file, context))

    def warning(
        self,
        rule_id: RuleId,
        message: str,
        source_file: str | None = None,
        context: str | None = None,
    ) -> DiagnosticMessage:
        return self.add(DiagnosticMessage(Severity.WARNING, rule_id, message, source_file, context))

    def info(
        self,
        rule_id: RuleId,
        message: str,
        source_file: str | None = None,
        context: str | None = None,
    ) -> DiagnosticMessage:
        return self.add(DiagnosticMessage(Severity.INFO, rule_id, message, source_file, context))

    def extend(self, messages: Iterable[DiagnosticMessage]) -> None:
        self.messages.extend(messages)

    def by_severity(self, severity: Severity) -> list[DiagnosticMessage]:
        return [m for m in self.messages if m.severity is severity]

    @property
    def errors(self) -> list[DiagnosticMessage]:
        return self.by_severity(Severity.ERROR)

    @property
    def warnings(self) -> list[DiagnosticMessage]:
        return self.by_severity(Severity.WARNING)

    @property
    def has_errors(self) -> bool:
        return any(m.severity is Severity.ERROR for m in self.messages)

    def snapshot(self) -> tuple[DiagnosticMessage, ...]:
        """Return an immutable copy of the messages recorded so far."""
        return tuple(self.messages)

    def __iter__(self) -> Iterator[DiagnosticMessage]:
        return iter(self.messages)

    def __len__(self) -> int:
        return len(self.messages)
