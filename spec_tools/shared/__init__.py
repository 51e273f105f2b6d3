"""Shared utilities for spec tools."""

from .config import (
    MULTIPART_EXTENSION_KEY,
    Discovery,
    MergeStrategy,
    MultiPartConfiguration,
    parse_multipart_extension,
)
from .diagnostics import (
    DiagnosticMessage,
    DiagnosticsLog,
    RuleId,
    Severity,
)
from .document import (
    Components,
    Operation,
    SpecificationDocument,
    SpecificationFile,
    iter_operations,
    operation_parameter_names,
    operation_schema_names,
    referenced_schema_names,
)
from .errors import (
    ConfigurationError,
    SpecError,
    SpecParseError,
)
from .identifiers import (
    BACKEND_PROFILES,
    RUST_SERVER,
    TYPESCRIPT_CLIENT,
    BackendProfile,
    IdentifierContext,
)
from .naming import (
    NamingConvention,
    pluralize,
    split_into_words,
    to_camel_case,
    to_header_property_name,
    to_identifier,
    to_pascal_case,
)
from .spec_loader import (
    dump_document,
    load_document,
    parse_specification,
    read_specification_file,
)

__all__ = [
    # Configuration
    "MULTIPART_EXTENSION_KEY",
    "Discovery",
    "MergeStrategy",
    "MultiPartConfiguration",
    "parse_multipart_extension",
    # Diagnostics
    "DiagnosticMessage",
    "DiagnosticsLog",
    "RuleId",
    "Severity",
    # Document model
    "Components",
    "Operation",
    "SpecificationDocument",
    "SpecificationFile",
    "iter_operations",
    "operation_parameter_names",
    "operation_schema_names",
    "referenced_schema_names",
    # Errors
    "ConfigurationError",
    "SpecError",
    "SpecParseError",
    # Identifiers
    "BACKEND_PROFILES",
    "RUST_SERVER",
    "TYPESCRIPT_CLIENT",
    "BackendProfile",
    "IdentifierContext",
    # Naming utilities
    "NamingConvention",
    "pluralize",
    "split_into_words",
    "to_camel_case",
    "to_header_property_name",
    "to_identifier",
    "to_pascal_case",
    # Loading
    "dump_document",
    "load_document",
    "parse_specification",
    "read_specification_file",
]
