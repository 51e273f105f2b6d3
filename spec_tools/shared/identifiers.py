"""Per-run identifier registry with collision and reserved-name tracking."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from .diagnostics import DiagnosticsLog, RuleId
from .naming import NamingConvention, to_identifier

if TYPE_CHECKING:
    from .document import SpecificationDocument

logger = logging.getLogger(__name__)

RUST_KEYWORDS: frozenset[str] = frozenset({
    "as", "async", "await", "break", "const", "continue", "crate", "dyn",
    "else", "enum", "extern", "false", "fn", "for", "if", "impl", "in",
    "let", "loop", "match", "mod", "move", "mut", "pub", "ref", "return",
    "self", "Self", "static", "struct", "super", "trait", "true", "type",
    "union", "unsafe", "use", "where", "while",
})

# Prelude and std names that generated route handlers and models rely on
RUST_TYPE_NAMES: frozenset[str] = frozenset({
    "Box", "Clone", "Copy", "Debug", "Default", "Err", "Error", "HashMap",
    "Json", "None", "Ok", "Option", "Path", "Query", "Result", "Some",
    "State", "String", "Uuid", "Value", "Vec",
})

TYPESCRIPT_KEYWORDS: frozenset[str] = frozenset({
    "any", "as", "boolean", "break", "case", "catch", "class", "const",
    "continue", "debugger", "default", "delete", "do", "else", "enum",
    "export", "extends", "false", "finally", "for", "function", "if",
    "implements", "import", "in", "instanceof", "interface", "let", "never",
    "new", "null", "number", "object", "package", "private", "protected",
    "public", "return", "static", "string", "super", "switch", "symbol",
    "this", "throw", "true", "try", "type", "typeof", "undefined", "unknown",
    "var", "void", "while", "with", "yield",
})

TYPESCRIPT_GLOBAL_TYPES: frozenset[str] = frozenset({
    "Array", "Blob", "Boolean", "Date", "Error", "File", "FormData", "Headers",
    "Map", "Number", "Object", "Omit", "Partial", "Pick", "Promise", "Record",
    "Request", "Response", "Set", "String", "URL",
})


@dataclass(frozen=True, slots=True)
class BackendProfile:
    """Reserved names and qualification syntax of one emitter target."""

    name: str
    reserved: frozenset[str]
    qualifier: str
    separator: str

    def qualify(self, identifier: str) -> str:
        return f"{self.qualifier}{self.separator}{identifier}"


RUST_SERVER: Final[BackendProfile] = BackendProfile(
    name="rust",
    reserved=RUST_KEYWORDS | RUST_TYPE_NAMES,
    qualifier="crate::models",
    separator="::",
)

TYPESCRIPT_CLIENT: Final[BackendProfile] = BackendProfile(
    name="typescript",
    reserved=TYPESCRIPT_KEYWORDS | TYPESCRIPT_GLOBAL_TYPES,
    qualifier="Types",
    separator=".",
)

BACKEND_PROFILES: Final[dict[str, BackendProfile]] = {
    RUST_SERVER.name: RUST_SERVER,
    TYPESCRIPT_CLIENT.name: TYPESCRIPT_CLIENT,
}


@dataclass
class IdentifierContext:
    """Identifier registry scoped to exactly one generation run.

    Construct one per run and pass it to whatever needs stable names. Two
    distinct raw names that synthesize the same identifier are reported as an
    ``IdentifierCollision`` error. A registered identifier that shadows a name
    reserved by the backend is fully qualified by :meth:`resolve`.

    Example:
        >>> ctx = IdentifierContext(RUST_SERVER)
        >>> ctx.register("result")
        'Result'
        >>> ctx.resolve("Result")
        'crate::models::Result'
    """

    profile: BackendProfile
    diagnostics: DiagnosticsLog = field(default_factory=DiagnosticsLog)
    _by_raw: dict[str, str] = field(default_factory=dict, init=False, repr=False)
    _by_identifier: dict[str, str] = field(default_factory=dict, init=False, repr=False)
    _reported_collisions: set[tuple[str, str]] = field(default_factory=set, init=False, repr=False)
    _reported_conflicts: set[str] = field(default_factory=set, init=False, repr=False)

    def register(self, raw: str, source_file: str | None = None) -> str:
        """Register a raw contract name and return its canonical identifier.

        Args:
            raw: The name as written in the contract.
            source_file: Optional file the name came from, for diagnostics.

        Returns:
            The PascalCase identifier. It is returned unchanged even when it
            collides with another raw name.
        """
        cached = self._by_raw.get(raw)
        if cached is not None:
            return cached

        identifier = to_identifier(raw, NamingConvention.PASCAL_CASE)
        self._by_raw[raw] = identifier

        owner = self._by_identifier.get(identifier)
        if owner is None:
            self._by_identifier[identifier] = raw
        elif (owner, raw) not in self._reported_collisions:
            self._reported_collisions.add((owner, raw))
            logger.debug("Identifier %s produced by both %r and %r", identifier, owner, raw)
            self.diagnostics.error(
                RuleId.IDENTIFIER_COLLISION,
                f"Names '{owner}' and '{raw}' both produce identifier '{identifier}'",
                source_file,
                context=identifier,
            )
        return identifier

    def register_document(
        self,
        document: SpecificationDocument,
        source_file: str | None = None,
    ) -> list[str]:
        """Register every component schema name of ``document`` in order."""
        return [self.register(name, source_file) for name in document.components.schemas]

    def is_reserved(self, identifier: str) -> bool:
        return identifier in self.profile.reserved

    def is_registered(self, identifier: str) -> bool:
        return identifier in self._by_identifier

    def raw_name(self, identifier: str) -> str | None:
        """Return the first raw name that produced ``identifier``."""
        return self._by_identifier.get(identifier)

    def resolve(self, identifier: str) -> str:
        """Return the name to emit at a point of use.

        A generated model whose identifier is also reserved by the backend is
        fully qualified with the profile's qualifier. Anything else, including
        reserved names that no schema produced, is returned as is.
        """
        if not (self.is_reserved(identifier) and self.is_registered(identifier)):
            return identifier

        if identifier not in self._reported_conflicts:
            self._reported_conflicts.add(identifier)
            self.diagnostics.warning(
                RuleId.RESERVED_IDENTIFIER_CONFLICT,
                f"Identifier '{identifier}' is reserved by the {self.profile.name} backend; "
                f"emitting '{self.profile.qualify(identifier)}'",
                context=identifier,
            )
        return self.profile.qualify(identifier)

    def conflicts(self) -> list[str]:
        """Registered identifiers that shadow a reserved name, sorted."""
        return sorted(i for i in self._by_identifier if self.is_reserved(i))

    def __len__(self) -> int:
        return len(self._by_raw)
