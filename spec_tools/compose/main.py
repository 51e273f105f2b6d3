#!/usr/bin/env python3
"""Merge a base OpenAPI specification with its part files.

Part files are discovered beside the base file, either automatically by the
``{base}_{Part}{ext}`` naming convention or from the explicit list in the
base document's ``x-multipart`` block, and merged in a deterministic order.
Conflicts are resolved per section by the configured merge strategy; every
outcome is reported as a diagnostic rather than raised.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from ..shared.config import (
    Discovery,
    MergeStrategy,
    MultiPartConfiguration,
    parse_multipart_extension,
)
from ..shared.diagnostics import DiagnosticMessage, DiagnosticsLog, RuleId, Severity
from ..shared.document import (
    SCHEMA_REF_PREFIX,
    SpecificationDocument,
    SpecificationFile,
    iter_operations,
    operation_schema_names,
)
from ..shared.errors import ConfigurationError, SpecParseError
from ..shared.spec_loader import (
    OUTPUT_FORMATS,
    dump_document,
    format_for_path,
    read_specification_file,
)

logger = logging.getLogger(__name__)

PREVIEW_LINES = 50
COMMON_PART_NAME = "Common"


@dataclass(frozen=True, slots=True)
class MergeResult:
    """Outcome of a merge run.

    ``document`` is only set when ``success`` is true; a run with any error
    diagnostic never exposes a partially merged document.
    """

    document: SpecificationDocument | None
    base_file: SpecificationFile | None
    part_files: tuple[SpecificationFile, ...]
    diagnostics: tuple[DiagnosticMessage, ...]
    success: bool

    @classmethod
    def failed(cls, diagnostics: DiagnosticsLog) -> MergeResult:
        return cls(None, None, (), diagnostics.snapshot(), False)

    @property
    def contributing_files(self) -> tuple[SpecificationFile, ...]:
        if self.base_file is None:
            return ()
        return (self.base_file, *self.part_files)

    @property
    def is_multi_part(self) -> bool:
        return bool(self.part_files)

    @property
    def errors(self) -> list[DiagnosticMessage]:
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[DiagnosticMessage]:
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    @property
    def total_paths(self) -> int:
        return len(self.document.paths) if self.document else 0

    @property
    def total_schemas(self) -> int:
        return len(self.document.components.schemas) if self.document else 0

    @property
    def total_operations(self) -> int:
        return self.document.operation_count() if self.document else 0


# =============================================================================
# Part file resolution
# =============================================================================


def part_name_for(base_path: Path, part_path: Path) -> str:
    """Derive the part name from a ``{base}_{Part}{ext}`` file name."""
    prefix = f"{base_path.stem}_"
    stem = part_path.stem
    if stem.lower().startswith(prefix.lower()) and len(stem) > len(prefix):
        return stem[len(prefix):]
    return stem


def discover_part_files(base_path: Path) -> list[Path]:
    """Find ``{stem}_*{suffix}`` siblings of the base file.

    The base file itself is excluded and the result is sorted by file name,
    ignoring case, which fixes the merge order. Names differing only in case
    fall back to an exact comparison.
    """
    base_path = Path(base_path)
    directory = base_path.parent
    if not directory.is_dir():
        return []

    prefix = f"{base_path.stem}_".lower()
    suffix = base_path.suffix.lower()
    base_resolved = base_path.resolve()
    found = [
        p
        for p in directory.iterdir()
        if p.is_file()
        and p.name.lower().startswith(prefix)
        and p.suffix.lower() == suffix
        and p.resolve() != base_resolved
    ]
    found.sort(key=lambda p: (p.name.lower(), p.name))
    logger.debug("Discovered %d part file(s) for %s", len(found), base_path.name)
    return found


def _load_part(base_path: Path, part_path: Path) -> SpecificationFile:
    part_name = part_name_for(base_path, part_path)
    try:
        return read_specification_file(part_path, part_name=part_name)
    except SpecParseError as e:
        logger.debug("Could not parse part %s: %s", part_path, e)
        return SpecificationFile(
            path=part_path,
            content="",
            document=None,
            part_name=part_name,
            parse_error=str(e),
        )


def load_part_files(base_path: Path, part_paths: Sequence[Path]) -> list[SpecificationFile]:
    """Load part files in the given order, keeping unparsable ones.

    A part that fails to parse is returned with ``document=None`` so that the
    merge step reports it against that file and carries on with the rest.
    """
    return [_load_part(Path(base_path), Path(p)) for p in part_paths]


def load_explicit_part_files(
    base_path: Path,
    parts: Sequence[str],
    diagnostics: DiagnosticsLog,
) -> list[SpecificationFile]:
    """Load the listed part files that exist beside the base file.

    Each listed file that does not exist is reported as a
    ``PartFileNotFound`` warning and skipped. An unlisted
    ``{base}_Common{ext}`` sibling is appended after the listed parts.
    """
    base_path = Path(base_path)
    existing: list[Path] = []
    for name in parts:
        candidate = base_path.parent / name
        if candidate.is_file():
            existing.append(candidate)
        else:
            diagnostics.warning(
                RuleId.PART_FILE_NOT_FOUND,
                f"Part file '{name}' listed in the multi-part configuration was not found",
                str(base_path),
                context=name,
            )

    common = base_path.parent / f"{base_path.stem}_{COMMON_PART_NAME}{base_path.suffix}"
    listed = {name.lower() for name in parts}
    if common.is_file() and common.name.lower() not in listed:
        logger.debug("Including common file %s", common.name)
        existing.append(common)

    return load_part_files(base_path, existing)


def extract_multipart_config(
    document: SpecificationDocument,
    source_path: str | None = None,
) -> MultiPartConfiguration | None:
    """Return the configuration embedded in ``document``, if any.

    Raises:
        ConfigurationError: If the ``x-multipart`` block is malformed.
    """
    return parse_multipart_extension(document.extensions, source_path)


# =============================================================================
# Validation
# =============================================================================


def validate_part_file(part_file: SpecificationFile) -> list[DiagnosticMessage]:
    """Check a part file for sections that only belong in the base file.

    These sections are never merged; each one found yields a warning.
    """
    document = part_file.document
    if document is None:
        return []

    log = DiagnosticsLog()
    source = str(part_file.path)
    if document.version:
        log.warning(
            RuleId.PART_FILE_HAS_VERSIONED_INFO,
            f"Part file '{part_file.file_name}' declares info.version; "
            "the version is taken from the base file",
            source,
        )
    if document.servers:
        log.warning(
            RuleId.PART_FILE_CONTAINS_PROHIBITED_SECTION,
            f"Part file '{part_file.file_name}' declares servers, which are ignored",
            source,
            context="servers",
        )
    if document.components.security_schemes:
        log.warning(
            RuleId.PART_FILE_CONTAINS_PROHIBITED_SECTION,
            f"Part file '{part_file.file_name}' declares securitySchemes, which are ignored",
            source,
            context="securitySchemes",
        )
    return log.messages


def validate_references(document: SpecificationDocument) -> list[DiagnosticMessage]:
    """Report schema references that do not resolve in ``document``.

    Request bodies and responses are walked one level deep (the schema, its
    ``items`` and its ``allOf`` members). Each missing name is reported once.
    """
    missing: dict[str, str] = {}
    for op in iter_operations(document):
        for name in operation_schema_names(op.definition):
            if name not in document.components.schemas and name not in missing:
                missing[name] = f"{op.method.upper()} {op.path}"

    log = DiagnosticsLog()
    for name, first_use in missing.items():
        log.warning(
            RuleId.UNRESOLVED_REFERENCE_AFTER_MERGE,
            f"Schema reference '{SCHEMA_REF_PREFIX}{name}' does not resolve after merge "
            f"(first used by {first_use})",
            context=name,
        )
    return log.messages


# =============================================================================
# Merging
# =============================================================================


_DUPLICATE_RULES = {
    "path": RuleId.DUPLICATE_PATH_IN_PART,
    "schema": RuleId.DUPLICATE_SCHEMA_IN_PART,
    "parameter": RuleId.DUPLICATE_PARAMETER_IN_PART,
}


def _merge_section(
    target: dict[str, Any],
    incoming: dict[str, Any],
    strategy: MergeStrategy,
    kind: str,
    part_file: SpecificationFile,
    diagnostics: DiagnosticsLog,
) -> None:
    rule_id = _DUPLICATE_RULES[kind]
    source = str(part_file.path)
    for key, value in incoming.items():
        if key not in target:
            target[key] = value
            continue

        if strategy is MergeStrategy.LAST_WINS:
            logger.debug("%s '%s' replaced by %s", kind, key, part_file.file_name)
            target[key] = value
        elif strategy is MergeStrategy.FIRST_WINS:
            logger.debug("%s '%s' from %s ignored", kind, key, part_file.file_name)
        elif strategy is MergeStrategy.MERGE_IF_IDENTICAL:
            if target[key] != value:
                diagnostics.error(
                    rule_id,
                    f"Duplicate {kind} '{key}' in '{part_file.file_name}' differs from the existing definition",
                    source,
                    context=str(key),
                )
        else:
            diagnostics.error(
                rule_id,
                f"Duplicate {kind} '{key}' found in '{part_file.file_name}'",
                source,
                context=str(key),
            )


def _merge_tags(target: list[dict[str, Any]], incoming: list[dict[str, Any]]) -> None:
    seen = {str(t.get("name", "")).lower() for t in target}
    for tag in incoming:
        key = str(tag.get("name", "")).lower()
        if key and key not in seen:
            seen.add(key)
            target.append(tag)


def _merge_into(
    base_file: SpecificationFile,
    part_files: Sequence[SpecificationFile],
    config: MultiPartConfiguration,
    diagnostics: DiagnosticsLog,
) -> MergeResult:
    if base_file.document is None:
        diagnostics.error(
            RuleId.SERVER_PARSING_ERROR,
            base_file.parse_error or f"Failed to parse base file '{base_file.file_name}'",
            str(base_file.path),
        )
        return MergeResult.failed(diagnostics)

    merged = base_file.document.clone()
    merged_count = 0

    for part in part_files:
        if part.document is None:
            diagnostics.error(
                RuleId.SERVER_PARSING_ERROR,
                part.parse_error or f"Failed to parse part file '{part.file_name}'",
                str(part.path),
            )
            continue

        logger.debug("Merging part %s", part.file_name)
        diagnostics.extend(validate_part_file(part))
        document = part.document
        _merge_section(merged.paths, document.paths, config.paths_strategy, "path", part, diagnostics)
        _merge_section(
            merged.components.schemas,
            document.components.schemas,
            config.schemas_strategy,
            "schema",
            part,
            diagnostics,
        )
        _merge_section(
            merged.components.parameters,
            document.components.parameters,
            config.parameters_strategy,
            "parameter",
            part,
            diagnostics,
        )
        _merge_tags(merged.tags, document.tags)
        merged_count += 1

    diagnostics.extend(validate_references(merged))

    if diagnostics.has_errors:
        logger.info("Merge of %s failed with %d error(s)", base_file.file_name, len(diagnostics.errors))
        return MergeResult(None, base_file, tuple(part_files), diagnostics.snapshot(), False)

    diagnostics.info(
        RuleId.MULTIPART_MERGE_SUCCESSFUL,
        f"Merged {merged_count} part file(s) into '{base_file.file_name}'",
        str(base_file.path),
    )
    logger.info("Merged %d part file(s) into %s", merged_count, base_file.file_name)
    return MergeResult(merged, base_file, tuple(part_files), diagnostics.snapshot(), True)


def merge_specifications(
    base_file: SpecificationFile,
    part_files: Sequence[SpecificationFile],
    config: MultiPartConfiguration | None = None,
) -> MergeResult:
    """Merge already-loaded part files into a clone of the base document.

    The source documents are never mutated. Parts are merged in the order
    given; see :class:`MergeStrategy` for how key collisions are resolved.
    Tags are always merged as a case-insensitive union in which the first
    occurrence wins.
    """
    return _merge_into(base_file, part_files, config or MultiPartConfiguration.DEFAULT, DiagnosticsLog())


def read_and_merge(
    base_path: Path | str,
    config: MultiPartConfiguration | None = None,
) -> MergeResult:
    """Read a base specification and merge its part files.

    Args:
        base_path: Path to the base specification file.
        config: Caller configuration. An ``x-multipart`` block in the base
            document takes precedence over it.

    Returns:
        The merge result. A missing or unparsable base file produces a
        failed result with a single error and no files.
    """
    base_path = Path(base_path)
    diagnostics = DiagnosticsLog()

    if not base_path.is_file():
        diagnostics.error(
            RuleId.BASE_FILE_NOT_FOUND,
            f"Base specification file not found: {base_path}",
            str(base_path),
        )
        return MergeResult.failed(diagnostics)

    try:
        base_file = read_specification_file(base_path, is_base=True)
    except SpecParseError as e:
        diagnostics.add(e.to_diagnostic(source_file=str(base_path)))
        return MergeResult.failed(diagnostics)

    effective = config or MultiPartConfiguration.DEFAULT
    try:
        embedded = extract_multipart_config(base_file.document, str(base_path))
    except ConfigurationError as e:
        diagnostics.add(e.to_diagnostic(Severity.WARNING, str(base_path)))
        embedded = None
    if embedded is not None:
        effective = embedded

    if not effective.enabled:
        logger.debug("Multi-part merging disabled for %s", base_path.name)
        return MergeResult(base_file.document, base_file, (), diagnostics.snapshot(), True)

    if effective.discovery is Discovery.EXPLICIT:
        part_files = load_explicit_part_files(base_path, effective.parts, diagnostics)
    else:
        part_files = load_part_files(base_path, discover_part_files(base_path))

    if not part_files:
        return MergeResult(base_file.document, base_file, (), diagnostics.snapshot(), True)

    return _merge_into(base_file, part_files, effective, diagnostics)


def generate_merged_text(result: MergeResult, fmt: str = "yaml") -> str:
    """Serialize the merged document, or return ``""`` for a failed merge."""
    if not result.success or result.document is None:
        return ""
    return dump_document(result.document, fmt)


# =============================================================================
# CLI
# =============================================================================


def _build_config(args: argparse.Namespace) -> MultiPartConfiguration | None:
    if args.disable:
        return MultiPartConfiguration.DISABLED
    if not (args.strategy or args.discovery or args.parts):
        return None

    config = MultiPartConfiguration.DEFAULT
    if args.parts:
        parts = tuple(p.strip() for p in args.parts.split(",") if p.strip())
        config = dataclasses.replace(config, discovery=Discovery.EXPLICIT, parts=parts)
    if args.discovery:
        config = dataclasses.replace(config, discovery=Discovery.parse(args.discovery, "discovery"))
    if args.strategy:
        strategy = MergeStrategy.parse(args.strategy, "strategy")
        config = dataclasses.replace(config, schemas_strategy=strategy)
        if strategy is not MergeStrategy.MERGE_IF_IDENTICAL:
            config = dataclasses.replace(config, paths_strategy=strategy)
    return config


def print_diagnostics(diagnostics: Sequence[DiagnosticMessage]) -> None:
    for severity, label in ((Severity.ERROR, "Errors"), (Severity.WARNING, "Warnings")):
        selected = [d for d in diagnostics if d.severity is severity]
        if not selected:
            continue
        print(f"{label} ({len(selected)}):")
        for message in selected:
            location = f" [{message.source_file}]" if message.source_file else ""
            print(f"  - {message.rule_id.value}: {message.message}{location}")


def print_statistics(result: MergeResult) -> None:
    print("Merge statistics:")
    print(f"  Files merged:     {len(result.contributing_files)}")
    print(f"  Total paths:      {result.total_paths}")
    print(f"  Total operations: {result.total_operations}")
    print(f"  Total schemas:    {result.total_schemas}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Merge a base OpenAPI specification with its part files")
    parser.add_argument("-s", "--specification", required=True, type=Path, help="Path to the base specification")
    parser.add_argument("-o", "--output", type=Path, help="Output path for the merged specification")
    parser.add_argument("--format", choices=OUTPUT_FORMATS, help="Output format (defaults to the output suffix)")
    parser.add_argument("--preview", action="store_true", help="Print the first lines instead of writing a file")
    parser.add_argument("--strategy", help="Merge strategy for paths and schemas")
    parser.add_argument("--discovery", choices=[d.value for d in Discovery], help="Part discovery mode")
    parser.add_argument("--parts", help="Comma-separated part file names (implies explicit discovery)")
    parser.add_argument("--disable", action="store_true", help="Ignore part files and emit the base file only")
    args = parser.parse_args(argv)

    try:
        config = _build_config(args)
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}")
        return 1

    result = read_and_merge(args.specification, config)

    print(f"Base file: {args.specification}")
    for part in result.part_files:
        print(f"  + {part.file_name}")
    print_diagnostics(result.diagnostics)

    if not result.success:
        print("Merge failed.")
        return 1

    print_statistics(result)

    if args.output is None and not args.preview:
        args.preview = True

    fmt = args.format or (format_for_path(args.output) if args.output else "yaml")
    text = generate_merged_text(result, fmt)

    if args.preview:
        lines = text.splitlines()
        print()
        print(f"Preview (first {PREVIEW_LINES} lines):")
        for line in lines[:PREVIEW_LINES]:
            print(line)
        if len(lines) > PREVIEW_LINES:
            print("... (truncated)")
        return 0

    try:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text, encoding="utf-8")
    except OSError as e:
        print(f"Failed to write merged specification {args.output}: {e}")
        return 1
    print(f"Merged specification written to: {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
