#!/usr/bin/env python3
"""Split a composed OpenAPI specification into part files.

The inverse of :mod:`spec_tools.compose`: operations are grouped by tag, by
path segment or by domain, each group becomes a part file, schemas used by
several groups go to a common file, and a base file lists the parts in an
explicit ``x-multipart`` block so the set merges back into one document.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

from jinja2 import Environment, FileSystemLoader, Template

from ..compose.main import COMMON_PART_NAME, print_diagnostics, read_and_merge
from ..shared.config import MULTIPART_EXTENSION_KEY, Discovery, MergeStrategy, MultiPartConfiguration
from ..shared.diagnostics import DiagnosticMessage, DiagnosticsLog, RuleId, Severity
from ..shared.document import Components, SpecificationDocument
from ..shared.errors import ConfigurationError
from ..shared.spec_loader import JSON_SUFFIXES, dump_mapping
from .analysis import analyze
from .grouping import OperationGroup, SplitStrategy, group_operations, shared_names, usage_by_group

logger = logging.getLogger(__name__)

DEFAULT_OPENAPI_VERSION = "3.1.0"
DEFAULT_INFO_VERSION = "1.0.0"


@dataclass(frozen=True, slots=True)
class SplitFileContent:
    """One generated file."""

    file_name: str
    content: str
    part_name: str | None = None
    is_base_file: bool = False
    is_common_file: bool = False
    path_count: int = 0
    schema_count: int = 0
    parameter_count: int = 0

    @property
    def estimated_lines(self) -> int:
        return len(self.content.splitlines())


@dataclass(frozen=True, slots=True)
class SplitResult:
    base_file: SplitFileContent
    part_files: tuple[SplitFileContent, ...]
    common_file: SplitFileContent | None
    diagnostics: tuple[DiagnosticMessage, ...]
    strategy: SplitStrategy

    @property
    def all_files(self) -> tuple[SplitFileContent, ...]:
        files = (self.base_file, *self.part_files)
        return files + (self.common_file,) if self.common_file else files

    @property
    def success(self) -> bool:
        return not any(d.severity is Severity.ERROR for d in self.diagnostics)

    def write_to(self, directory: Path) -> list[Path]:
        """Write every file into ``directory`` and return the written paths."""
        directory.mkdir(parents=True, exist_ok=True)
        written = []
        for item in self.all_files:
            target = directory / item.file_name
            target.write_text(item.content, encoding="utf-8")
            written.append(target)
        return written


@dataclass
class RenderContext:
    """Pre-compiled templates for YAML part, common and base files."""

    template_env: Environment = field(init=False)
    _part_template: Template = field(init=False)
    _common_template: Template = field(init=False)
    _base_template: Template = field(init=False)

    def __post_init__(self) -> None:
        templates_dir = Path(__file__).parent / "templates"
        self.template_env = Environment(
            loader=FileSystemLoader(templates_dir),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            auto_reload=False,
        )
        self._part_template = self.template_env.get_template("part_file.yaml.jinja")
        self._common_template = self.template_env.get_template("common_file.yaml.jinja")
        self._base_template = self.template_env.get_template("base_file.yaml.jinja")

    def render_part(self, part_name: str, body: str) -> str:
        return self._part_template.render(part_name=part_name, body=body.rstrip("\n"))

    def render_common(self, body: str) -> str:
        return self._common_template.render(body=body.rstrip("\n"))

    def render_base(self, title: str, common_file: str | None, body: str) -> str:
        return self._base_template.render(
            title=title,
            body=body.rstrip("\n"),
            has_common=common_file is not None,
            common_file=common_file,
        )


def _serialize(document: SpecificationDocument, fmt: str, render: Any, *args: Any) -> str:
    body = dump_mapping(document.to_mapping(), fmt)
    if fmt == "json":
        return body
    return render(*args, body) + "\n"


def _pick(source: dict[str, Any], names: Sequence[str]) -> dict[str, Any]:
    return {name: source[name] for name in sorted(names, key=str.lower) if name in source}


def _part_name_for_group(name: str) -> str:
    # The common file owns the {base}_Common name
    if name.lower() == COMMON_PART_NAME.lower():
        return f"{name}Api"
    return name


def split(
    document: SpecificationDocument,
    base_name: str,
    strategy: SplitStrategy | str = SplitStrategy.BY_TAG,
    extract_common: bool = True,
    extension: str = ".yaml",
) -> SplitResult:
    """Split ``document`` into a base file, part files and a common file.

    Args:
        document: The composed document to split. It is not modified.
        base_name: Stem of the generated file names.
        strategy: How operations are grouped into parts.
        extract_common: Move schemas and parameters used by several groups
            into ``{base_name}_Common{extension}``. When false they are
            copied into every part that uses them and the generated
            configuration merges schemas with ``MergeIfIdentical``.
        extension: ``.yaml``, ``.yml`` or ``.json``.

    Returns:
        The generated files and the diagnostics of the run.
    """
    strategy = SplitStrategy.parse(strategy)
    fmt = "json" if extension.lower() in JSON_SUFFIXES else "yaml"
    diagnostics = DiagnosticsLog()
    context = RenderContext()

    groups = group_operations(document, strategy, diagnostics)
    schema_usage = usage_by_group(groups, "schemas")
    parameter_usage = usage_by_group(groups, "parameters")
    shared_schemas = set(shared_names(schema_usage))
    shared_parameters = set(shared_names(parameter_usage))

    schemas = document.components.schemas
    parameters = document.components.parameters
    unassigned_schemas = [name for name in schemas if name not in schema_usage]
    unassigned_parameters = [name for name in parameters if name not in parameter_usage]
    for name in unassigned_schemas:
        placement = " and was placed in the common file" if extract_common else ""
        diagnostics.warning(
            RuleId.SCHEMA_NOT_ASSIGNED,
            f"Schema '{name}' is not referenced by any operation{placement}",
            context=name,
        )

    part_files = [
        _build_part_file(
            context,
            group,
            base_name,
            extension,
            fmt,
            schemas,
            parameters,
            exclude_schemas=shared_schemas if extract_common else set(),
            exclude_parameters=shared_parameters if extract_common else set(),
        )
        for group in groups.values()
    ]

    common_file = None
    if extract_common:
        common_schemas = _pick(schemas, [*shared_schemas, *unassigned_schemas])
        common_parameters = _pick(parameters, [*shared_parameters, *unassigned_parameters])
        if common_schemas or common_parameters:
            common_document = SpecificationDocument(
                openapi="",
                components=Components(schemas=common_schemas, parameters=common_parameters),
            )
            common_file = SplitFileContent(
                file_name=f"{base_name}_{COMMON_PART_NAME}{extension}",
                content=_serialize(common_document, fmt, context.render_common),
                part_name=COMMON_PART_NAME,
                is_common_file=True,
                schema_count=len(common_schemas),
                parameter_count=len(common_parameters),
            )

    duplicated = not extract_common and bool(shared_schemas)
    config = MultiPartConfiguration(
        discovery=Discovery.EXPLICIT,
        parts=tuple(p.file_name for p in part_files),
        schemas_strategy=MergeStrategy.MERGE_IF_IDENTICAL if duplicated else MergeStrategy.ERROR_ON_DUPLICATE,
    )
    base_file = _build_base_file(context, document, base_name, extension, fmt, config, common_file)

    logger.info(
        "Split %s into %d part file(s)%s by %s",
        base_name,
        len(part_files),
        " and a common file" if common_file else "",
        strategy.value,
    )
    return SplitResult(base_file, tuple(part_files), common_file, diagnostics.snapshot(), strategy)


def _build_part_file(
    context: RenderContext,
    group: OperationGroup,
    base_name: str,
    extension: str,
    fmt: str,
    schemas: dict[str, Any],
    parameters: dict[str, Any],
    exclude_schemas: set[str],
    exclude_parameters: set[str],
) -> SplitFileContent:
    part_name = _part_name_for_group(group.name)
    part_schemas = _pick(schemas, [n for n in group.schemas if n not in exclude_schemas])
    part_parameters = _pick(parameters, [n for n in group.parameters if n not in exclude_parameters])
    part_document = SpecificationDocument(
        openapi="",
        paths=_pick(group.paths, list(group.paths)),
        components=Components(schemas=part_schemas, parameters=part_parameters),
    )
    return SplitFileContent(
        file_name=f"{base_name}_{part_name}{extension}",
        content=_serialize(part_document, fmt, context.render_part, part_name),
        part_name=part_name,
        path_count=len(group.paths),
        schema_count=len(part_schemas),
        parameter_count=len(part_parameters),
    )


def _build_base_file(
    context: RenderContext,
    document: SpecificationDocument,
    base_name: str,
    extension: str,
    fmt: str,
    config: MultiPartConfiguration,
    common_file: SplitFileContent | None,
) -> SplitFileContent:
    base_document = document.clone()
    base_document.openapi = document.openapi or DEFAULT_OPENAPI_VERSION
    base_document.info.setdefault("title", base_name)
    base_document.info.setdefault("version", DEFAULT_INFO_VERSION)
    base_document.paths = {}
    base_document.components.schemas = {}
    base_document.components.parameters = {}
    extensions = {k: v for k, v in base_document.extensions.items() if k.lower() != MULTIPART_EXTENSION_KEY}
    base_document.extensions = {MULTIPART_EXTENSION_KEY: config.to_mapping(), **extensions}

    return SplitFileContent(
        file_name=f"{base_name}{extension}",
        content=_serialize(
            base_document,
            fmt,
            context.render_base,
            str(base_document.info["title"]),
            common_file.file_name if common_file else None,
        ),
        is_base_file=True,
    )


# =============================================================================
# CLI
# =============================================================================


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Split an OpenAPI specification into part files")
    parser.add_argument("-s", "--specification", required=True, type=Path, help="Path to the specification to split")
    parser.add_argument("-o", "--output", type=Path, help="Output directory (defaults to a split/ directory beside the specification)")
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in SplitStrategy],
        help="Grouping strategy (defaults to the analysis recommendation)",
    )
    parser.add_argument("--no-common", dest="extract_common", action="store_false", help="Do not extract shared schemas")
    parser.add_argument("--preview", action="store_true", help="List the files that would be written")
    args = parser.parse_args(argv)

    merged = read_and_merge(args.specification)
    if not merged.success or merged.document is None:
        print_diagnostics(merged.diagnostics)
        print("Failed to load specification.")
        return 1

    spec_path: Path = args.specification
    if args.strategy:
        strategy = SplitStrategy.parse(args.strategy)
    else:
        analysis = analyze(merged.document, str(spec_path))
        strategy = analysis.recommended_strategy
        print(f"Recommended strategy: {strategy.value} ({analysis.recommended_reason})")

    try:
        result = split(merged.document, spec_path.stem, strategy, args.extract_common, spec_path.suffix or ".yaml")
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}")
        return 1

    print_diagnostics(result.diagnostics)
    for item in result.all_files:
        kind = "base" if item.is_base_file else "common" if item.is_common_file else "part"
        print(
            f"  {item.file_name:40} {kind:6} paths={item.path_count} "
            f"schemas={item.schema_count} parameters={item.parameter_count}"
        )

    if args.preview:
        return 0

    output_dir = args.output or spec_path.parent / "split"
    try:
        written = result.write_to(output_dir)
    except OSError as e:
        print(f"Failed to write split files to {output_dir}: {e}")
        return 1
    print(f"Wrote {len(written)} file(s) to {output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
