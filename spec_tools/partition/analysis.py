"""Read-only analysis of a specification with a split recommendation."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Sequence

from ..shared.document import SpecificationDocument, iter_operations
from ..shared.errors import SpecParseError
from ..shared.spec_loader import parse_specification, read_specification_text
from .grouping import (
    SplitStrategy,
    first_path_segment,
    group_operations,
    shared_names,
    usage_by_group,
)

logger = logging.getLogger(__name__)

TAGGED_RATIO = 0.8
MIN_SEGMENTS = 2
MAX_SEGMENTS = 9
BALANCE_LOW = 0.3
BALANCE_HIGH = 3.0
# Rough guide only; real part sizes depend on schema verbosity.
LINES_PER_OPERATION = 50

SPLIT_LINE_THRESHOLD = 500
SPLIT_OPERATION_THRESHOLD = 15
SPLIT_SCHEMA_THRESHOLD = 20

REASON_BY_TAG = "Most operations are well-tagged, grouping by tag recommended"
REASON_BY_PATH_SEGMENT = "Path segments are well-balanced, grouping by path segment recommended"
REASON_BY_DOMAIN = "Mixed organization, using domain-based grouping"


@dataclass(frozen=True, slots=True)
class TagAnalysis:
    name: str
    operation_count: int
    paths: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class PathSegmentAnalysis:
    segment: str
    path_count: int
    operation_count: int


@dataclass(frozen=True, slots=True)
class SharedSchemaUsage:
    name: str
    groups: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class SuggestedSplit:
    file_name: str
    description: str
    part_name: str
    estimated_operations: int
    estimated_lines: int


@dataclass(frozen=True, slots=True)
class SpecificationAnalysis:
    """Counts, shared schemas and a recommended split strategy."""

    file_path: str
    total_lines: int
    total_paths: int
    total_operations: int
    total_schemas: int
    total_parameters: int
    tags: dict[str, TagAnalysis]
    path_segments: dict[str, PathSegmentAnalysis]
    shared_schemas: tuple[SharedSchemaUsage, ...]
    recommended_strategy: SplitStrategy
    recommended_reason: str
    suggested_splits: tuple[SuggestedSplit, ...]

    @property
    def should_split(self) -> bool:
        return (
            self.total_lines > SPLIT_LINE_THRESHOLD
            or self.total_operations > SPLIT_OPERATION_THRESHOLD
            or self.total_schemas > SPLIT_SCHEMA_THRESHOLD
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["recommended_strategy"] = self.recommended_strategy.value
        data["should_split"] = self.should_split
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


def recommend_strategy(
    total_operations: int,
    tagged_operations: int,
    segment_operation_counts: list[int],
) -> tuple[SplitStrategy, str]:
    """Pick a split strategy from tag coverage and segment balance.

    Rules, in order:
        1. More than 80% of operations carry a tag: ``ByTag``.
        2. 2 to 9 path segments whose operation counts all lie within 0.3x
           to 3x of the mean: ``ByPathSegment``.
        3. Otherwise ``ByDomain``.
    """
    if tagged_operations > total_operations * TAGGED_RATIO:
        return SplitStrategy.BY_TAG, REASON_BY_TAG

    count = len(segment_operation_counts)
    if MIN_SEGMENTS <= count <= MAX_SEGMENTS:
        mean = total_operations / count
        if all(mean * BALANCE_LOW <= ops <= mean * BALANCE_HIGH for ops in segment_operation_counts):
            return SplitStrategy.BY_PATH_SEGMENT, REASON_BY_PATH_SEGMENT

    return SplitStrategy.BY_DOMAIN, REASON_BY_DOMAIN


def analyze(
    document: SpecificationDocument,
    file_path: str,
    content: str | None = None,
) -> SpecificationAnalysis:
    """Analyze ``document`` without producing any files.

    Args:
        document: The document to analyze.
        file_path: Path reported in the result; its stem names the
            suggested part files.
        content: Original text, used to count lines when available.
    """
    tags: dict[str, dict[str, Any]] = {}
    segments: dict[str, dict[str, Any]] = {}
    total_operations = 0
    tagged_operations = 0

    for path in document.paths:
        segment = first_path_segment(path)
        entry = segments.setdefault(segment.lower(), {"segment": segment, "paths": set(), "operations": 0})
        entry["paths"].add(path)

    for op in iter_operations(document):
        total_operations += 1
        segments[first_path_segment(op.path).lower()]["operations"] += 1

        op_tags = [t for t in op.tags if t]
        if op_tags:
            tagged_operations += 1
        for tag in op_tags:
            info = tags.setdefault(tag.lower(), {"name": tag, "operations": 0, "paths": []})
            info["operations"] += 1
            if op.path not in info["paths"]:
                info["paths"].append(op.path)

    tag_analysis = {
        info["name"]: TagAnalysis(info["name"], info["operations"], tuple(info["paths"]))
        for info in tags.values()
    }
    segment_analysis = {
        entry["segment"]: PathSegmentAnalysis(entry["segment"], len(entry["paths"]), entry["operations"])
        for entry in segments.values()
    }

    strategy, reason = recommend_strategy(
        total_operations,
        tagged_operations,
        [s.operation_count for s in segment_analysis.values()],
    )

    groups = group_operations(document, strategy)
    usage = usage_by_group(groups, "schemas")
    shared = tuple(SharedSchemaUsage(name, tuple(usage[name])) for name in shared_names(usage))

    stem = Path(file_path).stem
    suffix = Path(file_path).suffix or ".yaml"
    suggestions = tuple(
        SuggestedSplit(
            file_name=f"{stem}_{group.name}{suffix}",
            description=f"Contains {group.operation_count} operation(s) for {group.name}",
            part_name=group.name,
            estimated_operations=group.operation_count,
            estimated_lines=group.operation_count * LINES_PER_OPERATION,
        )
        for group in groups.values()
        if group.operation_count
    )

    logger.debug("Analyzed %s: %d operation(s), recommending %s", file_path, total_operations, strategy.value)
    return SpecificationAnalysis(
        file_path=file_path,
        total_lines=len(content.splitlines()) if content else 0,
        total_paths=len(document.paths),
        total_operations=total_operations,
        total_schemas=len(document.components.schemas),
        total_parameters=len(document.components.parameters),
        tags=tag_analysis,
        path_segments=segment_analysis,
        shared_schemas=shared,
        recommended_strategy=strategy,
        recommended_reason=reason,
        suggested_splits=suggestions,
    )


def format_report(analysis: SpecificationAnalysis) -> str:
    """Render an analysis as a plain-text report."""
    lines = [
        f"Specification: {analysis.file_path}",
        f"  Lines:      {analysis.total_lines}",
        f"  Paths:      {analysis.total_paths}",
        f"  Operations: {analysis.total_operations}",
        f"  Schemas:    {analysis.total_schemas}",
        f"  Parameters: {analysis.total_parameters}",
        "",
    ]
    if analysis.tags:
        lines.append("Tags:")
        for tag in analysis.tags.values():
            lines.append(f"  {tag.name:30} {tag.operation_count} operation(s), {len(tag.paths)} path(s)")
        lines.append("")
    if analysis.path_segments:
        lines.append("Path segments:")
        for segment in analysis.path_segments.values():
            lines.append(
                f"  {segment.segment:30} {segment.operation_count} operation(s), {segment.path_count} path(s)"
            )
        lines.append("")
    if analysis.shared_schemas:
        lines.append("Shared schemas:")
        for usage in analysis.shared_schemas:
            lines.append(f"  {usage.name:30} {', '.join(usage.groups)}")
        lines.append("")

    lines.append(f"Recommended strategy: {analysis.recommended_strategy.value}")
    lines.append(f"  {analysis.recommended_reason}")
    lines.append(f"Split recommended: {'yes' if analysis.should_split else 'no'}")
    if analysis.suggested_splits:
        lines.append("Suggested files:")
        for suggestion in analysis.suggested_splits:
            lines.append(f"  {suggestion.file_name:40} ~{suggestion.estimated_lines} lines  {suggestion.description}")
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Analyze an OpenAPI specification and recommend a split strategy")
    parser.add_argument("-s", "--specification", required=True, type=Path, help="Path to the specification")
    parser.add_argument("--json", action="store_true", help="Print the analysis as JSON")
    args = parser.parse_args(argv)

    try:
        content = read_specification_text(args.specification)
        document = SpecificationDocument.from_mapping(
            parse_specification(content, str(args.specification), args.specification.suffix)
        )
    except SpecParseError as e:
        print(f"Error: {e}")
        return 1

    analysis = analyze(document, str(args.specification), content)
    print(analysis.to_json() if args.json else format_report(analysis))
    return 0


if __name__ == "__main__":
    sys.exit(main())
