"""Grouping of operations into fragments.

Split and analysis share these rules so that the analysis report describes
exactly the files a split would produce.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..shared.diagnostics import DiagnosticsLog, RuleId
from ..shared.document import (
    Operation,
    SpecificationDocument,
    iter_path_operations,
    operation_parameter_names,
    operation_schema_names,
)
from ..shared.errors import ConfigurationError
from ..shared.naming import NamingConvention, to_identifier

logger = logging.getLogger(__name__)

UNTAGGED_GROUP = "Untagged"
DEFAULT_SEGMENT = "Api"


class SplitStrategy(str, Enum):
    BY_TAG = "ByTag"
    BY_PATH_SEGMENT = "ByPathSegment"
    BY_DOMAIN = "ByDomain"

    @classmethod
    def parse(cls, value: str | SplitStrategy) -> SplitStrategy:
        """Parse a strategy name, ignoring case."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        valid = ", ".join(m.value for m in cls)
        raise ConfigurationError(f"Unknown split strategy {value!r} (expected one of: {valid})", field="strategy")


def first_path_segment(path: str) -> str:
    """Return the first meaningful segment of a path template.

    Version segments (``v1``, ``V2``) and parameter placeholders are skipped;
    ``"Api"`` is returned when nothing is left.

    Examples:
        >>> first_path_segment("/v1/{tenant}/users/{id}")
        'users'
        >>> first_path_segment("/{id}")
        'Api'
    """
    for segment in path.split("/"):
        if not segment:
            continue
        if segment[0] in "vV" and len(segment) > 1 and segment[1].isdigit():
            continue
        if segment.startswith("{"):
            continue
        return segment
    return DEFAULT_SEGMENT


def raw_group_key(op: Operation, strategy: SplitStrategy) -> str:
    """Return the group key of an operation before canonicalization."""
    tags = [t for t in op.tags if t]
    if strategy is SplitStrategy.BY_TAG:
        return tags[0] if tags else UNTAGGED_GROUP
    if strategy is SplitStrategy.BY_PATH_SEGMENT:
        return first_path_segment(op.path)
    return tags[0] if tags else first_path_segment(op.path)


def group_name(op: Operation, strategy: SplitStrategy) -> str:
    """Return the canonical (PascalCase) group name of an operation."""
    raw = raw_group_key(op, strategy)
    return to_identifier(raw, NamingConvention.PASCAL_CASE) or raw


@dataclass
class OperationGroup:
    """Paths, operations and component usage of one fragment."""

    name: str
    paths: dict[str, Any] = field(default_factory=dict)
    operations: list[Operation] = field(default_factory=list)
    schemas: dict[str, None] = field(default_factory=dict)
    parameters: dict[str, None] = field(default_factory=dict)

    @property
    def operation_count(self) -> int:
        return len(self.operations)


def group_operations(
    document: SpecificationDocument,
    strategy: SplitStrategy,
    diagnostics: DiagnosticsLog | None = None,
) -> dict[str, OperationGroup]:
    """Assign every path of ``document`` to exactly one group.

    A path belongs to the group of its first operation. When a later
    operation of the same path maps to a different group, a
    ``PathSpansMultipleGroups`` warning is recorded and the operation stays
    with its path. Paths without operations fall back to their first path
    segment.

    Returns:
        Groups keyed by name, sorted by name ignoring case.
    """
    groups: dict[str, OperationGroup] = {}

    for path, path_item in document.paths.items():
        operations = list(iter_path_operations(path, path_item))
        if operations:
            owner = group_name(operations[0], strategy)
        else:
            segment = first_path_segment(path)
            owner = to_identifier(segment, NamingConvention.PASCAL_CASE) or segment

        group = groups.get(owner)
        if group is None:
            group = groups[owner] = OperationGroup(owner)
        group.paths[path] = path_item

        for op in operations:
            name = group_name(op, strategy)
            if name != owner and diagnostics is not None:
                diagnostics.warning(
                    RuleId.PATH_SPANS_MULTIPLE_GROUPS,
                    f"{op.method.upper()} {path} belongs to group '{name}' but the path is kept in '{owner}'",
                    context=path,
                )
            group.operations.append(op)
            for schema in operation_schema_names(op.definition):
                group.schemas.setdefault(schema, None)
            for parameter in operation_parameter_names(op):
                group.parameters.setdefault(parameter, None)

    logger.debug("Grouped %d path(s) into %d group(s) by %s", len(document.paths), len(groups), strategy.value)
    return {name: groups[name] for name in sorted(groups, key=str.lower)}


def usage_by_group(groups: dict[str, OperationGroup], attribute: str) -> dict[str, list[str]]:
    """Map each used component name to the sorted names of groups using it.

    ``attribute`` is ``"schemas"`` or ``"parameters"``.
    """
    usage: dict[str, list[str]] = {}
    for group in groups.values():
        for name in getattr(group, attribute):
            usage.setdefault(name, []).append(group.name)
    return {name: sorted(users, key=str.lower) for name, users in usage.items()}


def shared_names(usage: dict[str, list[str]]) -> list[str]:
    """Names used by more than one group, sorted ignoring case."""
    return sorted((name for name, users in usage.items() if len(users) > 1), key=str.lower)
