"""Partitioning of a specification into part files, and split analysis."""

from .analysis import (
    PathSegmentAnalysis,
    SharedSchemaUsage,
    SpecificationAnalysis,
    SuggestedSplit,
    TagAnalysis,
    analyze,
    format_report,
    recommend_strategy,
)
from .grouping import (
    OperationGroup,
    SplitStrategy,
    first_path_segment,
    group_operations,
)
from .main import (
    RenderContext,
    SplitFileContent,
    SplitResult,
    split,
)

__all__ = [
    # Analysis
    "PathSegmentAnalysis",
    "SharedSchemaUsage",
    "SpecificationAnalysis",
    "SuggestedSplit",
    "TagAnalysis",
    "analyze",
    "format_report",
    "recommend_strategy",
    # Grouping
    "OperationGroup",
    "SplitStrategy",
    "first_path_segment",
    "group_operations",
    # Split
    "RenderContext",
    "SplitFileContent",
    "SplitResult",
    "split",
]
