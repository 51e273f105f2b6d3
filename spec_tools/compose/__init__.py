"""Composition of a base specification with its part files."""

from ..shared.spec_loader import dump_document
from .main import (
    MergeResult,
    discover_part_files,
    extract_multipart_config,
    generate_merged_text,
    load_explicit_part_files,
    load_part_files,
    merge_specifications,
    read_and_merge,
    validate_part_file,
    validate_references,
)

__all__ = [
    "MergeResult",
    "discover_part_files",
    "dump_document",
    "extract_multipart_config",
    "generate_merged_text",
    "load_explicit_part_files",
    "load_part_files",
    "merge_specifications",
    "read_and_merge",
    "validate_part_file",
    "validate_references",
]
