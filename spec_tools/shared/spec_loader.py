"""Specification loading and serialization."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from .document import SpecificationDocument, SpecificationFile
from .errors import SpecParseError

logger = logging.getLogger(__name__)

YAML_SUFFIXES: frozenset[str] = frozenset({".yaml", ".yml"})
JSON_SUFFIXES: frozenset[str] = frozenset({".json"})
OUTPUT_FORMATS: tuple[str, ...] = ("yaml", "json")


class _SpecDumper(yaml.SafeDumper):
    """Safe dumper that never emits anchors for shared nodes."""

    def ignore_aliases(self, data: Any) -> bool:
        return True


def read_specification_text(path: Path) -> str:
    """Read a specification file as UTF-8 text.

    Raises:
        SpecParseError: If the file cannot be read or is not valid UTF-8.
    """
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SpecParseError(f"Failed to read specification file: {e}", str(path)) from e


def parse_specification(content: str, source: str = "<string>", suffix: str = ".yaml") -> dict[str, Any]:
    """Parse specification text into a mapping.

    ``.json`` files go through :mod:`json`; everything else is parsed as YAML.

    Raises:
        SpecParseError: If the text is not valid or its root is not a mapping.
    """
    if suffix.lower() in JSON_SUFFIXES:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise SpecParseError(f"Invalid JSON: {e}", source) from e
    else:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise SpecParseError(f"Invalid YAML: {e}", source) from e

    if not isinstance(data, dict):
        raise SpecParseError("Specification root must be a mapping", source)

    return data


def load_document(path: Path) -> SpecificationDocument:
    """Load and parse a specification file into a document."""
    content = read_specification_text(path)
    return SpecificationDocument.from_mapping(parse_specification(content, str(path), path.suffix))


def read_specification_file(
    path: Path,
    *,
    part_name: str | None = None,
    is_base: bool = False,
) -> SpecificationFile:
    """Read and parse one specification file.

    Args:
        path: File to read.
        part_name: Part name for fragment files.
        is_base: Whether this is the base file of a multi-part set.

    Returns:
        The parsed file.

    Raises:
        SpecParseError: If the file cannot be read or parsed.
    """
    content = read_specification_text(path)
    data = parse_specification(content, str(path), path.suffix)
    logger.debug("Loaded %s (%d root keys)", path, len(data))
    return SpecificationFile(
        path=path,
        content=content,
        document=SpecificationDocument.from_mapping(data),
        part_name=part_name,
        is_base=is_base,
    )


def format_for_path(path: Path, default: str = "yaml") -> str:
    """Pick the output format matching a file suffix."""
    suffix = path.suffix.lower()
    if suffix in JSON_SUFFIXES:
        return "json"
    if suffix in YAML_SUFFIXES:
        return "yaml"
    return default


def dump_mapping(data: dict[str, Any], fmt: str = "yaml") -> str:
    """Serialize a plain mapping as YAML or JSON text."""
    if fmt == "json":
        return json.dumps(data, indent=2, ensure_ascii=False, default=str) + "\n"
    if fmt != "yaml":
        raise ValueError(f"Unsupported output format: {fmt}")
    return yaml.dump(
        data,
        Dumper=_SpecDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=120,
    )


def dump_document(document: SpecificationDocument, fmt: str = "yaml") -> str:
    """Serialize a document back to YAML or JSON text."""
    return dump_mapping(document.to_mapping(), fmt)
