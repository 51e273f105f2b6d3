#!/usr/bin/env python3
"""
Unified CLI for the spec tools.

Usage:
    python -m spec_tools [-v] <command> [options]

Commands:
    merge       Merge a base specification with its part files
    split       Split a specification into part files
    analyze     Analyze a specification and recommend a split strategy
    names       Synthesize identifiers from contract names

Examples:
    python -m spec_tools merge -s api.yaml -o merged.yaml
    python -m spec_tools split -s merged.yaml -o parts --strategy ByTag
    python -m spec_tools analyze -s api.yaml --json
    python -m spec_tools names x-correlation-id my-pet-store --backend rust
"""

from __future__ import annotations

import argparse
import logging
import sys

from .shared.errors import SpecError
from .shared.identifiers import BACKEND_PROFILES, IdentifierContext
from .shared.naming import NamingConvention, pluralize, to_header_property_name, to_identifier


def cmd_merge(args: list[str]) -> int:
    """Merge a base specification with its part files."""
    from .compose.main import main as merge_main
    return merge_main(args)


def cmd_split(args: list[str]) -> int:
    """Split a specification into part files."""
    from .partition.main import main as split_main
    return split_main(args)


def cmd_analyze(args: list[str]) -> int:
    """Analyze a specification."""
    from .partition.analysis import main as analyze_main
    return analyze_main(args)


def cmd_names(args: list[str]) -> int:
    """Synthesize identifiers from raw contract names."""
    parser = argparse.ArgumentParser(prog="spec_tools names", description="Synthesize identifiers")
    parser.add_argument("names", nargs="+", help="Raw contract names")
    parser.add_argument(
        "--convention",
        choices=[c.value for c in NamingConvention],
        default=NamingConvention.PASCAL_CASE.value,
        help="Naming convention",
    )
    parser.add_argument("--header", action="store_true", help="Treat names as HTTP header names")
    parser.add_argument("--plural", action="store_true", help="Pluralize the synthesized identifier")
    parser.add_argument("--backend", choices=sorted(BACKEND_PROFILES), default="rust", help="Target backend")
    parsed = parser.parse_args(args)

    convention = NamingConvention(parsed.convention)
    context = IdentifierContext(BACKEND_PROFILES[parsed.backend])

    for raw in parsed.names:
        if parsed.header:
            identifier = to_header_property_name(raw)
        else:
            context.register(raw)
            identifier = to_identifier(raw, convention)
        if parsed.plural:
            identifier = pluralize(identifier)
        print(f"{raw:30} {context.resolve(identifier)}")

    for message in context.diagnostics:
        print(message)
    return 1 if context.diagnostics.has_errors else 0


COMMANDS = {
    "merge": (cmd_merge, "Merge a base specification with its part files"),
    "split": (cmd_split, "Split a specification into part files"),
    "analyze": (cmd_analyze, "Analyze a specification and recommend a split strategy"),
    "names": (cmd_names, "Synthesize identifiers from contract names"),
}


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    if argv and argv[0] in ("-v", "--verbose"):
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
        argv = argv[1:]

    if not argv or argv[0] in ("-h", "--help"):
        print(__doc__)
        print("Available commands:")
        for name, (_, desc) in COMMANDS.items():
            print(f"  {name:12} {desc}")
        print("\nUse '<command> --help' for command-specific options.")
        return 0

    command = argv[0]
    args = argv[1:]

    if command not in COMMANDS:
        print(f"Unknown command: {command}")
        print(f"Available commands: {', '.join(COMMANDS.keys())}")
        return 1

    handler, _ = COMMANDS[command]
    try:
        return handler(args)
    except SpecError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
