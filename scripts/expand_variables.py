#!/usr/bin/env python3
# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Expand $NAME variables using the .acp.vars.json files of a workspace.

Usage:
    # Expand text
    python scripts/expand_variables.py "Calls $SYM_AUTH.ref on $$5 charges"

    # Resolve a single variable with a modifier
    python scripts/expand_variables.py --resolve SYM_AUTH --modifier full

    # List variables, or report names declared in more than one file
    python scripts/expand_variables.py --list --workspace ../repo
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from acplens.config import config_for
from acplens.engine import AnnotationEngine, engine_for_workspace

logger = logging.getLogger(__name__)


def print_variables(engine: AnnotationEngine) -> None:
    for variable in engine.list_available_variables():
        description = f" - {variable.description}" if variable.description else ""
        print(f"${variable.name} ({variable.type.value}, {variable.source}){description}")

    duplicates = engine.duplicate_variables()
    if duplicates:
        print("\nDeclared more than once:")
        for name, sources in duplicates.items():
            print(f"  ${name}: {', '.join(sources)}")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Expand ACP variables from .acp.vars.json files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "text",
        nargs="?",
        help="Text to expand",
    )
    parser.add_argument(
        "--workspace",
        "-w",
        type=Path,
        default=Path("."),
        help="Workspace root holding the vars files (default: current directory)",
    )
    parser.add_argument(
        "--resolve",
        metavar="NAME",
        help="Resolve one variable instead of expanding text",
    )
    parser.add_argument(
        "--modifier",
        choices=["full", "ref", "signature"],
        help="Rendering used with --resolve",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List available variables",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    if not args.workspace.is_dir():
        print(f"Error: Workspace not found: {args.workspace}")
        return 1

    config = config_for(args.workspace)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format="%(levelname)s: %(message)s",
    )

    logger.debug(f"Workspace: {args.workspace.resolve()}")
    logger.debug(f"Config: {config.model_dump()}")

    engine = engine_for_workspace(args.workspace, config)

    if args.list:
        print_variables(engine)
        return 0

    if args.resolve:
        result = engine.resolve_variable(args.resolve, args.modifier)
        if not result.success:
            print(f"Error ({result.error.kind.value}): {result.error.message}")
            if result.error.chain:
                print(f"  Chain: {' -> '.join(result.error.chain)}")
            return 1
        print(result.rendered)
        return 0

    if args.text is None:
        parser.error("text is required unless --resolve or --list is given")

    print(engine.expand_all(args.text))
    return 0


if __name__ == "__main__":
    sys.exit(main())
