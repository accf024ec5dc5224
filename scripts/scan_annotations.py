#!/usr/bin/env python3
# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Scan source files for @acp: annotations and report diagnostics.

Usage:
    # Scan a directory tree
    python scripts/scan_annotations.py src/

    # Scan one file and also check variable references against .acp.vars.json
    python scripts/scan_annotations.py src/payments.ts --check-variables -w .

    # Machine-readable output
    python scripts/scan_annotations.py src/ --json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from acplens.config import config_for
from acplens.documents.positions import LineIndex
from acplens.engine import AnnotationEngine, engine_for_workspace
from acplens.extractors.comment_annotations import parse_file, scan_directory_for_annotations
from acplens.models import AnnotationDiagnostic, DiagnosticSeverity, ParseResult

logger = logging.getLogger(__name__)


def scan(path: Path, engine: AnnotationEngine) -> dict[Path, ParseResult]:
    """Parse a file, or every supported file under a directory."""
    if path.is_dir():
        return scan_directory_for_annotations(path, parser=engine.parser)
    result = parse_file(path, engine.parser)
    if result is None:
        logger.warning(f"Unsupported file type: {path}")
        return {}
    return {path: result}


def format_diagnostic(path: Path, index: LineIndex, diagnostic: AnnotationDiagnostic) -> str:
    position = index.position_at(diagnostic.range.start)
    return (
        f"{path}:{position.line + 1}:{position.character + 1}: "
        f"{diagnostic.severity.name.lower()} [{diagnostic.code.value}] {diagnostic.message}"
    )


def format_result(path: Path, text: str, result: ParseResult, extra: list[AnnotationDiagnostic]) -> list[str]:
    index = LineIndex(text)
    lines = []
    for annotation in result.annotations:
        position = index.position_at(annotation.range.start)
        lines.append(f"{path}:{position.line + 1}:{position.character + 1}: {annotation.raw}")
    for diagnostic in [*result.diagnostics, *extra]:
        lines.append(format_diagnostic(path, index, diagnostic))
    return lines


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Scan source files for @acp: annotations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "path",
        type=Path,
        help="Source file or directory to scan",
    )
    parser.add_argument(
        "--workspace",
        "-w",
        type=Path,
        help="Workspace root holding the vars files (default: the scanned directory)",
    )
    parser.add_argument(
        "--check-variables",
        action="store_true",
        help="Report variable references that fail to resolve",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    if not args.path.exists():
        print(f"Error: Path not found: {args.path}")
        return 1

    root = args.workspace or (args.path if args.path.is_dir() else args.path.parent)
    config = config_for(root)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format="%(levelname)s: %(message)s",
    )

    engine = engine_for_workspace(root, config)
    results = scan(args.path, engine)

    error_count = 0
    report = {}
    output = []
    for path, result in results.items():
        extra = engine.variable_diagnostics(path.resolve().as_uri()) if args.check_variables else []
        diagnostics = [*result.diagnostics, *extra]
        error_count += sum(1 for d in diagnostics if d.severity == DiagnosticSeverity.ERROR)

        if args.json:
            report[str(path)] = {
                "annotations": [a.model_dump(mode="json") for a in result.annotations],
                "diagnostics": [d.model_dump(mode="json") for d in diagnostics],
            }
        else:
            output.extend(format_result(path, path.read_text(encoding="utf-8"), result, extra))

    if args.json:
        print(json.dumps(report, indent=2))
    else:
        for line in output:
            print(line)
        annotation_count = sum(len(r.annotations) for r in results.values())
        print(f"\n{annotation_count} annotations in {len(results)} files, {error_count} errors")

    return 0


if __name__ == "__main__":
    sys.exit(main())
