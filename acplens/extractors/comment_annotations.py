# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Extract ``@acp:`` annotations from source code comments.

Authors annotate code with structured comments that tools can act on:

    // @acp:lock("frozen") - Payment rounding is audited | owner:billing
    /**
     * @acp:fn("charge") - Charges a card
     * @acp:param("amount") - Amount in cents, see $SYM_MONEY.ref
     */

Grammar (one annotation):

    @acp:namespace ( "(" value ")" )? ( "-" description )? ( "|" metadata )*

Line and block comments carry one annotation; documentation comments are
read line by line and may carry one annotation per line.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, Optional

from acplens.extractors.comments import extract_comments
from acplens.extractors.languages import LANGUAGE_EXTENSIONS, language_from_path
from acplens.extractors.namespaces import NamespaceValidator, category_for
from acplens.extractors.variable_refs import extract_variable_refs
from acplens.models import (
    AnnotationDiagnostic,
    AnnotationRecord,
    CommentKind,
    CommentSpan,
    DiagnosticCode,
    DiagnosticSeverity,
    ParseResult,
    TextRange,
)

logger = logging.getLogger(__name__)

SIGIL = "@acp:"

# Full annotation, anchored at the sigil and running to the end of the text
ANNOTATION_PATTERN = re.compile(
    r"@acp:(?P<namespace>[a-zA-Z][a-zA-Z0-9-]*)"
    r"(?:\s*\(\s*(?P<value>\"(?:\\.|[^\"\\])*\"|'(?:\\.|[^'\\])*'|[^)]*?)\s*\))?"
    r"(?:\s*-\s*(?P<description>[^|]+?))?"
    r"(?:\s*\|(?P<metadata>.+))?"
    r"\s*\Z"
)

# Fallback for partially written annotations: namespace only
NAMESPACE_ONLY_PATTERN = re.compile(r"@acp:(?P<namespace>[a-zA-Z][a-zA-Z0-9-]*)")

QUOTED_VALUE_PATTERN = re.compile(r"^([\"'])(.*)\1$", re.DOTALL)
ESCAPE_PATTERN = re.compile(r"\\([\"'\\])")


def parse_value(raw_value: str) -> str:
    """Strip one layer of matching quotes and unescape ``\\"``, ``\\'``, ``\\\\``."""
    quoted = QUOTED_VALUE_PATTERN.match(raw_value)
    if quoted:
        return ESCAPE_PATTERN.sub(r"\1", quoted.group(2))
    return raw_value


def parse_metadata(raw_metadata: Optional[str]) -> list[str]:
    """Split pipe-separated metadata, dropping empty segments."""
    if not raw_metadata:
        return []
    return [item.strip() for item in raw_metadata.split("|") if item.strip()]


class AnnotationParser:
    """Parse annotations out of comments for any supported language."""

    def __init__(self, validator: Optional[NamespaceValidator] = None) -> None:
        """Initialize the parser.

        Args:
            validator: Namespace validator; a default one is created if omitted.
        """
        self.validator = validator or NamespaceValidator()

    def parse(self, language_id: str, text: str) -> ParseResult:
        """Parse every annotation in a document.

        Args:
            language_id: Editor language id of the document.
            text: Full document text.

        Returns:
            ParseResult with annotations, comments, and all diagnostics.
            Unsupported languages produce an empty result.
        """
        result = ParseResult()
        result.comments = extract_comments(language_id, text)

        for comment in result.comments:
            for annotation, syntax_error in self.parse_comment(comment):
                if annotation is not None:
                    result.annotations.append(annotation)
                    result.diagnostics.extend(annotation.diagnostics)
                elif syntax_error is not None:
                    result.diagnostics.append(syntax_error)

        return result

    def parse_comment(
        self, comment: CommentSpan
    ) -> list[tuple[Optional[AnnotationRecord], Optional[AnnotationDiagnostic]]]:
        """Parse the annotations carried by one comment.

        Returns:
            One (record, syntax_error) pair per sigil occurrence considered;
            exactly one side of each pair is set.
        """
        if SIGIL not in comment.content:
            return []

        if comment.kind == CommentKind.DOC:
            parsed = []
            for line, line_start in zip(comment.lines, comment.line_starts):
                if SIGIL in line:
                    parsed.append(self._parse_or_flag(line, line_start))
            return parsed

        return [self._parse_or_flag(comment.content, comment.content_offset)]

    def _parse_or_flag(
        self, content: str, content_offset: int
    ) -> tuple[Optional[AnnotationRecord], Optional[AnnotationDiagnostic]]:
        annotation = self.parse_annotation(content, content_offset)
        if annotation is not None:
            return annotation, None

        sigil_offset = content_offset + content.index(SIGIL)
        return None, AnnotationDiagnostic(
            severity=DiagnosticSeverity.WARNING,
            message=f"Expected a namespace after '{SIGIL}'",
            code=DiagnosticCode.INVALID_SYNTAX,
            range=TextRange(start=sigil_offset, end=sigil_offset + len(SIGIL)),
        )

    def parse_annotation(self, content: str, content_offset: int) -> Optional[AnnotationRecord]:
        """Parse the first annotation in a piece of comment content.

        Args:
            content: Comment content (or a single doc comment line).
            content_offset: Absolute document offset of ``content[0]``.

        Returns:
            AnnotationRecord, or None if no namespace follows the sigil.
        """
        prefix_index = content.find(SIGIL)
        if prefix_index == -1:
            return None

        annotation_text = content[prefix_index:]
        sigil_offset = content_offset + prefix_index

        match = ANNOTATION_PATTERN.match(annotation_text)
        if match is None:
            return self._parse_namespace_only(annotation_text, sigil_offset)

        raw = match.group(0).rstrip()
        namespace = match.group("namespace")
        annotation_range = TextRange(start=sigil_offset, end=sigil_offset + len(raw))

        raw_value = match.group("value")
        value = parse_value(raw_value.strip()) if raw_value is not None else None

        variable_refs = []
        if raw_value is not None:
            variable_refs = extract_variable_refs(raw_value, sigil_offset + match.start("value"))

        description = match.group("description")
        diagnostics = self.validator.validate(namespace, value, annotation_range)
        if value is None and not self.validator.is_value_optional(namespace):
            diagnostics.append(self.validator.missing_value(namespace, annotation_range))

        return AnnotationRecord(
            raw=raw,
            namespace=namespace,
            category=category_for(namespace),
            value=value,
            description=description.strip() if description else None,
            metadata=parse_metadata(match.group("metadata")),
            range=annotation_range,
            variable_refs=variable_refs,
            diagnostics=diagnostics,
        )

    def _parse_namespace_only(self, annotation_text: str, sigil_offset: int) -> Optional[AnnotationRecord]:
        match = NAMESPACE_ONLY_PATTERN.match(annotation_text)
        if match is None:
            return None

        raw = match.group(0)
        namespace = match.group("namespace")
        annotation_range = TextRange(start=sigil_offset, end=sigil_offset + len(raw))

        diagnostics = self.validator.validate(namespace, None, annotation_range)
        if not self.validator.is_value_optional(namespace):
            diagnostics.append(self.validator.missing_value(namespace, annotation_range))

        return AnnotationRecord(
            raw=raw,
            namespace=namespace,
            category=category_for(namespace),
            range=annotation_range,
            diagnostics=diagnostics,
        )


def parse_annotations(language_id: str, text: str) -> ParseResult:
    """Parse a document with a default parser."""
    return AnnotationParser().parse(language_id, text)


def parse_file(source_path: Path, parser: Optional[AnnotationParser] = None) -> Optional[ParseResult]:
    """Parse a source file, detecting its language from the extension.

    Returns:
        ParseResult, or None if the extension maps to no supported language.
    """
    language_id = language_from_path(str(source_path))
    if language_id is None:
        return None
    parser = parser or AnnotationParser()
    return parser.parse(language_id, source_path.read_text(encoding="utf-8"))


def scan_directory_for_annotations(
    directory: Path,
    extensions: Optional[Iterable[str]] = None,
    parser: Optional[AnnotationParser] = None,
) -> dict[Path, ParseResult]:
    """Recursively scan a directory for annotations in source files.

    Args:
        directory: Root directory to scan.
        extensions: File extensions to scan (default: every supported one).
        parser: Parser to use; a default one is created if omitted.

    Returns:
        Mapping of file path to its ParseResult, for files with annotations
        or diagnostics.
    """
    if extensions is None:
        extensions = [ext for exts in LANGUAGE_EXTENSIONS.values() for ext in exts]
    parser = parser or AnnotationParser()

    results: dict[Path, ParseResult] = {}

    for ext in extensions:
        for source_file in sorted(directory.rglob(f"*{ext}")):
            if not source_file.is_file():
                continue
            try:
                result = parse_file(source_file, parser)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Skipping unreadable file {source_file}: {e}")
                continue
            if result is not None and (result.annotations or result.diagnostics):
                results[source_file] = result

    return results
