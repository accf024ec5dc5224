# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Records produced by comment extraction and annotation parsing.

Ranges are absolute, half-open character offsets into the document text.
Editor-facing line/column coordinates are derived on demand through
:mod:`acplens.documents.positions`.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional

from pydantic import BaseModel, Field

from .span import TextRange
from .variable import VariableReference


class CommentKind(str, Enum):
    """Comment styles recognised by the extractor."""

    LINE = "line"
    BLOCK = "block"
    DOC = "doc"


class AnnotationCategory(str, Enum):
    """Fixed grouping a namespace belongs to."""

    FILE_LEVEL = "file-level"
    SYMBOL_LEVEL = "symbol-level"
    CONSTRAINT = "constraint"
    INLINE = "inline"


class DiagnosticSeverity(IntEnum):
    """Severity levels, numbered the way editors number them."""

    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4


class DiagnosticCode(str, Enum):
    """Stable codes attached to annotation diagnostics."""

    UNKNOWN_NAMESPACE = "acp-unknown-namespace"
    INVALID_SYNTAX = "acp-invalid-syntax"
    MISSING_VALUE = "acp-missing-value"
    INVALID_LOCK_LEVEL = "acp-invalid-lock-level"
    UNRESOLVED_VARIABLE = "acp-unresolved-variable"


@dataclass(frozen=True)
class CommentSpan:
    """A comment located in a document, delimiters stripped.

    Attributes:
        kind: line, block or doc.
        content: Comment text without delimiters. Doc comments have their
            per-line decoration (leading ``*``) removed as well.
        start_offset: Offset of the opening delimiter.
        end_offset: Offset just past the closing delimiter (or end of line).
        line_starts: Absolute offset of the first character of each line of
            ``content``. Line and block content is contiguous in the source,
            so only doc comments ever need more than the first entry.
    """

    kind: CommentKind
    content: str
    start_offset: int
    end_offset: int
    line_starts: tuple[int, ...] = field(default_factory=tuple)

    @property
    def range(self) -> TextRange:
        return TextRange(start=self.start_offset, end=self.end_offset)

    @property
    def lines(self) -> list[str]:
        return self.content.split("\n")

    @property
    def content_offset(self) -> int:
        """Absolute offset of the first content character."""
        return self.line_starts[0] if self.line_starts else self.start_offset


class AnnotationDiagnostic(BaseModel):
    """A problem found while parsing or validating an annotation."""

    severity: DiagnosticSeverity
    message: str
    code: DiagnosticCode
    range: TextRange


class AnnotationRecord(BaseModel):
    """A structured annotation parsed out of a comment."""

    raw: str  # Text from the sigil to the end of the match
    namespace: str  # e.g., "lock", "fn", "purpose"
    category: AnnotationCategory
    value: Optional[str] = None
    description: Optional[str] = None
    metadata: List[str] = Field(default_factory=list)
    range: TextRange
    variable_refs: List[VariableReference] = Field(default_factory=list)
    diagnostics: List[AnnotationDiagnostic] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(d.severity == DiagnosticSeverity.ERROR for d in self.diagnostics)


@dataclass
class ParseResult:
    """Everything parsed from one document version."""

    annotations: list[AnnotationRecord] = field(default_factory=list)
    comments: list[CommentSpan] = field(default_factory=list)
    diagnostics: list[AnnotationDiagnostic] = field(default_factory=list)
