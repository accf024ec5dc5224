# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Data models for annotations, comments and variables."""

from .annotation import (
    AnnotationCategory,
    AnnotationDiagnostic,
    AnnotationRecord,
    CommentKind,
    CommentSpan,
    DiagnosticCode,
    DiagnosticSeverity,
    ParseResult,
)
from .span import Position, TextRange
from .variable import (
    VALID_MODIFIERS,
    Modifier,
    ResolutionError,
    ResolutionErrorKind,
    ResolutionResult,
    ResolvedVariable,
    VariableEntry,
    VariableReference,
    VariableType,
    infer_type_from_prefix,
    is_valid_identifier,
)

__all__ = [
    "AnnotationCategory",
    "AnnotationDiagnostic",
    "AnnotationRecord",
    "CommentKind",
    "CommentSpan",
    "DiagnosticCode",
    "DiagnosticSeverity",
    "infer_type_from_prefix",
    "is_valid_identifier",
    "Modifier",
    "ParseResult",
    "Position",
    "ResolutionError",
    "ResolutionErrorKind",
    "ResolutionResult",
    "ResolvedVariable",
    "TextRange",
    "VALID_MODIFIERS",
    "VariableEntry",
    "VariableReference",
    "VariableType",
]
