# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Extractors for comments, annotations and variable references."""

from .comment_annotations import (
    AnnotationParser,
    parse_annotations,
    parse_file,
    scan_directory_for_annotations,
)
from .comments import contains_annotation, extract_comments
from .languages import get_comment_syntax, is_language_supported, language_from_path
from .namespaces import NamespaceValidator, category_for, classify
from .variable_refs import extract_variable_refs, find_reference_at

__all__ = [
    "AnnotationParser",
    "category_for",
    "classify",
    "contains_annotation",
    "extract_comments",
    "extract_variable_refs",
    "find_reference_at",
    "get_comment_syntax",
    "is_language_supported",
    "language_from_path",
    "NamespaceValidator",
    "parse_annotations",
    "parse_file",
    "scan_directory_for_annotations",
]
