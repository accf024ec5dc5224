# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Namespace taxonomy and semantic validation of annotations."""

from typing import Iterable, Optional

from acplens.models import (
    AnnotationCategory,
    AnnotationDiagnostic,
    DiagnosticCode,
    DiagnosticSeverity,
    TextRange,
)

FILE_LEVEL_NAMESPACES = frozenset(
    {"purpose", "module", "domain", "owner", "layer", "stability", "ref"}
)
SYMBOL_LEVEL_NAMESPACES = frozenset(
    {"fn", "class", "method", "param", "returns", "throws", "example", "deprecated"}
)
CONSTRAINT_NAMESPACES = frozenset(
    {"lock", "lock-reason", "style", "behavior", "quality", "test"}
)
INLINE_NAMESPACES = frozenset({"critical", "todo", "fixme", "perf", "hack", "debug"})

_CATEGORY_BY_NAMESPACE: dict[str, AnnotationCategory] = {
    **{ns: AnnotationCategory.FILE_LEVEL for ns in FILE_LEVEL_NAMESPACES},
    **{ns: AnnotationCategory.SYMBOL_LEVEL for ns in SYMBOL_LEVEL_NAMESPACES},
    **{ns: AnnotationCategory.CONSTRAINT for ns in CONSTRAINT_NAMESPACES},
    **{ns: AnnotationCategory.INLINE for ns in INLINE_NAMESPACES},
}

ALL_NAMESPACES = frozenset(_CATEGORY_BY_NAMESPACE)

# Namespaces that may appear without a value
VALUE_OPTIONAL_NAMESPACES = frozenset(
    {"deprecated", "todo", "fixme", "hack", "debug", "critical", "perf"}
)

# Most to least restrictive
LOCK_LEVELS: dict[str, str] = {
    "frozen": "MUST NOT modify",
    "restricted": "Requires approval",
    "approval-required": "Needs review",
    "tests-required": "Must have tests",
    "docs-required": "Must update docs",
    "review-required": "Needs code review",
    "normal": "Standard rules",
    "experimental": "Changes welcome",
}


def classify(namespace: str) -> Optional[AnnotationCategory]:
    """Category for a known namespace, None for anything else."""
    return _CATEGORY_BY_NAMESPACE.get(namespace)


def category_for(namespace: str) -> AnnotationCategory:
    """Category used on records: unknown namespaces fall back to symbol-level."""
    return classify(namespace) or AnnotationCategory.SYMBOL_LEVEL


def is_valid_lock_level(value: str) -> bool:
    return value in LOCK_LEVELS


def lock_level_rank(value: str) -> Optional[int]:
    """Position of a lock level in the ordering (0 = most restrictive)."""
    for rank, level in enumerate(LOCK_LEVELS):
        if level == value:
            return rank
    return None


class NamespaceValidator:
    """Semantic checks on namespace and value.

    Args:
        value_optional: Extra namespaces allowed without a value, on top of
            the built-in set.
    """

    def __init__(self, value_optional: Iterable[str] = ()) -> None:
        self.value_optional = VALUE_OPTIONAL_NAMESPACES | frozenset(value_optional)

    def is_value_optional(self, namespace: str) -> bool:
        return namespace in self.value_optional

    def validate(
        self, namespace: str, value: Optional[str], span: TextRange
    ) -> list[AnnotationDiagnostic]:
        """Diagnostics for an unknown namespace or an invalid enumerated value.

        Missing values are reported by the grammar matcher, not here.
        """
        diagnostics: list[AnnotationDiagnostic] = []

        if namespace not in ALL_NAMESPACES:
            diagnostics.append(
                AnnotationDiagnostic(
                    severity=DiagnosticSeverity.WARNING,
                    message=f"Unknown namespace '{namespace}'",
                    code=DiagnosticCode.UNKNOWN_NAMESPACE,
                    range=span,
                )
            )

        if namespace == "lock" and value is not None and not is_valid_lock_level(value):
            diagnostics.append(
                AnnotationDiagnostic(
                    severity=DiagnosticSeverity.ERROR,
                    message=(
                        f"Invalid lock level '{value}'. "
                        f"Valid levels: {', '.join(LOCK_LEVELS)}"
                    ),
                    code=DiagnosticCode.INVALID_LOCK_LEVEL,
                    range=span,
                )
            )

        return diagnostics

    def missing_value(self, namespace: str, span: TextRange) -> AnnotationDiagnostic:
        return AnnotationDiagnostic(
            severity=DiagnosticSeverity.ERROR,
            message=f"Annotation @acp:{namespace} requires a value",
            code=DiagnosticCode.MISSING_VALUE,
            range=span,
        )
