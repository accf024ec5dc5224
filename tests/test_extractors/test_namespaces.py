# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Tests for the namespace taxonomy and lock levels."""

import pytest

from acplens.extractors.namespaces import (
    CONSTRAINT_NAMESPACES,
    FILE_LEVEL_NAMESPACES,
    INLINE_NAMESPACES,
    SYMBOL_LEVEL_NAMESPACES,
)

NAMESPACE_CATEGORIES = (
    [(ns, "file-level") for ns in sorted(FILE_LEVEL_NAMESPACES)]
    + [(ns, "symbol-level") for ns in sorted(SYMBOL_LEVEL_NAMESPACES)]
    + [(ns, "constraint") for ns in sorted(CONSTRAINT_NAMESPACES)]
    + [(ns, "inline") for ns in sorted(INLINE_NAMESPACES)]
)


class TestClassification:
    """Tests for namespace categories."""

    @pytest.mark.parametrize("namespace,category", NAMESPACE_CATEGORIES)
    def test_known_namespaces(self, namespace: str, category: str) -> None:
        from acplens.extractors.namespaces import classify

        assert classify(namespace).value == category

    def test_unknown_namespace(self) -> None:
        from acplens.extractors.namespaces import category_for, classify
        from acplens.models import AnnotationCategory

        assert classify("banana") is None
        assert category_for("banana") == AnnotationCategory.SYMBOL_LEVEL

    def test_category_sets_are_disjoint(self) -> None:
        from acplens.extractors import namespaces

        sets = [
            namespaces.FILE_LEVEL_NAMESPACES,
            namespaces.SYMBOL_LEVEL_NAMESPACES,
            namespaces.CONSTRAINT_NAMESPACES,
            namespaces.INLINE_NAMESPACES,
        ]
        assert sum(len(s) for s in sets) == len(namespaces.ALL_NAMESPACES)


class TestLockLevels:
    """Tests for lock level ordering."""

    def test_ordering(self) -> None:
        from acplens.extractors.namespaces import lock_level_rank

        assert lock_level_rank("frozen") == 0
        assert lock_level_rank("experimental") == 7
        assert lock_level_rank("restricted") < lock_level_rank("normal")
        assert lock_level_rank("melted") is None

    def test_validity(self) -> None:
        from acplens.extractors.namespaces import is_valid_lock_level

        assert is_valid_lock_level("tests-required")
        assert not is_valid_lock_level("")
        assert not is_valid_lock_level("Frozen")


class TestNamespaceValidator:
    """Tests for semantic validation of records."""

    def test_valid_annotation_has_no_diagnostics(self) -> None:
        from acplens.extractors.namespaces import NamespaceValidator
        from acplens.models import TextRange

        validator = NamespaceValidator()

        assert validator.validate("lock", "frozen", TextRange(start=0, end=10)) == []

    def test_missing_value_message(self) -> None:
        from acplens.extractors.namespaces import NamespaceValidator
        from acplens.models import DiagnosticCode, DiagnosticSeverity, TextRange

        diagnostic = NamespaceValidator().missing_value("purpose", TextRange(start=4, end=16))

        assert diagnostic.code == DiagnosticCode.MISSING_VALUE
        assert diagnostic.severity == DiagnosticSeverity.ERROR
        assert "@acp:purpose" in diagnostic.message
        assert diagnostic.range.start == 4

    def test_value_optional_extension(self) -> None:
        from acplens.extractors.namespaces import NamespaceValidator

        validator = NamespaceValidator(value_optional=["note"])

        assert validator.is_value_optional("note")
        assert validator.is_value_optional("todo")
        assert not validator.is_value_optional("purpose")
