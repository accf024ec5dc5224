# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""The engine facade consumed by editor tooling, scripts and the MCP server.

Usage:
    provider = InMemoryDocumentProvider()
    provider.open("file:///repo/.acp.vars.json", vars_json)
    engine = AnnotationEngine(provider)

    result = engine.parse_annotations("typescript", source_text)
    engine.expand_all("See $SYM_AUTH.ref")

Every call is synchronous and on-demand. The engine keeps no state across
processes; the variable registry is rebuilt when invalidated.
"""

import logging
from pathlib import Path
from typing import Optional

from acplens.config import EngineConfig, config_for
from acplens.documents.provider import (
    DocumentProvider,
    InMemoryDocumentProvider,
    WorkspaceDocumentProvider,
    detect_language_id,
)
from acplens.extractors.comment_annotations import AnnotationParser
from acplens.extractors.languages import uri_to_path
from acplens.extractors.namespaces import NamespaceValidator
from acplens.models import (
    AnnotationDiagnostic,
    DiagnosticCode,
    DiagnosticSeverity,
    ParseResult,
    ResolutionResult,
)
from acplens.variables.builtins import BuiltinContext
from acplens.variables.registry import VariableRegistry
from acplens.variables.resolver import AvailableVariable, VariableResolver

logger = logging.getLogger(__name__)


class AnnotationEngine:
    """Annotation parsing and variable resolution behind one interface.

    Args:
        provider: Source of document text and declaration sources. Defaults
            to an empty in-memory provider.
        config: Engine settings; defaults apply when omitted.
    """

    def __init__(
        self,
        provider: Optional[DocumentProvider] = None,
        config: Optional[EngineConfig] = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.provider = provider or InMemoryDocumentProvider(self.config.vars_file_patterns)
        self.parser = AnnotationParser(NamespaceValidator(self.config.value_optional_namespaces))
        self.registry = VariableRegistry(self.provider, self.config.duplicate_policy)
        self.resolver = VariableResolver(self.registry, max_depth=self.config.max_depth)

    # Parsing

    def parse_annotations(self, language_id: str, text: str) -> ParseResult:
        return self.parser.parse(language_id, text)

    def parse_document(self, uri: str) -> Optional[ParseResult]:
        """Parse a document known to the provider.

        Returns:
            ParseResult, or None if the document is unknown or its language
            is unsupported.
        """
        text = self.provider.get_text(uri)
        if text is None:
            logger.debug(f"Document not available: {uri}")
            return None
        language_id = self.provider.get_language_id(uri) or detect_language_id(uri)
        if language_id is None:
            return None
        return self.parser.parse(language_id, text)

    def builtin_context(self, uri: str, offset: int) -> Optional[BuiltinContext]:
        """Values of the built-in variables at an offset of a document."""
        text = self.provider.get_text(uri)
        if text is None:
            return None
        result = self.parse_document(uri)
        annotations = result.annotations if result else []
        return BuiltinContext.for_location(uri_to_path(uri), text, offset, annotations)

    def variable_diagnostics(self, uri: str) -> list[AnnotationDiagnostic]:
        """Diagnostics for references in annotation values that fail to resolve."""
        result = self.parse_document(uri)
        if result is None:
            return []

        text = self.provider.get_text(uri) or ""
        path = uri_to_path(uri)
        diagnostics = []
        for annotation in result.annotations:
            for ref in annotation.variable_refs:
                builtins = BuiltinContext.for_location(path, text, ref.range.start, result.annotations)
                resolution = self.resolve_variable(ref.identifier, ref.modifier, builtins)
                if resolution.success:
                    continue
                diagnostics.append(
                    AnnotationDiagnostic(
                        severity=DiagnosticSeverity.WARNING,
                        message=resolution.error.message,
                        code=DiagnosticCode.UNRESOLVED_VARIABLE,
                        range=ref.range,
                    )
                )
        return diagnostics

    # Variables

    def resolve_variable(
        self,
        identifier: str,
        modifier: Optional[str] = None,
        builtins: Optional[BuiltinContext] = None,
    ) -> ResolutionResult:
        context = self.resolver.new_context(builtins)
        return self.resolver.resolve(identifier, modifier, context)

    def expand_all(self, text: str, builtins: Optional[BuiltinContext] = None) -> str:
        return self.resolver.expand_all(text, builtins)

    def is_variable_defined(self, identifier: str) -> bool:
        return self.resolver.is_defined(identifier)

    def list_available_variables(self) -> list[AvailableVariable]:
        return self.resolver.available_variables()

    def refresh_variables(self) -> None:
        """Rebuild the variable registry from the current declaration sources."""
        self.registry.refresh()

    def invalidate_variables(self) -> None:
        """Mark the registry stale after a declaration source changed."""
        self.registry.invalidate()

    def duplicate_variables(self) -> dict[str, list[str]]:
        self.registry.ensure_fresh()
        return self.registry.duplicates()


def engine_for_workspace(root: Path, config: Optional[EngineConfig] = None) -> AnnotationEngine:
    """Engine reading documents and declaration sources from disk."""
    config = config or config_for(root)
    provider = WorkspaceDocumentProvider(root, config.vars_file_patterns, include_sources=False)
    return AnnotationEngine(provider, config)
