# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Registry of declared variables, rebuilt from declaration sources.

The registry is an explicitly owned cache: nothing is read until
:meth:`VariableRegistry.refresh` runs, and callers decide when a declaration
source changed by calling :meth:`VariableRegistry.invalidate`.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Iterator, Optional

from pydantic import ValidationError

from acplens.documents.provider import DocumentProvider
from acplens.extractors.languages import uri_to_path
from acplens.models import VariableEntry, is_valid_identifier

logger = logging.getLogger(__name__)


class DuplicatePolicy(str, Enum):
    """Which declaration wins when several sources declare the same name."""

    FIRST = "first"  # Earliest source in provider order
    LAST = "last"  # Latest source in provider order


@dataclass
class DeclarationSource:
    """Variables parsed from one declaration document."""

    uri: str
    text: str
    entries: dict[str, VariableEntry] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return PurePosixPath(uri_to_path(self.uri)).name or self.uri

    def definition_line(self, identifier: str) -> int:
        """1-based line of the identifier's JSON key, 0 if not found."""
        needle = f'"{identifier}"'
        for line_number, line in enumerate(self.text.split("\n"), start=1):
            if needle in line:
                return line_number
        return 0


def parse_declaration_source(uri: str, text: str) -> Optional[DeclarationSource]:
    """Parse a declaration document.

    Malformed documents return None. Malformed entries and names that break
    the identifier rule are dropped. Each is logged as a warning, never raised.
    """
    try:
        content = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse vars file {uri}: {e}")
        return None

    if not isinstance(content, dict) or not isinstance(content.get("variables"), dict):
        logger.warning(f"Vars file {uri} has no 'variables' object; skipping")
        return None

    source = DeclarationSource(uri=uri, text=text)
    for identifier, raw_entry in content["variables"].items():
        if not is_valid_identifier(identifier):
            logger.warning(
                f"Skipping variable '{identifier}' in {uri}: name does not match "
                "^[A-Z][A-Z0-9_]*$ and can never be referenced"
            )
            continue
        try:
            entry = VariableEntry.from_declaration(raw_entry)
        except ValidationError as e:
            logger.warning(
                f"Skipping malformed variable '{identifier}' in {uri}: {e.errors()[0]['msg']}"
            )
            continue
        source.entries[identifier] = entry

    return source


class VariableRegistry:
    """Identifier to declaration lookup across all declaration sources.

    Args:
        provider: Document provider listing the declaration sources.
        duplicate_policy: Which source wins for names declared more than once.
    """

    def __init__(
        self,
        provider: DocumentProvider,
        duplicate_policy: DuplicatePolicy | str = DuplicatePolicy.FIRST,
    ) -> None:
        self.provider = provider
        self.duplicate_policy = DuplicatePolicy(duplicate_policy)
        self._sources: list[DeclarationSource] = []
        self._stale = True

    @property
    def sources(self) -> list[DeclarationSource]:
        return list(self._sources)

    @property
    def is_stale(self) -> bool:
        return self._stale

    def invalidate(self) -> None:
        """Mark the cache stale; the next :meth:`ensure_fresh` rebuilds it."""
        self._stale = True

    def ensure_fresh(self) -> None:
        if self._stale:
            self.refresh()

    def refresh(self) -> None:
        """Rebuild the cache from every current declaration source."""
        sources = []
        for document in self.provider.list_all_open_documents():
            if not self.provider.is_declaration_source(document.uri):
                continue
            source = parse_declaration_source(document.uri, document.text)
            if source is not None:
                sources.append(source)

        self._sources = sources
        self._stale = False

        for identifier, names in self.duplicates().items():
            logger.info(
                f"Variable '{identifier}' declared in {', '.join(names)}; "
                f"using the {self.duplicate_policy.value} declaration"
            )
        logger.debug(
            f"Variable registry refreshed: {len(sources)} sources, "
            f"{sum(len(s.entries) for s in sources)} entries"
        )

    def _ordered_sources(self) -> list[DeclarationSource]:
        if self.duplicate_policy == DuplicatePolicy.LAST:
            return list(reversed(self._sources))
        return self._sources

    def lookup(self, identifier: str) -> Optional[tuple[VariableEntry, DeclarationSource]]:
        """Winning declaration for an identifier under the duplicate policy."""
        for source in self._ordered_sources():
            entry = source.entries.get(identifier)
            if entry is not None:
                return entry, source
        return None

    def is_defined(self, identifier: str) -> bool:
        return any(identifier in source.entries for source in self._sources)

    def entries(self) -> Iterator[tuple[str, VariableEntry, DeclarationSource]]:
        """Every declaration, in source order, duplicates included."""
        for source in self._sources:
            for identifier, entry in source.entries.items():
                yield identifier, entry, source

    def duplicates(self) -> dict[str, list[str]]:
        """Identifiers declared by more than one source, with the source names."""
        declared: dict[str, list[str]] = {}
        for identifier, _, source in self.entries():
            declared.setdefault(identifier, []).append(source.name)
        return {name: sources for name, sources in declared.items() if len(sources) > 1}
