# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Document providers: where the engine gets document text from.

The engine never performs I/O itself. Editors hand it an
:class:`InMemoryDocumentProvider` fed from their open/change/close events;
command-line tools use :class:`WorkspaceDocumentProvider`, which reads files
under a root directory.
"""

import fnmatch
import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional, Protocol

from acplens.extractors.comments import contains_annotation
from acplens.extractors.languages import LANGUAGE_EXTENSIONS, language_from_path, uri_to_path

logger = logging.getLogger(__name__)

DEFAULT_VARS_FILE_PATTERNS = (".acp.vars.json", "acp.vars.json")

# Directories never worth walking into when scanning a workspace
SKIP_DIRECTORIES = frozenset(
    {".git", ".hg", ".svn", "node_modules", "__pycache__", ".venv", "venv", "dist", "build", "target"}
)


@dataclass
class OpenDocument:
    """A document known to a provider."""

    uri: str
    text: str
    language_id: Optional[str] = None
    version: int = 0

    @property
    def has_annotations(self) -> bool:
        return contains_annotation(self.text)


class DocumentProvider(Protocol):
    """Interface the engine consumes to read documents."""

    def get_text(self, uri: str) -> Optional[str]: ...

    def get_language_id(self, uri: str) -> Optional[str]: ...

    def list_all_open_documents(self) -> list[OpenDocument]: ...

    def is_declaration_source(self, uri: str) -> bool: ...


def is_vars_file(uri: str, patterns: Iterable[str] = DEFAULT_VARS_FILE_PATTERNS) -> bool:
    """True if the file name of uri matches a declaration-source pattern."""
    name = PurePosixPath(uri_to_path(uri)).name
    return any(fnmatch.fnmatch(name, pattern) for pattern in patterns)


def detect_language_id(uri: str) -> Optional[str]:
    """Language id from the extension; declaration sources are ``json``."""
    if uri_to_path(uri).endswith(".json"):
        return "json"
    return language_from_path(uri)


class InMemoryDocumentProvider:
    """Documents pushed in by an editor's open/change/close notifications."""

    def __init__(self, vars_file_patterns: Iterable[str] = DEFAULT_VARS_FILE_PATTERNS) -> None:
        self.vars_file_patterns = tuple(vars_file_patterns)
        self._documents: dict[str, OpenDocument] = {}

    def open(
        self, uri: str, text: str, language_id: Optional[str] = None, version: int = 0
    ) -> OpenDocument:
        document = OpenDocument(
            uri=uri,
            text=text,
            language_id=language_id or detect_language_id(uri),
            version=version,
        )
        self._documents[uri] = document
        logger.debug(f"Opened document: {uri} ({document.language_id})")
        return document

    def update(self, uri: str, text: str, version: Optional[int] = None) -> OpenDocument:
        """Replace a document's text; unknown URIs are opened."""
        document = self._documents.get(uri)
        if document is None:
            return self.open(uri, text, version=version or 0)
        document.text = text
        document.version = version if version is not None else document.version + 1
        return document

    def close(self, uri: str) -> None:
        self._documents.pop(uri, None)
        logger.debug(f"Closed document: {uri}")

    def get(self, uri: str) -> Optional[OpenDocument]:
        return self._documents.get(uri)

    def get_text(self, uri: str) -> Optional[str]:
        document = self._documents.get(uri)
        return document.text if document else None

    def get_language_id(self, uri: str) -> Optional[str]:
        document = self._documents.get(uri)
        return document.language_id if document else None

    def list_all_open_documents(self) -> list[OpenDocument]:
        return list(self._documents.values())

    def is_declaration_source(self, uri: str) -> bool:
        return is_vars_file(uri, self.vars_file_patterns)


class WorkspaceDocumentProvider:
    """Documents read from disk under a workspace root.

    Source files with a supported extension and declaration sources are
    listed; text is re-read on every listing so changes on disk are seen
    by the next registry refresh.
    """

    def __init__(
        self,
        root: Path,
        vars_file_patterns: Iterable[str] = DEFAULT_VARS_FILE_PATTERNS,
        include_sources: bool = True,
    ) -> None:
        self.root = Path(root)
        self.vars_file_patterns = tuple(vars_file_patterns)
        self.include_sources = include_sources
        self._extensions = {ext for exts in LANGUAGE_EXTENSIONS.values() for ext in exts}

    def _uri(self, path: Path) -> str:
        return path.resolve().as_uri()

    def _walk(self) -> list[Path]:
        paths = []
        for path in sorted(self.root.rglob("*")):
            relative = path.relative_to(self.root)
            if any(part in SKIP_DIRECTORIES for part in relative.parts[:-1]):
                continue
            if not path.is_file():
                continue
            if is_vars_file(path.name, self.vars_file_patterns):
                paths.append(path)
            elif self.include_sources and path.suffix.lower() in self._extensions:
                paths.append(path)
        return paths

    def get_text(self, uri: str) -> Optional[str]:
        path = Path(uri_to_path(uri))
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Cannot read {path}: {e}")
            return None

    def get_language_id(self, uri: str) -> Optional[str]:
        return detect_language_id(uri)

    def list_all_open_documents(self) -> list[OpenDocument]:
        documents = []
        for path in self._walk():
            uri = self._uri(path)
            text = self.get_text(uri)
            if text is None:
                continue
            documents.append(OpenDocument(uri=uri, text=text, language_id=detect_language_id(uri)))
        return documents

    def is_declaration_source(self, uri: str) -> bool:
        return is_vars_file(uri, self.vars_file_patterns)
