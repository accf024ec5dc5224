# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Document access and position mapping used by the engine."""

from .positions import LineIndex, offset_to_position, position_to_offset
from .provider import (
    DocumentProvider,
    InMemoryDocumentProvider,
    OpenDocument,
    WorkspaceDocumentProvider,
    is_vars_file,
)

__all__ = [
    "DocumentProvider",
    "InMemoryDocumentProvider",
    "is_vars_file",
    "LineIndex",
    "offset_to_position",
    "OpenDocument",
    "position_to_offset",
    "WorkspaceDocumentProvider",
]
