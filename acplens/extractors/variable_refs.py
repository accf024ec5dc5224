# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Find ``$NAME`` and ``$NAME.modifier`` references in text.

``$$`` is an escaped literal dollar and is never a reference. Identifiers are
matched loosely (any case) so that badly named references are reported as
invalid by the resolver instead of silently passing through as text.
"""

import re
from typing import Optional

from acplens.models import TextRange, VariableReference, infer_type_from_prefix
from acplens.variables.builtins import BUILTIN_VARIABLES

SIGIL = "$"
ESCAPED_SIGIL = "$$"

# "$$" is consumed first so "$$NAME" never yields a reference to NAME
REFERENCE_PATTERN = re.compile(
    r"\$\$|\$([A-Za-z_][A-Za-z0-9_]*)(?:\.([A-Za-z_][A-Za-z0-9_]*))?"
)


def extract_variable_refs(text: str, base_offset: int = 0) -> list[VariableReference]:
    """Return every non-overlapping reference in text.

    Args:
        text: Text to scan.
        base_offset: Absolute offset of ``text[0]`` in its document.

    Returns:
        References in order of appearance, ranged in absolute offsets.
    """
    refs: list[VariableReference] = []

    for match in REFERENCE_PATTERN.finditer(text):
        if match.group(0) == ESCAPED_SIGIL:
            continue

        identifier = match.group(1)
        refs.append(
            VariableReference(
                raw=match.group(0),
                identifier=identifier,
                modifier=match.group(2),
                range=TextRange(start=base_offset + match.start(), end=base_offset + match.end()),
                is_builtin=identifier in BUILTIN_VARIABLES,
                inferred_type=infer_type_from_prefix(identifier),
            )
        )

    return refs


def find_reference_at(text: str, offset: int) -> Optional[VariableReference]:
    """Reference covering offset (inclusive of its end, for cursors), if any."""
    for ref in extract_variable_refs(text):
        if ref.range.contains(offset):
            return ref
    return None
