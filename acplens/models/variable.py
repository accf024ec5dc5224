# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Records for variable references, declarations and resolution results.

Declaration sources (``.acp.vars.json``) map identifiers to either a bare
string or an object:

    {
      "variables": {
        "API_KEY": "secret123",
        "SYM_AUTH": {"value": "AuthService.login", "description": "Login entry"}
      }
    }
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from .span import TextRange

IDENTIFIER_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*$")

# Prefix -> inferred type for identifiers declared without an explicit type
TYPE_PREFIXES = (
    ("SYM_", "symbol"),
    ("FILE_", "file"),
    ("DOM_", "domain"),
)


class VariableType(str, Enum):
    """Kinds of declared variables."""

    SYMBOL = "symbol"
    FILE = "file"
    DOMAIN = "domain"
    STRING = "string"


class Modifier(str, Enum):
    """Alternate renderings selectable with ``$NAME.modifier``."""

    FULL = "full"
    REF = "ref"
    SIGNATURE = "signature"


VALID_MODIFIERS = frozenset(m.value for m in Modifier)


def is_valid_identifier(identifier: str) -> bool:
    """Check an identifier against the ``^[A-Z][A-Z0-9_]*$`` naming rule."""
    return IDENTIFIER_PATTERN.fullmatch(identifier) is not None


def infer_type_from_prefix(identifier: str) -> Optional[VariableType]:
    """Infer a variable type from its prefix (``SYM_``, ``FILE_``, ``DOM_``).

    Returns:
        The inferred type, or None when the identifier carries no known prefix.
    """
    for prefix, type_name in TYPE_PREFIXES:
        if identifier.startswith(prefix):
            return VariableType(type_name)
    return None


class VariableReference(BaseModel):
    """A ``$NAME`` or ``$NAME.modifier`` occurrence inside text."""

    raw: str  # e.g., "$SYM_AUTH.ref"
    identifier: str  # e.g., "SYM_AUTH"
    modifier: Optional[str] = None  # e.g., "ref"
    range: TextRange
    is_builtin: bool = False
    inferred_type: Optional[VariableType] = None

    @property
    def valid(self) -> bool:
        return is_valid_identifier(self.identifier)


class VariableEntry(BaseModel):
    """One declared variable, normalised from a string or object entry."""

    type: Optional[VariableType] = None
    value: str
    description: Optional[str] = None

    @field_validator("value", mode="before")
    @classmethod
    def _stringify_scalars(cls, value: Any) -> Any:
        # Numbers and booleans are accepted and kept as their text form
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @classmethod
    def from_declaration(cls, raw: Any) -> "VariableEntry":
        """Build an entry from a bare string or an object declaration.

        Raises:
            pydantic.ValidationError: If the declaration has no usable value.
        """
        if isinstance(raw, (str, int, float, bool)):
            return cls(value=raw)
        return cls.model_validate(raw)

    def effective_type(self, identifier: str) -> VariableType:
        """Declared type, else the type inferred from the identifier prefix."""
        return self.type or infer_type_from_prefix(identifier) or VariableType.STRING


class ResolvedVariable(BaseModel):
    """Outcome of a successful resolution."""

    name: str
    type: VariableType
    value: str  # Expanded value
    summary: str  # Human-readable one-liner
    full: Dict[str, Any] = Field(default_factory=dict)  # Rendered by .full
    ref: str  # Short cross-reference rendered by .ref
    signature: Optional[str] = None
    description: Optional[str] = None
    source: str  # Declaration source name, or "built-in"
    definition_line: int = 0  # 1-based, 0 if unknown


class ResolutionErrorKind(str, Enum):
    """Why a reference could not be resolved."""

    INVALID = "invalid"
    CIRCULAR = "circular"
    DEPTH = "depth"
    UNDEFINED = "undefined"
    PARSE = "parse"


@dataclass
class ResolutionError:
    """Failure details for a single resolution."""

    kind: ResolutionErrorKind
    message: str
    chain: List[str] = field(default_factory=list)


@dataclass
class ResolutionResult:
    """Tagged success/failure value returned by the resolver.

    Exactly one of ``variable`` and ``error`` is set. On success ``rendered``
    holds the value after the requested modifier was applied.
    """

    variable: Optional[ResolvedVariable] = None
    error: Optional[ResolutionError] = None
    rendered: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, variable: ResolvedVariable, rendered: Optional[str] = None) -> "ResolutionResult":
        return cls(variable=variable, rendered=variable.value if rendered is None else rendered)

    @classmethod
    def fail(
        cls, kind: ResolutionErrorKind, message: str, chain: Optional[List[str]] = None
    ) -> "ResolutionResult":
        return cls(error=ResolutionError(kind=kind, message=message, chain=list(chain or [])))
