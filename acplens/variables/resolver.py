# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Resolve ``$NAME`` references to values and expand them in free text.

Declared values may reference other variables. Those are expanded through
the same :class:`ExpansionContext`, whose stack holds the identifiers
currently being resolved; a repeat is a cycle and a full stack is a depth
failure. Failures are returned as :class:`ResolutionResult` values, never
raised.

A context belongs to one logical request. Concurrent requests against the
same resolver must each use their own context.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional, Union

from acplens.errors import EngineInvariantError
from acplens.extractors.variable_refs import ESCAPED_SIGIL, SIGIL, extract_variable_refs
from acplens.models import (
    VALID_MODIFIERS,
    Modifier,
    ResolutionError,
    ResolutionErrorKind,
    ResolutionResult,
    ResolvedVariable,
    VariableEntry,
    VariableType,
    is_valid_identifier,
)
from acplens.variables.builtins import BUILTIN_VARIABLES, BuiltinContext
from acplens.variables.registry import DeclarationSource, VariableRegistry

logger = logging.getLogger(__name__)

MAX_DEPTH = 10

# Stands in for "$$" while references are substituted
ESCAPE_PLACEHOLDER = "\x00ESCAPED_DOLLAR\x00"


class ExpansionContext:
    """Per-request expansion state.

    Args:
        max_depth: Largest number of nested resolutions allowed.
        builtins: Location values for the built-in variables, if known.
    """

    def __init__(self, max_depth: int = MAX_DEPTH, builtins: Optional[BuiltinContext] = None):
        self.max_depth = max_depth
        self.builtins = builtins
        self.stack: list[str] = []

    def __contains__(self, identifier: str) -> bool:
        return identifier in self.stack

    @property
    def depth(self) -> int:
        return len(self.stack)

    def push(self, identifier: str) -> None:
        self.stack.append(identifier)

    def pop(self, identifier: str) -> None:
        if not self.stack or self.stack[-1] != identifier:
            raise EngineInvariantError(
                f"Expansion stack out of order: expected '{identifier}' on top of {self.stack}"
            )
        self.stack.pop()

    def reset(self) -> None:
        self.stack.clear()


@dataclass(frozen=True)
class AvailableVariable:
    """A variable name offered to completion and listings."""

    name: str
    type: VariableType
    description: Optional[str]
    source: str


def create_reference(name: str, variable_type: VariableType, value: str) -> str:
    """Short cross-reference string rendered by the ``ref`` modifier."""
    if variable_type == VariableType.SYMBOL:
        return f"${name}" if name.startswith("SYM_") else f"$SYM_{name}"
    if variable_type == VariableType.FILE:
        return value
    if variable_type == VariableType.DOMAIN:
        return f"@domain:{value}"
    return f"${name}"


def apply_modifier(variable: ResolvedVariable, modifier: Optional[str]) -> str:
    """Render a resolved variable for a modifier (None for the plain value)."""
    if modifier == Modifier.FULL:
        return json.dumps(variable.full, indent=2)
    if modifier == Modifier.REF:
        return variable.ref
    if modifier == Modifier.SIGNATURE:
        return variable.signature or variable.summary
    return variable.value


def error_marker(error: ResolutionError) -> str:
    return f"[ERROR: {error.message}]"


class VariableResolver:
    """Resolve variable references against a registry and the built-ins.

    Args:
        registry: Declared variables.
        max_depth: Nesting limit for declared values referencing each other.
    """

    def __init__(self, registry: VariableRegistry, max_depth: int = MAX_DEPTH) -> None:
        self.registry = registry
        self.max_depth = max_depth

    def new_context(self, builtins: Optional[BuiltinContext] = None) -> ExpansionContext:
        return ExpansionContext(max_depth=self.max_depth, builtins=builtins)

    def resolve(
        self,
        identifier: str,
        modifier: Optional[str] = None,
        context: Optional[ExpansionContext] = None,
    ) -> ResolutionResult:
        """Resolve one reference.

        Args:
            identifier: Variable name without the ``$``.
            modifier: Optional ``full``, ``ref`` or ``signature``.
            context: Expansion state of the enclosing request; a fresh one is
                used when omitted.

        Returns:
            ResolutionResult carrying the variable and its rendered text, or
            the failure kind, message and chain.
        """
        if context is None:
            context = self.new_context()

        if not is_valid_identifier(identifier):
            return ResolutionResult.fail(
                ResolutionErrorKind.INVALID,
                f"Invalid variable name '{identifier}'. Names must match ^[A-Z][A-Z0-9_]*$",
            )

        if modifier is not None and modifier not in VALID_MODIFIERS:
            return ResolutionResult.fail(
                ResolutionErrorKind.INVALID,
                f"Invalid modifier '{modifier}'. Valid modifiers: {', '.join(m.value for m in Modifier)}",
            )

        if identifier in context:
            chain = [*context.stack, identifier]
            return ResolutionResult.fail(
                ResolutionErrorKind.CIRCULAR,
                f"Circular reference detected: {' -> '.join(chain)}",
                chain,
            )

        if context.depth >= context.max_depth:
            return ResolutionResult.fail(
                ResolutionErrorKind.DEPTH,
                f"Maximum variable nesting depth ({context.max_depth}) exceeded",
                [*context.stack, identifier],
            )

        if identifier in BUILTIN_VARIABLES:
            variable = self._builtin(identifier, context.builtins)
            return ResolutionResult.ok(variable, apply_modifier(variable, modifier))

        context.push(identifier)
        try:
            result = self._resolve_declared(identifier, context)
        finally:
            context.pop(identifier)

        if result.success and modifier is not None:
            result.rendered = apply_modifier(result.variable, modifier)
        return result

    def _resolve_declared(self, identifier: str, context: ExpansionContext) -> ResolutionResult:
        self.registry.ensure_fresh()
        found = self.registry.lookup(identifier)
        if found is None:
            return ResolutionResult.fail(
                ResolutionErrorKind.UNDEFINED,
                f"Undefined variable: '{identifier}'. "
                "Define it in .acp.vars.json or use a built-in variable.",
                [*context.stack],
            )

        entry, source = found
        expanded = self._expand_strict(entry.value, context)
        if isinstance(expanded, ResolutionError):
            return ResolutionResult(error=expanded)

        logger.debug(f"Resolved ${identifier} from {source.name}")
        return ResolutionResult.ok(self._declared(identifier, entry, expanded, source))

    def _expand_strict(self, text: str, context: ExpansionContext) -> Union[str, ResolutionError]:
        """Expand references in a declared value; the first failure aborts."""
        if SIGIL not in text:
            return text

        result = text.replace(ESCAPED_SIGIL, ESCAPE_PLACEHOLDER)
        for ref in reversed(extract_variable_refs(result)):
            nested = self.resolve(ref.identifier, ref.modifier, context)
            if not nested.success:
                return nested.error
            result = result[: ref.range.start] + nested.rendered + result[ref.range.end :]
        return result.replace(ESCAPE_PLACEHOLDER, SIGIL)

    def _builtin(self, identifier: str, builtins: Optional[BuiltinContext]) -> ResolvedVariable:
        builtin = BUILTIN_VARIABLES[identifier]
        value = builtins.value_for(identifier) if builtins else None
        if value is None:
            value = builtin.expansion
        return ResolvedVariable(
            name=identifier,
            type=VariableType.STRING,
            value=value,
            summary=builtin.description,
            full={"type": "builtin", "name": identifier, "value": value, "description": builtin.description},
            ref=f"${identifier}",
            description=builtin.description,
            source="built-in",
        )

    def _declared(
        self, identifier: str, entry: VariableEntry, value: str, source: DeclarationSource
    ) -> ResolvedVariable:
        variable_type = entry.effective_type(identifier)
        full = {"name": identifier, "type": variable_type.value, "value": value}
        if entry.description:
            full["description"] = entry.description
        return ResolvedVariable(
            name=identifier,
            type=variable_type,
            value=value,
            summary=entry.description or value,
            full=full,
            ref=create_reference(identifier, variable_type, value),
            signature=value if variable_type == VariableType.SYMBOL else None,
            description=entry.description,
            source=source.name,
            definition_line=source.definition_line(identifier),
        )

    def resolve_with_modifier(
        self,
        identifier: str,
        modifier: Optional[str] = None,
        context: Optional[ExpansionContext] = None,
    ) -> str:
        """Rendered value, or an inline ``[ERROR: ...]`` marker on failure."""
        result = self.resolve(identifier, modifier, context)
        if not result.success:
            return error_marker(result.error)
        return result.rendered

    def expand_all(self, text: str, builtins: Optional[BuiltinContext] = None) -> str:
        """Expand every reference in text.

        ``$$`` becomes a literal ``$``. Unresolvable references are replaced
        by ``[ERROR: message]`` so failures stay visible in the output.
        """
        context = self.new_context(builtins)
        result = text.replace(ESCAPED_SIGIL, ESCAPE_PLACEHOLDER)

        # Right to left so earlier offsets stay valid
        for ref in reversed(extract_variable_refs(result)):
            context.reset()
            expanded = self.resolve_with_modifier(ref.identifier, ref.modifier, context)
            result = result[: ref.range.start] + expanded + result[ref.range.end :]

        return result.replace(ESCAPE_PLACEHOLDER, SIGIL)

    def is_defined(self, identifier: str) -> bool:
        if identifier in BUILTIN_VARIABLES:
            return True
        self.registry.ensure_fresh()
        return self.registry.is_defined(identifier)

    def available_variables(self) -> list[AvailableVariable]:
        """Built-ins first, then declared variables in winning order."""
        variables = [
            AvailableVariable(
                name=name, type=VariableType.STRING, description=builtin.description, source="built-in"
            )
            for name, builtin in BUILTIN_VARIABLES.items()
        ]

        self.registry.ensure_fresh()
        seen = set(BUILTIN_VARIABLES)
        for name, _, _ in self.registry.entries():
            if name in seen:
                continue
            seen.add(name)
            entry, source = self.registry.lookup(name)
            variables.append(
                AvailableVariable(
                    name=name,
                    type=entry.effective_type(name),
                    description=entry.description,
                    source=source.name,
                )
            )
        return variables
