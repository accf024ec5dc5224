# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Variable registry, built-ins and resolver."""

__all__ = [
    "BUILTIN_VARIABLES",
    "BuiltinContext",
    "ExpansionContext",
    "VariableRegistry",
    "VariableResolver",
]


def __getattr__(name: str):
    """Lazy import; the reference extractor needs the built-ins before the resolver exists."""
    if name in ("BUILTIN_VARIABLES", "BuiltinContext"):
        from . import builtins

        return getattr(builtins, name)
    if name == "VariableRegistry":
        from .registry import VariableRegistry

        return VariableRegistry
    if name in ("ExpansionContext", "VariableResolver"):
        from . import resolver

        return getattr(resolver, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
