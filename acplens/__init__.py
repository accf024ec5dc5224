# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Annotation mining and variable resolution for ``@acp:`` source comments."""

__all__ = ["AnnotationEngine", "EngineConfig"]


def __getattr__(name: str):
    """Lazy import so submodules can be used without loading the facade."""
    if name == "AnnotationEngine":
        from .engine import AnnotationEngine

        return AnnotationEngine
    if name == "EngineConfig":
        from .config import EngineConfig

        return EngineConfig
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
