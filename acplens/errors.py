# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Exceptions raised by the engine.

Problems in the input (malformed comments, bad declaration files, undefined
variables) are never raised; they become diagnostics or failed
``ResolutionResult`` values. Only defects in the engine itself raise.
"""


class EngineInvariantError(RuntimeError):
    """An internal invariant of the engine was violated."""
