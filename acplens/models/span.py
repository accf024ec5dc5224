# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Offset ranges and editor positions."""

from pydantic import BaseModel


class TextRange(BaseModel):
    """Half-open ``[start, end)`` span of absolute document offsets."""

    model_config = {"frozen": True}

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start

    def contains(self, offset: int) -> bool:
        """True if offset falls inside the span (end inclusive, for cursors)."""
        return self.start <= offset <= self.end

    def slice(self, text: str) -> str:
        return text[self.start : self.end]


class Position(BaseModel):
    """Zero-based line and character, as editors address text."""

    model_config = {"frozen": True}

    line: int
    character: int
