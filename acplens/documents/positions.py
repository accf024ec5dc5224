# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Translate absolute offsets to editor line/character positions and back."""

from bisect import bisect_right

from acplens.models import Position, TextRange


class LineIndex:
    """Line start offsets of a text, for repeated offset/position lookups.

    ``\\n``, ``\\r\\n`` and a lone ``\\r`` all end a line, as editors count them.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.line_starts = [0]
        index = 0
        length = len(text)
        while index < length:
            char = text[index]
            if char == "\r":
                if index + 1 < length and text[index + 1] == "\n":
                    index += 1
                self.line_starts.append(index + 1)
            elif char == "\n":
                self.line_starts.append(index + 1)
            index += 1

    @property
    def line_count(self) -> int:
        return len(self.line_starts)

    def position_at(self, offset: int) -> Position:
        offset = max(0, min(offset, len(self.text)))
        line = bisect_right(self.line_starts, offset) - 1
        return Position(line=line, character=offset - self.line_starts[line])

    def offset_at(self, position: Position) -> int:
        if position.line < 0:
            return 0
        if position.line >= len(self.line_starts):
            return len(self.text)
        line_start = self.line_starts[position.line]
        if position.line + 1 < len(self.line_starts):
            line_end = self.line_starts[position.line + 1]
        else:
            line_end = len(self.text)
        return max(line_start, min(line_start + position.character, line_end))

    def range_positions(self, span: TextRange) -> tuple[Position, Position]:
        return self.position_at(span.start), self.position_at(span.end)


def offset_to_position(text: str, offset: int) -> Position:
    """Line/character for an absolute offset (clamped to the text)."""
    return LineIndex(text).position_at(offset)


def position_to_offset(text: str, position: Position) -> int:
    """Absolute offset for a line/character (clamped to the line)."""
    return LineIndex(text).offset_at(position)
