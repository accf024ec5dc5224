# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Locate line, block and documentation comments in source text.

The scanner builds one alternation per language and walks the text left to
right, so every character belongs to at most one construct:

    /** @acp:purpose("Auth") */   -> doc
    /* @acp:lock("frozen") */     -> block
    // @acp:todo - tidy up         -> line
    const url = "http://x";        -> string literal, skipped

Block and doc bodies are matched lazily and must be closed; an unterminated
block comment produces no span rather than swallowing the rest of the file.
"""

import re
from functools import lru_cache
from typing import Optional

from acplens.extractors.languages import CommentSyntax, get_comment_syntax
from acplens.models import CommentKind, CommentSpan

# Leading decoration on documentation comment lines: "   * text"
DOC_DECORATION_PATTERN = re.compile(r"^\s*\*\s?")


@lru_cache(maxsize=None)
def _scanner_for(syntax: CommentSyntax) -> re.Pattern[str]:
    """Compile the combined comment/string pattern for a syntax."""
    alternatives = []

    if syntax.doc:
        start, end = syntax.doc
        opener = re.escape(start)
        if syntax.block and start.startswith(syntax.block[0]) and end == syntax.block[1]:
            # "/**/" is an empty block comment, not a doc opener
            opener += "(?!" + re.escape(end[-1]) + ")"
        alternatives.append(f"(?P<doc>{opener}(?P<doc_body>.*?){re.escape(end)})")

    if syntax.block:
        start, end = syntax.block
        alternatives.append(
            f"(?P<block>{re.escape(start)}(?P<block_body>.*?){re.escape(end)})"
        )

    if syntax.line_doc:
        prefix = re.escape(syntax.line_doc)
        alternatives.append(
            f"(?P<line_doc>{prefix}[^\\n]*(?:\\n[ \\t]*{prefix}[^\\n]*)*)"
        )

    if syntax.line:
        alternatives.append(f"(?P<line>{re.escape(syntax.line)}(?P<line_body>[^\\n]*))")

    for string_pattern in syntax.strings:
        alternatives.append(f"(?:{string_pattern})")

    return re.compile("|".join(alternatives), re.DOTALL)


def extract_comments(language_id: str, text: str) -> list[CommentSpan]:
    """Find every comment in text using the language's delimiters.

    Args:
        language_id: Editor language id (e.g., ``typescript``, ``python``).
        text: Full document text.

    Returns:
        Comment spans ordered by start offset. Unsupported languages yield an
        empty list.
    """
    syntax = get_comment_syntax(language_id)
    if syntax is None:
        return []

    comments: list[CommentSpan] = []
    seen: set[tuple[int, int]] = set()

    for match in _scanner_for(syntax).finditer(text):
        span = _span_from_match(match, syntax)
        if span is None:
            continue
        key = (span.start_offset, span.end_offset)
        if key in seen:
            continue
        seen.add(key)
        comments.append(span)

    comments.sort(key=lambda c: c.start_offset)
    return comments


def _span_from_match(match: re.Match[str], syntax: CommentSyntax) -> Optional[CommentSpan]:
    """Turn a scanner match into a CommentSpan; string literals yield None."""
    kind = match.lastgroup
    if kind is None:
        return None

    if kind == "doc":
        return _doc_span(match.start("doc_body"), match.group("doc_body"), match.start(), match.end())

    if kind == "block":
        return _contiguous_span(
            CommentKind.BLOCK,
            match.start("block_body"),
            match.group("block_body"),
            match.start(),
            match.end(),
        )

    if kind == "line":
        return _contiguous_span(
            CommentKind.LINE,
            match.start("line_body"),
            match.group("line_body"),
            match.start(),
            match.end(),
        )

    if kind == "line_doc":
        assert syntax.line_doc is not None
        return _line_doc_span(match.group(), match.start(), syntax.line_doc)

    return None


def _contiguous_span(
    kind: CommentKind, body_start: int, body: str, start: int, end: int
) -> CommentSpan:
    """Span whose content is an unbroken slice of the source (line, block)."""
    content = body.strip()
    offset = body_start + (len(body) - len(body.lstrip()))
    return CommentSpan(
        kind=kind,
        content=content,
        start_offset=start,
        end_offset=end,
        line_starts=_line_starts(content, offset),
    )


def _doc_span(body_start: int, body: str, start: int, end: int) -> CommentSpan:
    """Span for a block-style doc comment, stripping ``*`` decoration per line."""
    cleaned: list[tuple[int, str]] = []
    position = body_start

    for raw_line in body.split("\n"):
        decoration = DOC_DECORATION_PATTERN.match(raw_line)
        skip = decoration.end() if decoration else 0
        cleaned.append((position + skip, raw_line[skip:].rstrip()))
        position += len(raw_line) + 1

    return _span_from_lines(CommentKind.DOC, cleaned, start, end)


def _line_doc_span(block: str, start: int, prefix: str) -> CommentSpan:
    """Span for consecutive line-style doc comments (``///``)."""
    cleaned: list[tuple[int, str]] = []
    position = start

    for raw_line in block.split("\n"):
        body_index = raw_line.index(prefix) + len(prefix)
        body = raw_line[body_index:]
        indent = len(body) - len(body.lstrip())
        cleaned.append((position + body_index + indent, body.strip()))
        position += len(raw_line) + 1

    return _span_from_lines(CommentKind.DOC, cleaned, start, start + len(block))


def _span_from_lines(
    kind: CommentKind, lines: list[tuple[int, str]], start: int, end: int
) -> CommentSpan:
    """Trim blank edge lines and leading whitespace, keeping per-line offsets."""
    while lines and not lines[0][1].strip():
        lines.pop(0)
    while lines and not lines[-1][1].strip():
        lines.pop()

    if not lines:
        return CommentSpan(kind=kind, content="", start_offset=start, end_offset=end, line_starts=(end,))

    first_offset, first_text = lines[0]
    indent = len(first_text) - len(first_text.lstrip())
    lines[0] = (first_offset + indent, first_text.lstrip())

    return CommentSpan(
        kind=kind,
        content="\n".join(text for _, text in lines),
        start_offset=start,
        end_offset=end,
        line_starts=tuple(offset for offset, _ in lines),
    )


def _line_starts(content: str, offset: int) -> tuple[int, ...]:
    """Offsets of each line of contiguous content starting at offset."""
    starts = [offset]
    for index, char in enumerate(content):
        if char == "\n":
            starts.append(offset + index + 1)
    return tuple(starts)


def contains_annotation(text: str, sigil: str = "@acp:") -> bool:
    """Cheap pre-check before running the extractor on a document."""
    return sigil in text
