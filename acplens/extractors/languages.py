# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Comment delimiters and file extensions for supported languages."""

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import unquote, urlparse

# String and character literal patterns shared across languages
_DQ_STRING = r'"(?:\\.|[^"\\\n])*"'
_CHAR_LITERAL = r"'(?:\\.|[^'\\\n])'"
_SQ_STRING = r"'(?:\\.|[^'\\\n])*'"
_TEMPLATE_STRING = r"`(?:\\.|[^`\\])*`"


@dataclass(frozen=True)
class CommentSyntax:
    """Comment delimiters for one language.

    Attributes:
        line: Single-line comment prefix (e.g., ``//`` or ``#``).
        block: Block comment delimiters as (start, end).
        doc: Documentation comment delimiters as (start, end), block style.
        line_doc: Line-style documentation prefix (e.g., ``///``); consecutive
            lines form one documentation comment.
        strings: Regexes for string literals whose contents must not be
            mistaken for comments.
    """

    line: Optional[str] = None
    block: Optional[tuple[str, str]] = None
    doc: Optional[tuple[str, str]] = None
    line_doc: Optional[str] = None
    strings: tuple[str, ...] = field(default_factory=tuple)


_C_STYLE = CommentSyntax(
    line="//",
    block=("/*", "*/"),
    strings=(_DQ_STRING, _CHAR_LITERAL),
)
_C_STYLE_WITH_DOC = CommentSyntax(
    line="//",
    block=("/*", "*/"),
    doc=("/**", "*/"),
    strings=(_DQ_STRING, _SQ_STRING, _TEMPLATE_STRING),
)
_C_STYLE_WITH_LINE_DOC = CommentSyntax(
    line="//",
    block=("/*", "*/"),
    line_doc="///",
    strings=(_DQ_STRING, _CHAR_LITERAL),
)

COMMENT_SYNTAX: dict[str, CommentSyntax] = {
    "typescript": _C_STYLE_WITH_DOC,
    "javascript": _C_STYLE_WITH_DOC,
    "typescriptreact": _C_STYLE_WITH_DOC,
    "javascriptreact": _C_STYLE_WITH_DOC,
    "java": CommentSyntax(
        line="//",
        block=("/*", "*/"),
        doc=("/**", "*/"),
        strings=(_DQ_STRING, _CHAR_LITERAL),
    ),
    "python": CommentSyntax(
        line="#",
        block=('"""', '"""'),
        doc=("'''", "'''"),
        strings=(_DQ_STRING, _SQ_STRING),
    ),
    "rust": _C_STYLE_WITH_LINE_DOC,
    "csharp": _C_STYLE_WITH_LINE_DOC,
    "go": CommentSyntax(
        line="//",
        block=("/*", "*/"),
        strings=(_DQ_STRING, r"`[^`]*`", _CHAR_LITERAL),
    ),
    "cpp": _C_STYLE,
    "c": _C_STYLE,
}

LANGUAGE_EXTENSIONS: dict[str, list[str]] = {
    "typescript": [".ts", ".tsx", ".mts", ".cts"],
    "javascript": [".js", ".jsx", ".mjs", ".cjs"],
    "python": [".py", ".pyi"],
    "rust": [".rs"],
    "go": [".go"],
    "java": [".java"],
    "csharp": [".cs"],
    "cpp": [".cpp", ".hpp", ".cc", ".hh", ".c", ".h"],
}

_EXTENSION_TO_LANGUAGE = {
    ext: language for language, exts in LANGUAGE_EXTENSIONS.items() for ext in exts
}


def get_comment_syntax(language_id: str) -> Optional[CommentSyntax]:
    """Comment syntax for a language id, or None if unsupported."""
    return COMMENT_SYNTAX.get(language_id)


def is_language_supported(language_id: str) -> bool:
    return language_id in COMMENT_SYNTAX


def uri_to_path(uri: str) -> str:
    """Convert a ``file://`` URI to a path; other strings pass through."""
    if uri.startswith("file://"):
        return unquote(urlparse(uri).path)
    return uri


def language_from_path(path: str) -> Optional[str]:
    """Detect the language id from a file path or ``file://`` URI.

    Args:
        path: File path or URI.

    Returns:
        Language id such as ``typescript``, or None for unknown extensions.
    """
    suffix = PurePosixPath(uri_to_path(path)).suffix.lower()
    return _EXTENSION_TO_LANGUAGE.get(suffix)
