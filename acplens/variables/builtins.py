# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Built-in variables that resolve without any declaration source.

Their values depend on where the reference appears, so callers pass a
:class:`BuiltinContext`. Without one, the example expansion is used.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from acplens.models import AnnotationRecord


@dataclass(frozen=True)
class BuiltinVariable:
    """Description of one built-in variable."""

    description: str
    expansion: str  # Example value used when no context is available
    contextual: bool = True


BUILTIN_VARIABLES: dict[str, BuiltinVariable] = {
    "FILE": BuiltinVariable(
        description="Current file path relative to workspace root",
        expansion="src/example.ts",
    ),
    "LINE": BuiltinVariable(
        description="Current line number in the file",
        expansion="42",
    ),
    "FUNCTION": BuiltinVariable(
        description="Name of the enclosing function or method",
        expansion="handleRequest",
    ),
    "CLASS": BuiltinVariable(
        description="Name of the enclosing class",
        expansion="UserService",
    ),
    "MODULE": BuiltinVariable(
        description="Module name from @acp:module annotation",
        expansion="AuthModule",
    ),
}


@dataclass(frozen=True)
class BuiltinContext:
    """Location-derived values for the built-in variables."""

    file: Optional[str] = None
    line: Optional[int] = None
    function: Optional[str] = None
    class_name: Optional[str] = None
    module: Optional[str] = None

    def value_for(self, identifier: str) -> Optional[str]:
        values = {
            "FILE": self.file,
            "LINE": str(self.line) if self.line is not None else None,
            "FUNCTION": self.function,
            "CLASS": self.class_name,
            "MODULE": self.module,
        }
        return values.get(identifier)

    @classmethod
    def for_location(
        cls,
        path: str,
        text: str,
        offset: int,
        annotations: Iterable["AnnotationRecord"] = (),
    ) -> "BuiltinContext":
        """Derive built-in values for a position in a document.

        Args:
            path: Document path as it should appear in ``$FILE``.
            text: Document text.
            offset: Absolute offset of the reference.
            annotations: Annotations parsed from the same document, used for
                ``$MODULE``, ``$FUNCTION`` and ``$CLASS``.
        """
        module = None
        function = None
        class_name = None

        for annotation in annotations:
            if annotation.value is None:
                continue
            if annotation.namespace == "module" and module is None:
                module = annotation.value
            if annotation.range.start > offset:
                continue
            # Nearest preceding declaration wins
            if annotation.namespace in ("fn", "method"):
                function = annotation.value
            elif annotation.namespace == "class":
                class_name = annotation.value

        return cls(
            file=path,
            line=text.count("\n", 0, offset) + 1,
            function=function,
            class_name=class_name,
            module=module,
        )
