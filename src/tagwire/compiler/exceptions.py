"""Compiler exceptions."""

from typing import Any, Optional


class TagwireCompileError(Exception):
    """Base error raised while compiling an element tree."""

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        self.message = message
        self.line = line
        self.column = column
        super().__init__(self._format())

    def _format(self) -> str:
        if self.line is None:
            return self.message
        if self.column is None:
            return f"{self.message} (line {self.line})"
        return f"{self.message} (line {self.line}, column {self.column})"


class ClassificationError(TagwireCompileError):
    """A node or attribute does not belong to any known variant."""

    def __init__(self, message: str, node: Any = None) -> None:
        self.node = node
        super().__init__(
            message,
            line=getattr(node, "line", None),
            column=getattr(node, "column", None),
        )


class PartEncodingError(TagwireCompileError):
    """A part descriptor holds indices that cannot be encoded or decoded.

    Raised by the encoder this always means the emitter produced an
    inconsistent descriptor, never a problem with user input.
    """


class TemplateDepthError(TagwireCompileError):
    """The element tree nests deeper than the configured limit."""


class TreeFormatError(TagwireCompileError):
    """A serialized tree document does not describe a valid node."""


class ExpressionSyntaxError(TagwireCompileError):
    """Embedded expression source is not a valid Python expression."""
