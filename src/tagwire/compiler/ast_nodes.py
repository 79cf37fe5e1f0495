"""Element tree nodes consumed by the template compiler.

Nodes compare by identity (``eq=False``): the compiler locates a node among
its siblings, and two structurally equal siblings are still different nodes.
"""

import ast
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

# Embedded values are Python expressions, given as source or as parsed nodes
Expression = Union[str, ast.expr]


class NodeKind(Enum):
    """Result of classifying an element or attribute."""

    LITERAL = "literal"
    DYNAMIC = "dynamic"


@dataclass(eq=False)
class StaticAttribute:
    """``name="value"``, or bare ``name`` when value is None."""

    name: str
    value: Optional[str] = None
    line: int = 0
    column: int = 0


@dataclass(eq=False)
class ExpressionAttribute:
    """``name={expr}``."""

    name: str
    expr: Expression
    line: int = 0
    column: int = 0


@dataclass(eq=False)
class SpreadAttribute:
    """``{...expr}``, expands to any number of attributes at render time."""

    expr: Expression
    line: int = 0
    column: int = 0


Attribute = Union[StaticAttribute, ExpressionAttribute, SpreadAttribute]


@dataclass(eq=False)
class Text:
    value: str
    line: int = 0
    column: int = 0


@dataclass(eq=False)
class ExpressionSlot:
    """``{expr}`` in child position. ``None`` or blank source is a no-op."""

    expr: Optional[Expression] = None
    line: int = 0
    column: int = 0

    @property
    def is_empty(self) -> bool:
        if self.expr is None:
            return True
        return isinstance(self.expr, str) and not self.expr.strip()


@dataclass(eq=False)
class Element:
    tag: str
    attributes: List[Attribute] = field(default_factory=list)
    children: List["Node"] = field(default_factory=list)
    line: int = 0
    column: int = 0


@dataclass(eq=False)
class Fragment:
    children: List["Node"] = field(default_factory=list)
    line: int = 0
    column: int = 0


Node = Union[Element, Text, ExpressionSlot, Fragment]
