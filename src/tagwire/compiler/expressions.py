"""Conversion of embedded expressions and element names to Python AST."""

import ast
from typing import Any

from tagwire.compiler.ast_nodes import Expression
from tagwire.compiler.exceptions import ClassificationError, ExpressionSyntaxError


def parse_expression(expr: Expression, node: Any = None) -> ast.expr:
    """Return ``expr`` as an expression node, parsing source when needed."""
    if isinstance(expr, ast.expr):
        return expr

    if not isinstance(expr, str):
        raise ClassificationError(
            f"Expected expression source or ast.expr, got {type(expr).__name__}", node
        )

    try:
        tree = ast.parse(expr.strip(), mode="eval")
    except SyntaxError as e:
        raise ExpressionSyntaxError(
            f"Invalid expression {expr!r}: {e.msg}",
            line=getattr(node, "line", None),
            column=getattr(node, "column", None),
        )
    return tree.body


def component_reference(tag_name: str, node: Any = None) -> ast.expr:
    """Turn ``Button`` or ``ui.forms.Button`` into a Name/Attribute chain."""
    parts = tag_name.split(".")
    if not all(part.isidentifier() for part in parts):
        raise ClassificationError(
            f"Element name {tag_name!r} cannot be used as a component reference", node
        )

    result: ast.expr = ast.Name(id=parts[0], ctx=ast.Load())
    for part in parts[1:]:
        result = ast.Attribute(value=result, attr=part, ctx=ast.Load())
    return result
