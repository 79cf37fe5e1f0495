"""Attribute translation and merging of adjacent dynamic attributes."""

import ast
import logging
from typing import List, Optional, Protocol, Tuple, Union

from tagwire.compiler.ast_nodes import ExpressionAttribute, StaticAttribute
from tagwire.compiler.constants import PROPERTY_ATTRIBUTE_MAP
from tagwire.compiler.expressions import parse_expression
from tagwire.compiler.svg_attributes import SVG_ATTRIBUTE_MAP

logger = logging.getLogger(__name__)


def attribute_key(name: str) -> str:
    """Prop key for a dynamic attribute. Only SVG names are rewritten."""
    return SVG_ATTRIBUTE_MAP.get(name, name)


def html_attribute_name(name: str) -> str:
    """Markup name for a literal attribute (``className`` -> ``class``)."""
    return PROPERTY_ATTRIBUTE_MAP.get(name, name)


def static_attribute_markup(name: str, value: Optional[str]) -> str:
    markup = f" {html_attribute_name(name)}"
    if value is None:
        return markup

    # Double quotes unless the value itself holds one
    quote = "'" if '"' in value else '"'
    return f"{markup}={quote}{value}{quote}"


def attribute_value(attribute: Union[StaticAttribute, ExpressionAttribute]) -> ast.expr:
    if isinstance(attribute, ExpressionAttribute):
        return parse_expression(attribute.expr, attribute)
    if attribute.value is None:
        return ast.Constant(value=True)
    return ast.Constant(value=attribute.value)


def create_attribute_property(
    attribute: Union[StaticAttribute, ExpressionAttribute],
) -> Tuple[ast.expr, ast.expr]:
    """Key/value pair for a props dict."""
    return ast.Constant(value=attribute_key(attribute.name)), attribute_value(attribute)


def create_attribute_expression(
    attribute: Union[StaticAttribute, ExpressionAttribute],
) -> ast.Dict:
    key, value = create_attribute_property(attribute)
    return ast.Dict(keys=[key], values=[value])


def _entries(expression: ast.expr) -> Tuple[List[Optional[ast.expr]], List[ast.expr]]:
    if isinstance(expression, ast.Dict):
        return list(expression.keys), list(expression.values)
    # bare spread value
    return [None], [expression]


def merge_attribute(expression: ast.expr, last_expression: ast.expr) -> ast.Dict:
    """Combine the slot value ``last_expression`` with a new dynamic attribute.

    Either side may be a bare spread value, which is promoted to ``{**value}``.
    Entries keep source order. Neither input is modified, since a spread value
    may be a dict display owned by the caller's tree.
    """
    keys, values = _entries(last_expression)
    new_keys, new_values = _entries(expression)
    return ast.Dict(keys=keys + new_keys, values=values + new_values)


class SlotSink(Protocol):
    expressions: List[ast.expr]

    def push_attribute_slot(self, expression: ast.expr) -> None: ...


class AttributeMerger:
    """Coalesces consecutive dynamic attributes of one element into one slot.

    A fresh merger is used per element. Literal attributes call ``reset`` so
    the next dynamic attribute opens its own slot.
    """

    def __init__(self, sink: SlotSink) -> None:
        self.sink = sink
        self.last_expression: Optional[ast.expr] = None

    def push(self, expression: ast.expr) -> None:
        if self.last_expression is None:
            self.sink.push_attribute_slot(expression)
            self.last_expression = expression
            return

        # same slot, same part descriptor; only the value grows
        merged = merge_attribute(expression, self.last_expression)
        self.sink.expressions[-1] = merged
        logger.debug("Merged attribute into slot %d", len(self.sink.expressions) - 1)
        self.last_expression = merged

    def reset(self) -> None:
        self.last_expression = None
