"""Literal/dynamic classification of elements and attributes."""

import re
from typing import List

from tagwire.compiler.ast_nodes import (
    Attribute,
    Element,
    ExpressionAttribute,
    ExpressionSlot,
    Fragment,
    NodeKind,
    SpreadAttribute,
    StaticAttribute,
    Text,
)
from tagwire.compiler.constants import (
    EXPRESSION_ATTRIBUTE_TAGS,
    EXPRESSION_ATTRIBUTES,
    RESERVED_ATTRIBUTES,
    SVG_TAG,
)
from tagwire.compiler.exceptions import ClassificationError

_HTML_TAG = re.compile(r"[a-z][^.:]*")


def is_html_element(tag_name: str) -> bool:
    """Lowercase, non-namespaced, non-member names are markup tags."""
    return bool(tag_name) and _HTML_TAG.fullmatch(tag_name) is not None


def needs_to_be_expression(tag_name: str, attr_name: str) -> bool:
    """Attributes whose literal form would not survive a trip through markup."""
    if attr_name in RESERVED_ATTRIBUTES:
        return True
    return tag_name in EXPRESSION_ATTRIBUTE_TAGS and attr_name in EXPRESSION_ATTRIBUTES


def has_reserved_attribute(element: Element) -> bool:
    return any(
        isinstance(attr, (StaticAttribute, ExpressionAttribute))
        and attr.name in RESERVED_ATTRIBUTES
        for attr in element.attributes
    )


def svg_has_dynamic_part(element: Element) -> bool:
    """Return True as soon as anything under ``element`` needs a slot.

    Checks the element's own attributes and every descendant, depth first,
    without visiting past the first dynamic part found.
    """
    stack: List[object] = [element]

    while stack:
        node = stack.pop()

        if isinstance(node, Element):
            if node is not element and not is_html_element(node.tag):
                return True
            for attr in node.attributes:
                if isinstance(attr, (SpreadAttribute, ExpressionAttribute)):
                    return True
                if isinstance(attr, StaticAttribute) and attr.name in RESERVED_ATTRIBUTES:
                    return True
            stack.extend(reversed(node.children))
        elif isinstance(node, Fragment):
            stack.extend(reversed(node.children))
        elif isinstance(node, ExpressionSlot):
            if not node.is_empty:
                return True

    return False


def classify_element(element: Element) -> NodeKind:
    """Decide whether ``element`` is emitted as markup or as a ``jsx`` call."""
    if not is_html_element(element.tag):
        return NodeKind.DYNAMIC

    if element.tag == SVG_TAG and svg_has_dynamic_part(element):
        return NodeKind.DYNAMIC

    if has_reserved_attribute(element):
        return NodeKind.DYNAMIC

    return NodeKind.LITERAL


def classify_attribute(tag_name: str, attribute: Attribute) -> NodeKind:
    if isinstance(attribute, (SpreadAttribute, ExpressionAttribute)):
        return NodeKind.DYNAMIC
    if isinstance(attribute, StaticAttribute):
        if needs_to_be_expression(tag_name, attribute.name):
            return NodeKind.DYNAMIC
        return NodeKind.LITERAL
    raise ClassificationError(
        f"Unknown attribute type {type(attribute).__name__} on <{tag_name}>", attribute
    )


def is_template_node(node: object) -> bool:
    """True for nodes that exist in the static skeleton (text and markup)."""
    if isinstance(node, Text):
        return True
    return isinstance(node, Element) and classify_element(node) is NodeKind.LITERAL
