"""Static lookup tables shared by every compilation."""

from types import MappingProxyType
from typing import FrozenSet, Mapping

from tagwire.compiler.svg_attributes import SVG_ATTRIBUTE_MAP

# Consumed by the runtime call convention, never emitted as markup
RESERVED_ATTRIBUTES: FrozenSet[str] = frozenset({"key", "ref"})

# Form controls whose markup value would not round-trip to the live property
EXPRESSION_ATTRIBUTE_TAGS: FrozenSet[str] = frozenset({"input", "select", "textarea"})
EXPRESSION_ATTRIBUTES: FrozenSet[str] = frozenset(
    {"value", "defaultValue", "checked", "defaultChecked"}
)

SELF_CLOSING_TAGS: FrozenSet[str] = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

PROPERTY_ATTRIBUTE_MAP: Mapping[str, str] = MappingProxyType(
    {
        "className": "class",
        "htmlFor": "for",
        "acceptCharset": "accept-charset",
        "httpEquiv": "http-equiv",
        **SVG_ATTRIBUTE_MAP,
    }
)

SVG_TAG = "svg"
