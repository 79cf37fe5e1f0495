"""Load element trees from their JSON representation.

Example document::

    {
      "type": "element",
      "tag": "div",
      "attributes": [
        {"type": "static", "name": "className", "value": "box"},
        {"type": "expression", "name": "title", "expr": "title"},
        {"type": "spread", "expr": "rest"}
      ],
      "children": [
        {"type": "text", "value": "Hello "},
        {"type": "expression", "expr": "name"}
      ]
    }

A document may also be a list of nodes, compiled as a fragment.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Union

from tagwire.compiler.ast_nodes import (
    Attribute,
    Element,
    ExpressionAttribute,
    ExpressionSlot,
    Fragment,
    Node,
    SpreadAttribute,
    StaticAttribute,
    Text,
)
from tagwire.compiler.exceptions import TreeFormatError


def _require(data: Dict[str, Any], key: str, expected: type) -> Any:
    if key not in data:
        raise TreeFormatError(
            f"{data.get('type', 'node')!s} is missing '{key}'",
            line=data.get("line"),
            column=data.get("column"),
        )
    value = data[key]
    if not isinstance(value, expected):
        raise TreeFormatError(
            f"'{key}' must be {expected.__name__}, got {type(value).__name__}",
            line=data.get("line"),
            column=data.get("column"),
        )
    return value


def _position(data: Dict[str, Any]) -> Dict[str, int]:
    return {"line": data.get("line", 0), "column": data.get("column", 0)}


def load_attribute(data: Any) -> Attribute:
    if not isinstance(data, dict):
        raise TreeFormatError(f"Attribute must be an object, got {type(data).__name__}")

    kind = data.get("type")
    if kind == "static":
        value = data.get("value")
        if value is not None and not isinstance(value, str):
            raise TreeFormatError(
                f"Static attribute value must be a string, got {type(value).__name__}",
                line=data.get("line"),
            )
        return StaticAttribute(
            name=_require(data, "name", str), value=value, **_position(data)
        )
    if kind == "expression":
        return ExpressionAttribute(
            name=_require(data, "name", str),
            expr=_require(data, "expr", str),
            **_position(data),
        )
    if kind == "spread":
        return SpreadAttribute(expr=_require(data, "expr", str), **_position(data))

    raise TreeFormatError(f"Unknown attribute type {kind!r}", line=data.get("line"))


def _optional_list(data: Dict[str, Any], key: str) -> List[Any]:
    if key not in data:
        return []
    return _require(data, key, list)


def _load_children(data: Dict[str, Any]) -> List[Node]:
    return [load_node(child) for child in _optional_list(data, "children")]


def load_node(data: Any) -> Node:
    if not isinstance(data, dict):
        raise TreeFormatError(f"Node must be an object, got {type(data).__name__}")

    kind = data.get("type")
    if kind == "element":
        return Element(
            tag=_require(data, "tag", str),
            attributes=[load_attribute(a) for a in _optional_list(data, "attributes")],
            children=_load_children(data),
            **_position(data),
        )
    if kind == "text":
        return Text(value=_require(data, "value", str), **_position(data))
    if kind == "expression":
        expr = data.get("expr")
        if expr is not None and not isinstance(expr, str):
            raise TreeFormatError(
                f"Expression must be a string, got {type(expr).__name__}",
                line=data.get("line"),
            )
        return ExpressionSlot(expr=expr, **_position(data))
    if kind == "fragment":
        return Fragment(children=_load_children(data), **_position(data))

    raise TreeFormatError(f"Unknown node type {kind!r}", line=data.get("line"))


def load_tree(data: Union[Dict[str, Any], List[Any]]) -> Node:
    if isinstance(data, list):
        return Fragment(children=[load_node(item) for item in data])
    return load_node(data)


def load_tree_file(path: Path) -> Node:
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise TreeFormatError(f"Invalid JSON in {path}: {e.msg}", line=e.lineno, column=e.colno)
    return load_tree(data)
