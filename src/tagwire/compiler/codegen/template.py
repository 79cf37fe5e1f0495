"""Template code generation.

Turns an element tree into a tagged template: the literal markup skeleton
split into string segments, one value expression per slot, and the part
descriptors telling the runtime where each value goes.
"""

import ast
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

from tagwire.compiler.ast_nodes import (
    Element,
    ExpressionAttribute,
    ExpressionSlot,
    Fragment,
    Node,
    NodeKind,
    SpreadAttribute,
    StaticAttribute,
    Text,
)
from tagwire.compiler.attributes import (
    AttributeMerger,
    attribute_value,
    create_attribute_expression,
    create_attribute_property,
    static_attribute_markup,
)
from tagwire.compiler.classifier import (
    classify_attribute,
    classify_element,
    is_html_element,
)
from tagwire.compiler.constants import SELF_CLOSING_TAGS
from tagwire.compiler.exceptions import ClassificationError, TemplateDepthError
from tagwire.compiler.expressions import component_reference, parse_expression
from tagwire.compiler.parts import PartKind, PartMeta, encode_parts
from tagwire.compiler.siblings import (
    SiblingIndex,
    flatten_fragment_children,
    is_output_node,
    nearest_container,
)
from tagwire.compiler.text import clean_string_for_html
from tagwire.config import DEFAULT_CONFIG, CompilerConfig

logger = logging.getLogger(__name__)

TemplateRoot = Union[Node, Sequence[Node]]


@dataclass
class CompiledTemplate:
    """Result of compiling one tree.

    ``strings`` always holds one more entry than ``expressions``: segment N
    precedes slot N and the last segment is the tail. ``parts`` lines up with
    ``expressions``.
    """

    strings: List[str]
    expressions: List[ast.expr]
    parts: List[PartMeta]
    element_count: int = 0

    @property
    def part_meta(self) -> str:
        return encode_parts(self.parts, self.element_count)

    @property
    def is_single_expression(self) -> bool:
        """A lone slot with no markup around it needs no template."""
        return (
            len(self.expressions) == 1
            and len(self.strings) == 2
            and not any(self.strings)
        )

    def to_ast(self, config: CompilerConfig = DEFAULT_CONFIG) -> ast.expr:
        if self.is_single_expression:
            return self.expressions[0]

        return ast.Call(
            func=ast.Name(id=config.html_name, ctx=ast.Load()),
            args=[
                ast.Tuple(
                    elts=[ast.Constant(value=s) for s in self.strings],
                    ctx=ast.Load(),
                ),
                ast.Tuple(elts=list(self.expressions), ctx=ast.Load()),
                ast.Constant(value=self.part_meta),
            ],
            keywords=[],
        )


@dataclass
class _EmitContext:
    """Mutable state of one compilation, discarded afterwards."""

    depth: int = 0
    strings: List[str] = field(default_factory=list)
    expressions: List[ast.expr] = field(default_factory=list)
    parts: List[PartMeta] = field(default_factory=list)
    segment: List[str] = field(default_factory=list)
    element_counter: int = 0
    # Literal elements only, keyed by node identity
    element_index: Dict[Element, int] = field(default_factory=dict)
    static_attribute_count: Dict[Element, int] = field(default_factory=dict)
    sibling_indexes: Dict[Optional[Node], SiblingIndex] = field(default_factory=dict)

    def push_to_strings(self) -> None:
        self.strings.append("".join(self.segment))
        self.segment = []

    def push_slot(self, expression: ast.expr, part: PartMeta) -> None:
        self.push_to_strings()
        self.parts.append(part)
        self.expressions.append(expression)

    def siblings(self, container: Optional[Node]) -> SiblingIndex:
        index = self.sibling_indexes.get(container)
        if index is None:
            index = SiblingIndex(container)
            self.sibling_indexes[container] = index
        return index

    def register_element(self, element: Element) -> int:
        index = self.element_counter
        self.element_index[element] = index
        self.static_attribute_count[element] = 0
        self.element_counter += 1
        return index


class _ElementSlots:
    """Slot sink for the attributes of one literal element."""

    def __init__(self, context: _EmitContext, element: Element) -> None:
        self.context = context
        self.element = element

    @property
    def expressions(self) -> List[ast.expr]:
        return self.context.expressions

    def push_attribute_slot(self, expression: ast.expr) -> None:
        part = PartMeta(
            PartKind.ATTRIBUTE,
            self.context.element_index[self.element],
            self.context.static_attribute_count[self.element],
        )
        self.context.push_slot(expression, part)

        # keep attributes separated once the value is substituted
        self.context.segment.append(" ")


class TemplateCodegen:
    """Generates Python AST for an element tree."""

    def __init__(self, config: CompilerConfig = DEFAULT_CONFIG) -> None:
        self.config = config

    def generate(self, root: TemplateRoot) -> ast.expr:
        """Compile ``root`` and return the expression replacing it."""
        return self.compile(root).to_ast(self.config)

    def compile(self, root: TemplateRoot, depth: int = 0) -> CompiledTemplate:
        if not isinstance(root, (Element, Text, ExpressionSlot, Fragment)):
            if isinstance(root, (list, tuple)):
                root = Fragment(children=list(root))
            else:
                raise ClassificationError(
                    f"Cannot compile {type(root).__name__} as a template root", root
                )

        context = _EmitContext(depth=depth)
        self._add_node(root, context, [])

        # tail segment
        context.push_to_strings()

        logger.debug(
            "Compiled template with %d slots over %d literal elements",
            len(context.expressions),
            context.element_counter,
        )
        return CompiledTemplate(
            strings=context.strings,
            expressions=context.expressions,
            parts=context.parts,
            element_count=context.element_counter,
        )

    def _enter(self, node: Node, context: _EmitContext) -> None:
        context.depth += 1
        if context.depth > self.config.max_depth:
            raise TemplateDepthError(
                f"Element tree is nested deeper than {self.config.max_depth} levels",
                line=node.line,
                column=node.column,
            )

    def _add_node(
        self, node: Node, context: _EmitContext, ancestors: List[Node]
    ) -> None:
        if isinstance(node, Element):
            self._add_element(node, context, ancestors)
        elif isinstance(node, Text):
            clean_str = clean_string_for_html(node.value)
            if clean_str:
                context.segment.append(clean_str)
        elif isinstance(node, ExpressionSlot):
            if node.is_empty:
                return
            siblings = context.siblings(nearest_container(ancestors))
            if siblings.is_wrapped_with_text(node):
                context.segment.append(self.config.placeholder_comment)
            self._push_node_slot(
                parse_expression(node.expr, node), node, context, ancestors
            )
        elif isinstance(node, Fragment):
            self._enter(node, context)
            for child in node.children:
                self._add_node(child, context, ancestors + [node])
            context.depth -= 1
        else:
            raise ClassificationError(
                f"Unknown node type {type(node).__name__} in element tree", node
            )

    def _push_node_slot(
        self,
        expression: ast.expr,
        node: Node,
        context: _EmitContext,
        ancestors: List[Node],
    ) -> None:
        container = nearest_container(ancestors)
        ref_node_index: Optional[int] = None
        if isinstance(container, Element):
            ref_node_index = context.element_index.get(container)

        position = context.siblings(container).position(node)
        kind = (
            PartKind.NODE_WITH_EXPRESSION_SIBLING
            if position.has_expression_sibling
            else PartKind.NODE
        )
        context.push_slot(
            expression, PartMeta(kind, ref_node_index, position.prev_child_index)
        )

    def _add_element(
        self, element: Element, context: _EmitContext, ancestors: List[Node]
    ) -> None:
        self._enter(element, context)

        if classify_element(element) is NodeKind.DYNAMIC:
            expression = self._create_jsx_call(element, context.depth)
            self._push_node_slot(expression, element, context, ancestors)
            context.depth -= 1
            return

        tag = element.tag
        context.register_element(element)
        context.segment.append(f"<{tag} ")

        merger = AttributeMerger(_ElementSlots(context, element))
        for attribute in element.attributes:
            kind = classify_attribute(tag, attribute)
            if isinstance(attribute, SpreadAttribute):
                merger.push(parse_expression(attribute.expr, attribute))
            elif kind is NodeKind.DYNAMIC:
                merger.push(create_attribute_expression(attribute))
            else:
                context.segment.append(
                    static_attribute_markup(attribute.name, attribute.value)
                )
                context.static_attribute_count[element] += 1
                # literal markup between two dynamic attributes splits their slots
                merger.reset()

        context.segment.append(">")

        for child in element.children:
            self._add_node(child, context, ancestors + [element])

        if tag not in SELF_CLOSING_TAGS:
            context.segment.append(f"</{tag}>")

        context.depth -= 1

    def _create_jsx_call(self, element: Element, depth: int) -> ast.Call:
        """``jsx(type, props[, key])`` for a component or forced-dynamic tag."""
        if is_html_element(element.tag):
            element_type: ast.expr = ast.Constant(value=element.tag)
        else:
            element_type = component_reference(element.tag, element)

        keys: List[Optional[ast.expr]] = []
        values: List[ast.expr] = []
        key_value: Optional[ast.expr] = None

        for attribute in element.attributes:
            if isinstance(attribute, SpreadAttribute):
                keys.append(None)
                values.append(parse_expression(attribute.expr, attribute))
            elif isinstance(attribute, (StaticAttribute, ExpressionAttribute)):
                if attribute.name == "key":
                    # a bare ``key`` carries no value to pass on
                    if not (isinstance(attribute, StaticAttribute) and attribute.value is None):
                        key_value = attribute_value(attribute)
                    continue
                prop_key, prop_value = create_attribute_property(attribute)
                keys.append(prop_key)
                values.append(prop_value)
            else:
                raise ClassificationError(
                    f"Unknown attribute type {type(attribute).__name__} "
                    f"on <{element.tag}>",
                    attribute,
                )

        if any(is_output_node(child) for child in flatten_fragment_children(element)):
            children = self.compile(element.children, depth=depth)
            keys.append(ast.Constant(value="children"))
            values.append(children.to_ast(self.config))

        args: List[ast.expr] = [element_type, ast.Dict(keys=keys, values=values)]
        if key_value is not None:
            args.append(key_value)

        return ast.Call(
            func=ast.Name(id=self.config.jsx_name, ctx=ast.Load()),
            args=args,
            keywords=[],
        )
