"""Locating dynamic child nodes relative to the static skeleton.

Fragments have no node of their own in the rendered DOM, so every lookup here
works on the children of the nearest non-fragment ancestor with fragments
inlined. Children that produce no output (blank text, empty expressions) are
ignored as well.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from tagwire.compiler.ast_nodes import ExpressionSlot, Fragment, Node, Text
from tagwire.compiler.classifier import is_template_node
from tagwire.compiler.text import clean_string_for_html


@dataclass(frozen=True)
class SiblingPosition:
    """Where a dynamic child sits among its parent's skeleton nodes.

    ``prev_child_index`` is -1 when nothing precedes the child.
    """

    prev_child_index: int = -1
    has_expression_sibling: bool = False


def flatten_fragment_children(parent: Optional[Node]) -> List[Node]:
    if parent is None:
        return []

    children: List[Node] = []
    for child in getattr(parent, "children", []):
        if isinstance(child, Fragment):
            children.extend(flatten_fragment_children(child))
        else:
            children.append(child)
    return children


def is_output_node(node: Node) -> bool:
    if isinstance(node, Text):
        return bool(clean_string_for_html(node.value))
    if isinstance(node, ExpressionSlot):
        return not node.is_empty
    return True


def nearest_container(ancestors: Sequence[Node]) -> Optional[Node]:
    """Nearest non-fragment ancestor, else the outermost ancestor."""
    for ancestor in reversed(ancestors):
        if not isinstance(ancestor, Fragment):
            return ancestor
    return ancestors[0] if ancestors else None


def output_children(container: Optional[Node]) -> List[Node]:
    return [c for c in flatten_fragment_children(container) if is_output_node(c)]


class SiblingIndex:
    """Positions of every output child of one container, computed once.

    Text runs with nothing rendered between them (only a fragment boundary or
    an empty expression) end up in one markup segment and parse as a single
    text node, so they share one child index.
    """

    def __init__(self, container: Optional[Node]) -> None:
        self.children = output_children(container)
        self._slot: Dict[Node, int] = {child: i for i, child in enumerate(self.children)}

        template = [is_template_node(child) for child in self.children]
        text = [isinstance(child, Text) for child in self.children]

        # A run of consecutive dynamic children gets one placeholder text node
        # at runtime, which occupies a child index of its own.
        self._prev_child_index: List[int] = []
        self._has_expression_sibling: List[bool] = []
        count = -1
        for i in range(len(self.children)):
            merged_text = i > 0 and text[i] and text[i - 1]
            if not merged_text and (template[i] or (i > 0 and not template[i - 1])):
                count += 1
            self._prev_child_index.append(count)
            self._has_expression_sibling.append(i > 0 and not template[i - 1])

        self._text_before = [i > 0 and text[i - 1] for i in range(len(self.children))]

        # whether the first skeleton node to the right is text
        self._text_after = [False] * len(self.children)
        following = False
        for i in reversed(range(len(self.children))):
            self._text_after[i] = following
            if template[i]:
                following = text[i]

    def position(self, node: Node) -> SiblingPosition:
        i = self._slot.get(node)
        if i is None:
            return SiblingPosition()
        return SiblingPosition(self._prev_child_index[i], self._has_expression_sibling[i])

    def is_wrapped_with_text(self, node: Node) -> bool:
        """
        Whether ``node`` sits between two text runs.

        Adjacent dynamic siblings are skipped on the right, so a run of
        expressions between two texts needs only one separating comment.
        """
        i = self._slot.get(node)
        if i is None:
            return False
        return self._text_before[i] and self._text_after[i]


def previous_sibling_index(node: Node, container: Optional[Node]) -> SiblingPosition:
    return SiblingIndex(container).position(node)


def is_wrapped_with_text(node: Node, container: Optional[Node]) -> bool:
    return SiblingIndex(container).is_wrapped_with_text(node)
