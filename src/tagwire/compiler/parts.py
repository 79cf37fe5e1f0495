"""Part descriptor encoding.

A compiled template carries one descriptor per slot, serialized as::

    code|primaryIndex|secondaryIndex[,code|primaryIndex|secondaryIndex...]

``code`` is 0 for an attribute part, 1 for a node part and 2 for a node part
whose previous sibling is itself dynamic. For attribute parts the primary
index is the element's position among the template's literal elements and the
secondary index counts the literal attributes written before the slot. For
node parts the primary index is the parent element and the secondary index is
the previous sibling among the parent's skeleton child nodes. Missing indices
(``None`` or -1) are written as empty strings to keep the payload small.

The grammar is shared with every runtime consuming compiled output; do not
change it.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, List, Optional

from tagwire.compiler.exceptions import PartEncodingError

PART_SEPARATOR = ","
FIELD_SEPARATOR = "|"


class PartKind(IntEnum):
    ATTRIBUTE = 0
    NODE = 1
    NODE_WITH_EXPRESSION_SIBLING = 2


@dataclass(frozen=True)
class PartMeta:
    kind: PartKind
    ref_node_index: Optional[int] = None
    secondary_index: Optional[int] = None

    @property
    def is_attribute(self) -> bool:
        return self.kind is PartKind.ATTRIBUTE


def _slim_index(index: Optional[int]) -> str:
    if index is None or index == -1:
        return ""
    return str(index)


def _check_index(index: Optional[int], label: str, position: int) -> None:
    if index is not None and index < -1:
        raise PartEncodingError(f"Part {position} has invalid {label} {index}")


def encode_part(part: PartMeta) -> str:
    return FIELD_SEPARATOR.join(
        (
            str(int(part.kind)),
            _slim_index(part.ref_node_index),
            _slim_index(part.secondary_index),
        )
    )


def encode_parts(parts: Iterable[PartMeta], element_count: Optional[int] = None) -> str:
    """Serialize descriptors, validating indices against ``element_count``."""
    encoded = []
    for position, part in enumerate(parts):
        _check_index(part.ref_node_index, "element index", position)
        _check_index(part.secondary_index, "secondary index", position)

        if (
            element_count is not None
            and part.ref_node_index is not None
            and part.ref_node_index >= element_count
        ):
            raise PartEncodingError(
                f"Part {position} references element {part.ref_node_index} "
                f"but only {element_count} literal elements were emitted"
            )
        if part.is_attribute and part.ref_node_index in (None, -1):
            raise PartEncodingError(f"Attribute part {position} has no element index")

        encoded.append(encode_part(part))

    return PART_SEPARATOR.join(encoded)


def _parse_index(value: str, meta: str) -> Optional[int]:
    if value == "":
        return None
    if not value.isdigit():
        raise PartEncodingError(f"Invalid index {value!r} in part meta {meta!r}")
    return int(value)


def decode_parts(meta: str) -> List[PartMeta]:
    """Parse a descriptor string back into :class:`PartMeta` records."""
    if not meta:
        return []

    parts = []
    for chunk in meta.split(PART_SEPARATOR):
        fields = chunk.split(FIELD_SEPARATOR)
        if len(fields) != 3:
            raise PartEncodingError(f"Malformed part {chunk!r} in part meta {meta!r}")

        code, primary, secondary = fields
        try:
            kind = PartKind(int(code))
        except ValueError:
            raise PartEncodingError(f"Unknown part code {code!r} in part meta {meta!r}")

        parts.append(
            PartMeta(kind, _parse_index(primary, meta), _parse_index(secondary, meta))
        )
    return parts
