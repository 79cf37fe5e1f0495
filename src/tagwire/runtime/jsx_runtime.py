"""Helpers referenced by compiled templates.

Compiled modules import ``jsx`` and ``html`` from here. They only record what
the compiler produced; turning the records into DOM is up to the renderer.
"""

from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, List, Optional, Sequence, Tuple

from tagwire.compiler.parts import PartMeta, decode_parts


@dataclass(frozen=True)
class JSXElement:
    type: Any
    props: Dict[str, Any] = field(default_factory=dict)
    key: Any = None


@dataclass(frozen=True)
class TemplateResult:
    strings: Tuple[str, ...]
    values: Tuple[Any, ...]
    part_meta: str

    @cached_property
    def parts(self) -> List[PartMeta]:
        return decode_parts(self.part_meta)

    @property
    def template(self) -> str:
        """Markup skeleton with every slot left out."""
        return "".join(self.strings)


def jsx(type: Any, props: Dict[str, Any], key: Optional[Any] = None) -> JSXElement:
    return JSXElement(type=type, props=props, key=key)


def html(strings: Sequence[str], values: Sequence[Any], part_meta: str) -> TemplateResult:
    if len(strings) != len(values) + 1:
        raise ValueError(
            f"Template has {len(strings)} string segments for {len(values)} values"
        )
    return TemplateResult(tuple(strings), tuple(values), part_meta)
