try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("tagwire")
except PackageNotFoundError:
    __version__ = "unknown"

from tagwire.compiler.ast_nodes import (
    Element,
    ExpressionAttribute,
    ExpressionSlot,
    Fragment,
    SpreadAttribute,
    StaticAttribute,
    Text,
)
from tagwire.compiler.codegen.template import CompiledTemplate, TemplateCodegen
from tagwire.compiler.exceptions import (
    ClassificationError,
    PartEncodingError,
    TagwireCompileError,
)
from tagwire.compiler.program import CompilationUnit
from tagwire.config import CompilerConfig

__all__ = [
    "Element",
    "ExpressionAttribute",
    "ExpressionSlot",
    "Fragment",
    "SpreadAttribute",
    "StaticAttribute",
    "Text",
    "CompiledTemplate",
    "TemplateCodegen",
    "CompilationUnit",
    "CompilerConfig",
    "ClassificationError",
    "PartEncodingError",
    "TagwireCompileError",
]
