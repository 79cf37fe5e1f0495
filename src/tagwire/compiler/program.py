"""Per-module compilation: runtime import injection plus tree compilation."""

import ast
import logging
from typing import List, Optional

from tagwire.compiler.codegen.template import TemplateCodegen, TemplateRoot
from tagwire.config import DEFAULT_CONFIG, CompilerConfig

logger = logging.getLogger(__name__)


def _runtime_import(config: CompilerConfig) -> ast.ImportFrom:
    return ast.ImportFrom(
        module=config.runtime_module,
        names=[
            ast.alias(name="jsx", asname=config.jsx_name),
            ast.alias(name="html", asname=config.html_name),
        ],
        level=0,
    )


def _is_runtime_import(stmt: ast.stmt, config: CompilerConfig) -> bool:
    if not isinstance(stmt, ast.ImportFrom) or stmt.module != config.runtime_module:
        return False
    local_names = {alias.asname or alias.name for alias in stmt.names}
    return {config.jsx_name, config.html_name} <= local_names


def _insertion_index(body: List[ast.stmt]) -> int:
    """First position after the module docstring and ``__future__`` imports."""
    index = 0
    if (
        body
        and isinstance(body[0], ast.Expr)
        and isinstance(body[0].value, ast.Constant)
        and isinstance(body[0].value.value, str)
    ):
        index = 1

    while (
        index < len(body)
        and isinstance(body[index], ast.ImportFrom)
        and body[index].module == "__future__"
    ):
        index += 1
    return index


class CompilationUnit:
    """Compiles element trees belonging to one Python module.

    The runtime helpers are imported into ``module`` the first time a tree is
    compiled, and never more than once.
    """

    def __init__(
        self,
        module: Optional[ast.Module] = None,
        config: CompilerConfig = DEFAULT_CONFIG,
    ) -> None:
        self.module = module if module is not None else ast.Module(body=[], type_ignores=[])
        self.config = config
        self.codegen = TemplateCodegen(config)
        self.has_runtime = any(_is_runtime_import(s, config) for s in self.module.body)

    def ensure_runtime(self) -> None:
        if self.has_runtime:
            return

        index = _insertion_index(self.module.body)
        self.module.body.insert(index, _runtime_import(self.config))
        self.has_runtime = True
        logger.debug("Injected runtime import from %s", self.config.runtime_module)

    def compile(self, root: TemplateRoot) -> ast.expr:
        """Compile ``root``; the caller puts the result where the tree was."""
        expression = self.codegen.generate(root)
        self.ensure_runtime()
        return expression

    def assign(self, target: str, root: TemplateRoot) -> ast.Assign:
        """Compile ``root`` into ``target = <template>`` appended to the module."""
        stmt = ast.Assign(
            targets=[ast.Name(id=target, ctx=ast.Store())],
            value=self.compile(root),
        )
        self.module.body.append(stmt)
        return stmt

    def to_source(self) -> str:
        ast.fix_missing_locations(self.module)
        return ast.unparse(self.module)
