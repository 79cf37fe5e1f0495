"""Compiler configuration."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CompilerConfig:
    """Options shared by every compilation in a unit.

    Attributes:
        runtime_module: Module providing the ``jsx`` and ``html`` helpers.
        jsx_name: Local name the ``jsx`` helper is imported as.
        html_name: Local name the ``html`` helper is imported as.
        placeholder: Text of the comment node separating adjacent text runs.
        max_depth: Deepest element/fragment nesting accepted before failing.
    """

    runtime_module: str = "tagwire.runtime.jsx_runtime"
    jsx_name: str = "_tagwire_jsx"
    html_name: str = "_tagwire_html"
    placeholder: str = "{{tagwire}}"
    max_depth: int = 256

    @property
    def placeholder_comment(self) -> str:
        return f"<!--{self.placeholder}-->"


DEFAULT_CONFIG = CompilerConfig()
