"""Main CLI entry point."""

import logging
from pathlib import Path
from typing import Optional

import rich_click as click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from tagwire import __version__
from tagwire.compiler.exceptions import TagwireCompileError
from tagwire.compiler.loader import load_tree_file
from tagwire.compiler.parts import decode_parts
from tagwire.compiler.program import CompilationUnit
from tagwire.config import DEFAULT_CONFIG, CompilerConfig

console = Console()

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.STYLE_HELPTEXT_FIRST = True
click.rich_click.STYLE_COMMANDS_TABLE_SHOW_LINES = False
click.rich_click.STYLE_COMMANDS_TABLE_BOX = None
click.rich_click.STYLE_OPTIONS_TABLE_BOX = None
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = "Try running 'tagwire --help' for more information."

# Cyan theme
click.rich_click.STYLE_HEADER_TEXT = "bold cyan"
click.rich_click.STYLE_OPTION = "cyan"
click.rich_click.STYLE_SWITCH = "cyan"
click.rich_click.STYLE_METAVAR = "dim white"
click.rich_click.STYLE_USAGE_COMMAND = "cyan"
click.rich_click.STYLE_USAGE = "dim"

PART_KIND_LABELS = {
    0: "attribute",
    1: "node",
    2: "node (after expression)",
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


@click.group(
    help=f"""
[bold white on cyan] tagwire [/] [bold cyan]v{__version__}[/] Compile element trees into tagged templates.

Run [bold cyan]tagwire compile TREE[/] to compile a JSON element tree.
Run [bold cyan]tagwire parts META[/] to inspect a part descriptor string.
"""
)
@click.version_option(__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose: bool) -> None:
    _configure_logging(verbose)


@cli.command("compile")
@click.argument("tree", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output",
    "-o",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write source to FILE instead of stdout",
)
@click.option("--target", default="template", help="Variable the template is assigned to")
@click.option(
    "--runtime-module",
    default=DEFAULT_CONFIG.runtime_module,
    help="Module providing the jsx/html helpers",
)
@click.option("--no-import", is_flag=True, help="Do not emit the runtime import")
def compile_tree(
    tree: Path,
    output: Optional[Path],
    target: str,
    runtime_module: str,
    no_import: bool,
) -> None:
    """Compile a JSON element tree to Python source."""
    config = CompilerConfig(runtime_module=runtime_module)

    try:
        root = load_tree_file(tree)
        unit = CompilationUnit(config=config)
        if no_import:
            # pretend the helpers are already in scope
            unit.has_runtime = True
        unit.assign(target, root)
    except TagwireCompileError as e:
        raise click.ClickException(f"{tree}: {e}")

    source = unit.to_source() + "\n"

    if output:
        output.write_text(source, encoding="utf-8")
        console.print(f"✅ Wrote [cyan]{output}[/]")
    else:
        click.echo(source, nl=False)


@cli.command()
@click.argument("meta")
def parts(meta: str) -> None:
    """Decode a part descriptor string."""
    try:
        decoded = decode_parts(meta)
    except TagwireCompileError as e:
        raise click.ClickException(str(e))

    table = Table(show_header=True, header_style="bold magenta", box=None)
    table.add_column("slot", justify="right")
    table.add_column("kind")
    table.add_column("element", justify="right")
    table.add_column("index", justify="right")

    for slot, part in enumerate(decoded):
        table.add_row(
            str(slot),
            PART_KIND_LABELS[int(part.kind)],
            "" if part.ref_node_index is None else str(part.ref_node_index),
            "" if part.secondary_index is None else str(part.secondary_index),
        )

    console.print(table)


if __name__ == "__main__":
    cli()
