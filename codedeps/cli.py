"""CLI entry point for codedeps."""

import asyncio
import json
import logging
from collections.abc import Coroutine
from pathlib import Path
from typing import Annotated, Any, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from codedeps.config import Config, load_config, parse_associations
from codedeps.core.diagnostics import LoggingDiagnosticSink
from codedeps.core.discovery import enumerate_files
from codedeps.core.exceptions import CodeDepsError
from codedeps.core.graph import FileGraph, GraphRenderer, load_graph, load_symbol_elements
from codedeps.core.indexer import Indexer
from codedeps.core.models import IndexStats, SymbolNode
from codedeps.core.storage import IndexRepository
from codedeps.render import JsonRenderer, TableRenderer, symbol_to_dict, symbol_tree

app = typer.Typer(
    name="codedeps",
    help="Incremental symbol index and file dependency graph.",
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger("codedeps")

T = TypeVar("T")

RootOption = Annotated[Path, typer.Option("--root", "-r", help="Project root")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show diagnostics")] = False,
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def get_config(root: Path) -> Config:
    """Load the project configuration, exiting on errors."""
    try:
        return load_config(root.resolve())
    except CodeDepsError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def index(
    path: Annotated[Path, typer.Argument(help="Project root to index")] = Path("."),
    force: Annotated[bool, typer.Option("--force", "-f", help="Re-index all files")] = False,
    pattern: Annotated[
        list[str] | None,
        typer.Option("--pattern", "-p", help="GLOB=LANGUAGE association (repeatable)"),
    ] = None,
    exclude: Annotated[
        list[str] | None, typer.Option("--exclude", "-e", help="Patterns to exclude")
    ] = None,
    retry_misses: Annotated[
        bool,
        typer.Option(
            "--retry-misses/--no-retry-misses",
            help="Resolve unresolved references again after the pass",
        ),
    ] = True,
) -> None:
    """Index new and changed files, drop removed ones."""
    config = get_config(path)
    root = config.root
    try:
        associations = parse_associations(pattern) if pattern else config.associations
    except CodeDepsError as e:
        raise typer.BadParameter(str(e), param_hint="--pattern") from e

    entries = enumerate_files(root, associations, config.exclude + (exclude or []))

    async def run() -> IndexStats:
        async with IndexRepository(config.db_path) as repo:
            indexer = Indexer.for_root(repo, root, LoggingDiagnosticSink(logger))
            await indexer.ensure_schema()
            if force:
                await repo.clear()

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                console=console,
            ) as progress:
                task = progress.add_task(f"Indexing [cyan]{root.name}[/]", total=None)

                def on_progress(relative_path: str, current: int, total: int) -> None:
                    progress.update(task, total=total, completed=current)
                    progress.update(task, description=f"[cyan]{relative_path}[/]")

                return await indexer.index(
                    entries, root, on_progress=on_progress, retry_misses=retry_misses
                )

    stats = _run(run())

    console.print("[green]Done![/green]")
    console.print(f"  Files indexed: {stats.files}")
    console.print(f"  Symbols found: {stats.symbols}")
    console.print(f"  References stored: {stats.references}")

    if stats.unchanged:
        console.print(f"  [dim]Unchanged: {stats.unchanged}[/]")
    if stats.removed:
        console.print(f"  [dim]Removed: {stats.removed}[/]")
    if stats.misses:
        console.print(f"  [yellow]Unresolved references: {stats.misses}[/]")
    if stats.failed:
        console.print(f"  [red]Failed: {len(stats.failed)}[/red]")
        for failed_path, error in zip(stats.failed, stats.errors):
            console.print(f"    {failed_path}: {error}")


@app.command()
def graph(
    root: RootOption = Path("."),
    output_json: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
    symbols: Annotated[
        bool, typer.Option("--symbols", "-s", help="Symbol-level elements instead of files")
    ] = False,
) -> None:
    """Show the file dependency graph."""
    config = get_config(root)

    if symbols:

        async def load_elements() -> dict[str, list[dict[str, object]]]:
            async with IndexRepository(config.db_path) as repo:
                await repo.ensure_schema()
                return await load_symbol_elements(repo, LoggingDiagnosticSink(logger))

        print(json.dumps(_run(load_elements())))
        return

    async def load() -> FileGraph:
        async with IndexRepository(config.db_path) as repo:
            await repo.ensure_schema()
            return await load_graph(repo, LoggingDiagnosticSink(logger))

    file_graph = _run(load())
    renderer: GraphRenderer = JsonRenderer() if output_json else TableRenderer(console)
    renderer.render(file_graph.nodes, file_graph.edges)


@app.command()
def stats(
    root: RootOption = Path("."),
    output_json: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """Show index statistics."""
    config = get_config(root)

    async def load() -> dict[str, object]:
        async with IndexRepository(config.db_path) as repo:
            await repo.ensure_schema()
            return dict(await repo.get_stats())

    result = _run(load())

    if output_json:
        last_updated = result["last_updated"]
        result["last_updated"] = str(last_updated) if last_updated else None
        print(json.dumps(result))
    else:
        console.print(f"Files indexed: {result['files']}")
        console.print(f"Symbols: {result['symbols']}")
        console.print(f"References: {result['references']}")
        if result["last_updated"]:
            console.print(f"Last updated: {result['last_updated']}")


@app.command(name="symbols")
def show_symbols(
    file: Annotated[str, typer.Argument(help="Relative path of an indexed file")],
    root: RootOption = Path("."),
    output_json: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """Show the symbol tree of one indexed file."""
    config = get_config(root)

    async def load() -> list[SymbolNode]:
        async with IndexRepository(config.db_path) as repo:
            await repo.ensure_schema()
            return await repo.symbols.load_tree(file, LoggingDiagnosticSink(logger))

    roots = _run(load())

    if output_json:
        print(json.dumps([symbol_to_dict(r) for r in roots]))
    elif not roots:
        console.print(f"No symbols for '[cyan]{file}[/cyan]'")
    else:
        console.print(symbol_tree(roots))


@app.command()
def remove(
    file: Annotated[str, typer.Argument(help="Relative path of an indexed file")],
    root: RootOption = Path("."),
) -> None:
    """Forget a file and every reference touching it."""
    config = get_config(root)

    async def run() -> None:
        async with IndexRepository(config.db_path) as repo:
            await repo.ensure_schema()
            await repo.remove_file(file)

    _run(run())
    console.print(f"Removed [cyan]{file}[/cyan]")


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine, turning codedeps errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except CodeDepsError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
