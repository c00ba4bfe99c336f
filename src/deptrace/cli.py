"""Command-line interface for deptrace."""

import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich import print
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from . import __version__
from .config import ConfigManager, GlobalConfig
from .exceptions import DeptraceError
from .models import BatchRequest, BatchResult, DirectoryNode, MergedResult
from .report import generate_markdown, update_report
from .service import (
    analyze_batch,
    find_entry_file,
    get_directory_structure,
    get_directory_tree,
    validate_entry_files,
)

app = typer.Typer(
    name="deptrace",
    help="Trace JavaScript/TypeScript module dependencies and render them as a Markdown report.",
    rich_markup_mode="rich",
)
console = Console()
logger = logging.getLogger(__name__)


def version_callback(value: bool):
    """Show version and exit."""
    if value:
        print(f"[cyan]deptrace[/cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
):
    """
    Deptrace - dependency graphs for JavaScript/TypeScript projects.

    Starting from one or more entry files, follows import, require, dynamic
    import and stylesheet references and writes a report with the graph,
    a directory tree and statistics.
    """
    pass


def _configure_logging(config_manager: ConfigManager, verbose: bool):
    """Log to the state directory and, for warnings or --verbose, to stderr."""
    file_handler = logging.FileHandler(config_manager.log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[file_handler, stream_handler],
        force=True,
    )


def _resolve_root(project_root: Optional[Path]) -> Path:
    root = Path(os.path.abspath(project_root or Path.cwd()))
    if not root.is_dir():
        print(f"[red]Error:[/red] {root} is not a valid directory")
        raise typer.Exit(1)
    return root


def _resolve_entries(entries: Optional[List[str]], root: Path, settings: GlobalConfig) -> List[str]:
    """Use the given entries or fall back to a common entry file."""
    entry_list = [e for e in entries or [] if e.strip()]
    if entry_list:
        return entry_list

    found = find_entry_file(root, candidates=settings.common_entries)
    if found is None:
        print(f"[red]Error:[/red] No entry file given and no common entry file found in {root}")
        _print_structure_hint(root)
        raise typer.Exit(1)

    print(f"[cyan]Using entry file:[/cyan] {found}")
    return [str(found)]


def _build_request(
    settings: GlobalConfig,
    entries: List[str],
    root: Path,
    max_depth: Optional[int],
    tree_depth: Optional[int],
    show_deps: Optional[bool],
    exclude: Optional[List[str]],
    workers: Optional[int],
) -> BatchRequest:
    """Merge command-line flags over the configured defaults."""
    return BatchRequest(
        entries=entries,
        project_root=root,
        max_depth=settings.max_depth if max_depth is None else max_depth,
        tree_depth=settings.tree_depth if tree_depth is None else tree_depth,
        show_deps=settings.show_deps if show_deps is None else show_deps,
        exclude_dirs=list(exclude) if exclude else list(settings.exclude_dirs),
        workers=settings.workers if workers is None else workers,
    )


def _report_path(output: Optional[Path], root: Path, settings: GlobalConfig) -> Path:
    path = output or Path(settings.report_output)
    return path if path.is_absolute() else root / path


def _print_structure_hint(root: Path):
    structure = get_directory_structure(root, 2)
    if not structure:
        return
    print("[yellow]Project structure:[/yellow]")
    for line in structure[:20]:
        console.print(line, markup=False, highlight=False)
    if len(structure) > 20:
        console.print("...", markup=False)


def _print_problems(batch: BatchResult):
    for entry in batch.invalid_entries:
        print(f"[yellow]Invalid entry:[/yellow] {entry}")
    for error in batch.errors:
        print(f"[red]Failed:[/red] {error.entry} - {error.error}")


def _print_statistics(result: MergedResult):
    stats = result.statistics

    table = Table(title="Dependency Analysis")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="green")

    table.add_row("Entry files", str(len(result.entry_results)))
    table.add_row("Total files", str(stats.total_files))
    table.add_row("Total dependencies", str(stats.total_dependencies))
    for file_type, count in stats.files_by_type.items():
        if count > 0:
            table.add_row(f"  {file_type}", str(count))
    if result.diagnostics:
        table.add_row("Skipped references", str(len(result.diagnostics)))

    console.print(table)


@app.command(name="analyze", help="Trace dependencies from one or more entry files")
def analyze(
    entries: Optional[List[str]] = typer.Argument(
        None,
        help="Entry files, absolute or relative to the project root (auto-detected when omitted)",
    ),
    project_root: Optional[Path] = typer.Option(
        None, "--project-root", "-p", help="Project root (defaults to current directory)",
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Markdown report path, relative to the project root",
    ),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Report title"),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", min=0, help="Maximum reference depth"),
    tree_depth: Optional[int] = typer.Option(None, "--tree-depth", min=0, help="Maximum rendered tree depth"),
    show_deps: Optional[bool] = typer.Option(
        None, "--show-deps/--no-show-deps", help="Annotate files with dependency counts",
    ),
    exclude: Optional[List[str]] = typer.Option(
        None, "--exclude", "-x", help="Directory to exclude, relative to the project root (repeatable)",
    ),
    workers: Optional[int] = typer.Option(None, "--workers", "-j", min=1, help="Entries analysed in parallel"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON instead of writing a report"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
):
    """Analyse entry files and write the Markdown report."""
    config_manager = ConfigManager()
    _configure_logging(config_manager, verbose)
    settings = config_manager.global_config

    root = _resolve_root(project_root)
    entry_list = _resolve_entries(entries, root, settings)
    request = _build_request(settings, entry_list, root, max_depth, tree_depth, show_deps, exclude, workers)

    try:
        batch = analyze_batch(request)
    except DeptraceError as e:
        print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(batch.to_dict(), indent=2, ensure_ascii=False))
        if not batch.success:
            raise typer.Exit(1)
        return

    _print_problems(batch)
    if not batch.success:
        print(f"[red]Error:[/red] {batch.message}")
        _print_structure_hint(root)
        raise typer.Exit(1)

    result = batch.data
    _print_statistics(result)

    report_path = _report_path(output, root, settings)
    content = generate_markdown(result, title or settings.report_title)
    if update_report(report_path, content):
        print(f"[green]✓ Report saved to[/green] {report_path}")
    else:
        print(f"[red]Failed to write report:[/red] {report_path}")
        raise typer.Exit(1)


@app.command(name="validate", help="Check that entry files exist inside the project")
def validate(
    entries: List[str] = typer.Argument(..., help="Entry files to check"),
    project_root: Optional[Path] = typer.Option(
        None, "--project-root", "-p", help="Project root; without it every entry is accepted",
    ),
):
    """Print the valid/invalid partition of the given entries."""
    validation = validate_entry_files(entries, project_root)

    for entry in validation.valid_entries:
        print(f"[green]✓[/green] {entry}")
    for entry in validation.invalid_entries:
        print(f"[red]✗[/red] {entry}")

    if not validation.valid_entries:
        print("[red]No valid entry files[/red]")
        raise typer.Exit(1)


def _add_branches(branch: Tree, node: DirectoryNode):
    for child in node.children:
        _add_branches(branch.add(f"{child.name}/"), child)


@app.command(name="tree", help="Show the folder structure of a directory")
def show_tree(
    directory: Optional[Path] = typer.Argument(None, help="Directory to probe (defaults to current directory)"),
    depth: Optional[int] = typer.Option(None, "--depth", "-d", min=1, help="Maximum folder depth"),
    as_json: bool = typer.Option(False, "--json", help="Print the structure as JSON"),
):
    """Print folders only, skipping dependency, VCS and build directories."""
    settings = ConfigManager().global_config
    root = _resolve_root(directory)

    node = get_directory_tree(root, depth or settings.probe_depth, settings.ignored_dirs)
    if as_json:
        typer.echo(json.dumps(node.to_dict(), indent=2, ensure_ascii=False))
        return

    tree = Tree(f"[bold]{node.name}/[/bold]")
    _add_branches(tree, node)
    console.print(tree)


@app.command(name="watch", help="Regenerate the report whenever sources change")
def watch(
    entries: Optional[List[str]] = typer.Argument(None, help="Entry files (auto-detected when omitted)"),
    project_root: Optional[Path] = typer.Option(None, "--project-root", "-p", help="Project root"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Markdown report path"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Report title"),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", min=0),
    tree_depth: Optional[int] = typer.Option(None, "--tree-depth", min=0),
    show_deps: Optional[bool] = typer.Option(None, "--show-deps/--no-show-deps"),
    exclude: Optional[List[str]] = typer.Option(None, "--exclude", "-x"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
):
    """Keep the report in sync with the project."""
    from .monitor import ReportWatcher

    config_manager = ConfigManager()
    _configure_logging(config_manager, verbose)
    settings = config_manager.global_config

    root = _resolve_root(project_root)
    entry_list = _resolve_entries(entries, root, settings)
    request = _build_request(settings, entry_list, root, max_depth, tree_depth, show_deps, exclude, 1)
    report_path = _report_path(output, root, settings)
    report_title = title or settings.report_title

    def regenerate() -> bool:
        batch = analyze_batch(request)
        if not batch.success:
            logger.warning(f"Analysis failed: {batch.message}")
            return False
        return update_report(report_path, generate_markdown(batch.data, report_title))

    if regenerate():
        print(f"[green]✓ Report saved to[/green] {report_path}")

    watcher = ReportWatcher(
        root,
        regenerate,
        report_path=report_path,
        exclude_dirs=request.exclude_dirs,
        update_delay=settings.watch_delay,
    )

    print(f"[green]Watching[/green] {root}")
    print("[yellow]Press Ctrl+C to stop[/yellow]")
    try:
        asyncio.run(watcher.run())
    except KeyboardInterrupt:
        print("\n[yellow]Stopped watching[/yellow]")


@app.command(name="config", help="Show or change the default settings")
def show_config(
    set_values: Optional[List[str]] = typer.Option(
        None, "--set", help="Persist a setting as KEY=VALUE (repeatable)",
    ),
    reset: bool = typer.Option(False, "--reset", help="Remove all saved settings"),
):
    """Show the effective settings and where they come from."""
    config_manager = ConfigManager()

    if reset:
        config_manager.reset()
        print("[green]Saved settings removed[/green]")

    for item in set_values or []:
        key, sep, value = item.partition("=")
        if not sep:
            print(f"[red]Error:[/red] expected KEY=VALUE, got {item!r}")
            raise typer.Exit(1)
        try:
            config_manager.set_value(key.strip(), value.strip())
        except KeyError:
            print(f"[red]Error:[/red] unknown setting {key.strip()!r}")
            raise typer.Exit(1)
        except ValidationError as e:
            print(f"[red]Error:[/red] invalid value for {key.strip()!r}: {e.errors()[0]['msg']}")
            raise typer.Exit(1)

    table = Table(title="deptrace settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_column("Source", style="dim")

    for key, value in config_manager.global_config.model_dump().items():
        source = "config.json" if key in config_manager.overrides else "default"
        table.add_row(key, json.dumps(value), source)

    console.print(table)
    print(f"[cyan]Config file:[/cyan] {config_manager.config_file}")
    print(f"[cyan]Log file:[/cyan] {config_manager.log_file}")


if __name__ == "__main__":
    app()
