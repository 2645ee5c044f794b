"""Typer-based CLI for ModGraph workspace queries."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler

from . import __version__, config
from .config_manager import Settings, load_settings, parse_setting, save_settings
from .errors import ModGraphError
from .formatting import (
    format_dependency_graph,
    format_module_packages,
    format_modules_list,
    format_package_symbols,
    format_symbol_detail,
    to_json,
)
from .models import SymbolFilter
from .service import WorkspaceService
from .workspace import GoWorkspaceView

app = typer.Typer(
    help="ModGraph CLI: module, package and symbol views of Go workspaces.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
config_app = typer.Typer(help="Show or change analysis settings.", no_args_is_help=True)
app.add_typer(config_app, name="config")

err_console = Console(stderr=True)

T = TypeVar("T")

CWD_OPTION = typer.Option(None, "--cwd", "-C", file_okay=False, help="Workspace directory (default: current directory).")
METADATA_OPTION = typer.Option(
    None, "--metadata", exists=True, dir_okay=False, help="Saved 'go list -json -deps -test' output to use instead of running go."
)
JSON_OPTION = typer.Option(False, "--json", help="Print the raw result as JSON.")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"ModGraph CLI v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log debug details to stderr."),
):
    """ModGraph CLI: structural views of Go workspaces for humans and LLMs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _service(cwd: Optional[Path], metadata: Optional[Path] = None) -> WorkspaceService:
    settings = load_settings()
    view = GoWorkspaceView(
        cwd or Path.cwd(),
        metadata_file=metadata,
        go_binary=settings.go_binary,
    )
    return WorkspaceService(view, settings)


def _run(query: Callable[[], T]) -> T:
    try:
        return query()
    except ModGraphError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1)


def parse_filter(text: str) -> SymbolFilter:
    """``Start`` -> any Start; ``*Server.Start`` or ``(*Server).Start`` -> method."""
    receiver, _, name = text.rpartition(".")
    if not name:
        raise typer.BadParameter(f"Invalid symbol filter '{text}'.")
    return SymbolFilter(name=name, receiver=receiver.strip().strip("()"))


@app.command("modules")
def modules(
    cwd: Optional[Path] = CWD_OPTION,
    direct_only: bool = typer.Option(True, "--direct-only/--all", help="Hide indirect dependencies (default) or show all."),
    as_json: bool = JSON_OPTION,
):
    """List the workspace's modules, split into internal and external."""
    service = _service(cwd)
    result = _run(lambda: service.list_modules(direct_only=direct_only))
    typer.echo(to_json(result) if as_json else format_modules_list(result), nl=as_json)


@app.command("packages")
def packages(
    module_path: str = typer.Argument("", help="Module path (default: main module)."),
    cwd: Optional[Path] = CWD_OPTION,
    metadata: Optional[Path] = METADATA_OPTION,
    exclude_tests: bool = typer.Option(False, "--exclude-tests", help="Skip test packages."),
    exclude_internal: bool = typer.Option(False, "--exclude-internal", help="Skip packages under an internal/ directory."),
    top_level_only: bool = typer.Option(False, "--top-level-only", help="Only packages directly below the module path."),
    include_docs: bool = typer.Option(False, "--docs", help="Include package documentation."),
    as_json: bool = JSON_OPTION,
):
    """List the packages of a module."""
    service = _service(cwd, metadata)
    result = _run(lambda: service.list_module_packages(
        module_path,
        exclude_tests=exclude_tests,
        exclude_internal=exclude_internal,
        top_level_only=top_level_only,
        include_docs=include_docs,
    ))
    typer.echo(to_json(result) if as_json else format_module_packages(result), nl=as_json)


@app.command("deps")
def deps(
    package_path: str = typer.Argument("", help="Package import path (default: main module root)."),
    cwd: Optional[Path] = CWD_OPTION,
    metadata: Optional[Path] = METADATA_OPTION,
    transitive: bool = typer.Option(False, "--transitive", "-t", help="Follow imports of imports."),
    max_depth: int = typer.Option(0, "--max-depth", "-d", help="Stop at this depth (0 = unbounded)."),
    as_json: bool = JSON_OPTION,
):
    """Show what a package imports and what imports it."""
    service = _service(cwd, metadata)
    result = _run(lambda: service.resolve_dependency_graph(
        package_path, include_transitive=transitive, max_depth=max_depth,
    ))
    typer.echo(to_json(result) if as_json else format_dependency_graph(result), nl=as_json)


@app.command("symbols")
def symbols(
    package_path: str = typer.Argument(..., help="Package import path."),
    cwd: Optional[Path] = CWD_OPTION,
    metadata: Optional[Path] = METADATA_OPTION,
    include_docs: bool = typer.Option(False, "--docs", help="Include doc comments."),
    include_bodies: bool = typer.Option(False, "--bodies", help="Include function bodies."),
    as_json: bool = JSON_OPTION,
):
    """List the exported symbols of a package."""
    service = _service(cwd, metadata)
    result = _run(lambda: service.list_package_symbols(
        package_path, include_docs=include_docs, include_bodies=include_bodies,
    ))
    output = to_json(result) if as_json else format_package_symbols(result, include_docs, include_bodies)
    typer.echo(output, nl=as_json)


@app.command("detail")
def detail(
    package_path: str = typer.Argument(..., help="Package import path."),
    filters: List[str] = typer.Argument(..., help="Symbols to show: Name, or Recv.Name for methods (e.g. '*Server.Start')."),
    cwd: Optional[Path] = CWD_OPTION,
    metadata: Optional[Path] = METADATA_OPTION,
    include_docs: bool = typer.Option(False, "--docs", help="Include doc comments."),
    include_bodies: bool = typer.Option(False, "--bodies", help="Include function bodies."),
    as_json: bool = JSON_OPTION,
):
    """Show selected symbols of a package by exact name and receiver."""
    symbol_filters = [parse_filter(text) for text in filters]
    service = _service(cwd, metadata)
    result = _run(lambda: service.get_package_symbol_detail(
        package_path, symbol_filters, include_docs=include_docs, include_bodies=include_bodies,
    ))
    output = to_json(result) if as_json else format_symbol_detail(result, include_docs, include_bodies)
    typer.echo(output, nl=as_json)


@config_app.command("show")
def config_show():
    """Print the active settings."""
    settings = load_settings()
    typer.echo(f"Config file: {config.CONFIG_FILE}")
    for key, value in vars(settings).items():
        typer.echo(f"  {key} = {value}")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Setting name."),
    value: str = typer.Argument(..., help="New value (comma-separated for lists)."),
):
    """Change one setting and save it."""
    settings: Settings = load_settings()
    try:
        parsed = parse_setting(key, value)
    except KeyError:
        raise typer.BadParameter(f"Unknown setting '{key}'.")
    except ValueError:
        raise typer.BadParameter(f"Invalid value for '{key}': {value}")
    setattr(settings, key, parsed)
    save_settings(settings)
    typer.echo(f"Set {key} = {parsed}")


if __name__ == "__main__":
    app()
