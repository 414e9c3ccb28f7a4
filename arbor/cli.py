from __future__ import annotations

"""arbor Command Line Interface."""

import importlib
from pathlib import Path
from typing import List, Optional

import typer
import yaml
from jsonschema import ValidationError
from rich.markup import escape
from rich.table import Table

from arbor import Node, resolve_links
from arbor.core.errors import ArborError
from arbor.core.registry import get_node_type, registered_types
from arbor.io.serializer import load_tree
from arbor.utils.constants import SYMBOLS
from arbor.utils.logging import console, get as get_logger, show_tree

app = typer.Typer(
    name="arbor",
    help="CLI for arbor: inspect and query component trees.",
    add_completion=False,
)

_TREE_ARG = typer.Argument(..., help="YAML tree file.", exists=True, file_okay=True, dir_okay=False, readable=True)
_TYPES_OPT = typer.Option(None, "--types-module", "-t", help="Module defining node types (repeatable).")
_LOG_OPT = typer.Option("warning", "--log-level", help="debug, info, warning or error.")


def _prepare(types_modules: Optional[List[str]], log_level: str) -> None:
    get_logger(log_level)
    for module_name in types_modules or []:
        try:
            importlib.import_module(module_name)
        except ImportError as e:
            console.print(f"{SYMBOLS['error']}[bold red]Cannot import types module '{module_name}': {escape(str(e))}[/]")
            raise typer.Exit(code=1)


def _load(tree_file: Path) -> Node:
    try:
        return load_tree(tree_file)
    except (ArborError, ValidationError, yaml.YAMLError) as e:
        console.print(f"{SYMBOLS['error']}[bold red]Error loading {tree_file}: {escape(str(e))}[/]")
        raise typer.Exit(code=1)


def _origin(root: Node, node_path: Optional[str]) -> Node:
    if not node_path:
        return root
    origin = root.get(node_path) if not node_path.startswith(root.full_path) else _walk(root, node_path)
    if not isinstance(origin, Node):
        console.print(f"{SYMBOLS['error']}[bold red]Node '{node_path}' not found.[/]")
        raise typer.Exit(code=1)
    return origin


def _walk(root: Node, full_path: str) -> Optional[Node]:
    """Follow a ``full_path`` (``.Root.Child...``) from *root*."""
    node: Optional[Node] = root
    for name in full_path[len(root.full_path):].split("."):
        if name and node is not None:
            node = node.locate_child(name)
    return node


@app.command()
def show(
    tree_file: Path = _TREE_ARG,
    properties: bool = typer.Option(False, "--properties", "-p", help="Show plain attribute values."),
    types_modules: Optional[List[str]] = _TYPES_OPT,
    log_level: str = _LOG_OPT,
):
    """Print the node tree stored in a YAML file."""
    _prepare(types_modules, log_level)
    root = _load(tree_file)
    show_tree(root, show_properties=properties)


@app.command()
def check(
    tree_file: Path = _TREE_ARG,
    types_modules: Optional[List[str]] = _TYPES_OPT,
    log_level: str = _LOG_OPT,
):
    """Resolve every link in the tree and report the first failure."""
    _prepare(types_modules, log_level)
    root = _load(tree_file)
    try:
        resolve_links(root)
    except ArborError as e:
        console.print(f"{SYMBOLS['error']}[bold red]{escape(str(e))}[/]")
        raise typer.Exit(code=1)
    count = sum(1 for _ in root.descendants()) + 1
    console.print(f"{SYMBOLS['success']}[green]All links resolved ({count} nodes).[/]")


@app.command("get")
def get_value(
    tree_file: Path = _TREE_ARG,
    path: str = typer.Argument(..., help="Dotted path, e.g. .Simulations.Sim1.Field1.area"),
    origin: Optional[str] = typer.Option(None, "--from", help="Node to resolve relative to (full path)."),
    types_modules: Optional[List[str]] = _TYPES_OPT,
    log_level: str = _LOG_OPT,
):
    """Resolve a path and print the value it leads to."""
    _prepare(types_modules, log_level)
    root = _load(tree_file)
    start = _origin(root, origin)
    try:
        value = start.get(path)
    except ArborError as e:
        console.print(f"{SYMBOLS['error']}[bold red]{escape(str(e))}[/]")
        raise typer.Exit(code=1)
    if value is None:
        console.print(f"[yellow]Nothing found at '{path}'.[/]")
        raise typer.Exit(code=1)
    if isinstance(value, Node):
        console.print(value.full_path, soft_wrap=True)
    else:
        console.print(repr(value), markup=False, highlight=False, soft_wrap=True)


@app.command()
def find(
    tree_file: Path = _TREE_ARG,
    type_name: str = typer.Argument(..., help="Registered node type name."),
    origin: Optional[str] = typer.Option(None, "--from", help="Node whose scope is searched (full path)."),
    types_modules: Optional[List[str]] = _TYPES_OPT,
    log_level: str = _LOG_OPT,
):
    """List the full paths of in-scope nodes of a type."""
    _prepare(types_modules, log_level)
    root = _load(tree_file)
    start = _origin(root, origin)
    try:
        node_type = get_node_type(type_name, start.full_path)
    except ArborError as e:
        console.print(f"{SYMBOLS['error']}[bold red]{escape(str(e))}[/]")
        raise typer.Exit(code=1)
    matches = start.find_all(node_type)
    if not matches:
        console.print(f"[yellow]No {type_name} in scope of {start.full_path}.[/]")
        return
    for node in matches:
        console.print(node.full_path, soft_wrap=True)


@app.command()
def types(types_modules: Optional[List[str]] = _TYPES_OPT):
    """List all registered node types."""
    _prepare(types_modules, "warning")
    table = Table(title="Registered node types")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Module", style="magenta")
    table.add_column("Slots", style="green")
    from arbor.core.schema import slots_of

    for name, cls in registered_types().items():
        slots = ", ".join(f"{s.name}[{s.type.__name__}]" if s.is_list else f"{s.name}:{s.type.__name__}" for s in slots_of(cls))
        table.add_row(name, cls.__module__, slots or "-")
    console.print(table)


if __name__ == "__main__":
    app()
