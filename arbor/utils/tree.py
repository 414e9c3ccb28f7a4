from __future__ import annotations

"""Tree helpers (no side-effects).

iter_nodes(node) yields (depth, node) depth-first.
build_rich_tree(node) returns a Rich *Tree* ready for printing.
"""
from typing import Any, Iterator, Tuple

from arbor.utils.constants import STYLE, SYMBOLS

__all__ = [
    "iter_nodes",
    "build_rich_tree",
]


def iter_nodes(node: Any, depth: int = 0) -> Iterator[Tuple[int, Any]]:  # noqa: D401
    """Yield *(depth, node)* for *node* and every descendant (pre-order)."""
    yield depth, node
    for child in node.children:
        yield from iter_nodes(child, depth + 1)


def _label(node: Any, show_properties: bool) -> str:
    from rich.markup import escape

    from arbor.core.zone import Zone, Simulation
    from arbor.scripting.manager import Manager

    type_name = type(node).__name__
    if isinstance(node, Simulation):
        label = f"{SYMBOLS['simulation']}[{STYLE['zone']}]{escape(node.name)}[/]"
    elif isinstance(node, Zone):
        label = f"{SYMBOLS['zone']}[{STYLE['zone']}]{escape(node.name)}[/]"
    elif isinstance(node, Manager):
        label = f"{SYMBOLS['script']}[{STYLE['script']}]{escape(node.name)}[/]"
    else:
        label = f"[{STYLE['node']}]{escape(node.name)}[/]"
    label += f" [{STYLE['type']}]({type_name})[/]"

    if show_properties:
        props = {k: v for k, v in node.properties().items() if k != "name" and k != "source_text"}
        if props:
            pairs = escape(", ".join(f"{k}={v!r}" for k, v in props.items()))
            label += f" [{STYLE['type']}]{pairs}[/]"
    return label


def build_rich_tree(node: Any, *, show_properties: bool = False):  # noqa: D401 – return type is Tree
    """Return a *rich.tree.Tree* visualisation of *node* (side-effect-free)."""
    from rich.tree import Tree  # local import keeps this module lightweight

    tree = Tree(_label(node, show_properties))

    def _add(parent: "Tree", obj: Any):
        for child in obj.children:
            branch = parent.add(_label(child, show_properties))
            _add(branch, child)

    _add(tree, node)
    return tree
