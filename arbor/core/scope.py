from __future__ import annotations

"""Scope resolution for arbor nodes.

A node sees everything below its nearest enclosing :class:`Zone` (the zone
itself included), plus the immediate children of every ancestor above that
zone. At the top-level :class:`Simulations` container the other simulations
are skipped so one run never sees another.
"""

from typing import List, Optional, Type, TypeVar

from arbor.core.node import Node
from arbor.core.zone import Simulation, Simulations, Zone

__all__ = ["scope_root", "find_all", "find", "find_by_name"]

N = TypeVar("N", bound=Node)


def scope_root(node: Node) -> Node:
    """Return the zone bounding *node*'s scope (the tree root when there is none)."""
    zone = node.locate_parent(Zone)
    return zone if zone is not None else node.root


def find_all(node: Node, node_type: Optional[type] = None) -> List[Node]:
    """Return every node visible from *node*, deduplicated, in discovery order."""
    m = scope_root(node)
    in_scope: List[Node] = list(m.descendants())
    in_scope.append(m)

    while m.parent is not None:
        m = m.parent
        if isinstance(m, Simulations):
            in_scope.extend(c for c in m.children if not isinstance(c, Simulation))
        else:
            in_scope.extend(m.children)
        in_scope.append(m)

    seen: set[int] = set()
    result: List[Node] = []
    for candidate in in_scope:
        if node_type is not None and not isinstance(candidate, node_type):
            continue
        if id(candidate) in seen:
            continue
        seen.add(id(candidate))
        result.append(candidate)
    return result


def find(node: Node, node_type: Type[N]) -> Optional[N]:
    """First node of *node_type* in scope, or ``None``."""
    matches = find_all(node, node_type)
    return matches[0] if matches else None  # type: ignore[return-value]


def find_by_name(node: Node, name: str) -> Optional[Node]:
    """First node in scope called *name*, or ``None``."""
    for candidate in find_all(node):
        if candidate.name == name:
            return candidate
    return None
