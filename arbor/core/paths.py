from __future__ import annotations

"""Dotted-path addressing.

Grammar::

    path     := [".Simulations"] ["[" TypeName "]"] segment ("." segment)*

``.Simulations`` re-roots at the top-level container. ``[TypeName]``
re-roots at the first in-scope node of that type. Each segment is looked up
as a child name first, then as an attribute; once a segment yields a plain
value (not a node) the remaining segments are attribute lookups only.
"""

from collections.abc import Mapping
from typing import Any

from arbor.core.errors import UnknownTypeNameError
from arbor.core.node import Node
from arbor.core.registry import resolve_type_name
from arbor.core.schema import plain_fields_of
from arbor.core.scope import find, find_all
from arbor.core.zone import Simulations
from arbor.utils.constants import ROOT_PREFIX

__all__ = ["get", "value_of"]


def value_of(obj: Any, name: str) -> Any:
    """Generic attribute lookup: mapping key, else attribute; ``None`` if absent."""
    if isinstance(obj, Mapping):
        return obj.get(name)
    if isinstance(obj, Node) and name in plain_fields_of(type(obj)):
        return getattr(obj, name)
    return getattr(obj, name, None)


def _has_root_prefix(path: str) -> bool:
    if not path.startswith(ROOT_PREFIX):
        return False
    rest = path[len(ROOT_PREFIX):]
    return rest == "" or rest.startswith(".")


def get(node: Node, path: str) -> Any:
    """Resolve *path* relative to *node*. Returns ``None`` when any segment is missing.

    Raises :class:`UnknownTypeNameError` for an unresolvable ``[TypeName]``
    or when nothing of that type is in scope.
    """
    obj: Any = node
    if _has_root_prefix(path):
        obj = node.locate_parent(Simulations)
        path = path[len(ROOT_PREFIX):]
        if obj is None:
            return None
    elif path.startswith("[") and "]" in path:
        pos = path.index("]")
        type_name = path[1:pos]
        path = path[pos + 1:]
        node_type = resolve_type_name(type_name)
        if node_type is not None:
            obj = find(node, node_type)
        else:
            # Compiled script classes are not registered; match them by class name.
            obj = next((n for n in find_all(node) if type(n).__name__ == type_name), None)
            if obj is None:
                raise UnknownTypeNameError(node.full_path, type_name, f"Unknown type name: {type_name}")
        if obj is None:
            raise UnknownTypeNameError(
                node.full_path,
                type_name,
                f"Cannot find type: {type_name} while doing a get for: {path}",
            )

    for segment in path.split("."):
        if not segment:
            continue
        local = obj.locate_child(segment) if isinstance(obj, Node) else None
        if local is None:
            local = value_of(obj, segment)
            if local is None:
                return None
        obj = local
    return obj
