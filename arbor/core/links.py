from __future__ import annotations

"""Dependency (``Link``) resolution.

Resolution is an explicit pass: the host runs it once after assembling a
tree, or per child through ``Node.add(child, resolve_links=True)``.
"""

from arbor.core.node import Node
from arbor.utils.logging import log

__all__ = ["resolve_links"]


def resolve_links(node: Node) -> None:  # noqa: D401
    """Resolve *node*'s links, then those of its subtree (depth-first, pre-order).

    Raises :class:`~arbor.core.errors.UnresolvedDependencyError` on the first
    link that finds nothing in scope.
    """
    log.debug("resolving links for %s", node.full_path)
    node.resolve_dependencies()
    for child in node.children:
        child._parent = node
        resolve_links(child)
