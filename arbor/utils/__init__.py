# This file makes the 'utils' directory a Python package.

"""arbor utilities."""

from .tree import iter_nodes, build_rich_tree

__all__ = [
    "iter_nodes",
    "build_rich_tree",
]
