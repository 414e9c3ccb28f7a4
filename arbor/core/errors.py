from __future__ import annotations

"""Exceptions raised by the arbor core.

Every error carries the ``full_path`` of the node that raised it so host
applications can point users at the offending part of the tree.
"""

from typing import Any

__all__ = [
    "ArborError",
    "SlotNotFoundError",
    "UnresolvedDependencyError",
    "UnknownTypeNameError",
    "CompileError",
    "CyclicPlacementError",
]


class ArborError(Exception):  # noqa: D101
    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}" if path else message)


class SlotNotFoundError(ArborError):
    """No slot on the parent accepts the child."""

    def __init__(self, path: str, child_name: str, parent_name: str = ""):
        self.child_name = child_name
        super().__init__(
            path, f"Cannot add model: {child_name} to parent model: {parent_name or path}"
        )


class UnresolvedDependencyError(ArborError):
    """A declared link found nothing of its type in scope."""

    def __init__(self, path: str, field: str, dependency_type: Any):
        self.field = field
        self.dependency_type = dependency_type
        type_name = getattr(dependency_type, "__name__", str(dependency_type))
        super().__init__(path, f"Cannot resolve link '{field}'. Model type is {type_name}")


class UnknownTypeNameError(ArborError):
    """A type name could not be mapped to a type, or nothing of that type is in scope."""

    def __init__(self, path: str, type_name: str, message: str | None = None):
        self.type_name = type_name
        super().__init__(path, message or f"Cannot find type: {type_name}")


class CompileError(ArborError):
    """Script source failed to compile or did not expose the expected class."""

    def __init__(self, diagnostics: str, path: str = ""):
        self.diagnostics = diagnostics
        super().__init__(path, f"Script compilation failed:\n{diagnostics}")


class CyclicPlacementError(ArborError):
    """The child is the parent itself or one of its ancestors."""

    def __init__(self, path: str, child_name: str):
        self.child_name = child_name
        super().__init__(path, f"Cannot add model: {child_name} below itself")
