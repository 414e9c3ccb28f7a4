from __future__ import annotations

"""Type-name registry for arbor nodes.

Every :class:`~arbor.core.node.Node` subclass registers itself here under its
unqualified class name when the class is created. Path lookups such as
``[Clock].Today`` and the YAML loader resolve names through this table.
"""

from typing import Dict, Optional, Type

from arbor.utils.logging import log

__all__ = [
    "register_node_type",
    "resolve_type_name",
    "get_node_type",
    "type_name_of",
    "registered_types",
]

# Global in-memory store of node types keyed by unqualified name.
_REGISTRY: Dict[str, type] = {}


def register_node_type(cls: type, name: str | None = None) -> type:  # noqa: D401
    """Register *cls* under *name* (defaults to the class name) and return it."""
    key = name or cls.__name__
    previous = _REGISTRY.get(key)
    if previous is not None and previous is not cls:
        log.debug("node type '%s' re-registered (%s -> %s)", key, previous.__module__, cls.__module__)
    _REGISTRY[key] = cls
    return cls


def resolve_type_name(name: str) -> Optional[type]:
    """Return the type registered under *name*, or ``None``."""
    return _REGISTRY.get(name.strip())


def get_node_type(name: str, path: str = "") -> type:
    cls = resolve_type_name(name)
    if cls is None:
        from arbor.core.errors import UnknownTypeNameError

        raise UnknownTypeNameError(path, name, f"Unknown type name: {name}")
    return cls


def type_name_of(cls: Type) -> str:
    """Return the name *cls* is registered under (falls back to ``__name__``)."""
    for key, value in _REGISTRY.items():
        if value is cls:
            return key
    return cls.__name__


def registered_types() -> Dict[str, type]:
    return dict(sorted(_REGISTRY.items()))
