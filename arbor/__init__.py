"""arbor: introspective component trees with scoped lookup and live scripts.

Main components:
* `Node`: Base class; node-typed fields are its child slots
* `Zone` / `Simulation` / `Simulations`: Scope boundaries and the top container
* `Link`: Marks a private attribute as a dependency filled by `resolve_links`
* `Manager`: Node whose child is compiled from source text at runtime
"""

# Version info
__version__ = "0.1.0"

# Core components
from arbor.core.errors import (
    ArborError,
    SlotNotFoundError,
    UnresolvedDependencyError,
    UnknownTypeNameError,
    CompileError,
    CyclicPlacementError,
)
from arbor.core.schema import Link, Slot
from arbor.core.node import Node
from arbor.core.zone import Zone, Simulation, Simulations
from arbor.core.links import resolve_links
from arbor.core.registry import register_node_type, resolve_type_name, registered_types

# Script component
from arbor.scripting import Manager, PythonScriptCompiler, get_compiler, set_compiler

# Persistence
from arbor.io.serializer import dumps, loads, save_tree, load_tree

# Export all important symbols
__all__ = [
    # Core classes
    "Node",
    "Zone",
    "Simulation",
    "Simulations",
    "Link",
    "Slot",
    "Manager",
    "PythonScriptCompiler",

    # Functions
    "resolve_links",
    "register_node_type",
    "resolve_type_name",
    "registered_types",
    "get_compiler",
    "set_compiler",
    "dumps",
    "loads",
    "save_tree",
    "load_tree",

    # Errors
    "ArborError",
    "SlotNotFoundError",
    "UnresolvedDependencyError",
    "UnknownTypeNameError",
    "CompileError",
    "CyclicPlacementError",
]
