"""
YAML persistence for arbor trees.

Every node is written as a mapping: a ``type`` key holding its registered
type name, its plain attributes, and one key per non-empty slot holding a
child mapping (single slot) or a list of child mappings (list slot)::

    type: Simulations
    name: Simulations
    simulations:
      - type: Simulation
        name: Sim1
        nodes:
          - type: Zone
            name: Field1

``serialize_instance`` / ``deserialize_payload`` work on one instance without
the type tag; the script component uses them to carry state across a rebuild.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Type, TypeVar

import yaml
from jsonschema import validate as _js_validate
from pydantic import ValidationError

from arbor.core.errors import UnknownTypeNameError
from arbor.core.node import Node
from arbor.core.registry import get_node_type, type_name_of
from arbor.core.schema import plain_fields_of, slots_of
from arbor.utils.logging import log

__all__ = [
    "serialize_instance",
    "deserialize_payload",
    "dump_node",
    "load_node",
    "dumps",
    "loads",
    "save_tree",
    "load_tree",
]

N = TypeVar("N", bound=Node)

TYPE_KEY = "type"


# --------------------------------------------------------------------------- #
# Instance primitives
# --------------------------------------------------------------------------- #

def serialize_instance(node: Node) -> Dict[str, Any]:
    """Return *node*'s plain attributes and children as a dict (no type tag)."""
    data: Dict[str, Any] = node.model_dump(mode="json", include=set(plain_fields_of(type(node))))
    for slot in slots_of(type(node)):
        value = getattr(node, slot.name, None)
        if value is None:
            continue
        if slot.is_list:
            if value:
                data[slot.name] = [dump_node(child) for child in value]
        else:
            data[slot.name] = dump_node(value)
    return data


def _construct(cls: Type[N], values: Dict[str, Any]) -> N:
    """Validate *values* into *cls*, dropping fields that no longer validate."""
    try:
        return cls.model_validate(values)
    except ValidationError as e:
        bad = {err["loc"][0] for err in e.errors() if err["loc"] and err["loc"][0] in values}
        if not bad:
            raise
        for name in sorted(bad):
            log.warning("dropping stored value for %s.%s: no longer valid", cls.__name__, name)
        return cls.model_validate({k: v for k, v in values.items() if k not in bad})


def deserialize_payload(data: Dict[str, Any], cls: Type[N]) -> N:
    """Best-effort rebuild of a *cls* instance from *data*.

    Keys unknown to *cls* are ignored, missing ones take the field defaults and
    children go back into the slot of the same name when it still accepts them.
    """
    values = {name: data[name] for name in plain_fields_of(cls) if name in data}
    node = _construct(cls, values)

    for slot in slots_of(cls):
        raw = data.get(slot.name)
        if raw is None:
            continue
        items: List[Any] = raw if slot.is_list else [raw]
        for item in items:
            child = load_node(item)
            if slot.accepts(child):
                node._place(slot, child)
            else:
                log.warning(
                    "dropping %s: slot %s.%s does not accept %s",
                    child.name, cls.__name__, slot.name, type(child).__name__,
                )
    return node


# --------------------------------------------------------------------------- #
# Tree level
# --------------------------------------------------------------------------- #

def dump_node(node: Node) -> Dict[str, Any]:
    """Return the tagged mapping for *node* and its subtree."""
    data: Dict[str, Any] = {TYPE_KEY: type_name_of(type(node))}
    data.update(node.dump_state())
    return data


def load_node(data: Dict[str, Any]) -> Node:
    """Inverse of :func:`dump_node`."""
    if not isinstance(data, dict) or TYPE_KEY not in data:
        raise UnknownTypeNameError("", str(data), f"Node entry without a '{TYPE_KEY}' key: {data!r}")
    cls = get_node_type(str(data[TYPE_KEY]))
    payload = {k: v for k, v in data.items() if k != TYPE_KEY}
    return cls.load_state(payload)


def dumps(node: Node) -> str:
    return yaml.safe_dump(dump_node(node), sort_keys=False, allow_unicode=True)


def loads(text: str) -> Node:  # noqa: D401
    """Load a tree from YAML *text*."""
    data = yaml.safe_load(text)
    _js_validate(instance=data, schema=_SCHEMA)
    return load_node(data)


def save_tree(node: Node, path: str | Path) -> None:
    log.info("saving %s to %s", node.full_path, path)
    Path(path).write_text(dumps(node), encoding="utf-8")


def load_tree(path: str | Path) -> Node:  # noqa: D401
    """Load YAML file at *path* into a node tree."""
    log.info("loading tree from %s", path)
    return loads(Path(path).read_text(encoding="utf-8"))


# --------------------------------------------------------------------------- #
# Minimal JSON Schema for YAML documents
# --------------------------------------------------------------------------- #

_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": [TYPE_KEY],
    "properties": {
        TYPE_KEY: {"type": "string"},
        "name": {"type": "string"},
    },
}
