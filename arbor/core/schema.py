from __future__ import annotations

"""Per-type schema tables for arbor nodes.

A node never stores an explicit list of children. Instead its pydantic
fields are scanned once per class: fields typed as a node (single slot) or
as a list of nodes (list slot) are its *slots*, everything else is a plain
attribute. Private attributes annotated with :class:`Link` are dependency
declarations filled in by :mod:`arbor.core.links`.

The tables are computed lazily and cached per class, so repeated
``children``/``add``/``remove`` calls never re-inspect annotations.
"""

import inspect
import types
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated, Any, List, Optional, Tuple, Union, get_args, get_origin

__all__ = [
    "Link",
    "Slot",
    "LinkDeclaration",
    "slots_of",
    "plain_fields_of",
    "links_of",
]


class Link:  # noqa: D101 – marker used inside ``Annotated[...]``
    def __repr__(self) -> str:
        return "Link()"


@dataclass(frozen=True)
class Slot:
    """A named attachment point for one child (single) or many (list)."""

    name: str
    type: type
    is_list: bool = False

    def accepts(self, child: Any) -> bool:
        """Return True when *child* may be stored here (assignability)."""
        return isinstance(child, self.type)

    def matches(self, child: Any) -> bool:
        """Placement rule used by ``Node.add``: exact type for single slots."""
        if self.is_list:
            return isinstance(child, self.type)
        return type(child) is self.type


@dataclass(frozen=True)
class LinkDeclaration:  # noqa: D101
    name: str
    type: type


# --------------------------------------------------------------------------- #
# Annotation helpers
# --------------------------------------------------------------------------- #

def _is_node_type(tp: Any) -> bool:
    from arbor.core.node import Node  # local import to avoid cycles

    return isinstance(tp, type) and issubclass(tp, Node)


def _strip_optional(tp: Any) -> Any:
    """``Optional[X]`` / ``X | None`` -> ``X``; anything else unchanged."""
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _slot_for(name: str, annotation: Any) -> Optional[Slot]:
    tp = _strip_optional(annotation)
    if get_origin(tp) is Annotated:
        tp = _strip_optional(get_args(tp)[0])
    if _is_node_type(tp):
        return Slot(name, tp, is_list=False)
    if get_origin(tp) in (list, List):
        args = get_args(tp)
        if args and _is_node_type(args[0]):
            return Slot(name, args[0], is_list=True)
    return None


# --------------------------------------------------------------------------- #
# Cached per-class tables
# --------------------------------------------------------------------------- #

@lru_cache(maxsize=None)
def slots_of(cls: type) -> Tuple[Slot, ...]:
    """Return the slots of *cls* in field declaration order."""
    slots: List[Slot] = []
    for name, info in cls.model_fields.items():
        slot = _slot_for(name, info.annotation)
        if slot is not None:
            slots.append(slot)
    return tuple(slots)


@lru_cache(maxsize=None)
def plain_fields_of(cls: type) -> Tuple[str, ...]:
    """Return the names of fields that are not slots."""
    slot_names = {s.name for s in slots_of(cls)}
    return tuple(name for name in cls.model_fields if name not in slot_names)


@lru_cache(maxsize=None)
def links_of(cls: type) -> Tuple[LinkDeclaration, ...]:
    """Return the ``Link``-annotated private attributes of *cls* (base classes first)."""
    declared: dict[str, LinkDeclaration] = {}
    private = getattr(cls, "__private_attributes__", {})
    for klass in reversed(cls.__mro__):
        if not _is_node_type(klass):
            continue
        for name, tp in inspect.get_annotations(klass, eval_str=True).items():
            if name not in private:
                continue
            if get_origin(tp) is not Annotated:
                continue
            base, *metadata = get_args(tp)
            if any(isinstance(m, Link) for m in metadata):
                declared[name] = LinkDeclaration(name, _strip_optional(base))
    return tuple(declared.values())
