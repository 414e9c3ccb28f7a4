from __future__ import annotations

"""Base Node class for the arbor composition tree."""

from typing import Any, Dict, Iterator, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, PrivateAttr

from arbor.core.errors import CyclicPlacementError, SlotNotFoundError
from arbor.core.registry import register_node_type
from arbor.core.schema import Slot, links_of, plain_fields_of, slots_of
from arbor.utils.constants import SCRIPT_MODULE_PREFIX
from arbor.utils.logging import log

__all__ = ["Node"]

N = TypeVar("N", bound="Node")


class Node(BaseModel):
    """A unit of the composition tree.

    Children are not stored in a dedicated list: any field typed as a node,
    or as a list of nodes, is a slot and whatever it holds is a child.
    ``parent`` is a non-owning back-reference maintained by :meth:`add`,
    :meth:`remove` and :func:`arbor.core.links.resolve_links`.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = ""

    _parent: Optional[Node] = PrivateAttr(default=None)
    _children: Optional[List[Node]] = PrivateAttr(default=None)

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        # Compiled scripts are owned by their Manager and stay out of the registry.
        if not cls.__module__.startswith(SCRIPT_MODULE_PREFIX + "."):
            register_node_type(cls)

    def model_post_init(self, __context: Any) -> None:
        if not self.name:
            self.name = type(self).__name__
        # Adopt children handed to the constructor.
        for child in self.children:
            child._parent = self

    # Identity semantics: two nodes are the same node only if they are the same object.
    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    # ------------------------------------------------------------------ #
    # Identity & navigation
    # ------------------------------------------------------------------ #

    @property
    def parent(self) -> Optional[Node]:
        return self._parent

    @property
    def full_path(self) -> str:
        """Dotted address, e.g. ``.Simulations.Sim1.Field1.Wheat``."""
        if self._parent is None:
            return "." + self.name
        return self._parent.full_path + "." + self.name

    @property
    def root(self) -> Node:
        node = self
        while node._parent is not None:
            node = node._parent
        return node

    @property
    def children(self) -> List[Node]:
        """All nodes currently held in this node's slots (declaration order)."""
        if self._children is None:
            found: List[Node] = []
            for slot in slots_of(type(self)):
                value = getattr(self, slot.name, None)
                if value is None:
                    continue
                if slot.is_list:
                    found.extend(v for v in value if isinstance(v, Node))
                elif isinstance(value, Node):
                    found.append(value)
            self._children = found
        return list(self._children)

    def descendants(self) -> Iterator[Node]:
        """Yield every node below this one, depth-first, pre-order."""
        for child in self.children:
            yield child
            yield from child.descendants()

    def locate_parent(self, node_type: Type[N]) -> Optional[N]:
        """Return the nearest node of *node_type*, starting with ``self``."""
        node: Optional[Node] = self
        while node is not None and not isinstance(node, node_type):
            node = node._parent
        return node

    def locate_child(self, name: str) -> Optional[Node]:
        for child in self.children:
            if child.name == name:
                return child
        return None

    def properties(self) -> Dict[str, Any]:
        """Plain (non-child) attribute values keyed by field name."""
        return {name: getattr(self, name) for name in plain_fields_of(type(self))}

    def slot(self, name: str) -> Optional[Slot]:
        for slot in slots_of(type(self)):
            if slot.name == name:
                return slot
        return None

    # ------------------------------------------------------------------ #
    # Mutation
    # ------------------------------------------------------------------ #

    def add(self, child: Node, resolve_links: bool = False) -> Node:
        """Place *child* into the first compatible slot and return it.

        Single slots match on exact runtime type, list slots on assignability;
        slots are tried in declaration order. ``child.parent`` is only set once
        the child has been placed. Adding a node below itself raises
        :class:`CyclicPlacementError` and changes nothing.
        """
        node: Optional[Node] = self
        while node is not None:
            if node is child:
                raise CyclicPlacementError(self.full_path, child.name)
            node = node._parent

        for slot in slots_of(type(self)):
            if slot.matches(child):
                break
        else:
            raise SlotNotFoundError(self.full_path, child.name, self.name)

        self._place(slot, child)
        log.debug("added %s to %s (slot '%s')", child.name, self.full_path, slot.name)

        if resolve_links:
            from arbor.core.links import resolve_links as _resolve  # local import to avoid cycles

            _resolve(child)
        return child

    def remove(self, child: Node) -> bool:
        """Detach *child* from whichever slot holds it. Returns False if none does."""
        self._invalidate()

        for slot in slots_of(type(self)):
            value = getattr(self, slot.name, None)
            if value is None:
                continue
            if slot.is_list:
                for i, item in enumerate(value):
                    if item is child:
                        del value[i]
                        child._parent = None
                        log.debug("removed %s from %s (slot '%s')", child.name, self.full_path, slot.name)
                        return True
            elif value is child:
                setattr(self, slot.name, None)
                child._parent = None
                log.debug("removed %s from %s (slot '%s')", child.name, self.full_path, slot.name)
                return True
        return False

    def _place(self, slot: Slot, child: Node) -> None:
        """Store *child* in *slot*; the only placement path besides ``add``."""
        if slot.is_list:
            items = getattr(self, slot.name, None)
            if items is None:
                items = []
                setattr(self, slot.name, items)
            items.append(child)
        else:
            displaced = getattr(self, slot.name, None)
            if displaced is not None and displaced is not child:
                displaced._parent = None
            setattr(self, slot.name, child)
        child._parent = self
        self._invalidate()

    def _invalidate(self) -> None:
        self._children = None

    # ------------------------------------------------------------------ #
    # Queries (delegating to the resolvers)
    # ------------------------------------------------------------------ #

    def find_all(self, node_type: Optional[type] = None) -> List[Node]:
        """Every node in scope, optionally restricted to *node_type*."""
        from arbor.core.scope import find_all

        return find_all(self, node_type)

    def find(self, key: type | str) -> Optional[Node]:
        """First in-scope node of type *key*, or named *key* when given a string."""
        from arbor.core.scope import find, find_by_name

        if isinstance(key, str):
            return find_by_name(self, key)
        return find(self, key)

    def get(self, path: str) -> Any:
        """Resolve a dotted *path* to a node or a value; ``None`` if it leads nowhere."""
        from arbor.core.paths import get

        return get(self, path)

    # ------------------------------------------------------------------ #
    # Dependencies
    # ------------------------------------------------------------------ #

    def resolve_dependencies(self) -> None:
        """Fill every ``Link`` declared on this node's type from its scope.

        Override to wire additional dependencies explicitly; call ``super()``
        to keep the declared links.
        """
        from arbor.core.errors import UnresolvedDependencyError
        from arbor.core.scope import find

        for link in links_of(type(self)):
            target = find(self, link.type)
            if target is None:
                raise UnresolvedDependencyError(self.full_path, link.name, link.type)
            setattr(self, link.name, target)
            log.debug("linked %s.%s -> %s", self.full_path, link.name, target.full_path)

    # ------------------------------------------------------------------ #
    # Persistence hooks (see arbor.io.serializer)
    # ------------------------------------------------------------------ #

    def dump_state(self) -> Dict[str, Any]:
        from arbor.io.serializer import serialize_instance

        return serialize_instance(self)

    @classmethod
    def load_state(cls: Type[N], data: Dict[str, Any]) -> N:
        from arbor.io.serializer import deserialize_payload

        return deserialize_payload(data, cls)


register_node_type(Node)
