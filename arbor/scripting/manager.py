from __future__ import annotations

"""Manager – a node whose single child is compiled from source text.

Assigning ``source_text`` rebuilds the embedded ``Script`` instance: the old
instance is snapshotted, the new source compiled and the snapshot replayed
onto the new class (matching fields keep their values, new fields take their
defaults, vanished fields are dropped). A failed compile leaves the old
instance in place.
"""

from typing import Annotated, Any, Dict, Optional, Type

from pydantic import PrivateAttr, ValidationError

from arbor.core.errors import CompileError
from arbor.core.node import Node
from arbor.core.schema import Link
from arbor.core.zone import Zone
from arbor.scripting.compiler import get_compiler, release
from arbor.utils.logging import log

__all__ = ["Manager"]

SCRIPT_KEY = "script"


class Manager(Node):  # noqa: D101
    source_text: str = ""
    embedded: Optional[Node] = None

    _zone: Annotated[Optional[Zone], Link()] = None
    _script_type: Optional[type] = PrivateAttr(default=None)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "source_text":
            self.rebuild(value)
            return
        super().__setattr__(name, value)

    # -------------------------------------------------- #

    @property
    def parent_zone(self) -> Optional[Zone]:
        return self._zone

    @property
    def script_type(self) -> Optional[type]:
        return self._script_type

    # -------------------------------------------------- #

    def rebuild(self, source_text: str | None = None, *, resolve_links: bool | None = None) -> Node:
        """Recompile and swap in a fresh ``Script`` instance; returns it.

        *resolve_links* defaults to resolving only when this manager is
        attached to a parent. Raises :class:`CompileError` without touching
        the current instance when the new source is unusable.
        """
        text = self.source_text if source_text is None else source_text

        from arbor.io.serializer import serialize_instance

        old = self.embedded
        snapshot = serialize_instance(old) if old is not None else None

        try:
            script_type = get_compiler().compile(text)
        except CompileError as e:
            raise CompileError(e.diagnostics, self.full_path) from e

        try:
            instance = self._instantiate(script_type, snapshot)
        except CompileError:
            release(script_type)
            raise

        previous_type = self._script_type
        if old is not None:
            self.remove(old)
        super().__setattr__("source_text", text)
        self._script_type = script_type
        if previous_type is not None and previous_type is not script_type:
            release(previous_type)
        self._place(self.slot("embedded"), instance)  # type: ignore[arg-type]
        log.debug("rebuilt script for %s (%s)", self.full_path, "from snapshot" if snapshot else "defaults")

        if resolve_links is None:
            resolve_links = self.parent is not None
        if resolve_links:
            from arbor.core.links import resolve_links as _resolve

            _resolve(instance)
        return instance

    def _instantiate(self, script_type: Type[Node], snapshot: Dict[str, Any] | None) -> Node:
        from arbor.io.serializer import deserialize_payload

        try:
            if snapshot is not None:
                return deserialize_payload(snapshot, script_type)
            return script_type()
        except ValidationError as e:
            raise CompileError(
                f"{script_type.__name__} cannot be constructed: {e}", self.full_path
            ) from e

    # -------------------------------------------------- #
    # Persistence
    # -------------------------------------------------- #

    def dump_state(self) -> Dict[str, Any]:
        from arbor.io.serializer import serialize_instance

        data: Dict[str, Any] = {"name": self.name, "source_text": self.source_text}
        if self.embedded is not None:
            data[SCRIPT_KEY] = serialize_instance(self.embedded)
        return data

    @classmethod
    def load_state(cls, data: Dict[str, Any]) -> "Manager":
        """Compile ``source_text`` and restore the script payload in one step."""
        manager = cls(name=data.get("name", ""), source_text=data.get("source_text", ""))
        if not manager.source_text:
            return manager

        try:
            script_type = get_compiler().compile(manager.source_text)
        except CompileError as e:
            raise CompileError(e.diagnostics, manager.full_path) from e
        try:
            instance = manager._instantiate(script_type, data.get(SCRIPT_KEY) or {})
        except CompileError:
            release(script_type)
            raise

        manager._script_type = script_type
        manager._place(manager.slot("embedded"), instance)  # type: ignore[arg-type]
        return manager
