import sys
import textwrap

import pytest

from arbor import (
    CompileError,
    Manager,
    Node,
    Simulation,
    Simulations,
    Zone,
    get_compiler,
    registered_types,
    resolve_links,
    set_compiler,
)
from arbor.scripting.compiler import PythonScriptCompiler
from arbor.utils.constants import SCRIPT_MODULE_PREFIX


def src(body: str) -> str:
    return textwrap.dedent(body)


SCRIPT_X = src(
    """
    from arbor import Node

    class Script(Node):
        x: int = 1
    """
)

SCRIPT_XY = src(
    """
    from arbor import Node

    class Script(Node):
        x: int = 1
        y: int = 2
    """
)

SCRIPT_LINKED = src(
    """
    from typing import Annotated, Optional
    from arbor import Link, Node, Zone

    class Script(Node):
        _zone: Annotated[Optional[Zone], Link()] = None

        @property
        def zone(self):
            return self._zone
    """
)


def _attached_manager():
    sims = Simulations()
    sim = sims.add(Simulation(name="Sim1"))
    field = sim.add(Zone(name="Field1"))
    manager = field.add(Manager(name="Script1"))
    return sims, field, manager


def test_construction_does_not_compile():
    manager = Manager(name="m", source_text=SCRIPT_X)
    assert manager.embedded is None
    assert manager.script_type is None


def test_assigning_source_builds_embedded_instance():
    manager = Manager(name="m")
    manager.source_text = SCRIPT_X
    script = manager.embedded
    assert script is not None
    assert type(script).__name__ == "Script"
    assert script.x == 1
    assert script.parent is manager
    assert manager.children == [script]
    assert manager.script_type is type(script)


def test_rebuild_keeps_shared_fields_and_defaults_new_ones():
    manager = Manager(name="m")
    manager.source_text = SCRIPT_X
    old = manager.embedded
    old.x = 7

    manager.source_text = SCRIPT_XY
    new = manager.embedded
    assert new is not old
    assert new.x == 7
    assert new.y == 2
    assert old.parent is None
    assert manager.source_text == SCRIPT_XY


def test_rebuild_drops_fields_missing_from_new_source():
    manager = Manager(name="m")
    manager.source_text = SCRIPT_XY
    manager.embedded.y = 9
    manager.source_text = SCRIPT_X
    assert manager.embedded.x == 1
    assert not hasattr(manager.embedded, "y")


def test_changed_field_type_falls_back_to_default():
    manager = Manager(name="m")
    manager.source_text = SCRIPT_X
    manager.embedded.x = 5
    manager.source_text = src(
        """
        from arbor import Node

        class Script(Node):
            x: list = ["default"]
        """
    )
    assert manager.embedded.x == ["default"]


def test_failed_compile_keeps_previous_instance():
    manager = Manager(name="m")
    manager.source_text = SCRIPT_X
    before = manager.embedded
    before.x = 3

    with pytest.raises(CompileError) as excinfo:
        manager.source_text = "class Script(:\n"

    assert "SyntaxError" in excinfo.value.diagnostics
    assert manager.embedded is before
    assert before.x == 3
    assert before.parent is manager
    assert manager.source_text == SCRIPT_X


def test_missing_script_class_is_a_compile_error():
    manager = Manager(name="m")
    with pytest.raises(CompileError, match="public class called Script"):
        manager.source_text = "from arbor import Node\n\nclass Other(Node):\n    pass\n"
    assert manager.embedded is None


def test_script_must_be_a_node():
    with pytest.raises(CompileError):
        PythonScriptCompiler().compile("class Script:\n    pass\n")


def test_errors_raised_by_script_body_are_reported():
    with pytest.raises(CompileError) as excinfo:
        PythonScriptCompiler().compile("raise ValueError('boom')\n")
    assert "boom" in excinfo.value.diagnostics


def test_script_without_defaults_cannot_be_built():
    manager = Manager(name="m")
    with pytest.raises(CompileError, match="cannot be constructed"):
        manager.source_text = "from arbor import Node\n\nclass Script(Node):\n    x: int\n"
    assert manager.embedded is None


def test_attached_rebuild_resolves_script_links():
    _, field, manager = _attached_manager()
    manager.source_text = SCRIPT_LINKED
    assert manager.embedded.zone is field


def test_detached_rebuild_skips_link_resolution():
    manager = Manager(name="m")
    manager.source_text = SCRIPT_LINKED
    assert manager.embedded.zone is None


def test_manager_links_to_its_zone():
    sims, field, manager = _attached_manager()
    manager.source_text = SCRIPT_X
    resolve_links(sims)
    assert manager.parent_zone is field


def test_script_instance_is_in_scope():
    _, field, manager = _attached_manager()
    manager.source_text = SCRIPT_X
    script = manager.embedded
    assert field.find(manager.script_type) is script
    assert field.get("Script1.Script.x") == 1


def test_custom_compiler_can_be_installed():
    class Fixed(Node):
        value: int = 42

    class FixedCompiler:
        def compile(self, source_text):
            return Fixed

    previous = set_compiler(FixedCompiler())
    try:
        manager = Manager(name="m")
        manager.source_text = "anything"
        assert isinstance(manager.embedded, Fixed)
        assert manager.embedded.value == 42
    finally:
        set_compiler(previous)
    assert get_compiler() is previous


def _script_modules():
    return {name for name in sys.modules if name.startswith(SCRIPT_MODULE_PREFIX + ".")}


def test_rebuild_releases_replaced_script_module():
    manager = Manager(name="m")
    manager.source_text = SCRIPT_X
    first = manager.script_type.__module__
    assert first in sys.modules

    before = _script_modules()
    for _ in range(5):
        manager.source_text = SCRIPT_XY
        manager.source_text = SCRIPT_X
    assert first not in sys.modules
    assert manager.script_type.__module__ in sys.modules
    assert len(_script_modules()) == len(before)


def test_unbuildable_script_module_is_released():
    before = _script_modules()
    manager = Manager(name="m")
    with pytest.raises(CompileError):
        manager.source_text = "from arbor import Node\n\nclass Script(Node):\n    x: int\n"
    assert _script_modules() == before


def test_script_classes_stay_out_of_the_registry():
    manager = Manager(name="m")
    manager.source_text = SCRIPT_X
    assert manager.script_type not in registered_types().values()


def test_bracket_lookup_finds_the_script_in_scope():
    sims = Simulations()
    sim = sims.add(Simulation(name="Sim1"))
    zone_a = sim.add(Zone(name="A"))
    zone_b = sim.add(Zone(name="B"))
    first = zone_a.add(Manager(name="MA"))
    second = zone_b.add(Manager(name="MB"))
    first.source_text = SCRIPT_X
    second.source_text = SCRIPT_XY
    second.embedded.x = 2

    assert zone_a.get("MA.Script.x") == 1
    assert zone_a.get("[Script].x") == 1
    assert zone_b.get("[Script].x") == 2
    assert zone_b.get("[Script].y") == 2
