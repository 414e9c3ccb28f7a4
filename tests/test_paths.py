from typing import Dict

import pytest

from arbor import Node, Simulation, Simulations, UnknownTypeNameError, Zone


class Weather(Node):
    rain: float = 12.5
    station: Dict[str, str] = {"id": "AU-001"}


class Wheat(Node):
    cultivar: str = "hartog"


class Unplaced(Node):
    pass


def _build():
    sims = Simulations()
    sim = sims.add(Simulation(name="Sim1"))
    weather = sim.add(Weather(name="Met"))
    field = sim.add(Zone(name="Field1", area=2.5))
    wheat = field.add(Wheat(name="Wheat"))
    return sims, sim, weather, field, wheat


def test_absolute_path_from_any_node():
    sims, _, weather, _, wheat = _build()
    assert weather.get(".Simulations.Sim1.Field1.Wheat") is wheat
    assert wheat.get(".Simulations") is sims


def test_missing_segment_returns_none():
    _, _, weather, _, _ = _build()
    assert weather.get(".Simulations.Sim1.Field2.Wheat") is None
    assert weather.get(".Simulations.Sim1.Field1.Barley") is None


def test_relative_path_and_attribute_fallback():
    _, sim, _, _, wheat = _build()
    assert sim.get("Field1.Wheat") is wheat
    assert sim.get("Field1.area") == 2.5
    assert sim.get("Field1.Wheat.cultivar") == "hartog"
    assert sim.get("Field1.Wheat.full_path") == ".Simulations.Sim1.Field1.Wheat"


def test_empty_segments_are_skipped():
    _, sim, _, _, wheat = _build()
    assert sim.get("..Field1..Wheat.") is wheat


def test_values_beyond_nodes_use_attribute_lookup():
    _, sim, _, _, _ = _build()
    assert sim.get("Met.station.id") == "AU-001"
    assert sim.get("Met.cultivar") is None
    assert sim.get("Field1.Wheat.cultivar.upper") is not None


def test_bracketed_type_reroots_at_found_node():
    _, _, _, _, wheat = _build()
    assert wheat.get("[Weather].rain") == 12.5
    assert wheat.get("[Weather]").name == "Met"


def test_unknown_type_name_raises():
    _, _, _, _, wheat = _build()
    with pytest.raises(UnknownTypeNameError) as excinfo:
        wheat.get("[NoSuchType].x")
    assert excinfo.value.path == ".Simulations.Sim1.Field1.Wheat"


def test_type_not_in_scope_raises_same_error():
    _, _, _, _, wheat = _build()
    with pytest.raises(UnknownTypeNameError):
        wheat.get("[Unplaced].name")


def test_root_prefix_needs_a_container():
    lonely = Wheat(name="w")
    assert lonely.get(".Simulations.Sim1") is None


def test_root_prefix_must_end_on_segment_boundary():
    sims, _, _, _, _ = _build()
    assert sims.get(".SimulationsX") is None
