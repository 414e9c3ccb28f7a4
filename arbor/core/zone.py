from __future__ import annotations

"""Scope boundaries: zones, simulations and the top-level container."""

from typing import List

from pydantic import Field

from arbor.core.node import Node

__all__ = ["Zone", "Simulation", "Simulations"]


class Zone(Node):
    """A locality boundary; lookups from inside a zone start here."""

    area: float = 1.0
    nodes: List[Node] = Field(default_factory=list)


class Simulation(Zone):  # noqa: D101 – one top-level run
    pass


class Simulations(Node):
    """The top-level container. Scope never leaks between its simulations."""

    simulations: List[Simulation] = Field(default_factory=list)
    nodes: List[Node] = Field(default_factory=list)
