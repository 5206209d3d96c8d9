"""Geodesic hexasphere tiles and Game of Life on their adjacency graph."""

from .errors import HexasphereError, InvalidArgument, NeighborCountError, TopologyError
from .life import SimulationState, generations, initial_state, life_rule, next_state
from .topology import Topology, build

__all__ = [
    "HexasphereError",
    "InvalidArgument",
    "NeighborCountError",
    "TopologyError",
    "SimulationState",
    "Topology",
    "build",
    "generations",
    "initial_state",
    "life_rule",
    "next_state",
]
