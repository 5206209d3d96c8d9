"""Exception types raised while building a hexasphere or stepping a simulation."""

from __future__ import annotations

__all__ = [
    "HexasphereError",
    "InvalidArgument",
    "TopologyError",
    "NeighborCountError",
]


class HexasphereError(Exception):
    """Base class for every error raised by this package."""


class InvalidArgument(HexasphereError, ValueError):
    """A construction or simulation argument is outside its valid range."""


class TopologyError(HexasphereError, RuntimeError):
    """The mesh violated a construction invariant.

    This is a defect in the subdivision, not a recoverable condition: no
    partial topology is ever returned after it is raised.
    """


class NeighborCountError(TopologyError):
    """A tile did not resolve to exactly one neighbor per boundary vertex."""
