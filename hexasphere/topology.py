"""Construction entry point and the immutable topology it produces."""

from __future__ import annotations

import logging
import math
import time
from collections import Counter
from dataclasses import dataclass, replace
from typing import Dict, FrozenSet, Iterator, List, Tuple

from . import mesh as mesh_builder
from .errors import InvalidArgument
from .mesh import StatusFn
from .neighbors import TileNeighborMap, build_neighbor_map, resolve_neighbor_ids
from .tiles import Tile, synthesize_tiles
from .vec3 import norm

__all__ = [
    "Topology",
    "build",
    "validate_build_arguments",
    "validate_topology",
]

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Topology:
    """Tiles plus their neighbour graph, fixed for a given division count.

    Safe to share between threads: nothing in it is ever mutated after
    :func:`build` returns.
    """

    radius: float
    num_divisions: int
    hex_size: float
    tiles: Tuple[Tile, ...]
    neighbor_map: TileNeighborMap

    def __iter__(self) -> Iterator[Tile]:
        return iter(self.tiles)

    def __len__(self) -> int:
        return len(self.tiles)

    def __getitem__(self, tile_id: int) -> Tile:
        return self.tiles[tile_id]

    def neighbors(self, tile_id: int) -> FrozenSet[int]:
        return self.neighbor_map[tile_id]

    def cells(self) -> Iterator[Tuple[int, FrozenSet[int]]]:
        """Yield ``(tile_id, neighbor_ids)`` in tile order."""
        for tile in self.tiles:
            yield tile.index, self.neighbor_map[tile.index]

    @property
    def pentagons(self) -> List[Tile]:
        return [tile for tile in self.tiles if tile.is_pentagon]

    def summary(self) -> str:
        return (
            f"{len(self.tiles)} tiles ({len(self.pentagons)} pentagons) "
            f"at {self.num_divisions} divisions"
        )


def validate_build_arguments(radius: float, num_divisions: int, hex_size: float) -> None:
    if not isinstance(radius, (int, float)) or isinstance(radius, bool):
        raise InvalidArgument(f"radius must be a number, got {radius!r}")
    if not math.isfinite(radius) or radius <= 0:
        raise InvalidArgument(f"radius must be positive and finite, got {radius}")
    mesh_builder.validate_divisions(num_divisions)
    if not isinstance(hex_size, (int, float)) or isinstance(hex_size, bool):
        raise InvalidArgument(f"hex_size must be a number, got {hex_size!r}")
    if not 0 < hex_size <= 1:
        raise InvalidArgument(f"hex_size must be within (0, 1], got {hex_size}")


def build(
    radius: float,
    num_divisions: int,
    hex_size: float,
    status: StatusFn | None = None,
) -> Topology:
    """Build the hexasphere topology.

    ``status``, when given, receives human-readable progress messages while
    this call runs and is not retained afterwards. Invalid arguments raise
    ``InvalidArgument`` before any work is done; broken adjacency raises
    ``TopologyError``.
    """

    validate_build_arguments(radius, num_divisions, hex_size)
    report = mesh_builder.make_reporter(status)
    started = time.perf_counter()

    report("Hexasphere building tiles array.")
    geodesic = mesh_builder.build_mesh(num_divisions, status=status)
    tiles = synthesize_tiles(geodesic, float(radius), float(hex_size))

    report(f"Calculating neighborhoods for all {len(tiles)} tiles")
    neighbor_ids = resolve_neighbor_ids(tiles)
    tiles = [replace(tile, neighbors=ids) for tile, ids in zip(tiles, neighbor_ids)]

    topology = Topology(
        radius=float(radius),
        num_divisions=num_divisions,
        hex_size=float(hex_size),
        tiles=tuple(tiles),
        neighbor_map=build_neighbor_map(neighbor_ids),
    )
    elapsed = time.perf_counter() - started
    vertex_count = sum(len(tile.boundary) for tile in tiles)
    report(
        f"Computation time {elapsed:.4f}s for {num_divisions} divisions yielding "
        f"{len(tiles)} tiles; vertices: {vertex_count}"
    )
    log.info("Topology summary: %s", topology.summary())
    return topology


def validate_topology(topology: Topology, tolerance: float = 1e-9) -> Dict[str, object]:
    """Check the structural laws of a built topology and log anything off.

    Returns a report dict; nothing is raised so callers can decide what to do
    with a bad report.
    """

    expected = mesh_builder.expected_point_count(topology.num_divisions)
    radius = topology.radius

    radius_errors = [abs(norm(tile.centre) - radius) for tile in topology.tiles]
    radius_errors.extend(
        abs(norm(vertex) - radius) for tile in topology.tiles for vertex in tile.boundary
    )
    max_radius_error = max(radius_errors) if radius_errors else 0.0

    valence = Counter(len(topology.neighbors(tile.index)) for tile in topology.tiles)
    mismatches = [
        tile.index
        for tile in topology.tiles
        if len(topology.neighbors(tile.index)) != len(tile.boundary)
    ]
    asymmetric: List[Tuple[int, int]] = [
        (tile_id, other)
        for tile_id, ids in topology.cells()
        for other in sorted(ids)
        if tile_id not in topology.neighbors(other)
    ]
    pentagon_count = len(topology.pentagons)

    if len(topology) != expected:
        log.error("Tile count %d does not match expected %d", len(topology), expected)
    if pentagon_count != 12:
        log.error("Found %d pentagons, expected 12", pentagon_count)
    if max_radius_error > tolerance * max(1.0, radius):
        log.warning("Max radius deviation %.3g exceeds tolerance", max_radius_error)
    if mismatches:
        log.error("%d tiles have a neighbour count mismatch (first 5): %s", len(mismatches), mismatches[:5])
    if asymmetric:
        log.error("%d asymmetric neighbour pairs (first 5): %s", len(asymmetric), asymmetric[:5])
    log.info("Neighbour count distribution: %s", sorted(valence.items()))

    return {
        "tile_count": len(topology),
        "expected_tile_count": expected,
        "pentagon_count": pentagon_count,
        "max_radius_error": max_radius_error,
        "valence_distribution": dict(valence),
        "neighbor_count_mismatches": mismatches,
        "asymmetric_pairs": asymmetric,
    }
