"""Tile adjacency from nearest-neighbour queries over tile centres.

On a geodesic sphere the tiles that share an edge with a tile are exactly its
nearest centres, so adjacency is resolved with a k-d tree instead of being
traced through the mesh.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import FrozenSet, List, Mapping, Sequence, Tuple

import numpy as np
from scipy.spatial import cKDTree

from .errors import NeighborCountError
from .tiles import Tile

__all__ = ["TileNeighborMap", "resolve_neighbor_ids", "build_neighbor_map"]

log = logging.getLogger(__name__)

TileNeighborMap = Mapping[int, FrozenSet[int]]


def resolve_neighbor_ids(tiles: Sequence[Tile]) -> List[Tuple[int, ...]]:
    """Return, per tile, the IDs of its neighbours ordered nearest first.

    Each tile asks for ``len(boundary) + 1`` centres; the extra one is the
    tile itself at distance zero and is dropped. Raises
    ``NeighborCountError`` when a tile cannot get one neighbour per boundary
    vertex.
    """

    if not tiles:
        return []
    for position, tile in enumerate(tiles):
        if tile.index != position:
            raise NeighborCountError(
                f"Tile at position {position} has index {tile.index}; tiles must be in ID order"
            )

    centres = np.asarray([tile.centre for tile in tiles], dtype=float)
    tree = cKDTree(centres)
    k = min(max(len(tile.boundary) for tile in tiles) + 1, len(tiles))
    _, indices = tree.query(centres, k=k)
    indices = np.asarray(indices).reshape(len(tiles), k)

    result: List[Tuple[int, ...]] = []
    for tile in tiles:
        wanted = len(tile.boundary)
        candidates = [int(i) for i in indices[tile.index][: wanted + 1]]
        if tile.index not in candidates:
            raise NeighborCountError(f"Tile {tile.index} is not its own nearest centre")
        candidates.remove(tile.index)
        if len(candidates) != wanted:
            raise NeighborCountError(
                f"Tile {tile.index} has {wanted} boundary vertices but "
                f"{len(candidates)} neighbours (mesh too coarse?)"
            )
        result.append(tuple(candidates))
    log.info("Resolved neighbours for %d tiles (k=%d)", len(tiles), k)
    return result


def build_neighbor_map(neighbor_ids: Sequence[Sequence[int]]) -> TileNeighborMap:
    """Freeze per-tile neighbour lists into a read-only ID → ID-set mapping."""
    return MappingProxyType({idx: frozenset(ids) for idx, ids in enumerate(neighbor_ids)})
