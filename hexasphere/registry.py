"""Face-adjacency registry.

Faces are triples of point IDs. The registry owns every face produced by the
mesh builder and remembers, for each point, which faces touch it. Tile
synthesis needs those faces walked around the point in order, so the registry
can also reorder them into a single adjacency cycle.
"""

from __future__ import annotations

from typing import Dict, List, Sequence

from .errors import TopologyError
from .icosahedron import Face

__all__ = ["FaceRegistry", "faces_adjacent", "order_faces"]


def faces_adjacent(a: Face, b: Face) -> bool:
    """Faces are adjacent when they have at least two corner points in common."""
    return len(set(a) & set(b)) >= 2


def order_faces(faces: Sequence[Face]) -> List[Face]:
    """Return *faces* reordered so consecutive entries share an edge.

    Starts from the first face and repeatedly takes the first remaining face
    adjacent to the last one placed. Raises ``TopologyError`` when the chain
    breaks; a consistent subdivision never produces such a point.
    """

    if not faces:
        return []

    remaining = list(faces)
    ordered = [remaining.pop(0)]
    while remaining:
        last = ordered[-1]
        for idx, face in enumerate(remaining):
            if faces_adjacent(face, last):
                ordered.append(remaining.pop(idx))
                break
        else:
            raise TopologyError(
                f"No face adjacent to {last} among {remaining}; "
                "adjacency cycle cannot be completed"
            )
    return ordered


class FaceRegistry:
    """Collects faces and indexes them by the points they touch."""

    def __init__(self) -> None:
        self.faces: List[Face] = []
        self._incident: Dict[int, List[int]] = {}

    def register(self, face: Face) -> int:
        """Store *face* against each of its three corners and return its index."""
        idx = len(self.faces)
        self.faces.append(face)
        for point_id in face:
            self._incident.setdefault(point_id, []).append(idx)
        return idx

    def faces_for(self, point_id: int) -> List[Face]:
        """Incident faces of *point_id* in registration order."""
        return [self.faces[idx] for idx in self._incident.get(point_id, ())]

    def faces_in_adjacency_order(self, point_id: int) -> List[Face]:
        return order_faces(self.faces_for(point_id))

    def __len__(self) -> int:
        return len(self.faces)
