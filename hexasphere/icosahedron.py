"""Utilities for constructing the base icosahedron mesh.

Vertex and face order are fixed: every point ID, and therefore every tile ID,
of a hexasphere is derived from this order, so changing it renumbers tiles.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import sqrt
from typing import List, Tuple

from .vec3 import Vector3, project_to_radius

__all__ = ["Face", "IcosahedronMesh", "regular_icosahedron"]

Face = Tuple[int, int, int]

PHI = (1 + sqrt(5)) / 2


@dataclass(slots=True)
class IcosahedronMesh:
    nodes: List[Vector3]
    faces: List[Face]


def regular_icosahedron() -> IcosahedronMesh:
    """Return an icosahedron with unit circumradius centered at the origin."""

    raw_nodes: List[Vector3] = [
        (1.0, PHI, 0.0),
        (-1.0, PHI, 0.0),
        (1.0, -PHI, 0.0),
        (-1.0, -PHI, 0.0),
        (0.0, 1.0, PHI),
        (0.0, -1.0, PHI),
        (0.0, 1.0, -PHI),
        (0.0, -1.0, -PHI),
        (PHI, 0.0, 1.0),
        (-PHI, 0.0, 1.0),
        (PHI, 0.0, -1.0),
        (-PHI, 0.0, -1.0),
    ]

    nodes = [project_to_radius(vec, 1.0) for vec in raw_nodes]

    # Each vertex takes part in exactly five faces.
    faces: List[Face] = [
        (0, 1, 4),
        (1, 9, 4),
        (4, 9, 5),
        (5, 9, 3),
        (2, 3, 7),
        (3, 2, 5),
        (7, 10, 2),
        (0, 8, 10),
        (0, 4, 8),
        (8, 2, 10),
        (8, 4, 5),
        (8, 5, 2),
        (1, 0, 6),
        (11, 1, 6),
        (3, 9, 11),
        (6, 10, 7),
        (3, 11, 7),
        (11, 6, 7),
        (6, 0, 10),
        (9, 1, 11),
    ]

    return IcosahedronMesh(nodes, faces)
