"""Tile synthesis: one pentagon or hexagon per mesh point."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .icosahedron import Face
from .mesh import GeodesicMesh
from .vec3 import Vector3, centroid, cross, dot, lerp, normalize, project_to_radius, sub

__all__ = [
    "MIN_HEX_SIZE",
    "GeoCoordinate",
    "Tile",
    "geo_coordinate",
    "synthesize_tile",
    "synthesize_tiles",
]

MIN_HEX_SIZE = 0.01


@dataclass(frozen=True, slots=True)
class GeoCoordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class Tile:
    """A single tile of the hexasphere.

    Attributes:
        index: Tile ID; equal to the ID of the mesh point it was built from.
        centre: Tile centre on the sphere surface.
        boundary: Polygon vertices on the sphere, in face-adjacency order.
        coordinate: Latitude/longitude of the centre in degrees.
        neighbors: IDs of adjacent tiles, one per boundary vertex. Empty until
            the neighbor resolver has run.
    """

    index: int
    centre: Vector3
    boundary: Tuple[Vector3, ...]
    coordinate: GeoCoordinate
    neighbors: Tuple[int, ...] = ()

    @property
    def is_pentagon(self) -> bool:
        return len(self.boundary) == 5

    @property
    def normal(self) -> Vector3:
        """Outward unit normal from the first three boundary vertices."""
        a, b, c = self.boundary[:3]
        return normalize(cross(sub(b, a), sub(c, a)))


def geo_coordinate(v: Vector3, radius: float) -> GeoCoordinate:
    """Latitude/longitude of *v*, treating +Y as the north pole.

    Longitude is the azimuth around Y measured from +Z towards +X and is
    wrapped to [-180, 180).
    """

    polar = math.acos(max(-1.0, min(1.0, v[1] / radius)))
    azimuth = math.atan2(v[0], v[2])
    longitude = (math.degrees(azimuth) + 180.0) % 360.0 - 180.0
    return GeoCoordinate(latitude=90.0 - math.degrees(polar), longitude=longitude)


def synthesize_tile(
    index: int,
    centre: Vector3,
    faces: Sequence[Face],
    corners: Sequence[Vector3],
    radius: float,
    hex_size: float,
) -> Tile:
    """Build the tile around *centre*.

    *faces* must already be in adjacency order and index into *corners*,
    which holds the projected mesh points. Each boundary vertex moves from the
    centre towards one face centroid by ``hex_size`` (clamped to
    [0.01, 1.0]) and is then put back on the sphere. The boundary always winds
    counter-clockwise seen from outside the sphere.
    """

    fraction = max(MIN_HEX_SIZE, min(1.0, hex_size))
    boundary: List[Vector3] = []
    for a, b, c in faces:
        face_centre = centroid(corners[a], corners[b], corners[c])
        boundary.append(project_to_radius(lerp(centre, face_centre, fraction), radius))
    if _winding(boundary, centre) < 0:
        boundary.reverse()
    return Tile(
        index=index,
        centre=centre,
        boundary=tuple(boundary),
        coordinate=geo_coordinate(centre, radius),
    )


def _winding(boundary: Sequence[Vector3], centre: Vector3) -> float:
    a, b, c = boundary[:3]
    return dot(cross(sub(b, a), sub(c, a)), centre)


def synthesize_tiles(mesh: GeodesicMesh, radius: float, hex_size: float) -> List[Tile]:
    corners = [project_to_radius(p, radius) for p in mesh.points]
    registry = mesh.registry
    return [
        synthesize_tile(
            idx,
            corners[idx],
            registry.faces_in_adjacency_order(idx),
            corners,
            radius,
            hex_size,
        )
        for idx in range(len(corners))
    ]
