"""Geodesic subdivision of the base icosahedron.

Every icosahedron face is split into ``num_divisions ** 2`` triangles. Points
created along a face edge are created a second time by the face on the other
side of that edge, so every new point goes through a :class:`PointArena`,
which hands back the existing ID when the coordinates already exist.
"""

from __future__ import annotations

import itertools
import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from . import icosahedron
from .errors import InvalidArgument
from .registry import FaceRegistry
from .vec3 import Vector3, lerp, squared_distance

__all__ = [
    "DEDUP_TOLERANCE",
    "StatusFn",
    "PointArena",
    "GeodesicMesh",
    "build_mesh",
    "expected_point_count",
    "make_reporter",
    "validate_divisions",
]

log = logging.getLogger(__name__)

StatusFn = Callable[[str], None]

# Distance under which two points of the unit-circumradius mesh are merged.
DEDUP_TOLERANCE = 1e-9
# Edge length of the spatial hash cells; must be larger than the tolerance.
CELL_SIZE = 1e-6


class PointArena:
    """Append-only point store with tolerance-based deduplication.

    The arena index of a point is its ID. Lookups go through a hash of
    quantized coordinates, so merging costs O(1) per point instead of a scan
    over every point created so far.
    """

    def __init__(self, tolerance: float = DEDUP_TOLERANCE, cell_size: float = CELL_SIZE) -> None:
        if not 0 < tolerance < cell_size:
            raise ValueError("tolerance must be positive and smaller than cell_size")
        self.tolerance = tolerance
        self.cell_size = cell_size
        self.points: List[Vector3] = []
        self._cells: Dict[Tuple[int, int, int], List[int]] = {}
        self._margin = tolerance / cell_size

    def add(self, vec: Vector3) -> int:
        """Return the ID of *vec*, creating a new point only if none matches."""
        existing = self.find(vec)
        if existing is not None:
            return existing
        idx = len(self.points)
        self.points.append(vec)
        key = tuple(math.floor(c / self.cell_size) for c in vec)
        self._cells.setdefault(key, []).append(idx)
        return idx

    def find(self, vec: Vector3) -> Optional[int]:
        limit = self.tolerance * self.tolerance
        for key in self._candidate_cells(vec):
            for idx in self._cells.get(key, ()):
                if squared_distance(self.points[idx], vec) <= limit:
                    return idx
        return None

    def _candidate_cells(self, vec: Vector3) -> Iterator[Tuple[int, int, int]]:
        # A neighbouring cell only needs checking when the coordinate sits
        # within the tolerance of that cell's boundary.
        axes = []
        for c in vec:
            q = c / self.cell_size
            base = math.floor(q)
            frac = q - base
            cells = [base]
            if frac < self._margin:
                cells.append(base - 1)
            elif frac > 1.0 - self._margin:
                cells.append(base + 1)
            axes.append(cells)
        return itertools.product(*axes)

    def __len__(self) -> int:
        return len(self.points)

    def __getitem__(self, idx: int) -> Vector3:
        return self.points[idx]


@dataclass(slots=True)
class GeodesicMesh:
    num_divisions: int
    points: List[Vector3]
    registry: FaceRegistry

    @property
    def faces(self) -> List[icosahedron.Face]:
        return self.registry.faces

    def summary(self) -> str:
        return f"{len(self.points)} points / {len(self.faces)} faces"


def expected_point_count(num_divisions: int) -> int:
    return 10 * num_divisions * num_divisions + 2


def validate_divisions(num_divisions: int) -> None:
    if isinstance(num_divisions, bool) or not isinstance(num_divisions, int):
        raise InvalidArgument(f"num_divisions must be an integer, got {num_divisions!r}")
    if num_divisions < 1:
        raise InvalidArgument(f"num_divisions must be at least 1, got {num_divisions}")


def make_reporter(status: StatusFn | None) -> StatusFn:
    """Wrap an optional status callback so every message is also logged."""

    def report(message: str) -> None:
        log.debug(message)
        if status is not None:
            status(message)

    return report


def build_mesh(num_divisions: int, status: StatusFn | None = None) -> GeodesicMesh:
    """Subdivide every icosahedron face ``num_divisions`` times.

    For face (A, B, C) the edges A→B and A→C are split into ``num_divisions``
    segments. Row ``i`` is then the strip of ``i + 1`` points between the
    ``i``-th points of those two edges, and triangles are stitched between
    consecutive rows.
    """

    validate_divisions(num_divisions)
    report = make_reporter(status)

    base = icosahedron.regular_icosahedron()
    arena = PointArena()
    for node in base.nodes:
        arena.add(node)

    registry = FaceRegistry()
    face_total = len(base.faces)
    for fidx, (ia, ib, ic) in enumerate(base.faces, start=1):
        started = time.perf_counter()
        report(f"Starting computation of face {fidx} of {face_total}")

        left = _subdivide_edge(arena, ia, ib, num_divisions)
        right = _subdivide_edge(arena, ia, ic, num_divisions)
        bottom = [ia]
        for i in range(1, num_divisions + 1):
            prev = bottom
            bottom = _subdivide_edge(arena, left[i], right[i], i)
            for j in range(i):
                registry.register((prev[j], bottom[j], bottom[j + 1]))
                if j > 0:
                    registry.register((prev[j - 1], prev[j], bottom[j]))

        elapsed = time.perf_counter() - started
        report(f"Face {fidx} of {face_total}: computation time {elapsed:.4f}s")

    mesh = GeodesicMesh(num_divisions=num_divisions, points=arena.points, registry=registry)
    log.info("Subdivision (divisions=%d): %s", num_divisions, mesh.summary())
    return mesh


def _subdivide_edge(arena: PointArena, start: int, end: int, count: int) -> List[int]:
    """IDs of ``count + 1`` evenly spaced points from *start* to *end* inclusive."""

    a = arena[start]
    b = arena[end]
    segment = [start]
    for i in range(1, count):
        segment.append(arena.add(lerp(a, b, i / count)))
    segment.append(end)
    return segment
