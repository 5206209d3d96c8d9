"""Vector helpers for points on and around the hexasphere.

Points are plain ``Vector3 = Tuple[float, float, float]`` tuples so they can
be hashed, stored in frozen dataclasses and shared between threads.
"""

from __future__ import annotations

import math
from typing import Tuple

__all__ = [
    "Vector3",
    "ZERO",
    "norm",
    "normalize",
    "dot",
    "cross",
    "sub",
    "lerp",
    "distance",
    "squared_distance",
    "project_to_radius",
    "centroid",
]

Vector3 = Tuple[float, float, float]

ZERO: Vector3 = (0.0, 0.0, 0.0)


def norm(v: Vector3) -> float:
    x, y, z = v
    return math.sqrt(x * x + y * y + z * z)


def normalize(v: Vector3) -> Vector3:
    """Unit vector along *v*; ``ZERO`` for a degenerate input."""
    length = norm(v)
    if length <= 1e-12:
        return ZERO
    x, y, z = v
    return (x / length, y / length, z / length)


def dot(a: Vector3, b: Vector3) -> float:
    ax, ay, az = a
    bx, by, bz = b
    return ax * bx + ay * by + az * bz


def cross(a: Vector3, b: Vector3) -> Vector3:
    ax, ay, az = a
    bx, by, bz = b
    return (ay * bz - az * by, az * bx - ax * bz, ax * by - ay * bx)


def sub(a: Vector3, b: Vector3) -> Vector3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def lerp(a: Vector3, b: Vector3, t: float) -> Vector3:
    """Point at fraction *t* of the way from *a* to *b*."""
    return tuple(p + (q - p) * t for p, q in zip(a, b))  # type: ignore[return-value]


def squared_distance(a: Vector3, b: Vector3) -> float:
    return sum((q - p) * (q - p) for p, q in zip(a, b))


def distance(a: Vector3, b: Vector3) -> float:
    return math.sqrt(squared_distance(a, b))


def project_to_radius(v: Vector3, radius: float, percent: float = 1.0) -> Vector3:
    """Move *v* along its ray onto the sphere of *radius*, then scale by *percent*.

    *percent* is clamped to [0, 1]; at 1.0 the result lies on the surface.
    """
    length = norm(v)
    if length == 0:
        raise ValueError("Cannot project zero-length vector")
    ratio = radius / length * max(0.0, min(1.0, percent))
    x, y, z = v
    return (x * ratio, y * ratio, z * ratio)


def centroid(a: Vector3, b: Vector3, c: Vector3) -> Vector3:
    return tuple((p + q + r) / 3.0 for p, q, r in zip(a, b, c))  # type: ignore[return-value]
