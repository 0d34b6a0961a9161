"""Tuple-based 3-vector helpers (pure Python, no FreeCAD dependency).

Every function takes and returns ``Vector3 = Tuple[float, float, float]``.
Shared by the vertex generator, the face triangulator, the mesh assembler
and the exporters.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence, Tuple

__all__ = [
    "Vector3",
    "ZERO",
    "add",
    "sub",
    "scale",
    "dot",
    "cross",
    "norm",
    "distance",
    "normalize",
    "mean",
    "rotate_x",
]

Vector3 = Tuple[float, float, float]

ZERO: Vector3 = (0.0, 0.0, 0.0)


def add(a: Vector3, b: Vector3) -> Vector3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def sub(a: Vector3, b: Vector3) -> Vector3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def scale(v: Vector3, s: float) -> Vector3:
    return (v[0] * s, v[1] * s, v[2] * s)


def dot(a: Vector3, b: Vector3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def cross(a: Vector3, b: Vector3) -> Vector3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def norm(v: Vector3) -> float:
    """Euclidean length of *v*."""
    return math.sqrt(dot(v, v))


def distance(a: Vector3, b: Vector3) -> float:
    return norm(sub(a, b))


def normalize(v: Vector3) -> Vector3:
    """Unit vector along *v*; raises for a zero-length input."""
    n = norm(v)
    if n <= 1e-12:
        raise ValueError("Cannot normalize zero-length vector")
    return (v[0] / n, v[1] / n, v[2] / n)


def mean(points: Iterable[Vector3]) -> Vector3:
    """Arithmetic mean of a non-empty point set."""
    sx = sy = sz = 0.0
    count = 0
    for x, y, z in points:
        sx += x
        sy += y
        sz += z
        count += 1
    if count == 0:
        raise ValueError("Cannot average an empty point set")
    return (sx / count, sy / count, sz / count)


def rotate_x(v: Sequence[float], angle_rad: float) -> Vector3:
    """Rotate *v* about the X axis by *angle_rad* (right-hand rule)."""
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    x, y, z = v
    return (x, y * c - z * s, y * s + z * c)
