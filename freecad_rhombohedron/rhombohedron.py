"""Vertex layouts for the acute and obtuse golden rhombohedra.

Both solids start from the golden rhombus ABCD of :mod:`constants` lying in
the plane ``z = -H/2``. The opposite face is the same rhombus lifted to
``z = +H/2`` and shifted sideways so every edge keeps unit length; the shift is
split evenly between the two faces (``±Q``) so the solid's centroid sits on
the origin.

Acute
    The face TBCU is ABCD rotated about BC until A lies directly above T on
    the long diagonal. ``BT = cos(α) / cos(γ)`` is the sideways shift along Y
    and ``H = √(1 - BT²)``.

Obtuse
    The top face is ABCD shifted by ``-2Q`` along X (the short diagonal) and
    lifted by ``H``, with ``AT = cos(α) / sin(θ)``, ``H = √(1 - AT²)`` and
    ``Q = X - AT/2``. The bottom and top faces are golden rhombi; the four
    side faces are unit rhombi with face angle ``acos(X²)``.

The emission order of :func:`build_vertices` is load-bearing: the face tables
in :mod:`faces` index into it.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from math import cos, sqrt
from typing import Any, List, Tuple

from . import vec3 as v3
from .constants import BE, GAMMA, X, Y

__all__ = [
    "Variant",
    "VariantGeometry",
    "RhombohedronSolid",
    "VERTEX_LABELS",
    "variant_geometry",
    "build_vertices",
    "build_rhombohedron",
]

Vector3 = v3.Vector3
Vertices = Tuple[Vector3, Vector3, Vector3, Vector3, Vector3, Vector3, Vector3, Vector3]


class Variant(enum.Enum):
    ACUTE = "ACUTE"
    OBTUSE = "OBTUSE"

    @classmethod
    def parse(cls, value: Any) -> "Variant":
        """Accept a ``Variant`` or its name in any case."""

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        choices = ", ".join(member.name for member in cls)
        raise ValueError(f"Unknown rhombohedron variant {value!r} (expected one of: {choices})")


# Labels per emission index. The top face is walked T, U, V, S for the obtuse
# solid and S, T, U, V for the acute one.
VERTEX_LABELS = {
    Variant.ACUTE: ("A", "B", "C", "D", "S", "T", "U", "V"),
    Variant.OBTUSE: ("A", "B", "C", "D", "T", "U", "V", "S"),
}


@dataclass(frozen=True, slots=True)
class VariantGeometry:
    """Height ``H`` between the two ABCD-parallel faces and centring offset ``Q``."""

    height: float
    offset: float


def _acute_geometry() -> VariantGeometry:
    bt = BE / cos(GAMMA)
    return VariantGeometry(height=sqrt(1 - bt * bt), offset=bt / 2)


def _obtuse_geometry() -> VariantGeometry:
    at = BE / Y
    return VariantGeometry(height=sqrt(1 - at * at), offset=X - at / 2)


_GEOMETRY = {
    Variant.ACUTE: _acute_geometry(),
    Variant.OBTUSE: _obtuse_geometry(),
}


def variant_geometry(variant: Variant | str) -> VariantGeometry:
    return _GEOMETRY[Variant.parse(variant)]


def _acute_vertices(g: VariantGeometry) -> Vertices:
    h, q = g.height / 2, g.offset
    return (
        (X, q, -h),  # A
        (0.0, q + Y, -h),  # B
        (-X, q, -h),  # C
        (0.0, q - Y, -h),  # D
        (X, -q, h),  # S
        (0.0, -q + Y, h),  # T
        (-X, -q, h),  # U
        (0.0, -q - Y, h),  # V
    )


def _obtuse_vertices(g: VariantGeometry) -> Vertices:
    h, q = g.height / 2, g.offset
    return (
        (q + X, 0.0, -h),  # A
        (q, Y, -h),  # B
        (q - X, 0.0, -h),  # C
        (q, -Y, -h),  # D
        (-q + X, 0.0, h),  # T
        (-q, Y, h),  # U
        (-q - X, 0.0, h),  # V
        (-q, -Y, h),  # S
    )


_VERTICES = {
    Variant.ACUTE: _acute_vertices(_GEOMETRY[Variant.ACUTE]),
    Variant.OBTUSE: _obtuse_vertices(_GEOMETRY[Variant.OBTUSE]),
}


def build_vertices(variant: Variant | str) -> Vertices:
    """Return the 8 unit-edge vertices of *variant* in emission order."""

    return _VERTICES[Variant.parse(variant)]


@dataclass(frozen=True, slots=True)
class RhombohedronSolid:
    variant: Variant
    vertices: Vertices

    @property
    def geometry(self) -> VariantGeometry:
        return _GEOMETRY[self.variant]

    @property
    def centroid(self) -> Vector3:
        return v3.mean(self.vertices)

    def label(self, index: int) -> str:
        return VERTEX_LABELS[self.variant][index]

    def scaled(self, factor: float) -> "RhombohedronSolid":
        return RhombohedronSolid(
            variant=self.variant,
            vertices=tuple(v3.scale(v, factor) for v in self.vertices),  # type: ignore[arg-type]
        )

    def edges(self) -> List[Tuple[int, int]]:
        """The 12 edges as sorted index pairs, read off the face table."""

        from .faces import face_loops

        edges = set()
        for loop in face_loops(self.variant):
            for i, a in enumerate(loop):
                b = loop[(i + 1) % len(loop)]
                edges.add((min(a, b), max(a, b)))
        return sorted(edges)


def build_rhombohedron(variant: Variant | str) -> RhombohedronSolid:
    variant = Variant.parse(variant)
    solid = RhombohedronSolid(variant=variant, vertices=_VERTICES[variant])
    logging.debug(
        "Built %s rhombohedron: H=%.6f Q=%.6f",
        variant.name,
        solid.geometry.height,
        solid.geometry.offset,
    )
    return solid
