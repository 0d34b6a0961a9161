"""Renderer-facing mesh descriptors for golden rhombohedra."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from . import vec3 as v3
from .faces import triangulate
from .rhombohedron import Variant, build_vertices

__all__ = [
    "FACE_COUNT",
    "FLOATS_PER_FACE",
    "DEFAULT_COLORS",
    "MeshDescriptor",
    "parse_color",
    "assemble_mesh",
    "generate_rhombohedron",
]

Vector3 = v3.Vector3

FACE_COUNT = 6
FLOATS_PER_FACE = 18

# Red, yellow, green, cyan, blue, magenta.
DEFAULT_COLORS: Tuple[int, ...] = (
    0xFF0000,
    0xFFFF00,
    0x00FF00,
    0x00FFFF,
    0x0000FF,
    0xFF00FF,
)


@dataclass(frozen=True, slots=True)
class MeshDescriptor:
    index: int
    vertices: Tuple[float, ...]
    color: int
    position: Vector3

    def points(self) -> List[Vector3]:
        """The 6 corner positions in local (unplaced) coordinates."""
        buf = self.vertices
        return [(buf[i], buf[i + 1], buf[i + 2]) for i in range(0, len(buf), 3)]

    def triangles(self) -> List[Tuple[Vector3, Vector3, Vector3]]:
        pts = self.points()
        return [(pts[i], pts[i + 1], pts[i + 2]) for i in range(0, len(pts), 3)]

    def world_points(self) -> List[Vector3]:
        return [v3.add(p, self.position) for p in self.points()]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "color": f"#{self.color:06x}",
            "position": list(self.position),
            "vertices": list(self.vertices),
        }


def parse_color(value: Any) -> int:
    """Accept ``0xRRGGBB`` ints or ``"#rrggbb"`` / ``"0xrrggbb"`` strings."""

    if isinstance(value, bool):
        raise ValueError(f"Invalid color {value!r}")
    if isinstance(value, int):
        color = value
    elif isinstance(value, str):
        text = value.strip().lower()
        if text.startswith("#"):
            text = text[1:]
        elif text.startswith("0x"):
            text = text[2:]
        if len(text) != 6:
            raise ValueError(f"Invalid color {value!r}")
        try:
            color = int(text, 16)
        except ValueError:
            raise ValueError(f"Invalid color {value!r}") from None
    else:
        raise ValueError(f"Invalid color {value!r}")
    if not 0 <= color <= 0xFFFFFF:
        raise ValueError(f"Color out of range: {value!r}")
    return color


def _check_scale(scale: float) -> float:
    value = float(scale)
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"Scale must be a positive finite number, got {scale!r}")
    return value


def _check_position(position: Sequence[float]) -> Vector3:
    if len(position) != 3:
        raise ValueError(f"Position must have 3 coordinates, got {len(position)}")
    return (float(position[0]), float(position[1]), float(position[2]))


def assemble_mesh(
    index: int,
    face: Sequence[float],
    scale: float,
    position: Sequence[float],
    color: int | str,
) -> MeshDescriptor:
    """Scale one triangulated face and tag it with placement and colour."""

    factor = _check_scale(scale)
    if len(face) != FLOATS_PER_FACE:
        raise ValueError(f"Face buffer must hold {FLOATS_PER_FACE} floats, got {len(face)}")
    return MeshDescriptor(
        index=index,
        vertices=tuple(c * factor for c in face),
        color=parse_color(color),
        position=_check_position(position),
    )


def _rotated(mesh: MeshDescriptor, angle: float) -> MeshDescriptor:
    coords: List[float] = []
    for p in mesh.points():
        coords.extend(v3.rotate_x(p, angle))
    return MeshDescriptor(
        index=mesh.index,
        vertices=tuple(coords),
        color=mesh.color,
        position=v3.rotate_x(mesh.position, angle),
    )


def generate_rhombohedron(
    variant: Variant | str,
    scale: float,
    position: Sequence[float],
    colors: Sequence[int | str],
    rotation_x: float = 0.0,
) -> List[MeshDescriptor]:
    """Return the 6 face meshes of a rhombohedron ready for a renderer.

    ``colors`` supplies one colour per face (``0xRRGGBB`` or ``"#rrggbb"``)
    and must hold at least 6 entries; surplus entries are ignored.
    ``rotation_x`` (radians) turns the whole placed solid about the X axis
    through the origin of ``position``, the way a rotating parent group would.
    """

    variant = Variant.parse(variant)
    factor = _check_scale(scale)
    offset = _check_position(position)
    if len(colors) < FACE_COUNT:
        raise ValueError(f"Need {FACE_COUNT} colors (one per face), got {len(colors)}")
    if not math.isfinite(rotation_x):
        raise ValueError(f"Rotation must be finite, got {rotation_x!r}")

    faces = triangulate(build_vertices(variant), variant)
    meshes = [
        assemble_mesh(index, face, factor, offset, colors[index])
        for index, face in enumerate(faces)
    ]
    if rotation_x:
        meshes = [_rotated(mesh, rotation_x) for mesh in meshes]
    logging.debug(
        "Generated %s meshes: scale=%.3f position=%s rotation_x=%.4f",
        variant.name,
        factor,
        offset,
        rotation_x,
    )
    return meshes
