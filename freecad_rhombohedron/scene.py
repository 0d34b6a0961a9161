"""Interaction and animation state for a group of rotating rhombohedra.

The scene owns no rendering resources. It keeps the rotation angle and the
pointer state explicitly, recomputes meshes from them on demand, and pushes
changes to whatever :class:`RenderTarget` is attached. A host (FreeCAD, a test,
a headless exporter) drives it by calling :meth:`RhombohedronScene.tick` with
the elapsed frame time and forwarding pointer events.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from . import vec3 as v3
from .meshes import DEFAULT_COLORS, FACE_COUNT, MeshDescriptor, generate_rhombohedron
from .rhombohedron import Variant

__all__ = [
    "ShapeSpec",
    "SceneState",
    "RenderTarget",
    "RhombohedronScene",
    "default_scene",
]

Vector3 = v3.Vector3


@dataclass(frozen=True, slots=True)
class ShapeSpec:
    variant: Variant
    position: Vector3
    scale: float = 5.0


@dataclass(slots=True)
class SceneState:
    rotation_x: float = 0.0
    active: bool = True
    hovered: bool = False


class RenderTarget(ABC):
    """What a renderer must offer the scene. Nothing else is ever touched."""

    @abstractmethod
    def show(self, meshes: Sequence[MeshDescriptor]) -> None:
        """Replace the displayed geometry with *meshes* (unrotated, group-local)."""

    @abstractmethod
    def apply_rotation(self, angle: float) -> None:
        """Rotate the whole group about its X axis to *angle* radians."""

    def set_highlight(self, on: bool) -> None:
        """Optional hover feedback."""


class RhombohedronScene:
    def __init__(
        self,
        shapes: Sequence[ShapeSpec],
        colors: Sequence[int] = DEFAULT_COLORS,
        group_position: Vector3 = (0.0, 0.0, -15.0),
        rotation_speed: float = 1.0,
        active: bool = True,
    ) -> None:
        if not shapes:
            raise ValueError("Scene needs at least one shape")
        if len(colors) < FACE_COUNT:
            raise ValueError(f"Need {FACE_COUNT} colors (one per face), got {len(colors)}")
        if not math.isfinite(rotation_speed):
            raise ValueError("Rotation speed must be finite")
        self.shapes: Tuple[ShapeSpec, ...] = tuple(shapes)
        self.colors: Tuple[int, ...] = tuple(colors)
        self.group_position = group_position
        self.rotation_speed = float(rotation_speed)
        self.state = SceneState(active=active)
        self._targets: List[RenderTarget] = []

    # -- geometry -----------------------------------------------------------

    def meshes(self, rotation_x: float | None = None) -> List[List[MeshDescriptor]]:
        """Meshes per shape, rotated by the current (or given) group angle."""

        angle = self.state.rotation_x if rotation_x is None else rotation_x
        return [
            generate_rhombohedron(shape.variant, shape.scale, shape.position, self.colors, angle)
            for shape in self.shapes
        ]

    def world_points(self) -> List[Vector3]:
        """Every mesh corner in scene coordinates (group translation applied)."""

        out: List[Vector3] = []
        for shape_meshes in self.meshes():
            for mesh in shape_meshes:
                out.extend(v3.add(p, self.group_position) for p in mesh.world_points())
        return out

    # -- renderer binding ---------------------------------------------------

    def attach(self, target: RenderTarget) -> None:
        self._targets.append(target)
        target.show([m for shape in self.meshes(rotation_x=0.0) for m in shape])
        target.apply_rotation(self.state.rotation_x)
        target.set_highlight(self.state.hovered)

    def detach(self, target: RenderTarget) -> None:
        self._targets = [t for t in self._targets if t is not target]

    # -- per-frame and pointer hooks ------------------------------------------

    def tick(self, delta: float) -> float:
        """Advance the animation by *delta* seconds; returns the current angle."""

        if not math.isfinite(delta) or delta < 0:
            raise ValueError(f"Frame delta must be a non-negative number, got {delta!r}")
        if self.state.active and delta:
            self.state.rotation_x = (self.state.rotation_x + delta * self.rotation_speed) % math.tau
            for target in self._targets:
                target.apply_rotation(self.state.rotation_x)
        return self.state.rotation_x

    def on_click(self) -> bool:
        self.state.active = not self.state.active
        logging.info("Rotation %s", "resumed" if self.state.active else "paused")
        return self.state.active

    def on_pointer_over(self) -> None:
        self._set_hovered(True)

    def on_pointer_out(self) -> None:
        self._set_hovered(False)

    def _set_hovered(self, hovered: bool) -> None:
        if self.state.hovered == hovered:
            return
        self.state.hovered = hovered
        for target in self._targets:
            target.set_highlight(hovered)


def default_scene(
    scale: float = 5.0,
    spacing: float = 8.0,
    variants: Sequence[Variant | str] = (Variant.OBTUSE, Variant.ACUTE),
    colors: Sequence[int] = DEFAULT_COLORS,
    group_position: Vector3 = (0.0, 0.0, -15.0),
    rotation_speed: float = 1.0,
    active: bool = True,
) -> RhombohedronScene:
    """Shapes laid out along X, centred on the group origin, first at +X.

    With the defaults this is an obtuse solid at (4, 0, 0) and an acute one at
    (-4, 0, 0), both scaled by 5.
    """

    parsed = [Variant.parse(v) for v in variants]
    count = len(parsed)
    shapes = [
        ShapeSpec(
            variant=variant,
            position=(spacing * ((count - 1) / 2 - i), 0.0, 0.0),
            scale=scale,
        )
        for i, variant in enumerate(parsed)
    ]
    return RhombohedronScene(
        shapes,
        colors=colors,
        group_position=group_position,
        rotation_speed=rotation_speed,
        active=active,
    )
