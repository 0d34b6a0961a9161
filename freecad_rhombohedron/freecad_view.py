"""FreeCAD rendering collaborator for the rhombohedron scene.

Faces become ``Mesh::Feature`` objects inside one ``App::Part`` so the whole
group can be turned with a single placement change per frame. FreeCAD and Qt
are imported lazily; in plain Python the renderer degrades to bookkeeping
only, which keeps the scene logic testable headless.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from . import vec3 as v3
from .meshes import MeshDescriptor
from .scene import RenderTarget, RhombohedronScene

__all__ = [
    "FaceInstance",
    "FreeCadRenderer",
    "SelectionObserver",
    "AnimationDriver",
    "color_to_rgb",
    "freecad_available",
]

log = logging.getLogger(__name__)

GROUP_NAME = "Rhombohedra"


@dataclass(slots=True)
class FaceInstance:
    name: str
    color: int
    area: float


def color_to_rgb(color: int) -> Tuple[float, float, float]:
    """``0xRRGGBB`` to the float triple FreeCAD view providers expect."""
    return (
        ((color >> 16) & 0xFF) / 255.0,
        ((color >> 8) & 0xFF) / 255.0,
        (color & 0xFF) / 255.0,
    )


def freecad_available() -> bool:
    try:
        import FreeCAD  # type: ignore  # noqa: F401
    except ImportError:
        return False
    return True


def _mesh_area(mesh: MeshDescriptor) -> float:
    return sum(
        v3.norm(v3.cross(v3.sub(b, a), v3.sub(c, a))) / 2 for a, b, c in mesh.triangles()
    )


class FreeCadRenderer(RenderTarget):
    def __init__(
        self,
        group_position: Sequence[float] = (0.0, 0.0, 0.0),
        document: Any | None = None,
        faces_per_shape: int = 6,
    ) -> None:
        self.group_position = tuple(float(c) for c in group_position)
        self.faces_per_shape = faces_per_shape
        self._doc = document
        self._group: Any = None
        self._features: List[Any] = []
        self.instances: List[FaceInstance] = []
        self.rotation: float = 0.0
        self.highlighted = False

    def ensure_document(self) -> Optional[Any]:
        if self._doc is not None:
            return self._doc
        try:
            import FreeCAD  # type: ignore
        except ImportError:  # pragma: no cover - outside FreeCAD
            return None
        doc = FreeCAD.ActiveDocument
        if doc is None:
            doc = FreeCAD.newDocument("GoldenRhombohedra")
        self._doc = doc
        return doc

    @property
    def document(self) -> Optional[Any]:
        return self._doc

    @property
    def object_names(self) -> List[str]:
        return [inst.name for inst in self.instances]

    def show(self, meshes: Sequence[MeshDescriptor]) -> None:
        doc = self.ensure_document()
        self._remove_features(doc)
        self.instances = []
        group = self._group_object(doc) if doc is not None else None
        for serial, mesh in enumerate(meshes):
            name = f"Face_{serial // self.faces_per_shape}_{mesh.index}"
            feature = self._make_feature(doc, name, mesh, group) if doc is not None else None
            if feature is not None:
                self._features.append(feature)
                # FreeCAD renames on collision; hit-testing needs the real name.
                name = feature.Name
            elif doc is not None:
                log.warning("Unable to create mesh feature for %s", name)
            self.instances.append(FaceInstance(name=name, color=mesh.color, area=_mesh_area(mesh)))
        if doc is not None:
            doc.recompute()
        log.info("Showing %d faces%s", len(self.instances), "" if doc else " (no FreeCAD document)")

    def clear(self) -> None:
        """Remove every face and the group from the document."""

        doc = self._doc
        self._remove_features(doc)
        self.instances = []
        if doc is not None and self._group is not None:
            self._remove_object(doc, self._group)
            doc.recompute()
        self._group = None

    def apply_rotation(self, angle: float) -> None:
        self.rotation = angle
        group = self._group
        if group is None:
            return
        try:
            import FreeCAD  # type: ignore
        except ImportError:
            return

        group.Placement = FreeCAD.Placement(
            FreeCAD.Vector(*self.group_position),
            FreeCAD.Rotation(FreeCAD.Vector(1, 0, 0), math.degrees(angle)),
        )

    def set_highlight(self, on: bool) -> None:
        self.highlighted = on
        for feature in self._features:
            vo = getattr(feature, "ViewObject", None)
            if vo is None:
                continue
            try:
                vo.LineWidth = 3.0 if on else 1.0
            except Exception as exc:  # pragma: no cover - view provider specific
                log.debug("LineWidth not supported on %s: %s", feature.Name, exc)

    def owns(self, object_name: str) -> bool:
        return object_name == GROUP_NAME or object_name in self.object_names

    def _group_object(self, doc: Any) -> Any | None:
        if self._group is not None:
            return self._group
        group = doc.getObject(GROUP_NAME)
        if group is not None:
            # Left over from an earlier run: start from an empty group.
            stale = list(getattr(group, "Group", []))
            for child in stale:
                self._remove_object(doc, child)
            if stale:
                log.info("Removed %d stale objects from %s", len(stale), GROUP_NAME)
        else:
            try:
                group = doc.addObject("App::Part", GROUP_NAME)
                group.Label = GROUP_NAME
            except Exception as exc:
                log.warning("Unable to create group %s: %s", GROUP_NAME, exc)
                return None
        self._group = group
        return group

    def _make_feature(self, doc: Any, name: str, mesh: MeshDescriptor, group: Any | None) -> Any | None:
        try:
            import FreeCAD  # type: ignore
            import Mesh  # type: ignore
        except ImportError:
            log.warning("Mesh workbench not available; skipping %s", name)
            return None
        facets = [list(p) for p in mesh.points()]
        feature = doc.addObject("Mesh::Feature", name)
        feature.Mesh = Mesh.Mesh(facets)
        feature.Placement = FreeCAD.Placement(FreeCAD.Vector(*mesh.position), FreeCAD.Rotation())
        vo = getattr(feature, "ViewObject", None)
        if vo is not None:
            try:
                vo.ShapeColor = color_to_rgb(mesh.color)
                vo.Lighting = "One side"
            except Exception as exc:  # pragma: no cover - view provider specific
                log.debug("View properties not applied to %s: %s", name, exc)
        if group is not None:
            group.addObject(feature)
        return feature

    def _remove_features(self, doc: Any | None) -> None:
        if doc is not None:
            for feature in self._features:
                self._remove_object(doc, feature)
        self._features = []

    @staticmethod
    def _remove_object(doc: Any, obj: Any) -> None:
        try:
            doc.removeObject(obj.Name)
        except Exception as exc:
            log.debug("Could not remove %s: %s", getattr(obj, "Name", "?"), exc)


class SelectionObserver:
    """Routes FreeCAD GUI preselection/selection to the scene's pointer hooks.

    Register with ``FreeCADGui.Selection.addObserver(observer)``. Hovering any
    face counts as hovering the group; clicking toggles the rotation.
    """

    def __init__(self, scene: RhombohedronScene, renderer: FreeCadRenderer) -> None:
        self.scene = scene
        self.renderer = renderer

    def setPreselection(self, doc: str, obj: str, sub: str) -> None:  # noqa: N802
        if self.renderer.owns(obj):
            self.scene.on_pointer_over()

    def removePreselection(self, doc: str, obj: str, sub: str) -> None:  # noqa: N802
        if self.renderer.owns(obj):
            self.scene.on_pointer_out()

    def addSelection(self, doc: str, obj: str, sub: str, pnt: Any) -> None:  # noqa: N802
        if not self.renderer.owns(obj):
            return
        self.scene.on_click()
        try:
            import FreeCADGui  # type: ignore

            FreeCADGui.Selection.clearSelection()
        except ImportError:  # pragma: no cover - outside FreeCAD GUI
            pass


def _import_qtcore() -> Any | None:
    for module in ("PySide6", "PySide2", "PySide"):
        try:
            return __import__(module, fromlist=["QtCore"]).QtCore
        except ImportError:
            continue
    return None


class AnimationDriver:
    """Calls ``scene.tick`` from a Qt timer with the measured frame delta."""

    def __init__(self, scene: RhombohedronScene, interval_ms: int = 16, clock=time.monotonic) -> None:
        self.scene = scene
        self.interval_ms = interval_ms
        self._clock = clock
        self._last: float | None = None
        self._timer: Any = None

    def step(self) -> float:
        now = self._clock()
        delta = 0.0 if self._last is None else max(0.0, now - self._last)
        self._last = now
        return self.scene.tick(delta)

    def start(self) -> bool:
        qtcore = _import_qtcore()
        if qtcore is None:
            log.info("Qt is not available; animation timer not started")
            return False
        self._last = None
        self._timer = qtcore.QTimer()
        self._timer.timeout.connect(self.step)
        self._timer.start(self.interval_ms)
        log.info("Animation started (%d ms frames)", self.interval_ms)
        return True

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
