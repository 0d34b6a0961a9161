import math

import pytest

from freecad_rhombohedron import constants
from freecad_rhombohedron.freecad_view import (
    AnimationDriver,
    FreeCadRenderer,
    SelectionObserver,
    color_to_rgb,
    freecad_available,
)
from freecad_rhombohedron.scene import default_scene

requires_freecad = pytest.mark.skipif(not freecad_available(), reason="FreeCAD not available")
headless_only = pytest.mark.skipif(freecad_available(), reason="exercises the headless fallback")


class FakeObject:
    def __init__(self, name):
        self.Name = name
        self.Label = name
        self.Group = []

    def addObject(self, obj):  # noqa: N802
        self.Group.append(obj)


class FakeDocument:
    def __init__(self):
        self.recomputed = 0
        self.removed = []
        self.objects = {}

    def recompute(self):
        self.recomputed += 1

    def addObject(self, type_name, name):  # noqa: N802
        obj = FakeObject(name)
        self.objects[name] = obj
        return obj

    def getObject(self, name):  # noqa: N802
        return self.objects.get(name)

    def removeObject(self, name):  # noqa: N802
        self.removed.append(name)
        obj = self.objects.pop(name, None)
        for other in self.objects.values():
            if obj in other.Group:
                other.Group.remove(obj)


def _scene_meshes(scene):
    return [m for shape in scene.meshes() for m in shape]


def test_color_to_rgb():
    assert color_to_rgb(0xFF0000) == (1.0, 0.0, 0.0)
    assert color_to_rgb(0x00FFFF) == (0.0, 1.0, 1.0)
    r, g, b = color_to_rgb(0x336699)
    assert math.isclose(r, 0x33 / 255) and math.isclose(g, 0x66 / 255) and math.isclose(b, 0x99 / 255)


@headless_only
def test_renderer_bookkeeping_without_freecad():
    scene = default_scene()
    doc = FakeDocument()
    renderer = FreeCadRenderer(group_position=scene.group_position, document=doc)
    scene.attach(renderer)

    assert len(renderer.instances) == 12
    assert renderer.object_names[0] == "Face_0_0"
    assert renderer.object_names[-1] == "Face_1_5"
    assert doc.getObject("Rhombohedra") is not None
    assert doc.recomputed == 1

    # Scale 5 multiplies every face area by 25. The obtuse solid (first six)
    # has golden top and bottom faces and four sides opening at acos(X²).
    golden = 25 * constants.AE
    side = 25 * math.sqrt(1 - constants.X ** 4)
    expected = [golden, side, side, side, side, golden] + [golden] * 6
    for inst, area in zip(renderer.instances, expected):
        assert math.isclose(inst.area, area, rel_tol=1e-9)

    scene.tick(0.5)
    assert math.isclose(renderer.rotation, 0.5)


@headless_only
def test_show_into_existing_group_replaces_previous_faces():
    doc = FakeDocument()
    group = doc.addObject("App::Part", "Rhombohedra")
    for name in ("Face_0_0", "Face_0_0001"):
        group.addObject(doc.addObject("Mesh::Feature", name))

    meshes = _scene_meshes(default_scene())
    renderer = FreeCadRenderer(document=doc)
    renderer.show(meshes)
    assert doc.removed == ["Face_0_0", "Face_0_0001"]
    assert group.Group == []
    assert len(renderer.instances) == 12

    renderer.show(meshes)
    assert len(renderer.instances) == 12
    assert doc.removed == ["Face_0_0", "Face_0_0001"]

    # A second renderer on the same document reuses the now empty group.
    again = FreeCadRenderer(document=doc)
    again.show(meshes)
    assert again._group is group
    assert len(again.object_names) == 12


@headless_only
def test_clear_removes_group_and_instances():
    doc = FakeDocument()
    renderer = FreeCadRenderer(document=doc)
    renderer.show(_scene_meshes(default_scene()))
    renderer.clear()
    assert "Rhombohedra" in doc.removed
    assert doc.getObject("Rhombohedra") is None
    assert renderer.instances == []
    assert not renderer.owns("Face_0_0")
@headless_only
def test_selection_observer_maps_pointer_events():
    scene = default_scene()
    renderer = FreeCadRenderer(document=FakeDocument())
    renderer.show(_scene_meshes(scene))
    observer = SelectionObserver(scene, renderer)

    observer.setPreselection("Doc", "Face_0_1", "Facet1")
    assert scene.state.hovered is True
    observer.removePreselection("Doc", "Face_0_1", "Facet1")
    assert scene.state.hovered is False

    observer.setPreselection("Doc", "SomethingElse", "")
    assert scene.state.hovered is False

    observer.addSelection("Doc", "Face_1_3", "Facet2", (0, 0, 0))
    assert scene.state.active is False
    observer.addSelection("Doc", "Rhombohedra", "", (0, 0, 0))
    assert scene.state.active is True


def test_animation_driver_uses_measured_delta():
    times = iter([10.0, 10.5, 10.75])
    scene = default_scene(rotation_speed=2.0)
    driver = AnimationDriver(scene, clock=lambda: next(times))
    assert driver.step() == 0.0
    assert math.isclose(driver.step(), 1.0)
    assert math.isclose(driver.step(), 1.5)


@requires_freecad
def test_renderer_creates_freecad_objects():
    import FreeCAD  # type: ignore

    doc = FreeCAD.newDocument("RhombohedronTest")
    try:
        scene = default_scene()
        renderer = FreeCadRenderer(group_position=scene.group_position, document=doc)
        scene.attach(renderer)
        group = doc.getObject("Rhombohedra")
        assert group is not None
        assert len(group.Group) == 12
        scene.tick(math.pi / 2)
        assert math.isclose(group.Placement.Rotation.Angle, math.pi / 2, abs_tol=1e-9)
        assert math.isclose(group.Placement.Base.z, -15.0)
    finally:
        FreeCAD.closeDocument(doc.Name)


@requires_freecad
def test_rerun_on_same_document_keeps_one_set_of_faces():
    import FreeCAD  # type: ignore

    doc = FreeCAD.newDocument("RhombohedronRerun")
    try:
        first = FreeCadRenderer(document=doc)
        default_scene().attach(first)
        second = FreeCadRenderer(document=doc)
        default_scene(variants=["acute"]).attach(second)
        group = doc.getObject("Rhombohedra")
        assert len(group.Group) == 6
        assert sorted(second.object_names) == sorted(obj.Name for obj in group.Group)
        assert all(second.owns(obj.Name) for obj in group.Group)
        second.clear()
        assert doc.getObject("Rhombohedra") is None
    finally:
        FreeCAD.closeDocument(doc.Name)
