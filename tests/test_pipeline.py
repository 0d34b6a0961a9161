import json

from freecad_rhombohedron import export
from freecad_rhombohedron.meshes import generate_rhombohedron, DEFAULT_COLORS
from freecad_rhombohedron.parameters import SceneParameters
from freecad_rhombohedron.pipeline import (
    ExportStep,
    GeometryStep,
    PipelineContext,
    PipelineStep,
    RhombohedronPipeline,
    default_steps,
)
from freecad_rhombohedron.rhombohedron import Variant


def _headless_pipeline() -> RhombohedronPipeline:
    pipeline = RhombohedronPipeline()
    pipeline.remove("freecad")
    return pipeline


def test_default_step_order():
    assert [s.name for s in default_steps()] == ["geometry", "validation", "freecad", "export"]


def test_pipeline_builds_validates_and_exports(tmp_path):
    params = SceneParameters(export_stl=True)
    ctx = PipelineContext(params=params, out_dir=tmp_path / "out")
    _headless_pipeline().run(ctx)

    assert len(ctx.meshes) == 2
    assert all(len(shape) == 6 for shape in ctx.meshes)
    assert set(ctx.validation) == {"OBTUSE", "ACUTE"}
    assert all(report["ok"] for report in ctx.validation.values())
    assert [p.name for p in ctx.written] == ["rhombohedra.json", "rhombohedra.obj", "rhombohedra.stl"]
    assert all(p.exists() for p in ctx.written)


def test_export_step_respects_flags(tmp_path):
    params = SceneParameters(export_manifest=False, export_obj=False, export_stl=False)
    ctx = PipelineContext(params=params, out_dir=tmp_path)
    _headless_pipeline().run(ctx)
    assert ctx.written == []
    assert not ExportStep().should_run(ctx)


def test_pipeline_editing_helpers():
    class Marker(PipelineStep):
        name = "marker"

        def execute(self, ctx):
            ctx.written.append("marker")

    pipeline = RhombohedronPipeline()
    pipeline.insert_after("geometry", Marker())
    assert [s.name for s in pipeline.steps][:2] == ["geometry", "marker"]
    pipeline.remove("marker")
    pipeline.insert_before("geometry", Marker())
    assert pipeline.steps[0].name == "marker"
    pipeline.replace("marker", GeometryStep())
    assert [s.name for s in pipeline.steps].count("geometry") == 2


def test_manifest_contents(tmp_path):
    meshes = [generate_rhombohedron(Variant.ACUTE, 2.0, (-4, 0, 0), DEFAULT_COLORS)]
    path = tmp_path / "m.json"
    export.export_manifest(meshes, path, ["acute"], (0.0, 0.0, -15.0))
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["group_position"] == [0.0, 0.0, -15.0]
    assert data["shapes"][0]["label"] == "acute"
    faces = data["shapes"][0]["faces"]
    assert len(faces) == 6
    assert faces[0]["color"] == "#ff0000"
    assert faces[0]["position"] == [-4.0, 0.0, 0.0]
    assert len(faces[0]["vertices"]) == 18


def test_obj_export_counts(tmp_path):
    meshes = [
        generate_rhombohedron(Variant.OBTUSE, 1.0, (4, 0, 0), DEFAULT_COLORS),
        generate_rhombohedron(Variant.ACUTE, 1.0, (-4, 0, 0), DEFAULT_COLORS),
    ]
    path = tmp_path / "r.obj"
    export.export_obj(meshes, path, ["obtuse", "acute"])
    lines = path.read_text(encoding="utf-8").splitlines()
    vertices = [l for l in lines if l.startswith("v ")]
    facets = [l for l in lines if l.startswith("f ")]
    objects = [l for l in lines if l.startswith("o ")]
    assert len(vertices) == 72
    assert len(facets) == 24
    assert objects[0] == "o obtuse_face0"
    assert facets[-1] == "f 70 71 72"
    # Placement offset is baked into the OBJ positions.
    assert all(float(l.split()[1]) > 0 for l in vertices[:36])
    assert all(float(l.split()[1]) < 0 for l in vertices[36:])


def test_stl_normals_point_away_from_solid_centre(tmp_path):
    meshes = [generate_rhombohedron(Variant.ACUTE, 1.0, (0, 0, 0), DEFAULT_COLORS)]
    path = tmp_path / "r.stl"
    export.export_stl(meshes, path, name="acute")
    lines = [l.strip() for l in path.read_text(encoding="utf-8").splitlines()]
    assert lines[0] == "solid acute"
    assert lines[-1] == "endsolid acute"
    normal_lines = [i for i, l in enumerate(lines) if l.startswith("facet normal")]
    assert len(normal_lines) == 12
    for i in normal_lines:
        n = [float(c) for c in lines[i].split()[2:]]
        corners = [[float(c) for c in lines[i + k].split()[1:]] for k in (2, 3, 4)]
        centre = [sum(p[axis] for p in corners) / 3 for axis in range(3)]
        assert sum(a * b for a, b in zip(n, centre)) > 0
