"""End-to-end tests for the headless entry point.

Tests that need FreeCAD are auto-skipped when it cannot be imported. Run them
inside FreeCAD with::

    freecadcmd -c "import pytest; pytest.main(['tests/test_integration.py', '-v'])"
"""

from __future__ import annotations

import importlib.util
import json
import math
from pathlib import Path

import pytest

from freecad_rhombohedron.freecad_view import freecad_available

REPO_ROOT = Path(__file__).resolve().parents[1]

requires_freecad = pytest.mark.skipif(not freecad_available(), reason="FreeCAD not available")


def _load_script():
    spec = importlib.util.spec_from_file_location(
        "generate_rhombohedron", REPO_ROOT / "scripts" / "generate_rhombohedron.py"
    )
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestHeadlessRun:
    def test_default_config_run(self, tmp_path):
        script = _load_script()
        ctx = script.main(["--no-gui", "--out-dir", str(tmp_path), "--stl"])
        assert ctx is not None
        assert [p.name for p in ctx.written] == [
            "rhombohedra.json",
            "rhombohedra.obj",
            "rhombohedra.stl",
        ]
        manifest = json.loads((tmp_path / "rhombohedra.json").read_text(encoding="utf-8"))
        assert [s["label"] for s in manifest["shapes"]] == ["obtuse", "acute"]
        assert manifest["group_position"] == [0.0, 0.0, -15.0]
        positions = [s["faces"][0]["position"] for s in manifest["shapes"]]
        assert positions == [[4.0, 0.0, 0.0], [-4.0, 0.0, 0.0]]

    def test_cli_overrides_and_freecad_argv_noise(self, tmp_path):
        script = _load_script()
        ctx = script.main(
            [
                "Macro.FCMacro",
                "--no-gui",
                "--out-dir",
                str(tmp_path),
                "--variant",
                "acute",
                "--scale",
                "2",
                "--skip-obj",
                "--manifest-name",
                "single.json",
            ]
        )
        assert ctx.params.variants == ["ACUTE"]
        assert [p.name for p in ctx.written] == ["single.json"]
        faces = json.loads((tmp_path / "single.json").read_text(encoding="utf-8"))["shapes"][0]["faces"]
        assert len(faces) == 6
        assert faces[0]["position"] == [0.0, 0.0, 0.0]
        # Acute height scales with the factor: 2 * sin(atan(phi)).
        zs = [v for face in faces for v in face["vertices"][2::3]]
        assert math.isclose(max(zs) - min(zs), 2 * 0.8506508083520399, rel_tol=1e-9)

    def test_explicit_config_file(self, tmp_path):
        config = tmp_path / "scene.json"
        config.write_text(json.dumps({"variants": ["OBTUSE"], "export_obj": False}), encoding="utf-8")
        script = _load_script()
        ctx = script.main(["--no-gui", "--config", str(config), "--out-dir", str(tmp_path / "out")])
        assert ctx.params.variants == ["OBTUSE"]
        assert ctx.validation["OBTUSE"]["ok"] is True
        assert [p.name for p in ctx.written] == ["rhombohedra.json"]


@requires_freecad
class TestFreeCadRun:
    def test_pipeline_populates_document(self, tmp_path):
        import FreeCAD  # type: ignore

        script = _load_script()
        ctx = script.main(["--no-gui", "--out-dir", str(tmp_path)])
        try:
            assert ctx.renderer is not None
            group = ctx.renderer.document.getObject("Rhombohedra")
            assert len(group.Group) == 12
        finally:
            FreeCAD.closeDocument(ctx.renderer.document.Name)
