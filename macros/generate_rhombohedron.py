"""Show rotating golden rhombohedra (FreeCAD macro).

Builds the two-solid scene inside the active FreeCAD document and animates it:

- Hovering a face thickens the face outlines.
- Clicking a face pauses or resumes the rotation.
- Running the macro again replaces the previous scene.

Add/run in FreeCAD:
- Macro -> Macros... -> Add -> select this file
- Execute
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

try:
    import FreeCADGui  # noqa: F401
except Exception as exc:
    raise SystemExit(f"This macro must be run inside FreeCAD GUI. Error: {exc}")


def _repo_root() -> Path:
    macro_path = Path(globals().get("__file__", "")).resolve()
    if macro_path.is_file():
        return macro_path.parents[1]
    return Path.cwd()


def main() -> None:
    repo_root = _repo_root().resolve()
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))

    # Avoid accidentally reusing stale modules from a previous run/session.
    for key in list(sys.modules.keys()):
        if key == "freecad_rhombohedron" or key.startswith("freecad_rhombohedron."):
            sys.modules.pop(key, None)

    from freecad_rhombohedron import parameters
    from freecad_rhombohedron.freecad_view import AnimationDriver, FreeCadRenderer, SelectionObserver
    from freecad_rhombohedron.scene import default_scene

    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    previous = getattr(FreeCADGui, "_rhombohedron_session", None)
    if previous is not None:
        driver, observer, renderer = previous
        driver.stop()
        FreeCADGui.Selection.removeObserver(observer)
        renderer.clear()
        FreeCADGui._rhombohedron_session = None

    config = repo_root / "configs" / "default.json"
    params = parameters.load_parameters(config if config.exists() else None)
    params = parameters.prompt_parameters_dialog(params)
    if params is None:
        return

    scene = default_scene(
        scale=params.scale,
        spacing=params.spacing,
        variants=params.variant_list(),
        colors=params.colors,
        group_position=params.group_position,
        rotation_speed=params.rotation_speed,
        active=params.start_active,
    )
    renderer = FreeCadRenderer(group_position=params.group_position)
    scene.attach(renderer)

    observer = SelectionObserver(scene, renderer)
    FreeCADGui.Selection.addObserver(observer)
    driver = AnimationDriver(scene, interval_ms=params.frame_interval_ms)
    driver.start()
    FreeCADGui._rhombohedron_session = (driver, observer, renderer)

    try:
        FreeCADGui.SendMsgToActiveView("ViewFit")
    except Exception as exc:
        logging.debug("ViewFit failed: %s", exc)


main()
