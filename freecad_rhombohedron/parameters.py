"""Configuration stack for the rhombohedron generator.

Parameters are layered from lowest to highest precedence:

1. Dataclass defaults: the two-solid demo scene.
2. JSON file: persistent project configuration.
3. CLI overrides: runtime tweaks for automation/headless workflows.

An optional Qt dialog can adjust the result interactively when PySide and a
display are available. Everything here is pure Python so unit tests run
outside FreeCAD.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
import logging
import json
import math
import os
import sys

from .meshes import DEFAULT_COLORS, FACE_COUNT, parse_color
from .rhombohedron import Variant

QtWidgets = None


def _import_qt() -> Any | None:
    global QtWidgets
    if QtWidgets is not None:
        return QtWidgets
    try:
        from PySide6 import QtWidgets as _QtWidgets  # type: ignore
        QtWidgets = _QtWidgets
        return QtWidgets
    except ImportError:  # pragma: no cover - GUI optional dependency
        try:
            from PySide2 import QtWidgets as _QtWidgets  # type: ignore
            QtWidgets = _QtWidgets
            return QtWidgets
        except ImportError:  # pragma: no cover - GUI optional dependency
            return None


@dataclass(slots=True)
class SceneParameters:
    """Canonical set of adjustable scene parameters."""

    scale: float = 5.0
    variants: List[str] = field(default_factory=lambda: ["OBTUSE", "ACUTE"])
    spacing: float = 8.0  # Distance between neighbouring solids along X
    group_position: Tuple[float, float, float] = (0.0, 0.0, -15.0)
    colors: List[int] = field(default_factory=lambda: list(DEFAULT_COLORS))
    rotation_speed: float = 1.0  # rad/s while active
    start_active: bool = True
    frame_interval_ms: int = 16
    export_manifest: bool = True
    export_obj: bool = True
    export_stl: bool = False

    def __post_init__(self) -> None:
        self.variants = [Variant.parse(v).name for v in self.variants]
        self.colors = [parse_color(c) for c in self.colors]
        self.group_position = tuple(float(c) for c in self.group_position)  # type: ignore[assignment]

    def validate(self) -> None:
        if not math.isfinite(self.scale) or self.scale <= 0:
            raise ValueError("Scale must be positive")
        if not self.variants:
            raise ValueError("At least one variant must be shown")
        if self.spacing < 0:
            raise ValueError("Spacing cannot be negative")
        if len(self.group_position) != 3:
            raise ValueError("Group position must have 3 coordinates")
        if len(self.colors) < FACE_COUNT:
            raise ValueError(f"Need at least {FACE_COUNT} colors, got {len(self.colors)}")
        if not math.isfinite(self.rotation_speed):
            raise ValueError("Rotation speed must be finite")
        if self.frame_interval_ms < 1:
            raise ValueError("Frame interval must be at least 1 ms")

    def variant_list(self) -> List[Variant]:
        return [Variant[name] for name in self.variants]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["group_position"] = list(self.group_position)
        data["colors"] = [f"#{c:06x}" for c in self.colors]
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SceneParameters":
        base = cls()
        merged = {**asdict(base), **data}
        unknown = set(merged) - set(asdict(base))
        if unknown:
            raise KeyError(f"Unknown parameter(s): {', '.join(sorted(unknown))}")
        params = cls(**merged)
        params.validate()
        return params


def load_json_config(path: Path | str | None) -> Dict[str, Any]:
    """Load the JSON config file or return an empty dict if no path is given."""

    if path is None:
        return {}
    json_path = Path(path)
    if not json_path.exists():
        raise FileNotFoundError(f"Config file not found: {json_path}")
    data = json.loads(json_path.read_text(encoding="utf-8"))
    if not isinstance(data, Mapping):
        raise ValueError("Top-level JSON config must be an object")
    return dict(data)


def apply_overrides(base: SceneParameters, overrides: Mapping[str, Any]) -> SceneParameters:
    """Return a copy of ``base`` with overrides applied."""

    merged = base.to_dict()
    for key, value in overrides.items():
        if key not in merged:
            raise KeyError(f"Unknown parameter '{key}'")
        merged[key] = value
    return SceneParameters.from_dict(merged)


def parse_cli_overrides(
    args: Optional[Iterable[str]] = None,
) -> Tuple[Dict[str, Any], Any]:
    """Parse CLI-style overrides using argparse conventions."""

    import argparse

    parser = argparse.ArgumentParser(description="Golden rhombohedron generator")
    parser.add_argument("--config", type=str, help="Path to JSON config", default=None)
    parser.add_argument("--out-dir", type=str, default="exports", help="Export folder")
    parser.add_argument("--manifest-name", type=str, default="rhombohedra.json")
    parser.add_argument("--obj-name", type=str, default="rhombohedra.obj")
    parser.add_argument("--stl-name", type=str, default="rhombohedra.stl")
    parser.add_argument("--scale", type=float, help="Uniform scale factor")
    parser.add_argument(
        "--variant",
        dest="variants",
        action="append",
        choices=[v.name.lower() for v in Variant],
        type=str.lower,
        help="Variant to show; repeat for several solids (first is placed at +X)",
    )
    parser.add_argument("--spacing", type=float, help="Distance between solids along X")
    parser.add_argument(
        "--group-position",
        type=float,
        nargs=3,
        metavar=("X", "Y", "Z"),
        help="Translation of the whole group",
    )
    parser.add_argument(
        "--colors",
        type=str,
        nargs=FACE_COUNT,
        metavar="COLOR",
        help="Six face colors as #rrggbb",
    )
    parser.add_argument("--rotation-speed", type=float, help="Rotation speed in rad/s")
    parser.add_argument("--paused", action="store_true", help="Start with rotation paused")
    parser.add_argument("--frame-interval", type=int, help="Animation timer interval (ms)")
    parser.add_argument("--skip-manifest", action="store_true", help="Disable JSON manifest export")
    parser.add_argument("--skip-obj", action="store_true", help="Disable OBJ export")
    parser.add_argument("--stl", action="store_true", help="Enable ASCII STL export")
    parser.add_argument(
        "--no-gui",
        action="store_true",
        help="Skip the graphical parameter dialog",
    )

    parsed, unknown = parser.parse_known_args(args=args)
    if unknown:
        logging.info("Ignoring unknown CLI args: %s", " ".join(unknown))
    overrides: Dict[str, Any] = {}
    if parsed.scale is not None:
        overrides["scale"] = parsed.scale
    if parsed.variants:
        overrides["variants"] = [v.upper() for v in parsed.variants]
    if parsed.spacing is not None:
        overrides["spacing"] = parsed.spacing
    if parsed.group_position is not None:
        overrides["group_position"] = list(parsed.group_position)
    if parsed.colors is not None:
        overrides["colors"] = list(parsed.colors)
    if parsed.rotation_speed is not None:
        overrides["rotation_speed"] = parsed.rotation_speed
    if parsed.paused:
        overrides["start_active"] = False
    if parsed.frame_interval is not None:
        overrides["frame_interval_ms"] = parsed.frame_interval
    if parsed.skip_manifest:
        overrides["export_manifest"] = False
    if parsed.skip_obj:
        overrides["export_obj"] = False
    if parsed.stl:
        overrides["export_stl"] = True

    return overrides, parsed


def load_parameters(
    config_path: Path | str | None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> SceneParameters:
    """Load parameters using the defaults → JSON → CLI precedence chain."""

    data = load_json_config(config_path)
    params = SceneParameters.from_dict(data)
    if cli_overrides:
        params = apply_overrides(params, cli_overrides)
    return params


def _has_display() -> bool:
    if sys.platform.startswith("win") or sys.platform == "darwin":  # pragma: no cover - platform guards
        return True
    if os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"):
        return True
    return False


def prompt_parameters_dialog(initial: SceneParameters) -> SceneParameters | None:
    """Show a Qt dialog to let the user tweak parameters.

    Returns ``initial`` unchanged when Qt or a display is missing and ``None``
    when the user cancels.
    """

    widgets = _import_qt()
    if widgets is None:
        logging.info("PySide is not available; skipping parameter dialog")
        return initial
    if not _has_display():
        logging.info("No graphical display detected; skipping parameter dialog")
        return initial

    app = widgets.QApplication.instance()
    created_app = False
    if app is None:
        app = widgets.QApplication([])
        created_app = True

    class _ParameterDialog(widgets.QDialog):
        def __init__(self) -> None:
            super().__init__()
            self.setWindowTitle("Golden Rhombohedra")
            layout = widgets.QVBoxLayout(self)
            form = widgets.QFormLayout()
            layout.addLayout(form)

            self.scale = self._double_spin(0.1, 100.0, 0.1, initial.scale)
            form.addRow("Scale", self.scale)

            self.spacing = self._double_spin(0.0, 100.0, 0.5, initial.spacing)
            form.addRow("Spacing", self.spacing)

            self.rotation_speed = self._double_spin(-10.0, 10.0, 0.1, initial.rotation_speed)
            form.addRow("Rotation speed (rad/s)", self.rotation_speed)

            variant_group = widgets.QGroupBox("Solids")
            variant_layout = widgets.QVBoxLayout(variant_group)
            self.show_obtuse = widgets.QCheckBox("Obtuse")
            self.show_obtuse.setChecked("OBTUSE" in initial.variants)
            self.show_acute = widgets.QCheckBox("Acute")
            self.show_acute.setChecked("ACUTE" in initial.variants)
            variant_layout.addWidget(self.show_obtuse)
            variant_layout.addWidget(self.show_acute)
            layout.addWidget(variant_group)

            self.start_active = widgets.QCheckBox("Start rotating")
            self.start_active.setChecked(initial.start_active)
            layout.addWidget(self.start_active)

            layout.addStretch(1)

            buttons = widgets.QDialogButtonBox(
                widgets.QDialogButtonBox.Ok | widgets.QDialogButtonBox.Cancel
            )
            buttons.accepted.connect(self.accept)
            buttons.rejected.connect(self.reject)
            layout.addWidget(buttons)

        def _double_spin(self, minimum: float, maximum: float, step: float, value: float):
            spin = widgets.QDoubleSpinBox()
            spin.setRange(minimum, maximum)
            spin.setDecimals(3)
            spin.setSingleStep(step)
            spin.setValue(value)
            return spin

        def to_params(self) -> SceneParameters:
            variants = []
            if self.show_obtuse.isChecked():
                variants.append("OBTUSE")
            if self.show_acute.isChecked():
                variants.append("ACUTE")
            return apply_overrides(
                initial,
                {
                    "scale": float(self.scale.value()),
                    "spacing": float(self.spacing.value()),
                    "rotation_speed": float(self.rotation_speed.value()),
                    "variants": variants or list(initial.variants),
                    "start_active": bool(self.start_active.isChecked()),
                },
            )

    dialog = _ParameterDialog()
    exec_fn = getattr(dialog, "exec_", dialog.exec)
    result = exec_fn()
    if created_app:
        app.quit()
    if result != widgets.QDialog.Accepted:
        return None
    return dialog.to_params()
