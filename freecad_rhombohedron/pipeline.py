"""Pipeline architecture for the rhombohedron generator.

Each step receives a shared ``PipelineContext`` and can read/write its fields.
Steps declare their own ``should_run`` predicate so the runner skips stages
that do not apply (no FreeCAD, exports disabled).

Usage::

    from freecad_rhombohedron.pipeline import PipelineContext, RhombohedronPipeline

    ctx = PipelineContext(params=my_params, out_dir=Path("exports"))
    RhombohedronPipeline().run(ctx)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from . import export, faces
from .meshes import MeshDescriptor
from .parameters import SceneParameters
from .scene import RhombohedronScene, default_scene

__all__ = [
    "PipelineContext",
    "PipelineStep",
    "RhombohedronPipeline",
    "GeometryStep",
    "ValidationStep",
    "FreeCadStep",
    "ExportStep",
    "default_steps",
]


# ---------------------------------------------------------------------------
# Pipeline context: shared state between steps
# ---------------------------------------------------------------------------


@dataclass
class PipelineContext:
    """Mutable state bag passed through every pipeline step."""

    params: SceneParameters
    out_dir: Path = field(default_factory=lambda: Path("exports"))

    manifest_name: str = "rhombohedra.json"
    obj_name: str = "rhombohedra.obj"
    stl_name: str = "rhombohedra.stl"

    # Populated by GeometryStep.
    scene: RhombohedronScene | None = None
    meshes: List[List[MeshDescriptor]] = field(default_factory=list)

    # Populated by ValidationStep, keyed by variant name.
    validation: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    # Populated by FreeCadStep.
    renderer: Any = None

    written: List[Path] = field(default_factory=list)

    @property
    def labels(self) -> List[str]:
        return [name.lower() for name in self.params.variants]


# ---------------------------------------------------------------------------
# Step base class
# ---------------------------------------------------------------------------


class PipelineStep(ABC):
    """A single composable stage of the generation pipeline."""

    name: str = "unnamed"

    def should_run(self, ctx: PipelineContext) -> bool:
        """Return ``False`` to skip this step for the current context."""
        return True

    @abstractmethod
    def execute(self, ctx: PipelineContext) -> None:
        """Perform the step's work, mutating *ctx* as needed."""
        ...


# ---------------------------------------------------------------------------
# Concrete steps
# ---------------------------------------------------------------------------


class GeometryStep(PipelineStep):
    """Build the scene and its face meshes from the parameters."""

    name = "geometry"

    def execute(self, ctx: PipelineContext) -> None:
        p = ctx.params
        ctx.scene = default_scene(
            scale=p.scale,
            spacing=p.spacing,
            variants=p.variant_list(),
            colors=p.colors,
            group_position=p.group_position,
            rotation_speed=p.rotation_speed,
            active=p.start_active,
        )
        ctx.meshes = ctx.scene.meshes()
        logging.info(
            "Generated %d solids / %d faces (scale=%.3f)",
            len(ctx.meshes),
            sum(len(m) for m in ctx.meshes),
            p.scale,
        )


class ValidationStep(PipelineStep):
    """Check incidence, edges, winding and face shape for each variant shown."""

    name = "validation"

    def execute(self, ctx: PipelineContext) -> None:
        for variant in dict.fromkeys(ctx.params.variant_list()):
            report = faces.validate_structure(None, variant)
            ctx.validation[variant.name] = report
            if not report["ok"]:
                logging.error("%s rhombohedron failed validation", variant.name)


class FreeCadStep(PipelineStep):
    """Push the meshes into a FreeCAD document when FreeCAD is importable."""

    name = "freecad"

    def should_run(self, ctx: PipelineContext) -> bool:
        from .freecad_view import freecad_available

        return ctx.scene is not None and freecad_available()

    def execute(self, ctx: PipelineContext) -> None:
        from .freecad_view import FreeCadRenderer

        try:
            renderer = FreeCadRenderer(group_position=ctx.params.group_position)
            ctx.scene.attach(renderer)
            ctx.renderer = renderer
        except Exception as exc:
            logging.warning("FreeCAD scene creation failed: %s", exc)


class ExportStep(PipelineStep):
    """Write manifest / OBJ / STL files according to the export flags."""

    name = "export"

    def should_run(self, ctx: PipelineContext) -> bool:
        p = ctx.params
        return bool(ctx.meshes) and (p.export_manifest or p.export_obj or p.export_stl)

    def execute(self, ctx: PipelineContext) -> None:
        ctx.out_dir.mkdir(parents=True, exist_ok=True)
        p = ctx.params
        if p.export_manifest:
            path = ctx.out_dir / ctx.manifest_name
            export.export_manifest(ctx.meshes, path, ctx.labels, p.group_position)
            ctx.written.append(path)
        if p.export_obj:
            path = ctx.out_dir / ctx.obj_name
            export.export_obj(ctx.meshes, path, ctx.labels)
            ctx.written.append(path)
        if p.export_stl:
            path = ctx.out_dir / ctx.stl_name
            export.export_stl(ctx.meshes, path)
            ctx.written.append(path)


def default_steps() -> List[PipelineStep]:
    return [GeometryStep(), ValidationStep(), FreeCadStep(), ExportStep()]


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


class RhombohedronPipeline:
    """Ordered list of steps executed against a shared context."""

    def __init__(self, steps: List[PipelineStep] | None = None) -> None:
        self.steps: List[PipelineStep] = steps if steps is not None else default_steps()

    def run(self, ctx: PipelineContext) -> None:
        """Execute all enabled steps in order."""
        for step in self.steps:
            if not step.should_run(ctx):
                logging.debug("[pipeline] skipping %s", step.name)
                continue
            logging.info("[pipeline] %s", step.name)
            step.execute(ctx)

    def insert_before(self, reference_name: str, step: PipelineStep) -> None:
        """Insert *step* before the step named *reference_name* (or at the front)."""
        for i, existing in enumerate(self.steps):
            if existing.name == reference_name:
                self.steps.insert(i, step)
                return
        self.steps.insert(0, step)

    def insert_after(self, reference_name: str, step: PipelineStep) -> None:
        """Insert *step* after the step named *reference_name* (or at the end)."""
        for i, existing in enumerate(self.steps):
            if existing.name == reference_name:
                self.steps.insert(i + 1, step)
                return
        self.steps.append(step)

    def remove(self, step_name: str) -> None:
        """Remove the step with the given name, if present."""
        self.steps = [s for s in self.steps if s.name != step_name]

    def replace(self, step_name: str, new_step: PipelineStep) -> None:
        """Replace an existing step with *new_step*."""
        for i, existing in enumerate(self.steps):
            if existing.name == step_name:
                self.steps[i] = new_step
                return
        self.steps.append(new_step)
