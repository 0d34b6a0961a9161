"""Export utilities for generated rhombohedron meshes.

Writes a JSON manifest of mesh descriptors plus Wavefront OBJ and ASCII STL
files. The writers are plain text so they work without FreeCAD.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Sequence

from . import vec3 as v3
from .meshes import MeshDescriptor

__all__ = [
    "export_manifest",
    "export_obj",
    "export_stl",
]


# ---------------------------------------------------------------------------
# Manifest export
# ---------------------------------------------------------------------------

def export_manifest(
    shapes: Sequence[Sequence[MeshDescriptor]],
    destination: Path,
    labels: Sequence[str] | None = None,
    group_position: Sequence[float] = (0.0, 0.0, 0.0),
) -> None:
    """Write per-face descriptors, grouped by solid, as a JSON manifest."""
    manifest = {
        "group_position": list(group_position),
        "shapes": [
            {
                "label": labels[i] if labels else f"shape_{i}",
                "faces": [mesh.to_dict() for mesh in meshes],
            }
            for i, meshes in enumerate(shapes)
        ],
    }
    destination.write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    logging.info("Wrote manifest %s", destination)


# ---------------------------------------------------------------------------
# OBJ / STL exports
# ---------------------------------------------------------------------------

def _fmt(value: float) -> str:
    return f"{value:.9g}"


def export_obj(
    shapes: Sequence[Sequence[MeshDescriptor]],
    destination: Path,
    labels: Sequence[str] | None = None,
) -> None:
    """One OBJ object per face; positions include the descriptor offset."""
    lines: List[str] = ["# golden rhombohedra"]
    base = 1  # OBJ indices are 1-based
    for i, meshes in enumerate(shapes):
        label = labels[i] if labels else f"shape_{i}"
        for mesh in meshes:
            lines.append(f"o {label}_face{mesh.index}")
            points = mesh.world_points()
            for x, y, z in points:
                lines.append(f"v {_fmt(x)} {_fmt(y)} {_fmt(z)}")
            for t in range(0, len(points), 3):
                lines.append(f"f {base + t} {base + t + 1} {base + t + 2}")
            base += len(points)
    destination.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logging.info("Wrote OBJ %s", destination)


def export_stl(
    shapes: Sequence[Sequence[MeshDescriptor]],
    destination: Path,
    name: str = "rhombohedra",
) -> None:
    """ASCII STL with right-hand facet normals."""
    lines: List[str] = [f"solid {name}"]
    facets = 0
    for meshes in shapes:
        for mesh in meshes:
            points = mesh.world_points()
            for t in range(0, len(points), 3):
                a, b, c = points[t], points[t + 1], points[t + 2]
                try:
                    n = v3.normalize(v3.cross(v3.sub(b, a), v3.sub(c, a)))
                except ValueError:
                    logging.warning("Skipping degenerate facet in face %d", mesh.index)
                    continue
                lines.append(f"  facet normal {_fmt(n[0])} {_fmt(n[1])} {_fmt(n[2])}")
                lines.append("    outer loop")
                for x, y, z in (a, b, c):
                    lines.append(f"      vertex {_fmt(x)} {_fmt(y)} {_fmt(z)}")
                lines.append("    endloop")
                lines.append("  endfacet")
                facets += 1
    lines.append(f"endsolid {name}")
    destination.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logging.info("Wrote STL %s (%d facets)", destination, facets)
