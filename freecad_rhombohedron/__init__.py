"""Golden rhombohedron mesh generator with FreeCAD viewer glue."""

from .meshes import DEFAULT_COLORS, MeshDescriptor, generate_rhombohedron
from .rhombohedron import Variant

__version__ = "0.1.0"

__all__ = [
    "constants",
    "export",
    "faces",
    "freecad_view",
    "meshes",
    "parameters",
    "pipeline",
    "rhombohedron",
    "scene",
    "vec3",
    "DEFAULT_COLORS",
    "MeshDescriptor",
    "Variant",
    "generate_rhombohedron",
    "__version__",
]
