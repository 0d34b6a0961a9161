"""Face triangulation and structural validation for golden rhombohedra."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, List, Sequence, Tuple

from . import vec3 as v3
from .constants import AE, PHI
from .rhombohedron import Variant, build_vertices

__all__ = [
    "Triangle",
    "FaceTriangles",
    "FACE_TABLES",
    "face_indices",
    "face_loops",
    "triangulate",
    "triangle_normal",
    "face_centroid",
    "signed_volume",
    "validate_structure",
]

Vector3 = v3.Vector3
Triangle = Tuple[int, int, int]
FaceTriangles = Tuple[Triangle, Triangle]

# Two triangles per rhombus, sharing one of its diagonals. Counter-clockwise
# when seen from outside the solid, so the right-hand normal points outward.
FACE_TABLES: Dict[Variant, Tuple[FaceTriangles, ...]] = {
    Variant.ACUTE: (
        ((1, 0, 2), (3, 2, 0)),  # BAC, DCA
        ((1, 2, 5), (6, 5, 2)),  # BCT, UTC
        ((1, 5, 0), (4, 0, 5)),  # BTA, SAT
        ((7, 3, 4), (0, 4, 3)),  # VDS, ASD
        ((7, 6, 3), (2, 3, 6)),  # VUD, CDU
        ((7, 4, 6), (5, 6, 4)),  # VSU, TUS
    ),
    Variant.OBTUSE: (
        ((2, 1, 0), (2, 0, 3)),  # CBA, CAD
        ((2, 5, 1), (2, 6, 5)),  # CUB, CVU
        ((3, 7, 2), (6, 2, 7)),  # DSC, VCS
        ((4, 3, 0), (4, 7, 3)),  # TDA, TSD
        ((4, 1, 5), (4, 0, 1)),  # TBU, TAB
        ((4, 5, 6), (4, 6, 7)),  # TUV, TVS
    ),
}


def face_indices(variant: Variant | str) -> Tuple[FaceTriangles, ...]:
    return FACE_TABLES[Variant.parse(variant)]


def _rhombus_loop(first: Triangle, second: Triangle) -> Tuple[int, int, int, int]:
    # Splice the second triangle's free vertex between the shared diagonal
    # ends so the loop keeps the first triangle's winding.
    extra = [i for i in second if i not in first]
    shared = set(first) & set(second)
    if len(extra) != 1 or len(shared) != 2:
        raise ValueError(f"Triangles {first} and {second} do not share exactly one edge")
    loop: List[int] = []
    for k in range(3):
        a, b = first[k], first[(k + 1) % 3]
        loop.append(a)
        if {a, b} == shared:
            loop.append(extra[0])
    return tuple(loop)  # type: ignore[return-value]


def face_loops(variant: Variant | str) -> List[Tuple[int, int, int, int]]:
    """Boundary of each rhombic face as 4 vertex indices, outward winding."""

    return [_rhombus_loop(first, second) for first, second in face_indices(variant)]


def triangulate(vertices: Sequence[Vector3], variant: Variant | str) -> List[Tuple[float, ...]]:
    """Flatten each face into 18 floats: 2 triangles x 3 vertices x (x, y, z)."""

    if len(vertices) != 8:
        raise ValueError(f"A rhombohedron has 8 vertices, got {len(vertices)}")
    faces: List[Tuple[float, ...]] = []
    for first, second in face_indices(variant):
        coords: List[float] = []
        for idx in (*first, *second):
            coords.extend(vertices[idx])
        faces.append(tuple(coords))
    return faces


def triangle_normal(a: Vector3, b: Vector3, c: Vector3) -> Vector3:
    """Unnormalized right-hand normal of triangle ``abc``."""
    return v3.cross(v3.sub(b, a), v3.sub(c, a))


def face_centroid(vertices: Sequence[Vector3], loop: Sequence[int]) -> Vector3:
    return v3.mean(vertices[i] for i in loop)


def signed_volume(vertices: Sequence[Vector3], variant: Variant | str) -> float:
    """Enclosed volume by the divergence theorem; negative if winding is inverted."""

    total = 0.0
    for tri in (t for pair in face_indices(variant) for t in pair):
        a, b, c = (vertices[i] for i in tri)
        total += v3.dot(a, v3.cross(b, c))
    return total / 6.0


def validate_structure(
    vertices: Sequence[Vector3] | None,
    variant: Variant | str,
    tolerance: float = 1e-9,
) -> Dict[str, object]:
    """Check incidence, edge lengths, winding and face shape of a solid.

    ``vertices`` may be ``None`` to check the canonical unit-edge layout.
    """

    variant = Variant.parse(variant)
    if vertices is None:
        vertices = build_vertices(variant)

    loops = face_loops(variant)
    incidence = Counter(idx for loop in loops for idx in loop)
    bad_incidence = [
        (idx, incidence.get(idx, 0)) for idx in range(len(vertices)) if incidence.get(idx, 0) != 3
    ]

    edge_lengths: Dict[Tuple[int, int], float] = {}
    for loop in loops:
        for i, a in enumerate(loop):
            b = loop[(i + 1) % 4]
            key = (min(a, b), max(a, b))
            edge_lengths[key] = v3.distance(vertices[a], vertices[b])
    lengths = list(edge_lengths.values())
    edge_stats = {
        "count": len(lengths),
        "min": min(lengths),
        "max": max(lengths),
    }

    center = v3.mean(vertices)
    inward_faces: List[Dict[str, object]] = []
    diagonal_ratios: List[float] = []
    face_areas: List[float] = []
    for face_no, ((first, second), loop) in enumerate(zip(face_indices(variant), loops)):
        outward = v3.sub(face_centroid(vertices, loop), center)
        area = 0.0
        for tri in (first, second):
            normal = triangle_normal(*(vertices[i] for i in tri))
            area += v3.norm(normal) / 2
            if v3.dot(normal, outward) <= 0:
                inward_faces.append({"face": face_no, "triangle": tri})
        face_areas.append(area)
        d1 = v3.distance(vertices[loop[0]], vertices[loop[2]])
        d2 = v3.distance(vertices[loop[1]], vertices[loop[3]])
        diagonal_ratios.append(max(d1, d2) / min(d1, d2))

    # Edge-length spread is a relative check so scaled solids validate too.
    unit = edge_stats["max"] or 1.0
    uniform_edges = (edge_stats["max"] - edge_stats["min"]) <= tolerance * unit
    golden_faces = all(abs(r - PHI) <= 1e-6 for r in diagonal_ratios)
    volume = signed_volume(vertices, variant)

    report: Dict[str, object] = {
        "variant": variant.name,
        "vertex_incidence": dict(sorted(incidence.items())),
        "bad_incidence": bad_incidence,
        "edge_lengths": edge_stats,
        "uniform_edges": uniform_edges,
        "inward_faces": inward_faces,
        "diagonal_ratios": diagonal_ratios,
        "golden_faces": golden_faces,
        "face_area_stats": {
            "min": min(face_areas),
            "max": max(face_areas),
            "expected_unit": AE,
        },
        "volume": volume,
    }
    report["ok"] = not bad_incidence and uniform_edges and not inward_faces and volume > 0

    if bad_incidence:
        logging.error("%s: vertices not on exactly 3 faces: %s", variant.name, bad_incidence)
    if not uniform_edges:
        logging.error("%s: edge lengths differ: %s", variant.name, edge_stats)
    if inward_faces:
        logging.error("%s: %d triangles wound inward: %s", variant.name, len(inward_faces), inward_faces)
    if not golden_faces:
        logging.warning("%s: face diagonal ratios off golden: %s", variant.name, diagonal_ratios)
    logging.info("%s: volume=%.6f edges=%s", variant.name, volume, edge_stats)
    return report
