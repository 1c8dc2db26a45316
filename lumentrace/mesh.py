"""
Conversion of indexed triangle meshes into renderable geometry.

File formats are parsed elsewhere; this module receives a shared point list
and faces as index triples into it, and applies the validation policy:
- a face that is not a triangle is a hard error
- a face referencing a point that does not exist is dropped
"""

from __future__ import annotations
import logging
from typing import List, Sequence

from .vec3 import Point3
from .materials import Material
from .shapes import GeometryError, Model, Triangle

logger = logging.getLogger(__name__)


class MalformedFaceError(GeometryError):
    """A face record does not have exactly three vertex indices."""
    pass


def build_triangles(
    points: Sequence[Point3],
    faces: Sequence[Sequence[int]],
    material: Material
) -> List[Triangle]:
    """Build triangles from 0-based index triples into `points`.

    Args:
        points: Shared vertex positions
        faces: One index triple per triangle, in winding order
        material: Material applied to every triangle

    Returns:
        Triangles in face order, without the faces that were dropped

    Raises:
        MalformedFaceError: If any face does not have exactly three indices
    """
    point_count = len(points)
    triangles = []
    dropped = 0

    for face_num, face in enumerate(faces):
        if len(face) != 3:
            raise MalformedFaceError(
                f"Face {face_num} has {len(face)} vertex indices, only triangles are supported"
            )

        if not all(0 <= idx < point_count for idx in face):
            dropped += 1
            continue

        a, b, c = (points[idx] for idx in face)
        triangles.append(Triangle(a, b, c, material))

    if dropped:
        logger.warning(
            "Dropped %d of %d faces with vertex indices outside 0..%d",
            dropped, len(faces), point_count - 1
        )

    return triangles


def build_model(
    points: Sequence[Point3],
    faces: Sequence[Sequence[int]],
    material: Material
) -> Model:
    """Convenience function to build a bounded Model from an indexed mesh."""
    return Model(build_triangles(points, faces, material))
