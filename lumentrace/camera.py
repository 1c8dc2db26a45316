"""
Camera module for generating primary rays.

Pinhole camera with a fixed world up vector: it can pan and tilt but never
roll. Pixels are addressed by a row-major linear index.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
import math

from .vec3 import Vec3, Point3
from .ray import Ray

WORLD_UP = Vec3(0, 1, 0)

# Right vector used when the view is vertical and cross(view, up) vanishes
FALLBACK_RIGHT = Vec3(1, 0, 0)


@dataclass(frozen=True)
class Camera:
    """Camera placement for one frame.

    Attributes:
        origin: Camera position in world space
        view_dir: Viewing direction (normalized when rays are generated)
        interest_point: Point the orbit helper circles around
    """
    origin: Point3 = field(default_factory=Point3)
    view_dir: Vec3 = field(default_factory=lambda: Vec3(0, 0, -1))
    interest_point: Point3 = field(default_factory=lambda: Point3(0, 0, -17))

    def basis(self) -> tuple[Vec3, Vec3]:
        """Return the (right, up) unit vectors spanning the image plane."""
        right = self.view_dir.cross(WORLD_UP)
        if right.near_zero():
            right = FALLBACK_RIGHT
        right = right.normalize()
        up = right.cross(self.view_dir).normalize()
        return right, up

    def primary_ray(self, pixel_index: int, width: int, height: int, fov: float) -> Ray:
        """Generate the ray through the centre of a pixel.

        Args:
            pixel_index: Row-major index, row * width + column
            width: Image width in pixels
            height: Image height in pixels
            fov: Horizontal field of view in radians

        Returns:
            A normalized ray from the camera origin
        """
        row, col = divmod(pixel_index, width)

        right, up = self.basis()
        viewport_width = 2.0 * self.view_dir.length() * math.tan(fov / 2.0)
        viewport_height = viewport_width * height / width

        col_step = right * (viewport_width / width)
        row_step = up * (viewport_height / height)

        direction = (
            self.view_dir
            + col_step * (col + 0.5 - width / 2.0)
            - row_step * (row + 0.5 - height / 2.0)
        ).normalize()

        return Ray(self.origin, direction)

    def orbit(self, angle: float, distance: float = 15.0) -> Camera:
        """Camera on a horizontal circle around the interest point, facing it.

        Args:
            angle: Position on the circle in radians
            distance: Circle radius

        Returns:
            A new camera; this one is left untouched
        """
        view_dir = Vec3(math.cos(angle), 0.0, math.sin(angle))
        return replace(
            self,
            view_dir=view_dir,
            origin=self.interest_point - view_dir * distance
        )

    def __repr__(self) -> str:
        return f"Camera(origin={self.origin}, view_dir={self.view_dir})"
