"""
Point lights for direct illumination.

A light only knows how strongly it lights a visible point; whether the
point is visible at all is decided by the shadow test in the render state.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

from .vec3 import Vec3, Point3
from .materials import Material


@dataclass(frozen=True)
class Light:
    """A point light emitting white light equally in all directions.

    Attributes:
        position: Position of the light
        intensity: Brightness multiplier (no distance falloff)
    """
    position: Point3
    intensity: float = 1.0

    def direction_from(self, point: Point3) -> Vec3:
        """Unit direction from a surface point towards the light."""
        return (self.position - point).normalize()

    def scales(
        self,
        hit: Point3,
        view_dir: Vec3,
        normal: Vec3,
        material: Material
    ) -> Tuple[float, float]:
        """Diffuse and specular intensity this light adds at a hit point.

        Args:
            hit: The lit surface point
            view_dir: Direction of the incoming view ray
            normal: Surface normal at the hit
            material: Surface material (for the specular exponent)

        Returns:
            Tuple of (diffuse_intensity, specular_intensity)
        """
        light_dir = self.direction_from(hit)

        diffuse = self.intensity * max(0.0, light_dir.dot(normal))

        reflected = -(-light_dir).reflect(normal)
        base = max(0.0, reflected.dot(view_dir))
        specular = base ** material.specular_exponent * self.intensity

        return diffuse, specular
