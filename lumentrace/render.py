"""
Recursive Whitted-style shading.

Implements:
- Direct illumination from point lights with hard shadows
- Mirror reflection and Snell refraction, traced recursively
- Camera ray generation per pixel

A RenderState is read-only while a frame is rendered: every pixel is a pure
function of the state and the pixel index, so pixels may be computed in any
order and on any number of threads.
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from .vec3 import Vec3, Color, Point3
from .ray import Ray
from .camera import Camera
from .lights import Light
from .materials import Material
from .shapes import EPSILON, Scene

WHITE = Color(1.0, 1.0, 1.0)

# Stand-in direction on total internal reflection, weighted by the
# refraction albedo like any refracted ray
TOTAL_INTERNAL_REFLECTION = Vec3(1.0, 0.0, 0.0)


@dataclass(frozen=True)
class RenderSettings:
    """Global render parameters, fixed for the lifetime of a frame."""
    width: int = 400
    height: int = 300
    fov: float = 0.95  # radians
    recursion_limit: int = 7
    background_color: Color = field(default_factory=lambda: Color(0.2, 0.7, 0.8))

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Resolution must be positive, got {self.width}x{self.height}")
        if not self.fov > 0:
            raise ValueError(f"Field of view must be positive, got {self.fov}")
        if self.recursion_limit < 0:
            raise ValueError(f"Recursion limit must be non-negative, got {self.recursion_limit}")

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


def reflect(direction: Vec3, normal: Vec3) -> Vec3:
    """Mirror `direction` about `normal`."""
    return direction.reflect(normal)


def refract(direction: Vec3, normal: Vec3, eta_t: float, eta_i: float = 1.0) -> Vec3:
    """Refract `direction` through a surface by Snell's law.

    Args:
        direction: Incident direction
        normal: Outward surface normal
        eta_t: Refractive index on the far side of the surface
        eta_i: Refractive index on the incident side

    Returns:
        Refracted direction (not normalized), or TOTAL_INTERNAL_REFLECTION
    """
    cos_i = -max(-1.0, min(1.0, direction.dot(normal)))
    if cos_i < 0:
        # Leaving the medium: flip the normal and swap the indices
        return refract(direction, -normal, eta_i, eta_t)

    eta = eta_i / eta_t
    k = 1.0 - eta * eta * (1.0 - cos_i * cos_i)
    if k < 0:
        return TOTAL_INTERNAL_REFLECTION
    return direction * eta + normal * (eta * cos_i - math.sqrt(k))


@dataclass(frozen=True)
class RenderState:
    """Everything needed to shade one frame.

    Attributes:
        settings: Resolution, field of view, recursion limit, background
        camera: Camera placement for this frame
        scene: Root of the scene graph
        lights: Point lights
    """
    settings: RenderSettings
    camera: Camera = field(default_factory=Camera)
    scene: Scene = field(default_factory=Scene)
    lights: Tuple[Light, ...] = ()

    def with_camera(self, camera: Camera) -> RenderState:
        """State for the next frame, sharing scene, lights and settings."""
        return replace(self, camera=camera)

    def is_shadowed(self, point: Point3, light: Light) -> bool:
        """True if geometry lies between `point` and the light.

        Geometry beyond the light does not block it.
        """
        blocker = self.scene.intersect(Ray(point, light.direction_from(point)))
        if blocker is None:
            return False
        return blocker.distance_squared(point) <= point.distance_squared(light.position)

    def light_intensities(
        self,
        point: Point3,
        view_dir: Vec3,
        normal: Vec3,
        material: Material
    ) -> Tuple[float, float]:
        """Summed (diffuse, specular) intensity of every unshadowed light."""
        diffuse = 0.0
        specular = 0.0
        for light in self.lights:
            if self.is_shadowed(point, light):
                continue
            d, s = light.scales(point, view_dir, normal, material)
            diffuse += d
            specular += s
        return diffuse, specular

    def cast_ray(self, depth: int, ray: Ray) -> Color:
        """Color seen along a ray, tracing reflection and refraction.

        Args:
            depth: Number of bounces already taken
            ray: The ray to trace

        Returns:
            Linear color, unclamped
        """
        background = self.settings.background_color
        if depth >= self.settings.recursion_limit:
            return background

        hit = self.scene.intersect(ray)
        if hit is None:
            return background

        point, normal, material = hit.point, hit.normal, hit.material

        # Skip recursive branches the material would weight to nothing
        if abs(material.reflection_weight) < EPSILON:
            reflect_color = Color()
        else:
            reflect_dir = reflect(ray.direction, normal).normalize()
            reflect_color = self.cast_ray(depth + 1, Ray(point, reflect_dir))

        if abs(material.refraction_weight) < EPSILON:
            refract_color = Color()
        else:
            refract_dir = refract(ray.direction, normal, material.refractive_index).normalize()
            refract_color = self.cast_ray(depth + 1, Ray(point, refract_dir))

        diffuse, specular = self.light_intensities(point, ray.direction, normal, material)

        return Vec3.sum([
            material.diffuse_color * diffuse * material.diffuse_weight,
            WHITE * specular * material.specular_weight,
            reflect_color * material.reflection_weight,
            refract_color * material.refraction_weight,
        ])

    def primary_ray(self, pixel_index: int) -> Ray:
        settings = self.settings
        return self.camera.primary_ray(
            pixel_index, settings.width, settings.height, settings.fov
        )

    def render_scene_pixel(self, pixel_index: int) -> Color:
        """Color of one pixel, addressed row-major."""
        return self.cast_ray(0, self.primary_ray(pixel_index))

    def render_pixels(self, pixel_indices: Optional[range] = None) -> List[Color]:
        """Colors for a run of pixels, the whole frame by default."""
        if pixel_indices is None:
            pixel_indices = range(self.settings.pixel_count)
        return [self.render_scene_pixel(idx) for idx in pixel_indices]
