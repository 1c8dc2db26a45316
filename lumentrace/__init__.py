"""
lumentrace - A Python Whitted-style Ray Tracer

Renders a scene of spheres, planes and triangle meshes lit by point lights:
- Hard shadows from shadow rays
- Recursive mirror reflection and refraction
- Bounding box pruning for meshes
- Pure per-pixel rendering, safe to run on any number of threads
"""

__version__ = "0.1.0"
__author__ = "lumentrace Team"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .materials import Material, IVORY, GLASS, RED_RUBBER, MIRROR, BLUE_RUBBER
from .lights import Light
from .shapes import (
    EPSILON, Entity, HitRecord, Intersectable, BoundingBox,
    Sphere, Plane, Triangle, Model, Scene,
    GeometryError, InvalidRadiusError
)
from .mesh import MalformedFaceError, build_triangles, build_model
from .camera import Camera
from .render import RenderSettings, RenderState, reflect, refract, TOTAL_INTERNAL_REFLECTION
from .renderer import Renderer, render_frame, to_ldr
