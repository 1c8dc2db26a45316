"""
Geometric entities for the ray tracer.

Every entity implements `intersect(ray)`, returning a HitRecord for the
nearest hit at a positive distance along the ray, or None. The entity kinds
form a closed set (see `Entity`): three leaf shapes carrying a material, and
two composites that reduce their children to the nearest hit.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Union
import math

from .vec3 import Vec3, Point3
from .ray import Ray
from .materials import Material

# Distance and orientation tolerance against self-intersection noise
EPSILON = 1e-3

# Möller-Trumbore determinant tolerance; the determinant scales with
# triangle area so it needs a much smaller cutoff than EPSILON
DETERMINANT_EPSILON = 1e-8


class GeometryError(ValueError):
    """Geometry was constructed from invalid input."""
    pass


class InvalidRadiusError(GeometryError):
    """A sphere was given a non-positive radius."""
    pass


@dataclass(frozen=True)
class HitRecord:
    """Stores information about a ray-object intersection.

    Attributes:
        point: The intersection point in world space
        normal: The unit surface normal at the intersection
        material: The material at the hit point
    """
    point: Point3
    normal: Vec3
    material: Material

    def distance_squared(self, origin: Point3) -> float:
        """Squared distance from `origin`, the ordering key for nearest hits."""
        return self.point.distance_squared(origin)


def nearest_hit(
    entities: Iterable[Intersectable], ray: Ray
) -> Optional[HitRecord]:
    """Intersect every entity and keep the hit closest to the ray origin.

    Exact ties keep the entity that comes first.
    """
    closest: Optional[HitRecord] = None
    closest_dist = math.inf

    for entity in entities:
        hit = entity.intersect(ray)
        if hit is None:
            continue
        dist = hit.distance_squared(ray.origin)
        if dist < closest_dist:
            closest = hit
            closest_dist = dist

    return closest


class Intersectable(ABC):
    """Abstract base class for all objects that can be hit by rays."""

    @abstractmethod
    def intersect(self, ray: Ray) -> Optional[HitRecord]:
        """Test if ray intersects this object.

        Args:
            ray: The ray to test

        Returns:
            HitRecord if intersection found, None otherwise
        """
        pass


class BoundingBox:
    """Axis-aligned bounding box used to prune rays before costly tests."""

    __slots__ = ('minimum', 'maximum')

    def __init__(self, minimum: Point3, maximum: Point3):
        """Create a box from corner points.

        Args:
            minimum: Corner with smallest x, y, z values
            maximum: Corner with largest x, y, z values
        """
        self.minimum = minimum
        self.maximum = maximum

    @classmethod
    def from_points(cls, points: Sequence[Point3]) -> BoundingBox:
        """Smallest box containing every point (needs at least one)."""
        if not points:
            raise GeometryError("Bounding box needs at least one point")
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        zs = [p.z for p in points]
        return cls(
            Point3(min(xs), min(ys), min(zs)),
            Point3(max(xs), max(ys), max(zs))
        )

    def __getitem__(self, index: int) -> Point3:
        """Corner by sign bit: 0 is the minimum corner, 1 the maximum."""
        return self.maximum if index else self.minimum

    def intersects(self, ray: Ray) -> bool:
        """Slab test: can the ray enter the box in front of its origin?

        The ray's sign bit picks the near corner per axis, so there is no
        branching on direction here.

        A ray parallel to an axis whose origin lies on that axis' face gives
        NaN slab bounds (0 * inf). Plain comparisons are False for NaN, so
        such a bound never narrows the interval and the ray is kept.
        """
        origin = ray.origin
        inv = ray.inv_direction
        t_near = 0.0
        t_far = math.inf

        for axis, sign in enumerate(ray.sign):
            near = (self[sign][axis] - origin[axis]) * inv[axis]
            far = (self[1 - sign][axis] - origin[axis]) * inv[axis]
            if near > t_near:
                t_near = near
            if far < t_far:
                t_far = far

        return t_near <= t_far

    def __repr__(self) -> str:
        return f"BoundingBox(min={self.minimum}, max={self.maximum})"


class Sphere(Intersectable):
    """A sphere defined by center and radius."""

    def __init__(self, center: Point3, radius: float, material: Material):
        """Create a sphere.

        Args:
            center: Center point of the sphere
            radius: Radius of the sphere, strictly positive
            material: Material for shading

        Raises:
            InvalidRadiusError: If radius is not positive
        """
        if not radius > 0:
            raise InvalidRadiusError(f"Sphere radius must be positive, got {radius}")
        self.center = center
        self.radius = radius
        self.material = material

    def intersect(self, ray: Ray) -> Optional[HitRecord]:
        """Geometric ray-sphere test.

        Projects the center onto the ray, rejects if the closest approach
        is outside the radius, then takes the near root or, when that one
        is at the origin or behind it, the far root. A ray starting inside
        the sphere therefore sees the far wall.
        """
        to_center = self.center - ray.origin
        tca = to_center.dot(ray.direction)
        d2 = to_center.dot(to_center) - tca * tca
        radius_sq = self.radius * self.radius
        if d2 > radius_sq:
            return None

        thc = math.sqrt(radius_sq - d2)
        t0 = tca - thc
        t1 = tca + thc
        if t0 < EPSILON:
            t0 = t1
        if t0 < EPSILON:
            return None

        point = ray.at(t0)
        # Outward normal; shading relies on it to tell entering from exiting
        normal = (point - self.center).normalize()
        return HitRecord(point, normal, self.material)

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class Plane(Intersectable):
    """An infinite one-sided plane defined by a point and normal."""

    def __init__(self, point: Point3, normal: Vec3, material: Material):
        """Create a plane.

        Args:
            point: Any point on the plane
            normal: The plane's normal vector (will be normalized)
            material: Material for shading
        """
        self.point = point
        self.normal = normal.normalize()
        self.material = material

    def intersect(self, ray: Ray) -> Optional[HitRecord]:
        """Point-normal plane test; only rays heading into the normal hit."""
        denominator = ray.direction.dot(self.normal)
        # Parallel, or moving away from the lit side
        if denominator > -EPSILON:
            return None

        numerator = (self.point - ray.origin).dot(self.normal)
        # Plane behind the origin, or the origin is on the plane
        if numerator * denominator < EPSILON:
            return None

        point = ray.at(numerator / denominator)
        return HitRecord(point, self.normal, self.material)

    def __repr__(self) -> str:
        return f"Plane(point={self.point}, normal={self.normal})"


class Triangle(Intersectable):
    """A triangle defined by three vertices.

    The winding a -> b -> c fixes the normal, cross(b - a, c - b).
    """

    def __init__(self, a: Point3, b: Point3, c: Point3, material: Material):
        self.points = (a, b, c)
        self.material = material

        # Pre-compute edges, normal and plane distance
        self.edge_ab = b - a
        self.edge_ac = c - a
        self.normal = self.edge_ab.cross(c - b).normalize()
        self.distance = a.dot(self.normal)

    def intersect(self, ray: Ray) -> Optional[HitRecord]:
        """Test ray-triangle intersection using Möller-Trumbore algorithm."""
        # Back faces are culled, as for planes
        if ray.direction.dot(self.normal) > EPSILON:
            return None

        a = self.points[0]
        u_vec = ray.direction.cross(self.edge_ac)
        det = self.edge_ab.dot(u_vec)

        # Ray is parallel to triangle
        if abs(det) < DETERMINANT_EPSILON:
            return None

        normal = -self.normal if det < 0.0 else self.normal
        inv_det = 1.0 / det

        a_to_origin = ray.origin - a
        u = a_to_origin.dot(u_vec) * inv_det
        if u < -EPSILON or u > 1.0 + EPSILON:
            return None

        v_vec = a_to_origin.cross(self.edge_ab)
        v = ray.direction.dot(v_vec) * inv_det
        if v < -EPSILON or u + v > 1.0 + EPSILON:
            return None

        dist = self.edge_ac.dot(v_vec) * inv_det
        if dist <= EPSILON:
            return None

        return HitRecord(ray.at(dist), normal, self.material)

    def __repr__(self) -> str:
        a, b, c = self.points
        return f"Triangle({a}, {b}, {c})"


class Model(Intersectable):
    """A triangle mesh behind a single bounding box.

    The box is computed once over every vertex; rays that miss it never
    reach the per-triangle tests.
    """

    def __init__(self, triangles: Iterable[Triangle]):
        self.triangles: List[Triangle] = list(triangles)
        self.bounding_box: Optional[BoundingBox] = None
        if self.triangles:
            self.bounding_box = BoundingBox.from_points(
                [p for tri in self.triangles for p in tri.points]
            )

    def intersect(self, ray: Ray) -> Optional[HitRecord]:
        """Nearest triangle hit, if the ray can enter the bounding box."""
        if self.bounding_box is None or not self.bounding_box.intersects(ray):
            return None
        return nearest_hit(self.triangles, ray)

    def __len__(self) -> int:
        return len(self.triangles)

    def __repr__(self) -> str:
        return f"Model(triangles={len(self.triangles)}, bounds={self.bounding_box})"


class Scene(Intersectable):
    """A collection of entities, possibly nested scenes."""

    def __init__(self, entities: Optional[Iterable[Entity]] = None):
        self.entities: List[Entity] = list(entities) if entities is not None else []

    def add(self, entity: Entity) -> None:
        """Add an entity. Only valid while the scene is being set up."""
        self.entities.append(entity)

    def intersect(self, ray: Ray) -> Optional[HitRecord]:
        """Find the closest intersection among all entities."""
        return nearest_hit(self.entities, ray)

    def __len__(self) -> int:
        return len(self.entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self.entities)


Entity = Union[Sphere, Plane, Triangle, Model, Scene]
