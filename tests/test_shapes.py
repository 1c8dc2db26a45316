"""Tests for geometric shapes."""

import pytest
import math
from lumentrace.vec3 import Vec3, Point3, Color
from lumentrace.ray import Ray
from lumentrace.materials import Material
from lumentrace.shapes import (
    Sphere, Plane, Triangle, Model, Scene, BoundingBox, HitRecord,
    InvalidRadiusError, GeometryError, EPSILON
)


WHITE = Material(diffuse_color=Color(1, 1, 1))
RED = Material(diffuse_color=Color(1, 0, 0))


def unit_triangle(material=WHITE, z=0.0):
    """Triangle in a z plane with normal +z."""
    return Triangle(Point3(0, 0, z), Point3(1, 0, z), Point3(0, 1, z), material)


class TestSphere:
    """Test Sphere class."""

    def test_creation(self):
        center = Point3(0, 0, 0)
        sphere = Sphere(center, 1.0, WHITE)
        assert sphere.center == center
        assert sphere.radius == 1.0

    @pytest.mark.parametrize("radius", [0.0, -1.0])
    def test_non_positive_radius_is_rejected(self, radius):
        with pytest.raises(InvalidRadiusError):
            Sphere(Point3(0, 0, 0), radius, WHITE)

    def test_invalid_radius_is_geometry_error(self):
        with pytest.raises(GeometryError):
            Sphere(Point3(0, 0, 0), -2.0, WHITE)

    def test_hit_through_center(self):
        center = Point3(0, 0, -10)
        radius = 2.0
        sphere = Sphere(center, radius, WHITE)
        origin = Point3(0, 0, 0)
        ray = Ray(origin, Vec3(0, 0, -1))
        hit = sphere.intersect(ray)

        assert hit is not None
        assert hit.point.distance(origin) == pytest.approx(origin.distance(center) - radius)
        assert hit.normal == (hit.point - center) / radius

    def test_hit_from_off_axis(self):
        center = Point3(3, 4, 5)
        sphere = Sphere(center, 1.5, WHITE)
        origin = Point3(-2, 1, 0)
        ray = Ray(origin, (center - origin).normalize())
        hit = sphere.intersect(ray)

        assert hit is not None
        assert hit.point.distance(origin) == pytest.approx(origin.distance(center) - 1.5)
        assert hit.normal == (hit.point - center) / 1.5

    def test_normal_faces_ray_from_outside(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0, WHITE)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        hit = sphere.intersect(ray)
        assert hit.normal.dot(ray.direction) < 0

    def test_hit_from_inside_sees_far_wall(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0, WHITE)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))
        hit = sphere.intersect(ray)

        assert hit is not None
        assert hit.point == Point3(0, 0, 1)
        # Outward normal, so shading can tell the ray is leaving
        assert hit.normal == Vec3(0, 0, 1)

    def test_ray_leaving_surface_does_not_hit_itself(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0, WHITE)
        ray = Ray(Point3(0, 0, 1), Vec3(0, 0, 1))
        assert sphere.intersect(ray) is None

    def test_ray_into_sphere_from_surface_hits_far_side(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0, WHITE)
        ray = Ray(Point3(0, 0, 1), Vec3(0, 0, -1))
        hit = sphere.intersect(ray)
        assert hit is not None
        assert hit.point == Point3(0, 0, -1)

    def test_miss(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0, WHITE)
        ray = Ray(Point3(0, 5, -5), Vec3(0, 0, 1))
        assert sphere.intersect(ray) is None

    def test_behind_ray(self):
        sphere = Sphere(Point3(0, 0, -5), 1.0, WHITE)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))
        assert sphere.intersect(ray) is None

    def test_with_material(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0, RED)
        hit = sphere.intersect(Ray(Point3(0, 0, -5), Vec3(0, 0, 1)))
        assert hit.material is RED


class TestPlane:
    """Test Plane class."""

    def test_normal_is_normalized(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 5, 0), WHITE)
        assert plane.normal == Vec3(0, 1, 0)

    @pytest.mark.parametrize("d", [0.5, 5.0, 123.25])
    def test_orthogonal_hit_at_distance(self, d):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0), WHITE)
        origin = Point3(0, d, 0)
        hit = plane.intersect(Ray(origin, Vec3(0, -1, 0)))

        assert hit is not None
        assert hit.point.distance(origin) == pytest.approx(d)
        assert hit.point.y == pytest.approx(0.0)
        assert hit.normal == Vec3(0, 1, 0)

    def test_hit_at_angle(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0), WHITE)
        hit = plane.intersect(Ray(Point3(0, 5, -5), Vec3(0, -1, 1).normalize()))

        assert hit is not None
        assert hit.point == Point3(0, 0, 0)

    def test_miss_parallel(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0), WHITE)
        assert plane.intersect(Ray(Point3(0, 5, 0), Vec3(1, 0, 0))) is None

    def test_parallel_in_plane(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0), WHITE)
        assert plane.intersect(Ray(Point3(0, 0, 0), Vec3(0, 0, 1))) is None

    def test_miss_moving_away(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0), WHITE)
        assert plane.intersect(Ray(Point3(0, 5, 0), Vec3(0, 1, 0))) is None

    def test_miss_from_back_side(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0), WHITE)
        assert plane.intersect(Ray(Point3(0, -5, 0), Vec3(0, 1, 0))) is None

    def test_miss_plane_behind_origin(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0), WHITE)
        # Heading into the normal but already below the plane
        assert plane.intersect(Ray(Point3(0, -5, 0), Vec3(0, -1, 0))) is None

    def test_origin_on_plane_does_not_hit(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0), WHITE)
        assert plane.intersect(Ray(Point3(2, 0, 3), Vec3(0, -1, 0))) is None


class TestTriangle:
    """Test Triangle class."""

    def test_precomputed_normal_and_distance(self):
        tri = unit_triangle(z=2.0)
        assert tri.normal == Vec3(0, 0, 1)
        assert tri.distance == pytest.approx(2.0)

    def test_hit_through_centroid(self):
        tri = unit_triangle()
        centroid = Point3(1 / 3, 1 / 3, 0)
        origin = centroid + tri.normal * 5
        hit = tri.intersect(Ray(origin, -tri.normal))

        assert hit is not None
        assert hit.point == centroid
        assert hit.normal == Vec3(0, 0, 1)
        assert hit.material is WHITE

    def test_oblique_hit(self):
        tri = unit_triangle()
        target = Point3(0.25, 0.5, 0)
        origin = Point3(2, 3, 4)
        hit = tri.intersect(Ray(origin, (target - origin).normalize()))

        assert hit is not None
        assert hit.point == target
        assert hit.normal.dot(target - origin) < 0

    def test_miss_outside_edges(self):
        tri = unit_triangle()
        # On the triangle's plane, beyond the hypotenuse
        ray = Ray(Point3(0.8, 0.8, 5), Vec3(0, 0, -1))
        assert tri.intersect(ray) is None

    @pytest.mark.parametrize("x, y", [(-0.5, 0.5), (0.5, -0.5), (2.0, 0.0)])
    def test_miss_outside_other_edges(self, x, y):
        tri = unit_triangle()
        assert tri.intersect(Ray(Point3(x, y, 5), Vec3(0, 0, -1))) is None

    def test_edge_tolerance_closes_seams(self):
        tri = unit_triangle()
        # Just past the u + v = 1 edge, inside the tolerance
        ray = Ray(Point3(0.5 + EPSILON / 4, 0.5, 5), Vec3(0, 0, -1))
        assert tri.intersect(ray) is not None

    def test_back_face_is_culled(self):
        tri = unit_triangle()
        ray = Ray(Point3(0.25, 0.25, -5), Vec3(0, 0, 1))
        assert tri.intersect(ray) is None

    def test_parallel_ray_misses(self):
        tri = unit_triangle()
        ray = Ray(Point3(-1, 0.25, 0), Vec3(1, 0, 0))
        assert tri.intersect(ray) is None

    def test_triangle_behind_origin_misses(self):
        tri = unit_triangle()
        ray = Ray(Point3(0.25, 0.25, -5), Vec3(0, 0, -1))
        assert tri.intersect(ray) is None

    def test_winding_sets_normal(self):
        tri = Triangle(Point3(0, 0, 0), Point3(0, 1, 0), Point3(1, 0, 0), WHITE)
        assert tri.normal == Vec3(0, 0, -1)
        assert tri.intersect(Ray(Point3(0.25, 0.25, -5), Vec3(0, 0, 1))) is not None
        assert tri.intersect(Ray(Point3(0.25, 0.25, 5), Vec3(0, 0, -1))) is None


class TestBoundingBox:
    """Test BoundingBox class."""

    def test_from_points(self):
        box = BoundingBox.from_points([
            Point3(1, -2, 3), Point3(-1, 5, 0), Point3(0, 0, -4)
        ])
        assert box.minimum == Point3(-1, -2, -4)
        assert box.maximum == Point3(1, 5, 3)

    def test_from_no_points(self):
        with pytest.raises(GeometryError):
            BoundingBox.from_points([])

    def test_corner_indexing(self):
        box = BoundingBox(Point3(-1, -1, -1), Point3(1, 1, 1))
        assert box[0] == Point3(-1, -1, -1)
        assert box[1] == Point3(1, 1, 1)

    def test_hit(self):
        box = BoundingBox(Point3(-1, -1, -1), Point3(1, 1, 1))
        assert box.intersects(Ray(Point3(0, 0, -5), Vec3(0, 0, 1)))

    def test_hit_negative_direction(self):
        box = BoundingBox(Point3(-1, -1, -1), Point3(1, 1, 1))
        assert box.intersects(Ray(Point3(3, 4, 5), Vec3(-3, -4, -5).normalize()))

    def test_miss(self):
        box = BoundingBox(Point3(-1, -1, -1), Point3(1, 1, 1))
        assert not box.intersects(Ray(Point3(0, 5, -5), Vec3(0, 0, 1)))

    def test_miss_diagonal(self):
        box = BoundingBox(Point3(-1, -1, -1), Point3(1, 1, 1))
        assert not box.intersects(Ray(Point3(-5, 3, 0), Vec3(1, 1, 0).normalize()))

    def test_box_behind_ray(self):
        box = BoundingBox(Point3(-1, -1, -1), Point3(1, 1, 1))
        assert not box.intersects(Ray(Point3(0, 0, -5), Vec3(0, 0, -1)))

    def test_origin_inside(self):
        box = BoundingBox(Point3(-1, -1, -1), Point3(1, 1, 1))
        assert box.intersects(Ray(Point3(0, 0, 0), Vec3(1, 0, 0)))

    def test_axis_parallel_ray_outside_slab(self):
        box = BoundingBox(Point3(-1, -1, -1), Point3(1, 1, 1))
        assert not box.intersects(Ray(Point3(5, 0, 5), Vec3(0, 0, -1)))

    def test_flat_box(self):
        box = BoundingBox(Point3(0, 0, 0), Point3(1, 1, 0))
        assert box.intersects(Ray(Point3(0.5, 0.5, 3), Vec3(0, 0, -1)))

    @pytest.mark.parametrize("origin", [
        Point3(-1, 0, -5), Point3(1, 0, -5), Point3(0, -1, -5), Point3(0, 1, -5),
    ])
    def test_ray_along_face(self, origin):
        # Zero direction component with the origin on that face
        box = BoundingBox(Point3(-1, -1, -1), Point3(1, 1, 1))
        assert box.intersects(Ray(origin, Vec3(0, 0, 1)))

    def test_ray_along_face_with_negative_zero(self):
        box = BoundingBox(Point3(-1, -1, -1), Point3(1, 1, 1))
        assert box.intersects(Ray(Point3(0, 1, 5), Vec3(-0.0, -0.0, -1)))

    def test_ray_along_face_behind_origin(self):
        box = BoundingBox(Point3(-1, -1, -1), Point3(1, 1, 1))
        assert not box.intersects(Ray(Point3(-1, 0, 5), Vec3(0, 0, 1)))


class TestModel:
    """Test Model class."""

    def make_quad(self, material=WHITE):
        a, b, c, d = Point3(0, 0, 0), Point3(1, 0, 0), Point3(1, 1, 0), Point3(0, 1, 0)
        return Model([Triangle(a, b, c, material), Triangle(a, c, d, material)])

    def test_bounding_box_covers_all_points(self):
        model = self.make_quad()
        assert model.bounding_box.minimum == Point3(0, 0, 0)
        assert model.bounding_box.maximum == Point3(1, 1, 0)

    def test_hit(self):
        model = self.make_quad()
        hit = model.intersect(Ray(Point3(0.75, 0.25, 5), Vec3(0, 0, -1)))
        assert hit is not None
        assert hit.point == Point3(0.75, 0.25, 0)

    def test_hit_second_triangle(self):
        model = self.make_quad()
        hit = model.intersect(Ray(Point3(0.25, 0.75, 5), Vec3(0, 0, -1)))
        assert hit is not None
        assert hit.point == Point3(0.25, 0.75, 0)

    def test_miss_bounding_box(self):
        model = self.make_quad()
        ray = Ray(Point3(5, 5, 5), Vec3(0, 0, -1))
        assert not model.bounding_box.intersects(ray)
        assert model.intersect(ray) is None

    def test_box_hit_but_triangles_miss(self):
        # Single triangle: the box corner (0.9, 0.9) is outside it
        model = Model([unit_triangle()])
        ray = Ray(Point3(0.9, 0.9, 5), Vec3(0, 0, -1))
        assert model.bounding_box.intersects(ray)
        assert model.intersect(ray) is None

    def test_box_pruning_skips_triangle_tests(self, monkeypatch):
        model = self.make_quad()
        calls = []
        monkeypatch.setattr(Triangle, "intersect", lambda self, ray: calls.append(ray))
        model.intersect(Ray(Point3(5, 5, 5), Vec3(0, 0, -1)))
        assert calls == []

    def test_ray_along_box_face_still_hits(self):
        # The box's min x equals the ray's x and the direction has no x part
        tri = Triangle(Point3(0, -1, -5), Point3(1, -1, -5), Point3(0, 1, -5), WHITE)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        assert tri.intersect(ray) is not None
        model = Model([tri])
        assert model.bounding_box.intersects(ray)
        hit = model.intersect(ray)
        assert hit is not None
        assert hit.point == Point3(0, 0, -5)

    def test_ray_along_lower_y_face_still_hits(self):
        tri = Triangle(Point3(-1, 0, -5), Point3(1, 0, -5), Point3(0, 1, -5), WHITE)
        hit = Model([tri]).intersect(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)))
        assert hit is not None
        assert hit.point == Point3(0, 0, -5)

    def test_nearest_triangle_wins(self):
        near = unit_triangle(RED, z=1.0)
        far = unit_triangle(WHITE, z=0.0)
        model = Model([far, near])
        hit = model.intersect(Ray(Point3(0.2, 0.2, 5), Vec3(0, 0, -1)))
        assert hit.material is RED

    def test_empty_model_never_hits(self):
        model = Model([])
        assert model.bounding_box is None
        assert model.intersect(Ray(Point3(0, 0, 5), Vec3(0, 0, -1))) is None
        assert len(model) == 0


class TestScene:
    """Test Scene class."""

    def test_empty(self):
        scene = Scene()
        assert len(scene) == 0
        assert scene.intersect(Ray(Point3(0, 0, 0), Vec3(1, 0, 0))) is None

    def test_add(self):
        scene = Scene()
        scene.add(Sphere(Point3(0, 0, 0), 1.0, WHITE))
        assert len(scene) == 1

    def test_iteration(self):
        s1 = Sphere(Point3(0, 0, 0), 1.0, WHITE)
        s2 = Sphere(Point3(3, 0, 0), 1.0, WHITE)
        assert list(Scene([s1, s2])) == [s1, s2]

    @pytest.mark.parametrize("near_first", [True, False])
    def test_nearest_sphere_regardless_of_order(self, near_first):
        near = Sphere(Point3(0, 0, -5), 1.0, RED)
        far = Sphere(Point3(0, 0, -10), 1.0, WHITE)
        scene = Scene([near, far] if near_first else [far, near])

        hit = scene.intersect(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)))
        assert hit.material is RED
        assert hit.point == Point3(0, 0, -4)

    @pytest.mark.parametrize("near_first", [True, False])
    def test_overlapping_spheres(self, near_first):
        near = Sphere(Point3(0, 0, -5), 2.0, RED)
        far = Sphere(Point3(0, 0, -6), 2.0, WHITE)
        scene = Scene([near, far] if near_first else [far, near])

        hit = scene.intersect(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)))
        assert hit.material is RED
        assert hit.point == Point3(0, 0, -3)

    def test_mixed_entities(self):
        scene = Scene([
            Plane(Point3(0, 0, -20), Vec3(0, 0, 1), WHITE),
            Model([unit_triangle(RED, z=-3.0)]),
            Sphere(Point3(0, 0, -10), 1.0, WHITE),
        ])
        hit = scene.intersect(Ray(Point3(0.2, 0.2, 0), Vec3(0, 0, -1)))
        assert hit.material is RED

    def test_nested_scene(self):
        inner = Scene([Sphere(Point3(0, 0, -5), 1.0, RED)])
        outer = Scene([Sphere(Point3(0, 0, -10), 1.0, WHITE), inner])
        hit = outer.intersect(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)))
        assert hit.material is RED

    def test_exact_tie_keeps_first(self):
        first = Sphere(Point3(0, 0, -5), 1.0, RED)
        second = Sphere(Point3(0, 0, -5), 1.0, WHITE)
        hit = Scene([first, second]).intersect(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)))
        assert hit.material is RED


class TestHitRecord:
    """Test HitRecord helpers."""

    def test_distance_squared(self):
        hit = HitRecord(Point3(0, 3, 4), Vec3(0, 1, 0), WHITE)
        assert hit.distance_squared(Point3(0, 0, 0)) == 25.0
