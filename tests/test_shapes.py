"""Tests for geometric shapes."""

import pytest
import math
from illuminate.vec3 import Vec3, Point3, Color
from illuminate.ray import Ray
from illuminate.shapes import Sphere, HittableList, HitRecord
from illuminate.materials import Lambertian, Metal
from illuminate.errors import ConfigurationError

INF = float('inf')


class TestSphere:
    """Test Sphere class."""

    def test_creation(self):
        center = Point3(0, 0, 0)
        sphere = Sphere(center, 1.0)
        assert sphere.center == center
        assert sphere.radius == 1.0

    def test_hit_through_center(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        hit = sphere.hit(ray, 0.001, INF)

        assert hit is not None
        assert abs(hit.t - 4.0) < 1e-6  # Hits at z=-1
        assert abs(hit.point.z - (-1.0)) < 1e-6

    @pytest.mark.parametrize("radius", [0.5, 1.0, 2.5])
    def test_hit_distance_and_outward_normal(self, radius):
        sphere = Sphere(Point3(0, 0, 0), radius)
        ray = Ray(Point3(0, 0, 5), Vec3(0, 0, -1))
        hit = sphere.hit(ray, 0.001, INF)

        assert hit is not None
        assert hit.t == pytest.approx(5 - radius)
        assert hit.normal == Vec3(0, 0, 1)
        assert hit.front_face is True

    def test_normal_is_unit_length(self):
        sphere = Sphere(Point3(1, 2, 3), 4.0)
        ray = Ray(Point3(10, 9, 8), (Point3(1, 2, 3) - Point3(10, 9, 8)) + Vec3(0.5, -0.3, 0.2))
        hit = sphere.hit(ray, 0.001, INF)

        assert hit is not None
        assert abs(hit.normal.length() - 1.0) < 1e-10

    def test_hit_front_face(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        hit = sphere.hit(ray, 0.001, INF)

        assert hit is not None
        assert hit.front_face is True
        # Normal should point outward (against ray)
        assert hit.normal.z < 0

    def test_hit_from_inside(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))
        hit = sphere.hit(ray, 0.001, INF)

        assert hit is not None
        assert hit.front_face is False
        assert hit.t == pytest.approx(1.0)
        # Outward normal is +z, flipped to face the ray
        assert hit.normal == Vec3(0, 0, -1)

    def test_miss(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 5, -5), Vec3(0, 0, 1))  # Ray passes above sphere
        assert sphere.hit(ray, 0.001, INF) is None

    def test_behind_ray(self):
        sphere = Sphere(Point3(0, 0, -5), 1.0)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))  # Ray points away from sphere
        assert sphere.hit(ray, 0.001, INF) is None

    def test_t_range(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))

        # Hit is at t=4, exclude it with t_min
        hit = sphere.hit(ray, 4.5, INF)
        assert hit is not None
        assert hit.t == pytest.approx(6.0)  # Back of sphere

    def test_t_max_excludes_both_roots(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        assert sphere.hit(ray, 0.001, 3.0) is None

    def test_t_min_prevents_self_intersection(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        # Ray leaving the surface it just hit
        ray = Ray(Point3(0, 0, 1), Vec3(0, 1, 1).normalize())
        assert sphere.hit(ray, 0.001, INF) is None

    def test_unnormalized_direction(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 2))
        hit = sphere.hit(ray, 0.001, INF)
        assert hit.t == pytest.approx(2.0)
        assert hit.point == Point3(0, 0, -1)

    def test_with_material(self):
        material = Lambertian(Color(1, 0, 0))
        sphere = Sphere(Point3(0, 0, 0), 1.0, material)
        hit = sphere.hit(Ray(Point3(0, 0, -5), Vec3(0, 0, 1)), 0.001, INF)

        assert hit is not None
        assert hit.material is material

    @pytest.mark.parametrize("radius", [0, -1.0, float('nan'), float('inf')])
    def test_rejects_bad_radius(self, radius):
        with pytest.raises(ConfigurationError):
            Sphere(Point3(0, 0, 0), radius)

    def test_rejects_non_finite_center(self):
        with pytest.raises(ConfigurationError):
            Sphere(Point3(float('inf'), 0, 0), 1.0)


class TestHitRecord:
    """Test HitRecord face orientation."""

    def test_set_face_normal_outside(self):
        record = HitRecord(point=Point3(0, 0, 1), normal=Vec3(0, 0, 1), t=1.0, front_face=False)
        record.set_face_normal(Ray(Point3(0, 0, 5), Vec3(0, 0, -1)), Vec3(0, 0, 1))
        assert record.front_face is True
        assert record.normal == Vec3(0, 0, 1)

    def test_set_face_normal_inside(self):
        record = HitRecord(point=Point3(0, 0, 1), normal=Vec3(0, 0, 1), t=1.0, front_face=True)
        record.set_face_normal(Ray(Point3(0, 0, 0), Vec3(0, 0, 1)), Vec3(0, 0, 1))
        assert record.front_face is False
        assert record.normal == Vec3(0, 0, -1)


class TestHittableList:
    """Test HittableList (group) class."""

    def test_empty_list(self):
        world = HittableList()
        assert len(world) == 0
        assert world.hit(Ray(Point3(0, 0, 0), Vec3(0, 0, 1)), 0.001, INF) is None

    def test_closest_hit(self):
        near = Lambertian(Color(1, 0, 0))
        far = Lambertian(Color(0, 0, 1))
        world = HittableList()
        world.add(Sphere(Point3(0, 0, 10), 1.0, far))
        world.add(Sphere(Point3(0, 0, 5), 1.0, near))

        hit = world.hit(Ray(Point3(0, 0, 0), Vec3(0, 0, 1)), 0.001, INF)

        assert hit is not None
        assert hit.t == pytest.approx(4.0)
        assert hit.material is near

    def test_order_independent(self):
        a = Sphere(Point3(0, 0, 5), 1.0, Lambertian(Color(1, 0, 0)))
        b = Sphere(Point3(0, 0, 10), 1.0, Lambertian(Color(0, 1, 0)))
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))

        assert HittableList([a, b]).hit(ray, 0.001, INF).t == HittableList([b, a]).hit(ray, 0.001, INF).t

    def test_respects_t_max(self):
        world = HittableList([Sphere(Point3(0, 0, 10), 1.0)])
        assert world.hit(Ray(Point3(0, 0, 0), Vec3(0, 0, 1)), 0.001, 5.0) is None

    def test_nested_groups(self):
        inner_material = Metal(Color(0.8, 0.8, 0.8), 0.1)
        inner = HittableList([Sphere(Point3(0, 0, 3), 1.0, inner_material)])
        world = HittableList([Sphere(Point3(0, 0, 20), 1.0), inner])

        hit = world.hit(Ray(Point3(0, 0, 0), Vec3(0, 0, 1)), 0.001, INF)

        assert hit.material is inner_material
        assert hit.t == pytest.approx(2.0)

    def test_shared_material(self):
        shared = Lambertian(Color(0.5, 0.5, 0.5))
        world = HittableList([
            Sphere(Point3(-3, 0, 5), 1.0, shared),
            Sphere(Point3(3, 0, 5), 1.0, shared),
        ])
        left = world.hit(Ray(Point3(-3, 0, 0), Vec3(0, 0, 1)), 0.001, INF)
        right = world.hit(Ray(Point3(3, 0, 0), Vec3(0, 0, 1)), 0.001, INF)
        assert left.material is right.material is shared

    def test_iteration_and_clear(self):
        spheres = [Sphere(Point3(i, 0, 0), 0.5) for i in range(3)]
        world = HittableList(spheres)
        assert list(world) == spheres
        world.clear()
        assert len(world) == 0
