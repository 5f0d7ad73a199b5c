"""Tests for Camera class."""

import pytest
import math
from illuminate.vec3 import Vec3, Point3
from illuminate.camera import Camera
from illuminate.rng import RandomSource
from illuminate.errors import ConfigurationError


def make_camera(**overrides):
    params = dict(
        look_from=Point3(0, 0, 0),
        look_at=Point3(0, 0, -1),
        vup=Vec3(0, 1, 0),
        vfov=90,
        aspect_ratio=1.0,
        aperture=0.0
    )
    params.update(overrides)
    return Camera(**params)


class TestCameraCreation:
    """Test Camera construction."""

    def test_origin(self):
        cam = make_camera(aspect_ratio=16 / 9)
        assert cam.origin == Point3(0, 0, 0)

    def test_camera_basis_vectors(self):
        cam = make_camera()
        # w should point backward (opposite of look direction)
        assert cam.w.z > 0
        # u should point right
        assert abs(cam.u.x - 1.0) < 1e-6
        # v should point up
        assert abs(cam.v.y - 1.0) < 1e-6

    def test_basis_is_orthonormal(self):
        cam = make_camera(look_from=Point3(13, 2, 3), look_at=Point3(0, 0, 0), vfov=20)
        for axis in (cam.u, cam.v, cam.w):
            assert abs(axis.length() - 1.0) < 1e-10
        assert abs(cam.u.dot(cam.v)) < 1e-10
        assert abs(cam.u.dot(cam.w)) < 1e-10
        assert abs(cam.v.dot(cam.w)) < 1e-10

    def test_viewport_scaled_by_focus_distance(self):
        cam = make_camera(vfov=90, aspect_ratio=2.0, focus_dist=3.0)
        # tan(45 deg) = 1, so the viewport is 2 high and 4 wide at unit distance
        assert abs(cam.vertical.length() - 6.0) < 1e-10
        assert abs(cam.horizontal.length() - 12.0) < 1e-10

    def test_lens_radius(self):
        assert make_camera(aperture=0.1).lens_radius == pytest.approx(0.05)


class TestCameraValidation:
    """Test that invalid cameras are rejected."""

    def test_coincident_look_from_and_look_at(self):
        with pytest.raises(ConfigurationError):
            make_camera(look_from=Point3(1, 1, 1), look_at=Point3(1, 1, 1))

    def test_up_parallel_to_view(self):
        with pytest.raises(ConfigurationError):
            make_camera(look_from=Point3(0, 10, 0), look_at=Point3(0, 0, 0), vup=Vec3(0, 1, 0))

    @pytest.mark.parametrize("vfov", [0, -10, 180, 270])
    def test_bad_field_of_view(self, vfov):
        with pytest.raises(ConfigurationError):
            make_camera(vfov=vfov)

    def test_bad_aspect_ratio(self):
        with pytest.raises(ConfigurationError):
            make_camera(aspect_ratio=0)

    def test_negative_aperture(self):
        with pytest.raises(ConfigurationError):
            make_camera(aperture=-0.1)

    def test_bad_focus_distance(self):
        with pytest.raises(ConfigurationError):
            make_camera(focus_dist=0)

    def test_non_finite_position(self):
        with pytest.raises(ConfigurationError):
            make_camera(look_from=Point3(float('nan'), 0, 0))


class TestCameraRays:
    """Test Camera.cast_ray() method."""

    def test_center_ray(self):
        ray = make_camera().cast_ray(0.5, 0.5, RandomSource(seed=1))

        # Center ray should go straight forward
        assert abs(ray.direction.x) < 1e-10
        assert abs(ray.direction.y) < 1e-10
        assert ray.direction.z < 0  # Forward is -Z

    def test_direction_is_unit(self):
        ray = make_camera().cast_ray(0.13, 0.91, RandomSource(seed=1))
        assert abs(ray.direction.length() - 1.0) < 1e-10

    def test_corner_rays(self):
        cam = make_camera()
        rng = RandomSource(seed=1)

        bl = cam.cast_ray(0, 0, rng)
        assert bl.direction.x < 0
        assert bl.direction.y < 0

        tr = cam.cast_ray(1, 1, rng)
        assert tr.direction.x > 0
        assert tr.direction.y > 0

    def test_out_of_range_coordinates(self):
        ray = make_camera().cast_ray(1.02, -0.03, RandomSource(seed=1))
        assert ray.direction.is_finite()
        assert ray.direction.x > 0

    def test_ray_origin_without_dof(self):
        cam = make_camera(look_from=Point3(1, 2, 3), look_at=Point3(0, 0, 0))
        ray = cam.cast_ray(0.5, 0.5, RandomSource(seed=1))
        assert ray.origin == cam.origin


class TestDepthOfField:
    """Test Camera depth of field."""

    def test_dof_varies_origin(self):
        cam = make_camera(look_at=Point3(0, 0, -10), aperture=2.0, focus_dist=10.0)
        rng = RandomSource(seed=3)

        origins = [cam.cast_ray(0.5, 0.5, rng).origin for _ in range(100)]

        xs = [o.x for o in origins]
        assert max(xs) - min(xs) > 0.1
        # Offsets stay inside the lens disk in the u/v plane
        for o in origins:
            assert (o - cam.origin).length() < cam.lens_radius + 1e-12
            assert abs(o.z) < 1e-12

    def test_focus_plane_is_sharp(self):
        cam = make_camera(look_at=Point3(0, 0, -10), aperture=2.0, focus_dist=10.0)
        rng = RandomSource(seed=4)
        target = cam.lower_left_corner + cam.horizontal * 0.3 + cam.vertical * 0.7

        for _ in range(20):
            ray = cam.cast_ray(0.3, 0.7, rng)
            # Every lens sample passes through the same focus-plane point
            t = (target - ray.origin).length()
            assert ray.at(t) == target

    def test_no_dof_fixed_origin(self):
        cam = make_camera(look_at=Point3(0, 0, -10), focus_dist=10.0)
        rng = RandomSource(seed=5)
        for _ in range(10):
            assert cam.cast_ray(0.5, 0.5, rng).origin == cam.origin


class TestFieldOfView:
    """Test Camera field of view."""

    def test_narrow_fov(self):
        rng = RandomSource(seed=1)
        ray_narrow = make_camera(vfov=20).cast_ray(1, 1, rng)
        ray_wide = make_camera(vfov=90).cast_ray(1, 1, rng)

        center = Vec3(0, 0, -1)
        assert ray_narrow.direction.dot(center) > ray_wide.direction.dot(center)

    def test_top_edge_angle(self):
        ray = make_camera(vfov=60).cast_ray(0.5, 1.0, RandomSource(seed=1))
        angle = math.degrees(math.acos(ray.direction.dot(Vec3(0, 0, -1))))
        assert angle == pytest.approx(30.0)


class TestCameraPositioning:
    """Test various camera positions."""

    def test_looking_down(self):
        cam = make_camera(look_from=Point3(0, 10, 0), look_at=Point3(0, 0, 0), vup=Vec3(0, 0, -1))
        ray = cam.cast_ray(0.5, 0.5, RandomSource(seed=1))
        assert ray.direction.y < 0

    def test_angled_camera(self):
        cam = make_camera(look_from=Point3(5, 5, 5), look_at=Point3(0, 0, 0), vfov=60)
        ray = cam.cast_ray(0.5, 0.5, RandomSource(seed=1))
        target = Point3(0, 0, 0) - cam.origin
        assert ray.direction.dot(target.normalize()) > 0.999
