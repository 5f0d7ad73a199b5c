"""
Ready-made scenes.

A large sphere stands in for the ground plane; the rest are unit balls
and the classic field of small random spheres.
"""

from __future__ import annotations
from typing import Optional

from .vec3 import Vec3, Point3, Color
from .camera import Camera
from .shapes import Sphere, HittableList
from .materials import Material, Lambertian, Metal, Dielectric
from .rng import RandomSource
from .errors import ConfigurationError

GROUND_RADIUS = 100000.0


def ground_sphere(color: Color = Color(0.5, 0.5, 0.5)) -> Sphere:
    """A huge matte sphere whose top touches y = 0."""
    return Sphere(Point3(0, -GROUND_RADIUS, 0), GROUND_RADIUS, Lambertian(color))


def ball_material(kind: str) -> Material:
    """Material for one of the demo balls: 'glass', 'matte' or 'metal'."""
    if kind == 'glass':
        return Dielectric(1.5)
    if kind == 'matte':
        return Lambertian(Color(0.4, 0.2, 0.1))
    if kind == 'metal':
        return Metal(Color(0.7, 0.5, 0.3), 0.0)
    raise ConfigurationError(f"Unknown ball kind: {kind}")


def single_ball_scene(kind: str = 'glass') -> HittableList:
    """The ground with one radius-1 ball resting at the origin."""
    return HittableList([
        ground_sphere(),
        Sphere(Point3(0, 1, 0), 1.0, ball_material(kind)),
    ])


def demo_scene() -> HittableList:
    """Three large balls side by side: matte, glass and metal."""
    return HittableList([
        ground_sphere(),
        Sphere(Point3(-4, 1, 0), 1.0, ball_material('matte')),
        Sphere(Point3(0, 1, 0), 1.0, ball_material('glass')),
        Sphere(Point3(4, 1, 0), 1.0, ball_material('metal')),
    ])


def random_scene(rng: Optional[RandomSource] = None) -> HittableList:
    """A grid of small random spheres around the three large balls.

    Args:
        rng: Source for positions and materials (seed it for a fixed layout)
    """
    rng = rng if rng is not None else RandomSource()
    small = HittableList()
    clearance_point = Point3(4, 0.2, 0)

    for a in range(-11, 11):
        for b in range(-11, 11):
            center = Point3(a + 0.9 * rng.uniform(), 0.2, b + 0.9 * rng.uniform())
            if (center - clearance_point).length() <= 0.9:
                continue

            choose_mat = rng.uniform()
            if choose_mat < 0.33:
                material = Lambertian(rng.random_vec3() * rng.random_vec3())
            elif choose_mat < 0.67:
                material = Metal(rng.random_vec3(0.5, 1.0), rng.uniform_between(0, 0.5))
            else:
                material = Dielectric(1.5)
            small.add(Sphere(center, 0.2, material))

    world = demo_scene()
    world.add(small)
    return world


def default_camera(aspect_ratio: float = 16.0 / 9.0) -> Camera:
    """Camera at (13, 2, 3) looking at the origin with a slight lens blur."""
    return Camera(
        look_from=Point3(13, 2, 3),
        look_at=Point3(0, 0, 0),
        vup=Vec3(0, 1, 0),
        vfov=20,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0
    )


SCENES = {
    'demo': demo_scene,
    'glass': lambda: single_ball_scene('glass'),
    'matte': lambda: single_ball_scene('matte'),
    'metal': lambda: single_ball_scene('metal'),
}
