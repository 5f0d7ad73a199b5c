"""
Geometric shapes for the ray tracer.

Each shape must implement the Hittable protocol with a `hit` method.
Spheres are the only primitive; a HittableList groups shapes (and other
groups) into a scene.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, TYPE_CHECKING
import math

from .vec3 import Vec3, Point3
from .ray import Ray
from .errors import ConfigurationError

if TYPE_CHECKING:
    from .materials import Material


@dataclass
class HitRecord:
    """Stores information about a ray-object intersection.

    Attributes:
        point: The intersection point in world space
        normal: The unit surface normal at the intersection (always points against ray)
        t: The ray parameter at intersection
        front_face: True if the geometric outward normal already faced the
            ray, i.e. the ray arrived from outside the object
        material: The material at the hit point
    """
    point: Point3
    normal: Vec3
    t: float
    front_face: bool
    material: Optional[Material] = None

    def set_face_normal(self, ray: Ray, outward_normal: Vec3) -> None:
        """Set the normal to always point against the ray direction.

        Args:
            ray: The incoming ray
            outward_normal: The geometric normal pointing outward from surface
        """
        self.front_face = ray.direction.dot(outward_normal) < 0
        self.normal = outward_normal if self.front_face else -outward_normal


class Hittable(ABC):
    """Abstract base class for all objects that can be hit by rays."""

    @abstractmethod
    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test if ray intersects this object.

        Args:
            ray: The ray to test
            t_min: Minimum t value to consider (avoid self-intersection)
            t_max: Maximum t value to consider

        Returns:
            HitRecord for the nearest intersection in [t_min, t_max], None otherwise
        """
        pass


class Sphere(Hittable):
    """A sphere defined by center and radius."""

    def __init__(self, center: Point3, radius: float, material: Optional[Material] = None):
        """Create a sphere.

        Args:
            center: Center point of the sphere
            radius: Radius of the sphere (must be positive)
            material: Material for shading, shared by reference

        Raises:
            ConfigurationError: For a non-finite center or a non-positive radius
        """
        if not center.is_finite():
            raise ConfigurationError(f"Sphere center must be finite, got {center}")
        if not (math.isfinite(radius) and radius > 0):
            raise ConfigurationError(f"Sphere radius must be positive, got {radius}")

        self.center = center
        self.radius = float(radius)
        self.material = material

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray-sphere intersection using the quadratic formula.

        The equation (P-C)·(P-C) = r² where P = ray.at(t)
        expands to: t²(d·d) + 2t(d·(O-C)) + (O-C)·(O-C) - r² = 0
        which is solved with the half-b form of the quadratic.
        """
        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        half_b = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = half_b * half_b - a * c
        if discriminant < 0:
            return None

        sqrtd = math.sqrt(discriminant)

        # Find the nearest root in the acceptable range
        root = (-half_b - sqrtd) / a
        if root < t_min or root > t_max:
            root = (-half_b + sqrtd) / a
            if root < t_min or root > t_max:
                return None

        point = ray.at(root)
        outward_normal = (point - self.center) / self.radius

        hit_record = HitRecord(
            point=point,
            normal=outward_normal,
            t=root,
            front_face=True,
            material=self.material
        )
        hit_record.set_face_normal(ray, outward_normal)

        return hit_record

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class HittableList(Hittable):
    """A group of hittable objects, itself hittable.

    Groups nest: a member may be another HittableList.
    """

    def __init__(self, objects: Optional[Iterable[Hittable]] = None):
        self.objects: list[Hittable] = list(objects) if objects is not None else []

    def add(self, obj: Hittable) -> None:
        """Add an object to the list."""
        self.objects.append(obj)

    def clear(self) -> None:
        """Remove all objects."""
        self.objects.clear()

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Find the closest intersection among all objects.

        t_max shrinks to the closest hit so far, so farther candidates are
        rejected by the members themselves.
        """
        closest_hit: Optional[HitRecord] = None
        closest_t = t_max

        for obj in self.objects:
            hit_record = obj.hit(ray, t_min, closest_t)
            if hit_record is not None:
                closest_hit = hit_record
                closest_t = hit_record.t

        return closest_hit

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self) -> Iterator[Hittable]:
        return iter(self.objects)
