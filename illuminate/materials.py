"""
Materials system.

Implements:
- Lambertian diffuse (matte)
- Metal (specular reflection with fuzz)
- Dielectric (glass, water - with refraction)

Materials are immutable once built and may be shared by many shapes.
All randomness comes from the RandomSource passed to `scatter`.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import math

from .vec3 import Vec3, Color
from .ray import Ray
from .rng import RandomSource
from .errors import ConfigurationError


@dataclass
class ScatterResult:
    """Result of a material scatter operation."""
    scattered_ray: Ray
    attenuation: Color


def _check_albedo(albedo: Color) -> None:
    if not albedo.is_finite():
        raise ConfigurationError(f"albedo must be finite, got {albedo}")


class Material(ABC):
    """Abstract base class for materials."""

    @abstractmethod
    def scatter(
        self,
        ray_in: Ray,
        hit_point: Vec3,
        normal: Vec3,
        front_face: bool,
        rng: RandomSource
    ) -> Optional[ScatterResult]:
        """Compute the scattered ray and attenuation.

        Args:
            ray_in: The incoming ray
            hit_point: Point of intersection
            normal: Unit surface normal at hit point, facing the incoming ray
            front_face: Whether ray hit from outside
            rng: Random source of the calling worker

        Returns:
            ScatterResult if ray scatters, None if absorbed
        """
        pass


class Lambertian(Material):
    """Diffuse material with Lambertian (ideal matte) scattering."""

    def __init__(self, albedo: Color):
        """Create a Lambertian material.

        Args:
            albedo: The base color (RGB, each component 0-1)
        """
        _check_albedo(albedo)
        self.albedo = albedo

    def scatter(self, ray_in: Ray, hit_point: Vec3, normal: Vec3, front_face: bool,
                rng: RandomSource) -> Optional[ScatterResult]:
        scatter_direction = normal + rng.random_unit_vector()

        # Catch degenerate scatter direction
        if scatter_direction.near_zero():
            scatter_direction = normal

        scattered = Ray(hit_point, scatter_direction.normalize())

        return ScatterResult(
            scattered_ray=scattered,
            attenuation=self.albedo
        )

    def __repr__(self) -> str:
        return f"Lambertian(albedo={self.albedo})"


class Metal(Material):
    """Metallic material with specular reflection."""

    def __init__(self, albedo: Color, fuzz: float = 0.0):
        """Create a metal material.

        Args:
            albedo: The reflection color
            fuzz: Reflection blur radius (0 = mirror, 1 = very rough)
        """
        _check_albedo(albedo)
        if not 0.0 <= fuzz <= 1.0:
            raise ConfigurationError(f"Metal fuzz must be in [0, 1], got {fuzz}")
        self.albedo = albedo
        self.fuzz = float(fuzz)

    def scatter(self, ray_in: Ray, hit_point: Vec3, normal: Vec3, front_face: bool,
                rng: RandomSource) -> Optional[ScatterResult]:
        reflected = ray_in.direction.normalize().reflect(normal)

        if self.fuzz > 0:
            reflected = reflected + rng.random_in_unit_sphere() * self.fuzz

        scattered = Ray(hit_point, reflected.normalize())

        # Fuzzed rays pointing into the surface are absorbed
        if scattered.direction.dot(normal) > 0:
            return ScatterResult(
                scattered_ray=scattered,
                attenuation=self.albedo
            )
        return None

    def __repr__(self) -> str:
        return f"Metal(albedo={self.albedo}, fuzz={self.fuzz})"


class Dielectric(Material):
    """Dielectric (glass-like) material with refraction.

    Glass never tints: attenuation is always white.
    """

    WHITE = Color(1, 1, 1)

    def __init__(self, ior: float = 1.5):
        """Create a dielectric material.

        Args:
            ior: Index of refraction (1.0 = air, 1.5 = glass, 2.4 = diamond)
        """
        if not (math.isfinite(ior) and ior > 0):
            raise ConfigurationError(f"Index of refraction must be positive, got {ior}")
        self.ior = float(ior)

    def scatter(self, ray_in: Ray, hit_point: Vec3, normal: Vec3, front_face: bool,
                rng: RandomSource) -> Optional[ScatterResult]:
        # Entering the medium divides by the ior, leaving multiplies
        refraction_ratio = 1.0 / self.ior if front_face else self.ior

        unit_direction = ray_in.direction.normalize()

        # Matching indices means there is no interface to reflect from
        if refraction_ratio == 1.0:
            return ScatterResult(
                scattered_ray=Ray(hit_point, unit_direction),
                attenuation=self.WHITE
            )

        cos_theta = min(-unit_direction.dot(normal), 1.0)
        sin_theta = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))

        cannot_refract = refraction_ratio * sin_theta > 1.0

        if cannot_refract or rng.uniform() < self.reflectance(cos_theta, refraction_ratio):
            direction = unit_direction.reflect(normal)
        else:
            direction = unit_direction.refract(normal, refraction_ratio)

        scattered = Ray(hit_point, direction.normalize())
        return ScatterResult(
            scattered_ray=scattered,
            attenuation=self.WHITE
        )

    @staticmethod
    def reflectance(cosine: float, ref_idx: float) -> float:
        """Schlick's approximation for reflectance."""
        r0 = (1 - ref_idx) / (1 + ref_idx)
        r0 = r0 * r0
        return r0 + (1 - r0) * pow(1 - cosine, 5)

    def __repr__(self) -> str:
        return f"Dielectric(ior={self.ior})"
