"""
Vector3 class for 3D math operations.

This is the fundamental building block of the ray tracer, used for:
- Points in 3D space
- Direction vectors
- RGB color values (linear, 0-1, before gamma)
"""

from __future__ import annotations
import math
from typing import Union
import numpy as np


NEAR_ZERO_EPSILON = 1e-8


class Vec3:
    """An immutable 3D vector supporting common vector operations.

    Uses numpy internally for efficient computation while providing
    a clean, Pythonic API. Every operation returns a new vector.
    """

    __slots__ = ('_data',)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self._data = np.array([x, y, z], dtype=np.float64)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Vec3:
        """Create Vec3 from numpy array."""
        v = cls.__new__(cls)
        v._data = np.asarray(arr, dtype=np.float64)
        return v

    @property
    def x(self) -> float:
        return float(self._data[0])

    @property
    def y(self) -> float:
        return float(self._data[1])

    @property
    def z(self) -> float:
        return float(self._data[2])

    def __repr__(self) -> str:
        return f"Vec3({self.x:.4f}, {self.y:.4f}, {self.z:.4f})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec3):
            return NotImplemented
        return np.allclose(self._data, other._data)

    def __hash__(self) -> int:
        return hash(tuple(self._data))

    def __neg__(self) -> Vec3:
        return Vec3.from_array(-self._data)

    def __add__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data + other._data)
        return Vec3.from_array(self._data + other)

    def __radd__(self, other: float) -> Vec3:
        return Vec3.from_array(other + self._data)

    def __sub__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data - other._data)
        return Vec3.from_array(self._data - other)

    def __rsub__(self, other: float) -> Vec3:
        return Vec3.from_array(other - self._data)

    def __mul__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data * other._data)
        return Vec3.from_array(self._data * other)

    def __rmul__(self, other: float) -> Vec3:
        return Vec3.from_array(other * self._data)

    def __truediv__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data / other._data)
        return Vec3.from_array(self._data / other)

    def __getitem__(self, index: int) -> float:
        return float(self._data[index])

    def __iter__(self):
        return iter(self.to_tuple())

    def length(self) -> float:
        """Return the magnitude (length) of the vector."""
        return float(np.linalg.norm(self._data))

    def length_squared(self) -> float:
        """Return the squared magnitude (avoids sqrt for comparisons)."""
        return float(np.dot(self._data, self._data))

    def normalize(self) -> Vec3:
        """Return a unit vector in the same direction.

        A zero-length vector normalizes to the zero vector; material code
        catches that case with `near_zero`.
        """
        length = self.length()
        if length == 0:
            return Vec3(0, 0, 0)
        return Vec3.from_array(self._data / length)

    def dot(self, other: Vec3) -> float:
        """Compute dot product with another vector."""
        return float(np.dot(self._data, other._data))

    def cross(self, other: Vec3) -> Vec3:
        """Compute cross product with another vector."""
        return Vec3.from_array(np.cross(self._data, other._data))

    def reflect(self, normal: Vec3) -> Vec3:
        """Reflect this vector around the given unit normal: d - 2(d.n)n."""
        return self - normal * 2 * self.dot(normal)

    def refract(self, normal: Vec3, eta_ratio: float) -> Vec3:
        """Refract this unit vector through a surface using Snell's law.

        Args:
            normal: Unit surface normal facing the incoming vector
            eta_ratio: Ratio of refractive indices (n1/n2)

        Returns:
            Refracted direction vector, or zero vector if total internal reflection
        """
        cos_theta = min(-self.dot(normal), 1.0)
        r_out_perp = (self + normal * cos_theta) * eta_ratio
        perp_len_sq = r_out_perp.length_squared()

        if perp_len_sq > 1.0:
            # Total internal reflection
            return Vec3(0, 0, 0)

        r_out_parallel = normal * (-math.sqrt(abs(1.0 - perp_len_sq)))
        return r_out_perp + r_out_parallel

    def lerp(self, end: Vec3, t: float) -> Vec3:
        """Linear interpolation: (1 - t) * self + t * end."""
        return Vec3.from_array(self._data * (1.0 - t) + end._data * t)

    def near_zero(self, epsilon: float = NEAR_ZERO_EPSILON) -> bool:
        """Check if vector is close to zero in all dimensions."""
        return all(abs(c) < epsilon for c in self._data)

    def is_finite(self) -> bool:
        """True when no component is NaN or infinite."""
        return bool(np.all(np.isfinite(self._data)))

    def to_array(self) -> np.ndarray:
        """Return the underlying numpy array (copy)."""
        return self._data.copy()

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


# Convenience type aliases
Point3 = Vec3
Color = Vec3
