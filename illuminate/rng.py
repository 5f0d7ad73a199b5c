"""
Random number source for Monte Carlo sampling.

Every scatter, every anti-aliasing jitter and every lens sample draws
from a RandomSource, which makes `uniform` the hottest call in a render.
Draws are served from a block pre-filled by a numpy Generator, so the
per-call cost is a list index.

The generator algorithm is pluggable: any numpy bit generator listed in
ALGORITHMS can back a source. Renders give each image row its own source
spawned from one SeedSequence, so a seeded render is reproducible no
matter how rows are spread across workers.
"""

from __future__ import annotations
from typing import Optional, Union
import numpy as np

from .vec3 import Vec3
from .errors import ConfigurationError


ALGORITHMS = {
    'pcg64': np.random.PCG64,
    'pcg64dxsm': np.random.PCG64DXSM,
    'philox': np.random.Philox,
    'sfc64': np.random.SFC64,
    'mt19937': np.random.MT19937,
}

DEFAULT_ALGORITHM = 'pcg64'
DEFAULT_BLOCK_SIZE = 4096

SeedLike = Union[None, int, np.random.SeedSequence]


def _seed_sequence(seed: SeedLike) -> np.random.SeedSequence:
    if isinstance(seed, np.random.SeedSequence):
        return seed
    return np.random.SeedSequence(seed)


class RandomSource:
    """Uniform floats in [0, 1) and the vectors derived from them."""

    __slots__ = ('algorithm', '_seed_sequence', '_generator', '_block', '_index', '_block_size')

    def __init__(
        self,
        seed: SeedLike = None,
        algorithm: str = DEFAULT_ALGORITHM,
        block_size: int = DEFAULT_BLOCK_SIZE
    ):
        """Create a random source.

        Args:
            seed: Integer seed, a SeedSequence, or None for fresh OS entropy
            algorithm: Name of the bit generator (see ALGORITHMS)
            block_size: Number of uniforms drawn from numpy at a time
        """
        if algorithm not in ALGORITHMS:
            raise ConfigurationError(
                f"Unknown random algorithm: {algorithm} "
                f"(expected one of {', '.join(sorted(ALGORITHMS))})"
            )
        if block_size <= 0:
            raise ConfigurationError(f"block_size must be positive, got {block_size}")

        self.algorithm = algorithm
        self._seed_sequence = _seed_sequence(seed)
        self._generator = np.random.Generator(ALGORITHMS[algorithm](self._seed_sequence))
        self._block_size = block_size
        self._block: list[float] = []
        self._index = 0

    def _refill(self) -> None:
        self._block = self._generator.random(self._block_size).tolist()
        self._index = 0

    def uniform(self) -> float:
        """Return a uniform float in [0, 1)."""
        if self._index >= len(self._block):
            self._refill()
        value = self._block[self._index]
        self._index += 1
        return value

    def uniform_between(self, lo: float, hi: float) -> float:
        """Return a uniform float in [lo, hi)."""
        return lo + self.uniform() * (hi - lo)

    def random_vec3(self, lo: float = 0.0, hi: float = 1.0) -> Vec3:
        """Return a vector with each component uniform in [lo, hi)."""
        return Vec3(
            self.uniform_between(lo, hi),
            self.uniform_between(lo, hi),
            self.uniform_between(lo, hi)
        )

    def random_in_unit_sphere(self) -> Vec3:
        """Rejection-sample a point strictly inside the unit sphere.

        About 52% of the cube is inside the sphere, so this takes two
        attempts on average.
        """
        while True:
            x = 2.0 * self.uniform() - 1.0
            y = 2.0 * self.uniform() - 1.0
            z = 2.0 * self.uniform() - 1.0
            if x * x + y * y + z * z < 1.0:
                return Vec3(x, y, z)

    def random_unit_vector(self) -> Vec3:
        """Return a random unit vector (uniform on the sphere surface)."""
        while True:
            p = self.random_in_unit_sphere()
            # Tiny vectors lose precision when normalized
            if p.length_squared() > 1e-160:
                return p.normalize()

    def random_in_unit_disk(self) -> Vec3:
        """Rejection-sample a point inside the unit disk (z = 0)."""
        while True:
            x = 2.0 * self.uniform() - 1.0
            y = 2.0 * self.uniform() - 1.0
            if x * x + y * y < 1.0:
                return Vec3(x, y, 0.0)

    def spawn(self, count: int) -> list[RandomSource]:
        """Derive `count` statistically independent child sources."""
        return [
            RandomSource(child, self.algorithm, self._block_size)
            for child in self._seed_sequence.spawn(count)
        ]

    def __repr__(self) -> str:
        return f"RandomSource(algorithm={self.algorithm!r}, entropy={self._seed_sequence.entropy})"


def row_seeds(seed: Optional[int], rows: int) -> list[np.random.SeedSequence]:
    """One SeedSequence per image row, all derived from `seed`.

    The same seed always yields the same per-row sequences, which is what
    makes seeded renders pixel-identical across worker counts.
    """
    return np.random.SeedSequence(seed).spawn(rows)
