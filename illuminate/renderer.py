"""
Renderer module - the heart of the ray tracer.

Implements:
- Recursive path tracing bounded by a maximum scatter depth
- Jittered multi-sample anti-aliasing
- Square-root gamma correction and 8-bit quantization
- Row-band parallel rendering on a thread or process pool
"""

from __future__ import annotations
import logging
import math
import os
import time
from concurrent.futures import Executor, ThreadPoolExecutor, ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Optional, Callable, Sequence, Tuple
import numpy as np

from .vec3 import Color
from .ray import Ray
from .camera import Camera
from .shapes import Hittable
from .rng import RandomSource, ALGORITHMS, DEFAULT_ALGORITHM, row_seeds
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

BLACK = Color(0, 0, 0)
WHITE = Color(1, 1, 1)

EXECUTORS = ('thread', 'process')


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 800
    height: Optional[int] = None  # None = derived from width / aspect_ratio
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 100
    max_depth: int = 50
    sky_color: Color = None
    use_sky_gradient: bool = True
    t_min: float = 0.001
    num_workers: int = 0  # 0 = auto-detect
    executor: str = 'thread'
    rows_per_task: int = 1
    seed: Optional[int] = None
    rng_algorithm: str = DEFAULT_ALGORITHM

    def __post_init__(self):
        if self.sky_color is None:
            self.sky_color = Color(0.5, 0.75, 1.0)
        if not (math.isfinite(self.aspect_ratio) and self.aspect_ratio > 0):
            raise ConfigurationError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.height is None:
            self.height = int(self.width / self.aspect_ratio)
        if self.num_workers == 0:
            self.num_workers = os.cpu_count() or 4
        self.validate()

    def validate(self) -> None:
        """Reject settings that would divide by zero or never finish.

        Raises:
            ConfigurationError: On the first invalid field
        """
        # Viewport coordinates divide by (width - 1) and (height - 1)
        if self.width < 2 or self.height < 2:
            raise ConfigurationError(
                f"Image must be at least 2x2 pixels, got {self.width}x{self.height}"
            )
        if self.samples_per_pixel < 1:
            raise ConfigurationError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 1:
            raise ConfigurationError(f"max_depth must be positive, got {self.max_depth}")
        if self.num_workers < 1:
            raise ConfigurationError(f"num_workers must be positive, got {self.num_workers}")
        if self.rows_per_task < 1:
            raise ConfigurationError(f"rows_per_task must be positive, got {self.rows_per_task}")
        if self.executor not in EXECUTORS:
            raise ConfigurationError(f"executor must be one of {EXECUTORS}, got {self.executor!r}")
        if self.rng_algorithm not in ALGORITHMS:
            raise ConfigurationError(f"Unknown random algorithm: {self.rng_algorithm}")
        if not (self.t_min > 0 and math.isfinite(self.t_min)):
            raise ConfigurationError(f"t_min must be a small positive number, got {self.t_min}")
        if not self.sky_color.is_finite():
            raise ConfigurationError(f"sky_color must be finite, got {self.sky_color}")


class Renderer:
    """Path tracing renderer with row-parallel workers."""

    def __init__(self, settings: RenderSettings = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self._progress_callback: Optional[Callable[[str], None]] = None

    def set_progress_callback(self, callback: Optional[Callable[[str], None]]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes a status line such as "row 12/90 done"
        """
        self._progress_callback = callback

    def render(self, scene: Hittable, camera: Camera) -> np.ndarray:
        """Render the scene into a finished 8-bit image.

        Args:
            scene: The scene to render (any Hittable)
            camera: The camera to render from

        Returns:
            uint8 array of shape (height, width, 3), row 0 at the top
        """
        return self.to_ldr(self.render_linear(scene, camera))

    def render_linear(self, scene: Hittable, camera: Camera) -> np.ndarray:
        """Render the scene and return averaged linear colors.

        Args:
            scene: The scene to render (any Hittable)
            camera: The camera to render from

        Returns:
            float64 array of shape (height, width, 3), before gamma
        """
        settings = self.settings
        width, height = settings.width, settings.height

        image = np.zeros((height, width, 3), dtype=np.float64)
        seeds = row_seeds(settings.seed, height)
        bands = self._generate_bands(height)

        logger.info(
            "Rendering %dx%d, %d samples/pixel, depth %d, %d %s worker(s), %s generator",
            width, height, settings.samples_per_pixel, settings.max_depth,
            settings.num_workers, settings.executor, settings.rng_algorithm
        )
        start = time.perf_counter()

        rows_done = 0
        if settings.num_workers == 1:
            for y0, y1 in bands:
                image[y0:y1] = self._render_rows(scene, camera, y0, seeds[y0:y1])
                rows_done += y1 - y0
                self._report(rows_done, height)
        else:
            with self._make_executor(scene, camera) as executor:
                futures = {}
                for y0, y1 in bands:
                    if settings.executor == 'process':
                        future = executor.submit(_render_rows_in_worker, y0, seeds[y0:y1])
                    else:
                        future = executor.submit(self._render_rows, scene, camera, y0, seeds[y0:y1])
                    futures[future] = (y0, y1)

                for future in as_completed(futures):
                    y0, y1 = futures[future]
                    # Bands are disjoint row ranges
                    image[y0:y1] = future.result()
                    rows_done += y1 - y0
                    self._report(rows_done, height)

        logger.info("Render finished in %.2fs", time.perf_counter() - start)
        return image

    def _make_executor(self, scene: Hittable, camera: Camera) -> Executor:
        if self.settings.executor == 'process':
            return ProcessPoolExecutor(
                max_workers=self.settings.num_workers,
                initializer=_init_worker,
                initargs=(scene, camera, self.settings)
            )
        return ThreadPoolExecutor(max_workers=self.settings.num_workers)

    def _report(self, rows_done: int, height: int) -> None:
        logger.debug("%d/%d rows rendered", rows_done, height)
        if self._progress_callback:
            self._progress_callback(f"row {rows_done}/{height} done")

    def _render_rows(
        self,
        scene: Hittable,
        camera: Camera,
        y0: int,
        seeds: Sequence[np.random.SeedSequence]
    ) -> np.ndarray:
        """Render consecutive rows starting at y0, one random source per row."""
        width = self.settings.width
        band = np.zeros((len(seeds), width, 3), dtype=np.float64)

        for j, seed in enumerate(seeds):
            rng = RandomSource(seed, self.settings.rng_algorithm)
            for i in range(width):
                band[j, i] = self.sample_pixel(scene, camera, i, y0 + j, rng).to_array()

        return band

    def sample_pixel(self, scene: Hittable, camera: Camera, px: int, py: int,
                     rng: RandomSource) -> Color:
        """Average samples_per_pixel jittered samples for one pixel.

        Args:
            px: Column, 0 at the left
            py: Row, 0 at the top
            rng: Random source for jitter and scattering

        Returns:
            The averaged linear color
        """
        width = self.settings.width
        height = self.settings.height
        samples = self.settings.samples_per_pixel
        max_depth = self.settings.max_depth

        pixel_color = np.zeros(3, dtype=np.float64)
        for _ in range(samples):
            s = (px + rng.uniform()) / (width - 1)
            # Image row 0 is the top of the viewport
            t = 1.0 - (py + rng.uniform()) / (height - 1)

            ray = camera.cast_ray(s, t, rng)
            pixel_color += self.ray_color(ray, scene, max_depth, rng).to_array()

        return Color.from_array(pixel_color / samples)

    def ray_color(self, ray: Ray, scene: Hittable, depth: int, rng: RandomSource) -> Color:
        """Compute the color for a ray using path tracing.

        Args:
            ray: The ray to trace
            scene: The scene to trace against
            depth: Remaining number of bounces
            rng: Random source for scattering

        Returns:
            The computed color for this ray
        """
        # Out of bounces, the light is lost
        if depth <= 0:
            return BLACK

        hit_record = scene.hit(ray, self.settings.t_min, math.inf)

        if hit_record is None:
            return self.sky_color(ray)

        # Without a material the surface absorbs everything
        if hit_record.material is None:
            return BLACK

        scatter_result = hit_record.material.scatter(
            ray, hit_record.point, hit_record.normal, hit_record.front_face, rng
        )
        if scatter_result is None:
            return BLACK

        return scatter_result.attenuation * self.ray_color(
            scatter_result.scattered_ray, scene, depth - 1, rng
        )

    def sky_color(self, ray: Ray) -> Color:
        """Background color for a ray that escapes the scene.

        With the gradient enabled this blends from white at the horizon
        below to the sky color straight up.

        Args:
            ray: The escaping ray

        Returns:
            Sky color in this direction
        """
        if not self.settings.use_sky_gradient:
            return self.settings.sky_color
        unit_direction = ray.direction.normalize()
        t = 0.5 * (unit_direction.y + 1.0)
        return WHITE.lerp(self.settings.sky_color, t)

    def _generate_bands(self, height: int) -> list[Tuple[int, int]]:
        """Split the image into contiguous row ranges (y0, y1)."""
        rows = self.settings.rows_per_task
        return [(y, min(y + rows, height)) for y in range(0, height, rows)]

    @staticmethod
    def to_ldr(linear_image: np.ndarray) -> np.ndarray:
        """Convert linear colors to 8-bit with square-root gamma.

        Args:
            linear_image: Averaged linear image array (float64)

        Returns:
            LDR image as uint8 array
        """
        corrected = np.sqrt(np.clip(linear_image, 0.0, 1.0))
        # 256 equal-width buckets, so values just under 1.0 still reach 255
        return (corrected * 255.999).astype(np.uint8)


# Per-process state for ProcessPoolExecutor workers, set once by the
# pool initializer so the scene is pickled once per worker, not per task.
_worker_state: Optional[Tuple[Renderer, Hittable, Camera]] = None


def _init_worker(scene: Hittable, camera: Camera, settings: RenderSettings) -> None:
    global _worker_state
    _worker_state = (Renderer(settings), scene, camera)


def _render_rows_in_worker(y0: int, seeds: Sequence[np.random.SeedSequence]) -> np.ndarray:
    renderer, scene, camera = _worker_state
    return renderer._render_rows(scene, camera, y0, seeds)


def render_image(
    scene: Hittable,
    camera: Camera,
    settings: Optional[RenderSettings] = None,
    progress: Optional[Callable[[str], None]] = None
) -> np.ndarray:
    """Render a scene to an 8-bit image in one call."""
    renderer = Renderer(settings)
    renderer.set_progress_callback(progress)
    return renderer.render(scene, camera)
