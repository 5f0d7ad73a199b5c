"""
Illuminate - A Python Ray Tracer

A Monte Carlo path tracer for scenes made of spheres, with:
- Matte, metallic and glass materials
- Depth of field (thin lens camera)
- Jittered anti-aliasing with square-root gamma
- Reproducible, row-parallel rendering with pluggable random generators
"""

__version__ = "0.1.0"
__author__ = "Illuminate Team"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .errors import ConfigurationError
from .rng import RandomSource, ALGORITHMS
from .shapes import Sphere, HittableList, HitRecord, Hittable
from .materials import Material, Lambertian, Metal, Dielectric, ScatterResult
from .camera import Camera
from .renderer import Renderer, RenderSettings, render_image
from .scenes import ground_sphere, single_ball_scene, demo_scene, random_scene, default_camera
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene
from .image_io import save_image
