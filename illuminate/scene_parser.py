"""
Scene description language parser.

Supports YAML and JSON scene descriptions with:
- Camera configuration
- Render settings
- Materials library
- Objects (spheres and nested groups)

Example scene file:
```yaml
camera:
  look_from: [13, 2, 3]
  look_at: [0, 0, 0]
  vfov: 20
  aperture: 0.1
  focus_dist: 10

render:
  width: 800
  aspect_ratio: 1.7778
  samples: 100
  max_depth: 50
  sky_color: [0.5, 0.75, 1.0]
  seed: 7

materials:
  ground:
    type: lambertian
    albedo: [0.5, 0.5, 0.5]

  glass:
    type: dielectric
    ior: 1.5

objects:
  - type: sphere
    center: [0, -100000, 0]
    radius: 100000
    material: ground

  - type: group
    objects:
      - type: sphere
        center: [0, 1, 0]
        radius: 1
        material: glass
```
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, Any, Optional, Tuple
import json

import yaml

from .vec3 import Vec3, Point3, Color
from .camera import Camera
from .shapes import Sphere, HittableList
from .materials import Material, Lambertian, Metal, Dielectric
from .renderer import RenderSettings


class SceneParseError(Exception):
    """Error during scene parsing."""
    pass


class SceneParser:
    """Parser for scene description files."""

    def __init__(self):
        self.materials: Dict[str, Material] = {}
        self.objects: HittableList = HittableList()
        self.camera: Optional[Camera] = None
        self.settings: Optional[RenderSettings] = None

    def parse_file(self, filepath: str) -> Tuple[HittableList, Camera, RenderSettings]:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file (YAML or JSON)

        Returns:
            Tuple of (scene, camera, settings)
        """
        path = Path(filepath)
        if not path.exists():
            raise SceneParseError(f"Scene file not found: {filepath}")

        content = path.read_text()

        try:
            if path.suffix == '.json':
                data = json.loads(content)
            else:
                # JSON is a subset of YAML
                data = yaml.safe_load(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SceneParseError(f"Cannot read scene file {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise SceneParseError(f"Scene file must contain a mapping, got {type(data).__name__}")

        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> Tuple[HittableList, Camera, RenderSettings]:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            Tuple of (scene, camera, settings)
        """
        data = self._mapping(data, "Scene")

        # Parse materials first (objects reference them)
        if 'materials' in data:
            self._parse_materials(data['materials'])

        if 'objects' in data:
            self._parse_objects(data['objects'], self.objects)

        # Settings first, the camera defaults to their aspect ratio
        if 'render' in data:
            self._parse_settings(data['render'])
        else:
            self.settings = RenderSettings()

        if 'camera' in data:
            self._parse_camera(data['camera'])
        else:
            self.camera = Camera(
                look_from=Point3(0, 0, 5),
                look_at=Point3(0, 0, 0),
                vfov=60,
                aspect_ratio=self.settings.aspect_ratio
            )

        return self.objects, self.camera, self.settings

    def _number(self, value: Any, what: str) -> float:
        """Convert a scalar field to float."""
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise SceneParseError(f"{what} must be a number, got {value!r}") from e

    def _integer(self, value: Any, what: str) -> int:
        """Convert a scalar field to int."""
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise SceneParseError(f"{what} must be an integer, got {value!r}") from e

    def _mapping(self, data: Any, what: str) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise SceneParseError(f"{what} must be a mapping, got {type(data).__name__}")
        return data

    def _parse_vec3(self, data: Any) -> Vec3:
        """Parse a Vec3 from various formats."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Vec3 must have 3 components, got {len(data)}")
            return Vec3(*(self._number(c, "Vec3 component") for c in data))
        elif isinstance(data, dict):
            return Vec3(
                self._number(data.get('x', 0), "Vec3 x"),
                self._number(data.get('y', 0), "Vec3 y"),
                self._number(data.get('z', 0), "Vec3 z")
            )
        else:
            raise SceneParseError(f"Cannot parse Vec3 from: {data}")

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color from various formats."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Color must have 3 components, got {len(data)}")
            return Color(*(self._number(c, "Color component") for c in data))
        elif isinstance(data, dict):
            return Color(
                self._number(data.get('r', 0), "Color r"),
                self._number(data.get('g', 0), "Color g"),
                self._number(data.get('b', 0), "Color b")
            )
        elif isinstance(data, str):
            # Handle hex colors
            if data.startswith('#') and len(data) == 7:
                try:
                    r, g, b = (int(data[i:i + 2], 16) / 255.0 for i in (1, 3, 5))
                except ValueError as e:
                    raise SceneParseError(f"Cannot parse color from string: {data}") from e
                return Color(r, g, b)
            raise SceneParseError(f"Cannot parse color from string: {data}")
        else:
            raise SceneParseError(f"Cannot parse Color from: {data}")

    def _parse_material(self, mat_data: Any) -> Material:
        mat_data = self._mapping(mat_data, "Material")
        mat_type = str(mat_data.get('type', 'lambertian')).lower()

        if mat_type in ('lambertian', 'matte'):
            albedo = self._parse_color(mat_data.get('albedo', [0.5, 0.5, 0.5]))
            return Lambertian(albedo)

        if mat_type in ('metal', 'metallic'):
            albedo = self._parse_color(mat_data.get('albedo', [0.8, 0.8, 0.8]))
            fuzz = self._number(mat_data.get('fuzz', 0.0), "fuzz")
            return Metal(albedo, fuzz)

        if mat_type in ('dielectric', 'glass'):
            return Dielectric(self._number(mat_data.get('ior', 1.5), "ior"))

        raise SceneParseError(f"Unknown material type: {mat_type}")

    def _parse_materials(self, materials_data: Any) -> None:
        """Parse materials section."""
        for name, mat_data in self._mapping(materials_data, "materials section").items():
            self.materials[name] = self._parse_material(mat_data)

    def _get_material(self, mat_ref: Any) -> Optional[Material]:
        """Get a material by name or inline definition."""
        if mat_ref is None:
            return None
        if isinstance(mat_ref, str):
            if mat_ref not in self.materials:
                raise SceneParseError(f"Unknown material: {mat_ref}")
            return self.materials[mat_ref]
        elif isinstance(mat_ref, dict):
            return self._parse_material(mat_ref)
        else:
            raise SceneParseError(f"Invalid material reference: {mat_ref}")

    def _parse_objects(self, objects_data: Any, group: HittableList) -> None:
        """Parse an objects list into the given group."""
        if not isinstance(objects_data, list):
            raise SceneParseError(f"objects must be a list, got {type(objects_data).__name__}")

        for obj_data in objects_data:
            obj_data = self._mapping(obj_data, "Object entry")
            obj_type = str(obj_data.get('type', 'sphere')).lower()

            if obj_type == 'sphere':
                material = self._get_material(obj_data.get('material'))
                center = self._parse_vec3(obj_data.get('center', [0, 0, 0]))
                radius = self._number(obj_data.get('radius', 1.0), "radius")
                group.add(Sphere(center, radius, material))

            elif obj_type == 'group':
                child = HittableList()
                self._parse_objects(obj_data.get('objects', []), child)
                group.add(child)

            else:
                raise SceneParseError(f"Unknown object type: {obj_type}")

    def _parse_camera(self, camera_data: Any) -> None:
        """Parse camera section."""
        camera_data = self._mapping(camera_data, "camera section")
        self.camera = Camera(
            look_from=self._parse_vec3(camera_data.get('look_from', [0, 0, 5])),
            look_at=self._parse_vec3(camera_data.get('look_at', [0, 0, 0])),
            vup=self._parse_vec3(camera_data.get('vup', [0, 1, 0])),
            vfov=self._number(camera_data.get('vfov', 60), "vfov"),
            aspect_ratio=self._number(camera_data.get('aspect_ratio', self.settings.aspect_ratio),
                                      "aspect_ratio"),
            aperture=self._number(camera_data.get('aperture', 0.0), "aperture"),
            focus_dist=self._number(camera_data.get('focus_dist', 1.0), "focus_dist")
        )

    def _parse_settings(self, settings_data: Any) -> None:
        """Parse render settings section."""
        settings_data = self._mapping(settings_data, "render section")
        sky_color = None
        if 'sky_color' in settings_data:
            sky_color = self._parse_color(settings_data['sky_color'])

        height = settings_data.get('height')
        seed = settings_data.get('seed')

        self.settings = RenderSettings(
            width=self._integer(settings_data.get('width', 800), "width"),
            height=self._integer(height, "height") if height is not None else None,
            aspect_ratio=self._number(settings_data.get('aspect_ratio', 16 / 9), "aspect_ratio"),
            samples_per_pixel=self._integer(settings_data.get('samples', 100), "samples"),
            max_depth=self._integer(settings_data.get('max_depth', 50), "max_depth"),
            sky_color=sky_color,
            use_sky_gradient=bool(settings_data.get('sky_gradient', True)),
            num_workers=self._integer(settings_data.get('workers', 0), "workers"),
            executor=str(settings_data.get('executor', 'thread')),
            seed=self._integer(seed, "seed") if seed is not None else None,
            rng_algorithm=str(settings_data.get('rng', 'pcg64'))
        )


def load_scene(filepath: str) -> Tuple[HittableList, Camera, RenderSettings]:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file

    Returns:
        Tuple of (scene, camera, settings)
    """
    parser = SceneParser()
    return parser.parse_file(filepath)


def parse_scene(data: Dict[str, Any]) -> Tuple[HittableList, Camera, RenderSettings]:
    """Convenience function to parse a scene from a dictionary.

    Args:
        data: Scene description dictionary

    Returns:
        Tuple of (scene, camera, settings)
    """
    parser = SceneParser()
    return parser.parse_dict(data)
