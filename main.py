#!/usr/bin/env python3
"""
Illuminate - A Python Ray Tracer

Main entry point for rendering scenes.
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from illuminate.errors import ConfigurationError
from illuminate.renderer import Renderer, RenderSettings
from illuminate.rng import ALGORITHMS, RandomSource
from illuminate.scenes import SCENES, default_camera, random_scene
from illuminate.scene_parser import SceneParseError, load_scene
from illuminate.image_io import save_image


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Illuminate - A Python Ray Tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --scene demo --output render.png
  python main.py --scene random --width 1200 --samples 200 --seed 42 --output final.png
  python main.py --scene scenes/glass.yaml --executor process --workers 8
        '''
    )

    parser.add_argument('--scene', type=str, default='demo',
                        help=f"Built-in scene ({', '.join(list(SCENES) + ['random'])}) "
                             "or a YAML/JSON scene file (default: demo)")
    parser.add_argument('--width', type=int, default=None, help='Image width (default: 800)')
    parser.add_argument('--aspect-ratio', type=float, default=None,
                        help='Width / height ratio (default: 16/9)')
    parser.add_argument('--samples', type=int, default=None, help='Samples per pixel (default: 100)')
    parser.add_argument('--depth', type=int, default=None, help='Max scatter depth (default: 50)')
    parser.add_argument('--workers', type=int, default=None, help='Number of workers (0=auto)')
    parser.add_argument('--executor', choices=['thread', 'process'], default=None,
                        help='Worker pool type (default: thread)')
    parser.add_argument('--seed', type=int, default=None, help='Seed for a reproducible render')
    parser.add_argument('--rng', choices=sorted(ALGORITHMS), default=None,
                        help='Random generator algorithm (default: pcg64)')
    parser.add_argument('--output', type=str, default='output/render.png', help='Output filename')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log debug output')
    return parser


def resolve_settings(args: argparse.Namespace, base: RenderSettings = None) -> RenderSettings:
    """Overlay command-line flags on top of scene-file or default settings."""
    overrides = {
        'width': args.width,
        'aspect_ratio': args.aspect_ratio,
        'samples_per_pixel': args.samples,
        'max_depth': args.depth,
        'num_workers': args.workers,
        'executor': args.executor,
        'seed': args.seed,
        'rng_algorithm': args.rng,
    }
    fields = {}
    if base is not None:
        fields = {
            'width': base.width,
            'aspect_ratio': base.aspect_ratio,
            'samples_per_pixel': base.samples_per_pixel,
            'max_depth': base.max_depth,
            'sky_color': base.sky_color,
            'use_sky_gradient': base.use_sky_gradient,
            'num_workers': base.num_workers,
            'executor': base.executor,
            'seed': base.seed,
            'rng_algorithm': base.rng_algorithm,
        }
        # An explicit height only survives when width and ratio are untouched
        if args.width is None and args.aspect_ratio is None:
            fields['height'] = base.height
    fields.update({key: value for key, value in overrides.items() if value is not None})
    return RenderSettings(**fields)


def load_world(args: argparse.Namespace):
    """Return (world, camera, settings) for the requested scene."""
    if args.scene in SCENES or args.scene == 'random':
        settings = resolve_settings(args)
        if args.scene == 'random':
            world = random_scene(RandomSource(settings.seed))
        else:
            world = SCENES[args.scene]()
        return world, default_camera(settings.aspect_ratio), settings

    world, camera, file_settings = load_scene(args.scene)
    return world, camera, resolve_settings(args, file_settings)


def progress_bar(status: str) -> None:
    print(f'\rRendering: {status}', end='', file=sys.stderr, flush=True)


def main(argv=None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    print("=" * 60)
    print("Illuminate Ray Tracer")
    print("=" * 60)

    try:
        world, camera, settings = load_world(args)
    except (ConfigurationError, SceneParseError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    print(f"\nRender Settings:")
    print(f"  Resolution: {settings.width}x{settings.height}")
    print(f"  Samples: {settings.samples_per_pixel}")
    print(f"  Max Depth: {settings.max_depth}")
    print(f"  Workers: {settings.num_workers} ({settings.executor})")
    print(f"  Generator: {settings.rng_algorithm}, seed {settings.seed}")
    print(f"\nScene: {args.scene} ({len(world)} top-level objects)")

    renderer = Renderer(settings)
    renderer.set_progress_callback(progress_bar)

    start_time = time.time()
    image = renderer.render(world, camera)
    elapsed = max(time.time() - start_time, 1e-9)

    print(f"\nRender completed in {elapsed:.2f} seconds", file=sys.stderr)
    print(f"  Samples per second: {(settings.width * settings.height * settings.samples_per_pixel) / elapsed:.0f}")

    output_path = save_image(image, Path(args.output))
    print(f"\nSaved to: {output_path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
