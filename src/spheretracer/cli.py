"""Command-line entry point for rendering sphere scenes.

Renders the random spheres cover scene, the single-sphere diagnostic scene,
or a scene loaded from JSON, and writes the result as PPM or any format
Pillow supports.

Usage:
    spheretracer [options]

Options:
    --width WIDTH       Image width in pixels (default: 1000)
    --height HEIGHT     Image height in pixels (default: 500)
    --samples SAMPLES   Number of samples per pixel (default: 10)
    --max-depth DEPTH   Maximum scatter bounces per ray (default: 50)
    --scene SCENE       "random", "single" or a path to a JSON scene file
    --seed SEED         Seed for scene generation and sampling (default: 0)
    --no-jitter         Sample pixel centers instead of random positions
    --arch ARCH         Taichi backend, "cpu" or "gpu" (default: cpu)
    --batch-size SIZE   Samples per progress update (default: 1)
    --output OUTPUT     Output file path, or "-" for PPM on stdout
    --quiet             Only log warnings and errors
    --verbose           Log debug messages

Example:
    spheretracer --width 200 --height 100 --samples 20 --output spheres.png
    spheretracer --scene single --output - > sphere.ppm
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from collections.abc import Sequence
from pathlib import Path

import taichi as ti

from spheretracer.core.config import (
    DEFAULT_HEIGHT,
    DEFAULT_MAX_DEPTH,
    DEFAULT_SAMPLES_PER_PIXEL,
    DEFAULT_WIDTH,
    RenderConfig,
)

logger = logging.getLogger("spheretracer")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

ARCHES = {"cpu": ti.cpu, "gpu": ti.gpu}


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Send package log records to stderr.

    Stdout is left untouched so PPM output can be piped.

    Args:
        level: Log level for the package logger.

    Returns:
        The configured package logger.
    """
    logger.setLevel(level)

    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console_handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="spheretracer",
        description="Render a scene of spheres with a Monte Carlo path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=DEFAULT_WIDTH,
        help=f"Image width in pixels (default: {DEFAULT_WIDTH})",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=DEFAULT_HEIGHT,
        help=f"Image height in pixels (default: {DEFAULT_HEIGHT})",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=DEFAULT_SAMPLES_PER_PIXEL,
        help=f"Number of samples per pixel (default: {DEFAULT_SAMPLES_PER_PIXEL})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum scatter bounces per ray (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default="random",
        help='"random", "single" or a path to a JSON scene file (default: random)',
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for scene generation and sampling (default: 0)",
    )
    parser.add_argument(
        "--no-jitter",
        action="store_true",
        help="Sample pixel centers instead of random sub-pixel positions",
    )
    parser.add_argument(
        "--arch",
        choices=sorted(ARCHES),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=1,
        help="Samples per progress update (default: 1)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="spheres.ppm",
        help='Output file path, or "-" for PPM on stdout (default: spheres.ppm)',
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    verbosity.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug messages",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> RenderConfig:
    """Create a validated RenderConfig from parsed arguments."""
    config = RenderConfig(
        width=args.width,
        height=args.height,
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
        jitter=not args.no_jitter,
        seed=args.seed,
    )
    config.validate()
    return config


def load_scene(scene_arg: str, config: RenderConfig):
    """Build the requested scene and its camera.

    JSON scene files hold "materials" and "spheres" lists as written by
    SceneManager.save_json, plus an optional "camera" object with lookfrom,
    lookat, vup and vfov. Missing camera values default to the cover scene
    framing.

    Returns:
        Tuple of (SceneManager, PinholeCamera).

    Raises:
        ValueError: If the scene name is unknown or the file is invalid.
    """
    # Lazy imports to allow Taichi initialization first
    from spheretracer.camera.pinhole import PinholeCamera
    from spheretracer.scene.manager import SceneManager
    from spheretracer.scene.random_spheres import (
        COVER_LOOKAT,
        COVER_LOOKFROM,
        COVER_VFOV,
        COVER_VUP,
        create_random_spheres_scene,
        create_single_sphere_scene,
    )

    if scene_arg == "random":
        return create_random_spheres_scene(config.aspect_ratio, seed=config.seed)
    if scene_arg == "single":
        return create_single_sphere_scene(config.aspect_ratio)

    path = Path(scene_arg)
    if path.suffix.lower() != ".json":
        raise ValueError(f"Unknown scene {scene_arg!r}: expected random, single or a .json file")

    scene = SceneManager()
    data = scene.load_json(path)

    camera_data = data.get("camera", {})
    camera = PinholeCamera(
        lookfrom=tuple(camera_data.get("lookfrom", COVER_LOOKFROM)),
        lookat=tuple(camera_data.get("lookat", COVER_LOOKAT)),
        vup=tuple(camera_data.get("vup", COVER_VUP)),
        vfov=float(camera_data.get("vfov", COVER_VFOV)),
        aspect_ratio=config.aspect_ratio,
    )
    logger.info("Loaded %d spheres from %s", scene.get_sphere_count(), path)
    return scene, camera


def render_scene(
    config: RenderConfig,
    scene_arg: str = "random",
    output_path: str = "spheres.ppm",
    batch_size: int = 1,
) -> None:
    """Render a scene and write the image.

    Args:
        config: Render settings.
        scene_arg: "random", "single" or a path to a JSON scene file.
        output_path: Output file path, or "-" to write PPM to stdout.
        batch_size: Number of samples to render between progress updates.
    """
    # Lazy imports to allow Taichi initialization first
    from spheretracer.camera.pinhole import setup_camera
    from spheretracer.core.progressive import ProgressiveRenderer
    from spheretracer.preview.export import save_image, write_ppm

    scene, camera = load_scene(scene_arg, config)
    setup_camera(camera)

    renderer = ProgressiveRenderer(config)

    logger.info(
        "Rendering %dx%d at %d samples per pixel (max depth %d)",
        config.width,
        config.height,
        config.samples_per_pixel,
        config.max_depth,
    )

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        elapsed = time.time() - start_time
        samples_per_sec = current / elapsed if elapsed > 0 else 0
        logger.info(
            "Progress: %d/%d samples (%.1f%%) - %.1f spp/s",
            current,
            target,
            (current / target) * 100 if target > 0 else 0,
            samples_per_sec,
        )

    renderer.render(batch_size=batch_size, callback=progress_callback)

    if output_path == "-":
        write_ppm(renderer.get_pixels(), sys.stdout)
        sys.stdout.flush()
    else:
        save_image(renderer.get_pixels(), output_path)
        logger.info("Saved to: %s", Path(output_path).absolute())

    logger.info("Total time: %.2fs", time.time() - start_time)


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.quiet:
        setup_logging(logging.WARNING)
    elif args.verbose:
        setup_logging(logging.DEBUG)
    else:
        setup_logging(logging.INFO)

    try:
        config = build_config(args)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    ti.init(arch=ARCHES[args.arch], random_seed=config.seed)

    try:
        render_scene(
            config,
            scene_arg=args.scene,
            output_path=args.output,
            batch_size=args.batch_size,
        )
        return 0
    except (OSError, RuntimeError, ValueError) as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
