"""Random spheres scene configuration.

This module provides factory functions for the two standard sphere scenes:

- The "random spheres" cover scene: a huge ground sphere, a grid of small
  spheres with randomly drawn materials, and three large feature spheres
  (glass, diffuse, mirror metal).
- A single diffuse sphere in front of the camera, used as a diagnostic scene.

Host-side randomness comes from a seeded NumPy generator so the same seed
always yields the same scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.scene.random_spheres import create_random_spheres_scene
    >>> from spheretracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_random_spheres_scene(aspect_ratio=2.0, seed=7)
    >>> setup_camera(camera)
    >>> # Now render using the scene and camera
"""

import logging

import numpy as np

from spheretracer.camera.pinhole import PinholeCamera
from spheretracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# =============================================================================
# Random Spheres Constants
# =============================================================================

GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)

# Small spheres are placed on a grid over [-GRID_EXTENT, GRID_EXTENT)
GRID_EXTENT = 11
SMALL_SPHERE_RADIUS = 0.2
SMALL_SPHERE_JITTER = 0.9

# Small spheres closer than this to EXCLUSION_CENTER are skipped
EXCLUSION_CENTER = (4.0, 0.2, 0.0)
EXCLUSION_RADIUS = 0.9

# Cumulative material probabilities for small spheres
LAMBERTIAN_PROBABILITY = 0.8
METAL_PROBABILITY = 0.95

GLASS_SPHERE_CENTER = (0.0, 1.0, 0.0)
GLASS_SPHERE_IOR = 1.5
DIFFUSE_SPHERE_CENTER = (-4.0, 1.0, 0.0)
DIFFUSE_SPHERE_ALBEDO = (0.4, 0.2, 0.1)
METAL_SPHERE_CENTER = (4.0, 1.0, 0.0)
METAL_SPHERE_ALBEDO = (0.7, 0.6, 0.5)
METAL_SPHERE_FUZZ = 0.0
FEATURE_SPHERE_RADIUS = 1.0

# Camera framing the cover scene
COVER_LOOKFROM = (7.0, 1.5, 1.95)
COVER_LOOKAT = (0.0, 0.0, -1.0)
COVER_VUP = (0.0, 1.0, 0.0)
COVER_VFOV = 50.0


# =============================================================================
# Scene Factories
# =============================================================================


def _add_random_material(scene: SceneManager, rng: np.random.Generator) -> int:
    """Register a material drawn 80% Lambertian, 15% metal, 5% dielectric."""
    choice = rng.random()
    if choice < LAMBERTIAN_PROBABILITY:
        albedo = tuple(float(c) for c in rng.random(3))
        return scene.add_lambertian_material(albedo=albedo)
    if choice < METAL_PROBABILITY:
        albedo = tuple(float(c) for c in rng.random(3))
        return scene.add_metal_material(albedo=albedo, fuzz=float(rng.random()))
    # Shift [0, 1) to (0, 1] so the index is always a valid positive value
    return scene.add_dielectric_material(ref_idx=1.0 - float(rng.random()))


def create_random_spheres_scene(
    aspect_ratio: float = 2.0,
    seed: int | None = 0,
) -> tuple[SceneManager, PinholeCamera]:
    """Create the random spheres cover scene.

    The scene contains:
    - A ground sphere of radius 1000 centered at (0, -1000, 0)
    - Up to 22 x 22 small spheres of radius 0.2 resting on the ground, each
      jittered within its grid cell and given a random material
    - A glass sphere, a brown diffuse sphere and a mirror metal sphere of
      radius 1 along the x axis

    Args:
        aspect_ratio: Image width divided by height, used for the camera.
        seed: Seed for the scene generator. None draws fresh entropy.

    Returns:
        A tuple of (SceneManager, PinholeCamera).

    Example:
        >>> scene, camera = create_random_spheres_scene(seed=1)
        >>> scene.get_sphere_count() > 4
        True
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager()

    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, albedo=GROUND_ALBEDO)

    exclusion = np.array(EXCLUSION_CENTER)
    for a in range(-GRID_EXTENT, GRID_EXTENT):
        for b in range(-GRID_EXTENT, GRID_EXTENT):
            center = np.array(
                [
                    a + SMALL_SPHERE_JITTER * rng.random(),
                    SMALL_SPHERE_RADIUS,
                    b + SMALL_SPHERE_JITTER * rng.random(),
                ]
            )
            if np.linalg.norm(center - exclusion) > EXCLUSION_RADIUS:
                material_id = _add_random_material(scene, rng)
                scene.add_sphere(
                    (float(center[0]), float(center[1]), float(center[2])),
                    SMALL_SPHERE_RADIUS,
                    material_id,
                )

    scene.add_dielectric_sphere(
        GLASS_SPHERE_CENTER, FEATURE_SPHERE_RADIUS, ref_idx=GLASS_SPHERE_IOR
    )
    scene.add_lambertian_sphere(
        DIFFUSE_SPHERE_CENTER, FEATURE_SPHERE_RADIUS, albedo=DIFFUSE_SPHERE_ALBEDO
    )
    scene.add_metal_sphere(
        METAL_SPHERE_CENTER,
        FEATURE_SPHERE_RADIUS,
        albedo=METAL_SPHERE_ALBEDO,
        fuzz=METAL_SPHERE_FUZZ,
    )

    logger.info("Built random spheres scene with %d spheres", scene.get_sphere_count())

    camera = PinholeCamera(
        lookfrom=COVER_LOOKFROM,
        lookat=COVER_LOOKAT,
        vup=COVER_VUP,
        vfov=COVER_VFOV,
        aspect_ratio=aspect_ratio,
    )

    return scene, camera


def create_single_sphere_scene(
    aspect_ratio: float = 2.0,
) -> tuple[SceneManager, PinholeCamera]:
    """Create a scene with one gray diffuse unit sphere at the origin.

    The camera sits on the +z axis looking at the sphere, so the sphere fills
    the middle of the frame with sky around it.

    Args:
        aspect_ratio: Image width divided by height, used for the camera.

    Returns:
        A tuple of (SceneManager, PinholeCamera).
    """
    scene = SceneManager()
    scene.add_lambertian_sphere((0.0, 0.0, 0.0), 1.0, albedo=(0.5, 0.5, 0.5))

    camera = PinholeCamera(
        lookfrom=(0.0, 0.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=60.0,
        aspect_ratio=aspect_ratio,
    )

    return scene, camera
