"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure, vector algebra and random sampling
    config: Render configuration (resolution, samples, depth, sky color)
    integrator: Bounce-limited color resolution and the parallel sampling kernels
    progressive: Sample accumulation wrapper around the integrator

The integrator resolves the color of each camera ray by bouncing it through
the sphere scene, multiplying material attenuations together until the ray
escapes to the sky, is absorbed, or reaches the bounce limit.

All compute-intensive operations use Taichi kernels for parallel execution.
"""

from .config import RenderConfig
from .ray import (
    Ray,
    cross,
    dot,
    length,
    make_ray,
    point_at_parameter,
    random_in_unit_sphere,
    reflect,
    refract,
    schlick,
    squared_length,
    unit_vector,
    vec3,
)

# Note: integrator and progressive are NOT imported here because they declare
# Taichi fields, which must only happen after ti.init().
# Import directly from spheretracer.core.integrator or spheretracer.core.progressive.

__all__ = [
    "Ray",
    "RenderConfig",
    "point_at_parameter",
    "make_ray",
    "vec3",
    "dot",
    "cross",
    "length",
    "squared_length",
    "unit_vector",
    "reflect",
    "refract",
    "schlick",
    "random_in_unit_sphere",
]
