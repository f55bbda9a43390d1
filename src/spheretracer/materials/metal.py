"""Metal (specular reflective) material implementation.

Perfect metals (fuzz=0) produce mirror reflections; rougher metals perturb the
mirror direction by a random point in a sphere of radius ``fuzz``:

    scattered = reflect(unit(incident), N) + fuzz * random_in_unit_sphere()

The ray is absorbed when the perturbed direction points into the surface.

Example:
    >>> # Within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, normal
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from spheretracer.core.ray import (
    random_in_unit_sphere,
    reflect,
    unit_vector,
)

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
):
    """Compute the scattered ray direction for a metal surface.

    Args:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzz: The surface roughness in [0, 1]. 0 = perfect mirror.
        incident_direction: The incoming ray direction (any non-zero length).
        normal: The outward unit surface normal.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The (fuzzed) mirror direction, not normalized.
        - attenuation: The albedo.
        - did_scatter: 1 if the direction leaves the surface, 0 if absorbed.
    """
    reflected = reflect(unit_vector(incident_direction), normal)
    scattered_direction = reflected + fuzz * random_in_unit_sphere()

    did_scatter = 0
    if tm.dot(scattered_direction, normal) > 0.0:
        did_scatter = 1

    return scattered_direction, albedo, did_scatter
