"""Lambertian (ideal diffuse) material implementation.

A diffuse surface scatters every incoming ray toward a random point in the
unit sphere tangent to the hit point:

    target = p + normal + random_in_unit_sphere()

and tints it by its albedo. Diffuse surfaces never absorb a ray outright;
energy loss comes only from the albedo.

Example:
    >>> # Within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_lambertian(albedo, p, normal)
"""

import taichi as ti
import taichi.math as tm

from spheretracer.core.ray import random_in_unit_sphere

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_lambertian(albedo: vec3, hit_point: vec3, normal: vec3):
    """Compute the scattered ray direction for a Lambertian surface.

    Args:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
        hit_point: The intersection point; the scattered ray starts here.
        normal: The outward unit surface normal at the hit point.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: target - hit_point (not normalized).
        - attenuation: The albedo.
        - did_scatter: Always 1.
    """
    target = hit_point + normal + random_in_unit_sphere()
    return target - hit_point, albedo, 1
