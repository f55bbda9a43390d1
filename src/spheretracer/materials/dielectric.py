"""Dielectric (glass/water) material implementation.

Dielectrics both reflect and refract. Each scatter event picks one of the two
at random, reflecting with the probability given by Schlick's approximation of
the Fresnel reflectance, and always reflecting when Snell's law admits no
refracted ray (total internal reflection).

Whether the ray is entering or leaving the sphere is decided from the sign of
dot(direction, normal), since hit normals always point outward:
    - entering: normal as-is, index ratio 1 / ref_idx
    - exiting: flipped normal, index ratio ref_idx

Dielectrics are colorless: the attenuation is always white.

Example:
    >>> # Within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_dielectric(
    >>> #     ref_idx, incident_dir, normal
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from spheretracer.core.ray import (
    length,
    reflect,
    refract,
    schlick,
)

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def _orient(ref_idx: ti.f32, incident_direction: vec3, normal: vec3):
    """Pick the refraction normal, index ratio and Schlick cosine.

    Returns:
        A tuple of (outward_normal, ni_over_nt, cosine).
    """
    d_dot_n = tm.dot(incident_direction, normal)
    d_len = length(incident_direction)

    # Entering the surface from outside
    outward_normal = normal
    ni_over_nt = 1.0 / ref_idx
    cosine = -d_dot_n / d_len

    if d_dot_n > 0.0:
        # Leaving the sphere from inside
        outward_normal = -normal
        ni_over_nt = ref_idx
        cosine = ref_idx * d_dot_n / d_len

    return outward_normal, ni_over_nt, cosine


@ti.func
def reflect_probability(ref_idx: ti.f32, incident_direction: vec3, normal: vec3) -> ti.f32:
    """Probability that a dielectric scatter event reflects.

    Args:
        ref_idx: Refractive index of the material.
        incident_direction: The incoming ray direction (any non-zero length).
        normal: The outward unit surface normal.

    Returns:
        1.0 under total internal reflection, otherwise schlick(cosine, ref_idx).
    """
    outward_normal, ni_over_nt, cosine = _orient(ref_idx, incident_direction, normal)
    _, did_refract = refract(incident_direction, outward_normal, ni_over_nt)
    prob = 1.0
    if did_refract == 1:
        prob = schlick(cosine, ref_idx)
    return prob


@ti.func
def scatter_dielectric(
    ref_idx: ti.f32,
    incident_direction: vec3,
    normal: vec3,
):
    """Compute the scattered ray direction for a dielectric surface.

    Args:
        ref_idx: Refractive index of the material.
        incident_direction: The incoming ray direction (any non-zero length).
        normal: The outward unit surface normal.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The reflected or refracted direction
          (not normalized).
        - attenuation: White (1, 1, 1).
        - did_scatter: Always 1 for dielectrics.
    """
    reflected = reflect(incident_direction, normal)
    outward_normal, ni_over_nt, cosine = _orient(ref_idx, incident_direction, normal)
    refracted, did_refract = refract(incident_direction, outward_normal, ni_over_nt)

    prob = 1.0
    if did_refract == 1:
        prob = schlick(cosine, ref_idx)

    scattered_direction = refracted
    if ti.random(ti.f32) < prob:
        scattered_direction = reflected

    return scattered_direction, vec3(1.0, 1.0, 1.0), 1
