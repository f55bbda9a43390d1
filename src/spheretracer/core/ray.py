"""Ray data structure and vector utilities for the path tracer.

This module provides the Ray dataclass and the vector algebra every higher
layer depends on. Vectors are Taichi ``vec3`` values, which already carry the
arithmetic operators (negation, addition, component-wise multiply/divide and
scalar scaling); the geometric operations live here as Taichi functions so
they can be called from inside render kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> # point_at_parameter(ray, 5.0) inside a kernel -> (0, 0, -5)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not normalized;
            callers normalize when unit length matters.
    """

    origin: vec3
    direction: vec3


@ti.func
def point_at_parameter(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a kernel."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the right-handed cross product a x b."""
    return tm.cross(a, b)


@ti.func
def squared_length(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length sqrt(dot(v, v))."""
    return ti.sqrt(squared_length(v))


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Scale a vector to unit length.

    The caller must guarantee that v has non-zero length.

    Args:
        v: The input vector.

    Returns:
        v / length(v).
    """
    return v / length(v)


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Reflect a vector about a normal.

    Computes v - 2 * dot(v, n) * n. The normal should be unit length.

    Args:
        v: The incoming direction vector (pointing toward the surface).
        n: The surface normal.

    Returns:
        The reflected direction vector.
    """
    return v - 2.0 * tm.dot(v, n) * n


@ti.func
def refract(v: vec3, n: vec3, ni_over_nt: ti.f32):
    """Refract a vector through a surface using Snell's law.

    The incoming vector is normalized first. Refraction is impossible (total
    internal reflection) when the discriminant

        1 - ni_over_nt^2 * (1 - dot(unit(v), n)^2)

    is non-positive.

    Args:
        v: The incoming direction vector (need not be normalized).
        n: The surface normal on the incoming side (unit length).
        ni_over_nt: Ratio of refractive indices (incident / transmitted).

    Returns:
        A tuple of (refracted, did_refract) where:
        - refracted: The refracted direction (not normalized), or a zero
          vector when total internal reflection occurs.
        - did_refract: 1 if refraction is possible, 0 otherwise.
    """
    uv = unit_vector(v)
    dt = tm.dot(uv, n)
    discriminant = 1.0 - ni_over_nt * ni_over_nt * (1.0 - dt * dt)
    refracted = vec3(0.0, 0.0, 0.0)
    did_refract = 0
    if discriminant > 0.0:
        refracted = ni_over_nt * (uv - n * dt) - n * ti.sqrt(discriminant)
        did_refract = 1
    return refracted, did_refract


@ti.func
def schlick(cosine: ti.f32, ref_idx: ti.f32) -> ti.f32:
    """Approximate Fresnel reflectance with Schlick's formula.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        ref_idx: Refractive index of the material.

    Returns:
        r0 + (1 - r0) * (1 - cosine)^5 with r0 = ((1 - ref_idx) / (1 + ref_idx))^2.
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point strictly inside the unit sphere.

    Rejection sampling: draw a point uniformly in the cube [-1, 1]^3 and retry
    until its squared length is below 1. Roughly half of the draws are
    accepted, so the loop terminates almost surely.

    Returns:
        A random point with squared_length < 1.
    """
    # Seed outside the sphere so the loop body runs at least once
    p = vec3(1.0, 1.0, 1.0)
    while squared_length(p) >= 1.0:
        p = 2.0 * vec3(ti.random(ti.f32), ti.random(ti.f32), ti.random(ti.f32)) - vec3(
            1.0, 1.0, 1.0
        )
    return p
