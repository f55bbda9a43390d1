"""Sphere primitive and ray-sphere intersection.

The ray-sphere intersection is found by solving

    |origin + t * direction - center|^2 = radius^2

which expands to the quadratic a*t^2 + 2*b*t + c = 0 with

    a = dot(direction, direction)
    b = dot(oc, direction)
    c = dot(oc, oc) - radius^2
    oc = origin - center

A hit is reported at the nearer root that lies strictly inside the caller's
(t_min, t_max) interval, falling back to the farther root. t_min is normally a
small epsilon so that rays leaving a surface do not re-hit it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.geometry.sphere import Sphere, hit_sphere
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from spheretracer.core.ray import Ray, point_at_parameter
from spheretracer.materials.material import Material

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        material: The surface material value.
    """

    center: vec3
    radius: ti.f32
    material: Material


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected (1 if hit, 0 if miss). The remaining
            fields are only valid if hit == 1.
        t: The ray parameter of the intersection, inside (t_min, t_max).
        p: The world-space intersection point.
        normal: Unit surface normal at p, always pointing away from the
            sphere center.
        material: Copy of the surface material at p.
    """

    hit: ti.i32
    t: ti.f32
    p: vec3
    normal: vec3
    material: Material


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        p=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material=Material(kind=0, albedo=vec3(0.0, 0.0, 0.0), fuzz=0.0, ref_idx=0.0),
    )


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray: The ray to test (direction need not be normalized).
        sphere: The sphere to test intersection against.
        t_min: Exclusive lower bound for a valid hit.
        t_max: Exclusive upper bound for a valid hit.

    Returns:
        A HitRecord; check its hit field to determine if intersection
        occurred. A non-positive discriminant (miss or exact tangent) or
        an empty interval (t_min >= t_max) never hits.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = b * b - a * c

    result = make_miss_record()

    if discriminant > 0.0:
        sqrt_d = ti.sqrt(discriminant)

        # Nearer root first, then the farther one
        t = (-b - sqrt_d) / a
        valid = t < t_max and t > t_min
        if not valid:
            t = (-b + sqrt_d) / a
            valid = t < t_max and t > t_min

        if valid:
            p = point_at_parameter(ray, t)
            result = HitRecord(
                hit=1,
                t=t,
                p=p,
                normal=(p - sphere.center) / sphere.radius,
                material=sphere.material,
            )

    return result
