"""Scene-level sphere storage and nearest-hit intersection.

Spheres are stored in Taichi fields (Structure-of-Arrays) with a material ID
each. The scene is populated from Python before rendering and is only read by
kernels afterwards, so concurrent intersection queries need no locking.

intersect_scene tests every sphere while shrinking the upper bound to the
closest hit found so far, so each later test is already bounded by the best
candidate and the nearest hit wins.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.materials.material import add_lambertian_material
    >>> from spheretracer.scene.intersection import add_sphere, clear_scene, vec3
    >>> clear_scene()
    >>> mat = add_lambertian_material((0.5, 0.5, 0.5))
    >>> add_sphere(vec3(0, 0, -1), 0.5, material_id=mat)
    0
    >>> # Use intersect_scene within a Taichi kernel
"""

import math

import taichi as ti
import taichi.math as tm

from spheretracer.core.ray import Ray
from spheretracer.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record
from spheretracer.materials.material import get_material

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all spheres from the scene.

    Resets the sphere count to zero. The actual field data is not cleared
    but will be overwritten when new spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (must be finite and positive).
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is not a positive finite number.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if not math.isfinite(radius) or radius <= 0.0:
        raise ValueError(f"Sphere radius must be a positive finite number, got {radius}")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def get_sphere(index: ti.i32) -> Sphere:
    """Assemble the Sphere value stored at an index."""
    return Sphere(
        center=sphere_centers[index],
        radius=sphere_radii[index],
        material=get_material(sphere_material_ids[index]),
    )


@ti.func
def intersect_scene(ray: Ray, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Find the nearest sphere hit by a ray.

    Args:
        ray: The ray to test.
        t_min: Exclusive lower bound for a valid hit.
        t_max: Exclusive upper bound for a valid hit.

    Returns:
        The HitRecord of the nearest sphere in (t_min, t_max), or a miss
        record if no sphere qualifies. On an exact tie the earlier sphere
        is kept.
    """
    closest_so_far = t_max
    result = make_miss_record()

    for i in range(num_spheres[None]):
        rec = hit_sphere(ray, get_sphere(i), t_min, closest_so_far)
        if rec.hit == 1:
            closest_so_far = rec.t
            result = rec

    return result
