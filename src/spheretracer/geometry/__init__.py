"""Geometry module for the sphere primitive.

Components:
    sphere: Sphere and HitRecord dataclasses and ray-sphere intersection

Spheres are the only primitive; there is no acceleration structure, the
scene simply tests every sphere. Intersection routines are Taichi functions
for parallel intersection testing inside render kernels.

Ray-object intersection follows the pattern:
    record = hit_sphere(ray, sphere, t_min, t_max)
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_miss_record

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_miss_record",
]
