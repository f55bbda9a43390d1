"""Materials module for surface scattering models.

This module implements the three surface responses of the path tracer:

Components:
    material: The tagged Material value and the unified material registry
    lambertian: Ideal diffuse reflection
    metal: Mirror reflection with optional fuzz
    dielectric: Glass-like reflection/refraction chosen by Schlick's approximation

Each scatter function shares one contract: given the incoming direction and
the hit point/normal, return (scattered_direction, attenuation, did_scatter).
The scattered ray always starts at the hit point; did_scatter == 0 means the
ray was absorbed.

All scatter computations are Taichi functions for kernel execution.
"""

from .dielectric import reflect_probability, scatter_dielectric
from .lambertian import scatter_lambertian
from .material import (
    MAX_MATERIALS,
    Material,
    MaterialKind,
    add_dielectric_material,
    add_lambertian_material,
    add_metal_material,
    clear_materials,
    get_material,
    get_material_count,
)
from .metal import scatter_metal

__all__ = [
    "Material",
    "MaterialKind",
    "MAX_MATERIALS",
    "add_lambertian_material",
    "add_metal_material",
    "add_dielectric_material",
    "clear_materials",
    "get_material",
    "get_material_count",
    "scatter_lambertian",
    "scatter_metal",
    "scatter_dielectric",
    "reflect_probability",
]
