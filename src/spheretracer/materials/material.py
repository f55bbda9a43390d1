"""Material value type and the unified material registry.

Materials form a closed set of variants (Lambertian, Metal, Dielectric). They
are represented as a single Taichi struct tagged by ``kind``; members a
variant does not use are zero. Hit records carry a copy of this value so that
shading never needs to look back into the scene.

The registry stores every material in Structure-of-Arrays Taichi fields and
hands out unified material IDs. Parameters are validated on the Python side
when a material is added; kernels never see an invalid material.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.materials.material import (
    ...     add_lambertian_material, add_metal_material, add_dielectric_material
    ... )
    >>> ground = add_lambertian_material((0.5, 0.5, 0.5))
    >>> mirror = add_metal_material((0.7, 0.6, 0.5), fuzz=0.0)
    >>> glass = add_dielectric_material(1.5)
"""

import math
from enum import IntEnum

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


class MaterialKind(IntEnum):
    """Tag of the material variant, used for scatter dispatch."""

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


@ti.dataclass
class Material:
    """A surface material value.

    Attributes:
        kind: The variant tag (see MaterialKind).
        albedo: Reflective color for Lambertian and Metal (RGB in [0, 1]).
        fuzz: Metal roughness in [0, 1]. 0 = perfect mirror.
        ref_idx: Dielectric refractive index (positive).
    """

    kind: ti.i32
    albedo: vec3
    fuzz: ti.f32
    ref_idx: ti.f32


# =============================================================================
# Material Field Storage
# =============================================================================

# Maximum number of materials in the scene (one per sphere in the cover scene)
MAX_MATERIALS = 1024

material_kinds = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_fuzz = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_ref_idx = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def get_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


def _validate_albedo(albedo: tuple[float, float, float]) -> None:
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {albedo}")
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )


def _add_material(
    kind: MaterialKind,
    albedo: tuple[float, float, float],
    fuzz: float,
    ref_idx: float,
) -> int:
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_kinds[idx] = int(kind)
    material_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    material_fuzz[idx] = fuzz
    material_ref_idx[idx] = ref_idx
    num_materials[None] = idx + 1
    return idx


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian (diffuse) material to the registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.
            Each component must be in [0, 1].

    Returns:
        The unified material ID.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    _validate_albedo(albedo)
    return _add_material(MaterialKind.LAMBERTIAN, albedo, 0.0, 0.0)


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Add a metal (specular reflective) material to the registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple in [0, 1].
        fuzz: Roughness in [0, 1]. Default is 0 (perfect mirror).

    Returns:
        The unified material ID.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component or fuzz is outside [0, 1].
    """
    _validate_albedo(albedo)
    if fuzz < 0.0 or fuzz > 1.0:
        raise ValueError(
            f"Fuzz = {fuzz} is outside [0, 1]. "
            "Fuzz must be between 0 (perfect mirror) and 1 (maximum fuzz)."
        )
    return _add_material(MaterialKind.METAL, albedo, fuzz, 0.0)


def add_dielectric_material(ref_idx: float = 1.5) -> int:
    """Add a dielectric (glass/water) material to the registry.

    Args:
        ref_idx: Refractive index. Must be finite and positive.
            Common values: Water=1.33, Glass=1.5, Diamond=2.4.

    Returns:
        The unified material ID.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If the refractive index is not a positive finite number.
    """
    if not math.isfinite(ref_idx) or ref_idx <= 0.0:
        raise ValueError(
            f"Refractive index = {ref_idx} must be a positive finite number."
        )
    return _add_material(MaterialKind.DIELECTRIC, (1.0, 1.0, 1.0), 0.0, ref_idx)


@ti.func
def get_material(material_id: ti.i32) -> Material:
    """Copy a material value out of the registry.

    Args:
        material_id: The unified material ID.

    Returns:
        The Material stored under that ID.
    """
    return Material(
        kind=material_kinds[material_id],
        albedo=material_albedos[material_id],
        fuzz=material_fuzz[material_id],
        ref_idx=material_ref_idx[material_id],
    )
