"""Scene manager for building sphere scenes with materials.

This module provides the high-level scene construction API. It coordinates
the material registry with sphere storage, keeps a Python-side record of
everything added, and converts scenes to and from plain configuration data
(dicts and JSON files).

A scene is assembled completely before rendering starts. Kernels only read
the Taichi fields the manager fills, so the manager must not be modified
while a render is in progress.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> red = scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=red)
    0
    >>> scene.add_dielectric_sphere((1, 0, -1), 0.5, ref_idx=1.5)
    (1, 1)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import taichi.math as tm

from spheretracer.materials.material import (
    MAX_MATERIALS,
    MaterialKind,
    add_dielectric_material,
    add_lambertian_material,
    add_metal_material,
    clear_materials,
    get_material_count,
)
from spheretracer.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        kind: The material variant.
        params: The material parameters as provided during creation.
    """

    material_id: int
    kind: MaterialKind
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Serializable description of a scene.

    Attributes:
        materials: List of material configurations. Each has a "type" key
            ("lambertian", "metal" or "dielectric") plus its parameters.
        spheres: List of sphere configurations with "center", "radius" and
            "material_id" keys.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _as_triple(values: Any, name: str) -> tuple[float, float, float]:
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {values}")
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Scene builder coordinating spheres and materials.

    Creating a SceneManager clears the global scene and material registry;
    only one scene is active per render session.

    Attributes:
        materials: MaterialInfo for all registered materials, by material ID.
        spheres: SphereInfo for all spheres in the scene.

    Example:
        >>> scene = SceneManager()
        >>> ground = scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        >>> scene.add_sphere((0, -1000, 0), 1000, ground)
        0
        >>> scene.add_metal_sphere((4, 1, 0), 1.0, albedo=(0.7, 0.6, 0.5), fuzz=0.0)
        (1, 1)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_materials()
        self.materials.clear()
        self.spheres.clear()

    def clear(self) -> None:
        """Clear the entire scene (spheres and materials)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _track_material(
        self, material_id: int, kind: MaterialKind, params: dict[str, Any]
    ) -> int:
        self.materials.append(MaterialInfo(material_id=material_id, kind=kind, params=params))
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Add a Lambertian (diffuse) material to the scene.

        Args:
            albedo: The diffuse reflectance color as (R, G, B) in [0, 1].

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        material_id = add_lambertian_material(albedo)
        return self._track_material(
            material_id, MaterialKind.LAMBERTIAN, {"albedo": tuple(albedo)}
        )

    def add_metal_material(
        self,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Add a metal (specular reflective) material to the scene.

        Args:
            albedo: The reflective color as (R, G, B) in [0, 1].
            fuzz: The surface roughness in [0, 1]. Default is 0 (perfect mirror).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component or fuzz is outside [0, 1].
        """
        material_id = add_metal_material(albedo, fuzz)
        return self._track_material(
            material_id, MaterialKind.METAL, {"albedo": tuple(albedo), "fuzz": fuzz}
        )

    def add_dielectric_material(self, ref_idx: float = 1.5) -> int:
        """Add a dielectric (glass/water) material to the scene.

        Args:
            ref_idx: Refractive index. Default is 1.5 (typical glass).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If the refractive index is not positive.
        """
        material_id = add_dielectric_material(ref_idx)
        return self._track_material(material_id, MaterialKind.DIELECTRIC, {"ref_idx": ref_idx})

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return get_material_count()

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Sphere Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (must be positive).
            material_id: The unified material ID to assign to the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or radius is not positive.
        """
        if material_id < 0 or material_id >= get_material_count():
            raise ValueError(f"Invalid material_id: {material_id}")

        center_vec = vec3(center[0], center[1], center[2])
        sphere_index = add_sphere(center_vec, radius, material_id)

        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=(float(center[0]), float(center[1]), float(center[2])),
                radius=float(radius),
                material_id=material_id,
            )
        )
        return sphere_index

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new Lambertian material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_lambertian_material(albedo)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new metal material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_metal_material(albedo, fuzz)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        ref_idx: float = 1.5,
    ) -> tuple[int, int]:
        """Add a sphere with a new dielectric material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_dielectric_material(ref_idx)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for mat in self.materials:
            mat_config: dict[str, Any] = {"type": mat.kind.name.lower()}
            for key, value in mat.params.items():
                mat_config[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(mat_config)

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene, then adds the materials (in order, so
        their IDs match the configuration) followed by the spheres.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        for mat_config in config.materials:
            mat_type = str(mat_config.get("type", "")).lower()
            if mat_type == "lambertian":
                albedo = _as_triple(mat_config.get("albedo", [0.5, 0.5, 0.5]), "albedo")
                self.add_lambertian_material(albedo)
            elif mat_type == "metal":
                albedo = _as_triple(mat_config.get("albedo", [0.8, 0.8, 0.8]), "albedo")
                self.add_metal_material(albedo, float(mat_config.get("fuzz", 0.0)))
            elif mat_type == "dielectric":
                self.add_dielectric_material(float(mat_config.get("ref_idx", 1.5)))
            else:
                raise ValueError(f"Unknown material type: {mat_type}")

        for sphere_config in config.spheres:
            center = _as_triple(sphere_config.get("center", [0, 0, 0]), "center")
            radius = float(sphere_config.get("radius", 1.0))
            material_id = int(sphere_config.get("material_id", 0))
            self.add_sphere(center, radius, material_id)

        logger.debug(
            "Loaded scene with %d materials and %d spheres",
            len(self.materials),
            len(self.spheres),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with 'materials' and 'spheres' keys."""
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
        )
        self.from_config(config)

    def save_json(self, path: str | Path) -> None:
        """Write the scene to a JSON file."""
        Path(path).write_text(json.dumps(self.to_dict(), indent=2))

    def load_json(self, path: str | Path) -> dict[str, Any]:
        """Load the scene from a JSON file.

        Keys other than "materials" and "spheres" are ignored here but kept
        in the returned data, so callers can read extra sections such as a
        camera.

        Returns:
            The parsed JSON object.

        Raises:
            ValueError: If the file is not valid JSON or describes an
                invalid scene.
        """
        try:
            data = json.loads(Path(path).read_text())
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid scene file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid scene file {path}: expected a JSON object")
        self.from_dict(data)
        return data

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS
