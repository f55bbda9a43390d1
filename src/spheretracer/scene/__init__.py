"""Scene module for sphere storage, nearest-hit queries and scene building.

Components:
    intersection: Sphere storage in Taichi fields and nearest-hit search
    manager: Scene manager coordinating spheres and materials, with
        dict/JSON serialization
    random_spheres: Factories for the random spheres cover scene and a
        single-sphere diagnostic scene

Scene data is organized for efficient GPU access:
    - Structure-of-Arrays layout for geometric data
    - Contiguous material ID arrays resolved to Material values on lookup
"""

from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MaterialInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
)
from .random_spheres import (
    create_random_spheres_scene,
    create_single_sphere_scene,
)

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    # Random spheres module
    "create_random_spheres_scene",
    "create_single_sphere_scene",
]
