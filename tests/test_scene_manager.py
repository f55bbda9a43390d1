"""Unit tests for the SceneManager.

Tests cover:
- Material registration (Lambertian, Metal, Dielectric)
- Material tracking and lookup
- Sphere addition with materials
- Convenience methods (add_*_sphere)
- Scene serialization (to_config, from_config, dicts and JSON files)
- Scene clearing
"""

import json

import pytest
import taichi as ti


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for each test."""
    from spheretracer.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()


class TestMaterialRegistration:
    """Tests for material registration."""

    def test_add_multiple_materials(self, fresh_scene):
        """Test materials of different kinds share one ID sequence."""
        id0 = fresh_scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
        id1 = fresh_scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.0)
        id2 = fresh_scene.add_dielectric_material(ref_idx=1.5)
        id3 = fresh_scene.add_lambertian_material(albedo=(0.1, 0.8, 0.1))

        assert (id0, id1, id2, id3) == (0, 1, 2, 3)
        assert fresh_scene.get_material_count() == 4

    def test_material_validation(self, fresh_scene):
        """Test invalid parameters are rejected and not tracked."""
        with pytest.raises(ValueError):
            fresh_scene.add_lambertian_material(albedo=(1.5, 0.5, 0.5))
        with pytest.raises(ValueError):
            fresh_scene.add_metal_material(albedo=(0.5, 0.5, 0.5), fuzz=2.0)
        with pytest.raises(ValueError):
            fresh_scene.add_dielectric_material(ref_idx=-1.0)

        assert fresh_scene.materials == []
        assert fresh_scene.get_material_count() == 0

    def test_get_material_info(self, fresh_scene):
        """Test material info records kind and parameters."""
        from spheretracer.materials.material import MaterialKind

        mat_id = fresh_scene.add_metal_material(albedo=(0.7, 0.6, 0.5), fuzz=0.2)
        info = fresh_scene.get_material_info(mat_id)

        assert info is not None
        assert info.kind == MaterialKind.METAL
        assert info.params == {"albedo": (0.7, 0.6, 0.5), "fuzz": 0.2}
        assert fresh_scene.get_material_info(99) is None


class TestSphereAddition:
    """Tests for adding spheres."""

    def test_add_sphere_with_material(self, fresh_scene):
        """Test a sphere is stored with its material ID."""
        from spheretracer.scene.intersection import sphere_material_ids, sphere_radii

        mat_id = fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        fresh_scene.add_lambertian_material(albedo=(0.1, 0.1, 0.1))
        idx = fresh_scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=mat_id)

        assert idx == 0
        assert fresh_scene.get_sphere_count() == 1
        assert sphere_material_ids[idx] == mat_id
        assert abs(sphere_radii[idx] - 0.5) < 1e-6

    @pytest.mark.parametrize("material_id", [-1, 1, 5])
    def test_add_sphere_invalid_material(self, fresh_scene, material_id):
        """Test unknown material IDs raise ValueError."""
        fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        with pytest.raises(ValueError, match="Invalid material_id"):
            fresh_scene.add_sphere(center=(0, 0, 0), radius=1.0, material_id=material_id)

    def test_add_sphere_invalid_radius(self, fresh_scene):
        """Test non-positive radii raise ValueError and are not tracked."""
        mat_id = fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        with pytest.raises(ValueError, match="radius"):
            fresh_scene.add_sphere(center=(0, 0, 0), radius=0.0, material_id=mat_id)
        assert fresh_scene.spheres == []

    def test_convenience_methods(self, fresh_scene):
        """Test add_*_sphere create one material and one sphere each."""
        from spheretracer.materials.material import MaterialKind

        assert fresh_scene.add_lambertian_sphere((0, 0, 0), 1.0, albedo=(0.5, 0.5, 0.5)) == (0, 0)
        assert fresh_scene.add_metal_sphere((2, 0, 0), 1.0, albedo=(0.7, 0.6, 0.5)) == (1, 1)
        assert fresh_scene.add_dielectric_sphere((4, 0, 0), 1.0, ref_idx=1.33) == (2, 2)

        kinds = [m.kind for m in fresh_scene.materials]
        assert kinds == [MaterialKind.LAMBERTIAN, MaterialKind.METAL, MaterialKind.DIELECTRIC]
        assert fresh_scene.get_sphere_count() == 3


class TestSceneClearing:
    """Tests for clearing the scene."""

    def test_clear_scene(self, fresh_scene):
        """Test clear() removes spheres, materials and tracking."""
        fresh_scene.add_lambertian_sphere((0, 0, 0), 1.0, albedo=(0.5, 0.5, 0.5))
        fresh_scene.clear()

        assert fresh_scene.get_sphere_count() == 0
        assert fresh_scene.get_material_count() == 0
        assert fresh_scene.materials == []
        assert fresh_scene.spheres == []

    def test_new_manager_replaces_previous_scene(self, fresh_scene):
        """Test constructing a SceneManager starts from an empty scene."""
        from spheretracer.scene.manager import SceneManager

        fresh_scene.add_lambertian_sphere((0, 0, 0), 1.0, albedo=(0.5, 0.5, 0.5))
        other = SceneManager()
        assert other.get_sphere_count() == 0
        assert other.get_material_count() == 0


class TestSceneSerialization:
    """Tests for scene serialization."""

    def _populate(self, scene):
        glass = scene.add_dielectric_material(ref_idx=1.5)
        scene.add_lambertian_sphere((0.0, -1000.0, 0.0), 1000.0, albedo=(0.5, 0.5, 0.5))
        scene.add_metal_sphere((4.0, 1.0, 0.0), 1.0, albedo=(0.7, 0.6, 0.5), fuzz=0.1)
        scene.add_sphere((0.0, 1.0, 0.0), 1.0, glass)

    def test_to_dict(self, fresh_scene):
        """Test to_dict lists materials with their type and spheres with IDs."""
        self._populate(fresh_scene)
        data = fresh_scene.to_dict()

        assert data["materials"] == [
            {"type": "dielectric", "ref_idx": 1.5},
            {"type": "lambertian", "albedo": [0.5, 0.5, 0.5]},
            {"type": "metal", "albedo": [0.7, 0.6, 0.5], "fuzz": 0.1},
        ]
        assert data["spheres"][2] == {"center": [0.0, 1.0, 0.0], "radius": 1.0, "material_id": 0}
        assert len(data["spheres"]) == 3

    def test_to_dict_from_dict(self, fresh_scene):
        """Test a dict round trip reproduces the scene."""
        self._populate(fresh_scene)
        data = fresh_scene.to_dict()

        fresh_scene.from_dict(data)
        assert fresh_scene.to_dict() == data
        assert fresh_scene.get_sphere_count() == 3
        assert fresh_scene.get_material_count() == 3

    def test_from_config_defaults(self, fresh_scene):
        """Test missing material parameters fall back to defaults."""
        from spheretracer.scene.manager import SceneConfig

        fresh_scene.from_config(
            SceneConfig(
                materials=[{"type": "Metal"}, {"type": "dielectric"}],
                spheres=[{"center": [1, 2, 3], "radius": 0.5, "material_id": 1}],
            )
        )
        assert fresh_scene.materials[0].params == {"albedo": (0.8, 0.8, 0.8), "fuzz": 0.0}
        assert fresh_scene.materials[1].params == {"ref_idx": 1.5}
        assert fresh_scene.spheres[0].center == (1.0, 2.0, 3.0)

    def test_from_config_invalid_material_type(self, fresh_scene):
        """Test unknown material types raise ValueError."""
        from spheretracer.scene.manager import SceneConfig

        with pytest.raises(ValueError, match="Unknown material type"):
            fresh_scene.from_config(SceneConfig(materials=[{"type": "emissive"}]))

    def test_from_config_bad_center(self, fresh_scene):
        """Test centers without three components raise ValueError."""
        from spheretracer.scene.manager import SceneConfig

        with pytest.raises(ValueError, match="center"):
            fresh_scene.from_config(
                SceneConfig(
                    materials=[{"type": "lambertian"}],
                    spheres=[{"center": [1, 2], "radius": 1.0, "material_id": 0}],
                )
            )

    def test_json_round_trip(self, fresh_scene, tmp_path):
        """Test save_json and load_json reproduce the scene."""
        self._populate(fresh_scene)
        path = tmp_path / "scene.json"
        fresh_scene.save_json(path)

        assert json.loads(path.read_text()) == fresh_scene.to_dict()

        expected = fresh_scene.to_dict()
        fresh_scene.clear()
        fresh_scene.load_json(path)
        assert fresh_scene.to_dict() == expected

    def test_load_json_returns_extra_sections(self, fresh_scene, tmp_path):
        """Test load_json returns the parsed object including unknown keys."""
        path = tmp_path / "with_camera.json"
        data = {
            "materials": [{"type": "lambertian", "albedo": [0.5, 0.5, 0.5]}],
            "spheres": [{"center": [0, 0, -1], "radius": 0.5, "material_id": 0}],
            "camera": {"vfov": 30},
        }
        path.write_text(json.dumps(data))

        loaded = fresh_scene.load_json(path)
        assert loaded == data
        assert fresh_scene.get_sphere_count() == 1

    def test_load_json_invalid_file(self, fresh_scene, tmp_path):
        """Test malformed JSON raises ValueError."""
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="Invalid scene file"):
            fresh_scene.load_json(path)

        path.write_text("[1, 2, 3]")
        with pytest.raises(ValueError, match="expected a JSON object"):
            fresh_scene.load_json(path)


class TestCapacityInfo:
    """Tests for capacity information."""

    def test_capacity_methods(self, fresh_scene):
        """Test the capacity accessors report the preallocated sizes."""
        from spheretracer.materials.material import MAX_MATERIALS
        from spheretracer.scene.intersection import MAX_SPHERES

        assert fresh_scene.get_max_spheres() == MAX_SPHERES
        assert fresh_scene.get_max_materials() == MAX_MATERIALS


class TestIntegrationWithIntersection:
    """Tests that scene data reaches the kernels."""

    def test_intersection_returns_sphere_material(self, fresh_scene):
        """Test the hit record carries the material assigned through the manager."""
        from spheretracer.core.ray import Ray, vec3
        from spheretracer.scene.intersection import intersect_scene

        fresh_scene.add_lambertian_sphere((0.0, 0.0, -10.0), 1.0, albedo=(0.1, 0.1, 0.1))
        fresh_scene.add_metal_sphere((0.0, 0.0, -3.0), 1.0, albedo=(0.7, 0.6, 0.5), fuzz=0.4)

        kind = ti.field(dtype=ti.i32, shape=())
        fuzz = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
            rec = intersect_scene(ray, 0.001, 1e30)
            kind[None] = rec.material.kind
            fuzz[None] = rec.material.fuzz

        test_kernel()
        assert kind[None] == 1
        assert abs(fuzz[None] - 0.4) < 1e-6
