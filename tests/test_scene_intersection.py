"""Unit tests for scene-level sphere storage and nearest-hit search."""

import math

import pytest
import taichi as ti


def _query(ox, oy, oz, dx, dy, dz, t_min=0.001, t_max=1e30):
    """Run intersect_scene for one ray and return (hit, t, normal, albedo)."""
    from spheretracer.core.ray import Ray, vec3
    from spheretracer.scene.intersection import intersect_scene

    hit = ti.field(dtype=ti.i32, shape=())
    t = ti.field(dtype=ti.f32, shape=())
    normal = ti.Vector.field(3, dtype=ti.f32, shape=())
    albedo = ti.Vector.field(3, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel():
        ray = Ray(origin=vec3(ox, oy, oz), direction=vec3(dx, dy, dz))
        rec = intersect_scene(ray, t_min, t_max)
        hit[None] = rec.hit
        t[None] = rec.t
        normal[None] = rec.normal
        albedo[None] = rec.material.albedo

    test_kernel()
    return hit[None], t[None], normal[None], albedo[None]


class TestSceneStorage:
    """Tests for adding and clearing spheres."""

    def test_add_sphere_returns_sequential_indices(self):
        """Test sphere indices count up from zero."""
        from spheretracer.core.ray import vec3
        from spheretracer.scene.intersection import add_sphere, get_sphere_count

        assert add_sphere(vec3(0, 0, -1), 0.5) == 0
        assert add_sphere(vec3(1, 0, -1), 0.5) == 1
        assert get_sphere_count() == 2

    def test_clear_scene(self):
        """Test clear_scene resets the count."""
        from spheretracer.core.ray import vec3
        from spheretracer.scene.intersection import add_sphere, clear_scene, get_sphere_count

        add_sphere(vec3(0, 0, -1), 0.5)
        clear_scene()
        assert get_sphere_count() == 0

    @pytest.mark.parametrize("radius", [0.0, -1.0, math.inf, math.nan])
    def test_invalid_radius_rejected(self, radius):
        """Test non-positive or non-finite radii raise ValueError."""
        from spheretracer.core.ray import vec3
        from spheretracer.scene.intersection import add_sphere, get_sphere_count

        with pytest.raises(ValueError, match="radius"):
            add_sphere(vec3(0, 0, -1), radius)
        assert get_sphere_count() == 0

    def test_capacity_exceeded(self):
        """Test adding more than MAX_SPHERES raises RuntimeError."""
        from spheretracer.core.ray import vec3
        from spheretracer.scene import intersection

        intersection.num_spheres[None] = intersection.MAX_SPHERES
        with pytest.raises(RuntimeError, match="Maximum number of spheres"):
            intersection.add_sphere(vec3(0, 0, -1), 0.5)


class TestIntersectScene:
    """Tests for the nearest-hit query."""

    def test_empty_scene_misses(self):
        """Test a ray in an empty scene reports no hit."""
        hit, _, _, _ = _query(0.0, 0.0, 0.0, 0.0, 0.0, -1.0)
        assert hit == 0

    def test_nearest_sphere_wins_regardless_of_order(self):
        """Test the closer sphere is reported even when added last."""
        from spheretracer.core.ray import vec3
        from spheretracer.materials.material import add_lambertian_material
        from spheretracer.scene.intersection import add_sphere

        far_mat = add_lambertian_material((0.1, 0.1, 0.1))
        near_mat = add_lambertian_material((0.9, 0.9, 0.9))
        add_sphere(vec3(0, 0, -10), 1.0, far_mat)
        add_sphere(vec3(0, 0, -4), 1.0, near_mat)

        hit, t, _, albedo = _query(0.0, 0.0, 0.0, 0.0, 0.0, -1.0)
        assert hit == 1
        assert abs(t - 3.0) < 1e-5
        assert abs(albedo[0] - 0.9) < 1e-6

    def test_single_sphere_matches_direct_test(self):
        """Test a one-sphere scene gives the same record as hit_sphere."""
        from spheretracer.core.ray import Ray, vec3
        from spheretracer.geometry.sphere import hit_sphere
        from spheretracer.materials.material import add_metal_material
        from spheretracer.scene.intersection import add_sphere, get_sphere, intersect_scene

        mat = add_metal_material((0.7, 0.6, 0.5), fuzz=0.25)
        add_sphere(vec3(0.2, -0.1, -3.0), 1.0, mat)

        results = ti.field(dtype=ti.f32, shape=(2, 8))

        @ti.func
        def store(row, rec):
            results[row, 0] = ti.cast(rec.hit, ti.f32)
            results[row, 1] = rec.t
            results[row, 2] = rec.normal.x
            results[row, 3] = rec.normal.y
            results[row, 4] = rec.normal.z
            results[row, 5] = ti.cast(rec.material.kind, ti.f32)
            results[row, 6] = rec.material.fuzz
            results[row, 7] = rec.material.albedo.x

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.1, 0.05, -1.0))
            store(0, intersect_scene(ray, 0.001, 1e30))
            store(1, hit_sphere(ray, get_sphere(0), 0.001, 1e30))

        test_kernel()
        values = results.to_numpy()
        assert values[0, 0] == 1.0
        assert (values[0] == values[1]).all()

    def test_t_max_excludes_far_spheres(self):
        """Test spheres beyond t_max are ignored."""
        from spheretracer.core.ray import vec3
        from spheretracer.materials.material import add_lambertian_material
        from spheretracer.scene.intersection import add_sphere

        mat = add_lambertian_material((0.5, 0.5, 0.5))
        add_sphere(vec3(0, 0, -10), 1.0, mat)

        hit, _, _, _ = _query(0.0, 0.0, 0.0, 0.0, 0.0, -1.0, t_max=5.0)
        assert hit == 0

    def test_overlapping_spheres_report_first_surface(self):
        """Test overlapping spheres report the first surface along the ray."""
        from spheretracer.core.ray import vec3
        from spheretracer.materials.material import add_lambertian_material
        from spheretracer.scene.intersection import add_sphere

        mat = add_lambertian_material((0.5, 0.5, 0.5))
        add_sphere(vec3(0, 0, -5), 2.0, mat)
        add_sphere(vec3(0, 0, -4), 0.5, mat)

        hit, t, normal, _ = _query(0.0, 0.0, 0.0, 0.0, 0.0, -1.0)
        assert hit == 1
        assert abs(t - 3.0) < 1e-5
        assert abs(normal[2] - 1.0) < 1e-6
