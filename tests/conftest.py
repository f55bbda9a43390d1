"""Pytest configuration for spheretracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before each test.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized before any field is declared
    from spheretracer.core.integrator import clear_render_target, set_sky_color
    from spheretracer.materials.material import clear_materials
    from spheretracer.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_materials()
        clear_render_target()
        set_sky_color()

    # Clear everything before test
    _clear_all()

    yield

    # Clear everything after test
    _clear_all()


@pytest.fixture
def render_small():
    """Return a helper that renders the current scene at a small size.

    The helper takes (width, height, samples, max_depth, jitter) and returns
    the resolved uint8 image with rows ordered top to bottom.
    """
    from spheretracer.core.integrator import (
        get_pixels_numpy,
        render_image,
        setup_render_target,
    )

    def _render(width=8, height=4, samples=1, max_depth=50, jitter=False):
        setup_render_target(width, height)
        render_image(samples, max_depth, jitter)
        return get_pixels_numpy()

    return _render
