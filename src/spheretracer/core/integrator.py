"""Path tracing integrator and parallel sampling kernels.

This module resolves the color of camera rays and drives the per-pixel
sampling loop.

The color of a ray is defined recursively:

    color(ray, depth) =
        attenuation * color(scattered, depth + 1)   if the ray hits a surface
                                                    that scatters it and
                                                    depth < max_depth
        black                                       if it hits a surface that
                                                    absorbs it, or the bounce
                                                    limit is reached
        sky(ray)                                    if it hits nothing

Taichi functions cannot recurse, so trace_color evaluates the same recursion
iteratively by carrying the product of attenuations (the throughput) forward.

The sky is a vertical gradient from white at the horizon to the configured
sky color overhead, blended by t = 0.5 * (unit(direction).y + 1).

Sampling runs in one kernel whose outer loop over pixels is parallelised by
Taichi. Every pixel only writes its own slot of the preallocated buffers and
the scene, materials and camera are read-only during the kernel, so no
synchronisation is needed. Randomness comes from Taichi's per-thread random
streams.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, random_seed=0)
    >>> from spheretracer.core.integrator import (
    ...     render_image, setup_render_target, get_pixels_numpy
    ... )
    >>> from spheretracer.scene.random_spheres import create_random_spheres_scene
    >>> from spheretracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_random_spheres_scene(aspect_ratio=2.0)
    >>> setup_camera(camera)
    >>> set_sky_color((0.5, 0.7, 1.0))
    >>> setup_render_target(200, 100)
    >>> render_image(num_samples=10)
    >>> pixels = get_pixels_numpy()  # (100, 200, 3) uint8, top row first
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from spheretracer.camera.pinhole import get_ray_sample
from spheretracer.core.config import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_SKY_COLOR,
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
)
from spheretracer.core.ray import Ray, make_ray, unit_vector
from spheretracer.geometry.sphere import HitRecord
from spheretracer.materials.dielectric import scatter_dielectric
from spheretracer.materials.lambertian import scatter_lambertian
from spheretracer.materials.material import MaterialKind
from spheretracer.materials.metal import scatter_metal
from spheretracer.scene.intersection import intersect_scene

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum ray bounces (path length)
MAX_DEPTH = DEFAULT_MAX_DEPTH

# t_min suppresses self-intersection of rays leaving a surface
T_MIN = 0.001
T_MAX = float(np.finfo(np.float32).max)

# Scale used to map [0, 1] to 8-bit channels with truncation
COLOR_SCALE = 255.99

# =============================================================================
# Sky Configuration
# =============================================================================

_sky_color = ti.Vector.field(3, dtype=ti.f32, shape=())


def set_sky_color(color: tuple[float, float, float] = DEFAULT_SKY_COLOR) -> None:
    """Set the color at the top of the sky gradient.

    Must be called before the first render; ProgressiveRenderer does this
    from its RenderConfig.

    Args:
        color: RGB color, each component in [0, 1].

    Raises:
        ValueError: If any component is outside [0, 1].
    """
    for i, component in enumerate(color):
        if component < 0.0 or component > 1.0:
            raise ValueError(f"Sky color component {i} = {component} is outside [0, 1]")
    _sky_color[None] = [color[0], color[1], color[2]]


def get_sky_color() -> tuple[float, float, float]:
    """Get the current sky color."""
    c = _sky_color[None]
    return (float(c[0]), float(c[1]), float(c[2]))


@ti.func
def sky_gradient(direction: vec3) -> vec3:
    """Color of a ray that escapes the scene.

    Args:
        direction: The ray direction (any non-zero length).

    Returns:
        (1 - t) * white + t * sky_color with t = 0.5 * (unit(direction).y + 1).
    """
    t = 0.5 * (unit_vector(direction).y + 1.0)
    return (1.0 - t) * vec3(1.0, 1.0, 1.0) + t * _sky_color[None]


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Linear color sum per pixel, indexed [col, row] with row 0 at the bottom
_color_sum = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Gamma corrected 8-bit pixels resolved from the sums
_pixels = ti.Vector.field(3, dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers. The buffers are
    preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    logger.debug("Render target set up at %dx%d", width, height)

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_sum.fill(0.0)
    _sample_count.fill(0)
    _pixels.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def scatter(ray_in: Ray, rec: HitRecord):
    """Dispatch a hit to its material's scatter function.

    Args:
        ray_in: The incoming ray.
        rec: The hit record carrying the material value.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). The
        scattered ray starts at rec.p; did_scatter == 0 means absorbed.
    """
    material = rec.material

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if material.kind == int(MaterialKind.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian(
            material.albedo, rec.p, rec.normal
        )
    elif material.kind == int(MaterialKind.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal(
            material.albedo, material.fuzz, ray_in.direction, rec.normal
        )
    elif material.kind == int(MaterialKind.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric(
            material.ref_idx, ray_in.direction, rec.normal
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Color Resolution
# =============================================================================


@ti.func
def trace_color(ray: Ray, max_depth: ti.i32) -> vec3:
    """Resolve the color seen along a ray.

    Args:
        ray: The ray to trace.
        max_depth: Maximum number of scatter bounces. A path that is still
            bouncing after max_depth scatters contributes black.

    Returns:
        The linear RGB color of the ray.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray
    depth = 0
    active = 1

    while active == 1:
        rec = intersect_scene(current, T_MIN, T_MAX)

        if rec.hit == 1:
            scattered_direction, attenuation, did_scatter = scatter(current, rec)
            if did_scatter == 1 and depth < max_depth:
                throughput *= attenuation
                current = make_ray(rec.p, scattered_direction)
                depth += 1
            else:
                # Absorbed or out of bounces: the path contributes nothing
                active = 0
        else:
            color = throughput * sky_gradient(current.direction)
            active = 0

    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_samples(
    width: ti.i32,
    height: ti.i32,
    num_samples: ti.i32,
    max_depth: ti.i32,
    jitter: ti.i32,
):
    """Add num_samples samples to every pixel's color sum."""
    for col, row in ti.ndrange(width, height):
        total = vec3(0.0, 0.0, 0.0)
        for _ in range(num_samples):
            ray = get_ray_sample(col, row, width, height, jitter)
            total += trace_color(ray, max_depth)

        _color_sum[col, row] += total
        _sample_count[col, row] += num_samples


@ti.kernel
def _resolve_pixels(width: ti.i32, height: ti.i32):
    """Average, gamma correct (gamma 2) and quantize every pixel."""
    for col, row in ti.ndrange(width, height):
        n = _sample_count[col, row]
        value = vec3(0.0, 0.0, 0.0)
        if n > 0:
            value = tm.sqrt(_color_sum[col, row] / ti.cast(n, ti.f32))
        _pixels[col, row] = ti.cast(COLOR_SCALE * value, ti.i32)


@ti.kernel
def _trace_single_ray(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    max_depth: ti.i32,
) -> vec3:
    """Resolve the color of one ray given by its components."""
    return trace_color(make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz)), max_depth)


@ti.kernel
def _render_single_sample(
    col: ti.i32,
    row: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    jitter: ti.i32,
) -> vec3:
    """Resolve the color of one camera sample for a specific pixel."""
    return trace_color(get_ray_sample(col, row, width, height, jitter), max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Resolve the linear color of a single ray.

    Python-callable entry point for testing and debugging; production
    rendering uses render_image().

    Args:
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z), any non-zero length.
        max_depth: Maximum number of scatter bounces.

    Returns:
        Tuple of (R, G, B) linear color values.
    """
    color = _trace_single_ray(
        origin[0], origin[1], origin[2], direction[0], direction[1], direction[2], max_depth
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def render_sample(
    col: int,
    row: int,
    max_depth: int = MAX_DEPTH,
    jitter: bool = True,
) -> tuple[float, float, float]:
    """Render a single camera sample for a specific pixel.

    Args:
        col: Pixel column (0 = left).
        row: Pixel row (0 = bottom).
        max_depth: Maximum number of scatter bounces.
        jitter: If True, the sample is placed randomly within the pixel.

    Returns:
        Tuple of (R, G, B) linear color values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    color = _render_single_sample(col, row, width, height, max_depth, int(jitter))

    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(
    num_samples: int = 1,
    max_depth: int = MAX_DEPTH,
    jitter: bool = True,
) -> None:
    """Add samples to every pixel of the render target.

    Can be called repeatedly; samples accumulate so the resolved image is
    always the average over all samples rendered so far.

    Args:
        num_samples: Number of samples to add per pixel.
        max_depth: Maximum number of scatter bounces.
        jitter: If True, sub-pixel sample positions are random.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If max_depth is negative.
    """
    _check_render_target_initialized()
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")
    if num_samples <= 0:
        return

    width, height = get_image_dimensions()
    _render_samples(width, height, num_samples, max_depth, int(jitter))


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    return int(_sample_count[0, 0])


def get_color_sum_numpy() -> npt.NDArray[np.float32]:
    """Get the raw linear color sums as a (height, width, 3) array.

    Rows are ordered top to bottom.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    sums = _color_sum.to_numpy()[:width, :height, :]
    return np.flipud(np.transpose(sums, (1, 0, 2))).astype(np.float32)


def get_pixels_numpy() -> npt.NDArray[np.uint8]:
    """Get the resolved 8-bit image.

    Averages the accumulated samples, applies gamma 2 (square root per
    channel) and scales by 255.99 with truncation. Sampling indexes rows
    bottom-up; the result is flipped here so row 0 is the top of the image.

    Returns:
        NumPy array of shape (height, width, 3) with dtype uint8.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    _resolve_pixels(width, height)

    # Field layout is [col, row] with row 0 at the bottom
    pixels = _pixels.to_numpy()[:width, :height, :]
    pixels = np.transpose(pixels, (1, 0, 2))
    pixels = np.flipud(pixels)

    return np.clip(pixels, 0, 255).astype(np.uint8)
