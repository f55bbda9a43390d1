"""Pinhole camera model for perspective projection ray generation.

The camera maps normalized image-plane coordinates (u, v) to world-space rays
with a closed-form affine transform. It supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view specification
- Arbitrary aspect ratios
- Jittered sub-pixel sampling for anti-aliasing

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> camera = PinholeCamera(
    ...     lookfrom=(7.0, 1.5, 1.95),
    ...     lookat=(0.0, 0.0, -1.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=50.0,
    ...     aspect_ratio=2.0,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image center
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from spheretracer.core.ray import Ray, make_ray, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())  # Lower-left of viewport


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: PinholeCamera) -> None:
    """Initialize camera state from configuration.

    Computes the viewport geometry on a virtual image plane at unit distance
    in front of the camera. Must be called before rendering; the camera is
    read-only while kernels run.

    Args:
        camera: Camera configuration with position, orientation, and FOV.

    Raises:
        ValueError: If lookfrom equals lookat, vup is parallel to the view
            direction, or the field of view / aspect ratio is invalid.
    """
    if not 0.0 < camera.vfov < 180.0:
        raise ValueError(f"vfov must be in (0, 180) degrees, got {camera.vfov}")
    if camera.aspect_ratio <= 0.0:
        raise ValueError(f"aspect_ratio must be positive, got {camera.aspect_ratio}")

    theta = math.radians(camera.vfov)
    half_height = math.tan(theta / 2.0)
    half_width = camera.aspect_ratio * half_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    w = lookfrom - lookat
    w_norm = np.linalg.norm(w)
    if w_norm == 0.0:
        raise ValueError("lookfrom and lookat must differ")
    w = w / w_norm

    u = np.cross(vup, w)
    u_norm = np.linalg.norm(u)
    if u_norm == 0.0:
        raise ValueError("vup must not be parallel to the view direction")
    u = u / u_norm

    v = np.cross(w, u)

    horizontal = 2.0 * half_width * u
    vertical = 2.0 * half_height * v
    lower_left = lookfrom - half_width * u - half_height * v - w

    _camera_origin[None] = lookfrom.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (u, v).

    The coordinates are normalized:
    - u = 0: left edge of image, u = 1: right edge
    - v = 0: bottom edge of image, v = 1: top edge

    Args:
        u: Horizontal coordinate in [0, 1] (left to right).
        v: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A Ray from the camera origin toward the point (u, v) on the image
        plane. The direction is not normalized.
    """
    origin = _camera_origin[None]
    direction = (
        _lower_left_corner[None]
        + u * _viewport_horizontal[None]
        + v * _viewport_vertical[None]
        - origin
    )
    return make_ray(origin, direction)


@ti.func
def get_ray_sample(
    col: ti.i32, row: ti.i32, width: ti.i32, height: ti.i32, jitter: ti.i32
) -> Ray:
    """Generate a ray for one sub-pixel sample.

    With jitter enabled the sample position is uniform within the pixel;
    otherwise it is the pixel center.

    Args:
        col: Pixel column (0 = left).
        row: Pixel row (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
        jitter: 1 for random sub-pixel offsets, 0 for pixel centers.

    Returns:
        The camera ray for (u, v) = ((col + du) / width, (row + dv) / height).
    """
    du = 0.5
    dv = 0.5
    if jitter == 1:
        du = ti.random(ti.f32)
        dv = ti.random(ti.f32)

    u = (ti.cast(col, ti.f32) + du) / ti.cast(width, ti.f32)
    v = (ti.cast(row, ti.f32) + dv) / ti.cast(height, ti.f32)

    return get_ray(u, v)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, horizontal, vertical, lower_left.
    """
    origin_vec = _camera_origin[None]
    h_vec = _viewport_horizontal[None]
    vert_vec = _viewport_vertical[None]
    ll_vec = _lower_left_corner[None]

    return {
        "origin": (float(origin_vec[0]), float(origin_vec[1]), float(origin_vec[2])),
        "horizontal": (float(h_vec[0]), float(h_vec[1]), float(h_vec[2])),
        "vertical": (float(vert_vec[0]), float(vert_vec[1]), float(vert_vec[2])),
        "lower_left": (float(ll_vec[0]), float(ll_vec[1]), float(ll_vec[2])),
    }
