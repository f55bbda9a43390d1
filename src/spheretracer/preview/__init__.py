"""Preview module for image output.

Components:
    export: PPM and Pillow-based image export plus image comparison

Example:
    >>> from spheretracer.preview import save_image, write_ppm
    >>> import sys
    >>>
    >>> save_image(pixels, "output.png")
    >>> write_ppm(pixels, sys.stdout)
"""

from spheretracer.preview.export import (
    compute_rmse,
    save_image,
    save_png_from_array,
    save_ppm,
    write_ppm,
)

__all__ = [
    "write_ppm",
    "save_ppm",
    "save_png_from_array",
    "save_image",
    "compute_rmse",
]
