"""Image export utilities for rendered images.

This module writes resolved 8-bit images (shape (H, W, 3), rows top to
bottom) to files or streams.

Supported formats:
    - PPM (plain-text P3, one "r g b" line per pixel)
    - PNG and any other format Pillow can write

Example:
    >>> from spheretracer.preview.export import save_image
    >>> from spheretracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer()
    >>> renderer.render()
    >>> save_image(renderer.get_pixels(), "output.png")
"""

from __future__ import annotations

from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


def _check_pixels(pixels: npt.NDArray[np.integer[npt.NBitBase]]) -> None:
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {pixels.shape}")


def write_ppm(pixels: npt.NDArray[np.integer[npt.NBitBase]], stream: TextIO) -> None:
    """Write an image as plain-text PPM (P3).

    The header is "P3", the dimensions as "width height" and the maximum
    value 255, followed by one "r g b" line per pixel in row-major order.

    Args:
        pixels: Image array of shape (H, W, 3) with values in [0, 255].
        stream: Text stream to write to.

    Raises:
        ValueError: If the array is not (H, W, 3).
    """
    _check_pixels(pixels)
    height, width = pixels.shape[0], pixels.shape[1]

    stream.write(f"P3\n{width} {height}\n255\n")
    rows = pixels.reshape(-1, 3).astype(np.int64)
    stream.writelines(f"{r} {g} {b}\n" for r, g, b in rows.tolist())


def save_ppm(pixels: npt.NDArray[np.integer[npt.NBitBase]], filepath: str | Path) -> None:
    """Save an image as a plain-text PPM file."""
    with open(filepath, "w", encoding="ascii") as f:
        write_ppm(pixels, f)


def save_png_from_array(
    pixels: npt.NDArray[np.integer[npt.NBitBase]],
    filepath: str | Path,
) -> None:
    """Save an 8-bit image array using Pillow.

    The format follows the file extension (PNG for ".png").

    Args:
        pixels: Image array of shape (H, W, 3) with values in [0, 255].
        filepath: Output file path.

    Raises:
        ValueError: If the array is not (H, W, 3).
    """
    _check_pixels(pixels)
    image_uint8 = np.clip(pixels, 0, 255).astype(np.uint8)

    pil_image = PILImage.fromarray(image_uint8, mode="RGB")
    pil_image.save(filepath)


def save_image(
    pixels: npt.NDArray[np.integer[npt.NBitBase]],
    filepath: str | Path,
) -> None:
    """Save an image, choosing PPM or Pillow from the file extension."""
    if Path(filepath).suffix.lower() == ".ppm":
        save_ppm(pixels, filepath)
    else:
        save_png_from_array(pixels, filepath)


def compute_rmse(
    image_a: npt.NDArray[np.number[npt.NBitBase]],
    image_b: npt.NDArray[np.number[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
