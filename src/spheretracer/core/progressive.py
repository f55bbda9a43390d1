"""Progressive renderer for iterative sample accumulation.

This module provides a convenient wrapper around the core integrator that supports:
- Progressive rendering that refines over time
- Batch rendering (multiple samples per pixel in one kernel launch)
- Progress callbacks and a generator interface
- Easy reset and re-render functionality

The ProgressiveRenderer class is driven by a RenderConfig and encapsulates
the render target state.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.core.config import RenderConfig
    >>> from spheretracer.core.progressive import ProgressiveRenderer
    >>> from spheretracer.scene.random_spheres import create_random_spheres_scene
    >>> from spheretracer.camera.pinhole import setup_camera
    >>>
    >>> config = RenderConfig(width=200, height=100, samples_per_pixel=10)
    >>> scene, camera = create_random_spheres_scene(config.aspect_ratio)
    >>> setup_camera(camera)
    >>>
    >>> renderer = ProgressiveRenderer(config)
    >>> renderer.render()
    >>> pixels = renderer.get_pixels()
"""

import logging
from collections.abc import Callable, Generator
from pathlib import Path

import numpy as np
import numpy.typing as npt

from spheretracer.core.config import RenderConfig
from spheretracer.core.integrator import (
    clear_render_target,
    get_color_sum_numpy,
    get_pixels_numpy,
    get_total_samples,
    render_image,
    set_sky_color,
    setup_render_target,
)

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """A progressive renderer that accumulates samples over time.

    The renderer owns the render target for its lifetime: constructing it
    (or calling resize) sizes and clears the global integrator buffers and
    installs the configured sky color.

    Attributes:
        config: The render settings in effect.
    """

    def __init__(self, config: RenderConfig | None = None) -> None:
        """Initialize the progressive renderer.

        Args:
            config: Render settings. Defaults to RenderConfig().

        Raises:
            ValueError: If the configuration is invalid or the dimensions
                exceed the maximum supported size.
        """
        self.config = config if config is not None else RenderConfig()
        self.config.validate()
        setup_render_target(self.config.width, self.config.height)
        set_sky_color(self.config.sky_color)
        logger.debug("Render target set up: %r", self)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.config.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.config.height

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Reset the accumulator for a new render.

        Clears the color buffer and sample count, allowing a fresh render
        without changing the image dimensions.
        """
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and reset accumulator.

        Args:
            width: New image width in pixels.
            height: New image height in pixels.

        Raises:
            ValueError: If dimensions are invalid or exceed the maximum.
        """
        setup_render_target(width, height)
        self.config.width = width
        self.config.height = height

    def render(
        self,
        num_samples: int | None = None,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render samples progressively with optional progress callback.

        Accumulates the specified number of samples into the existing buffer.
        Can be called multiple times to continue refining the image.

        Args:
            num_samples: Number of samples per pixel to add. Defaults to
                config.samples_per_pixel.
            batch_size: Number of samples to render before each callback.
                A larger batch size reduces callback overhead but provides
                less frequent updates.
            callback: Optional callback function called after each batch.
                Receives (current_total_samples, target_total_samples).
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int | None = None,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples progressively, yielding progress after each batch.

        Args:
            num_samples: Number of samples per pixel to add. Defaults to
                config.samples_per_pixel.
            batch_size: Number of samples to render before each yield.

        Yields:
            Tuple of (current_total_samples, target_total_samples).

        Raises:
            ValueError: If batch_size is not positive.
        """
        if num_samples is None:
            num_samples = self.config.samples_per_pixel
        if num_samples <= 0:
            return
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        start_samples = self.sample_count
        target_samples = start_samples + num_samples

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch, self.config.max_depth, self.config.jitter)
            remaining -= batch
            logger.debug("Accumulated %d/%d samples", self.sample_count, target_samples)
            yield (self.sample_count, target_samples)

    def get_color_sum(self) -> npt.NDArray[np.float32]:
        """Get the raw linear color sums as a (height, width, 3) array."""
        return get_color_sum_numpy()

    def get_pixels(self) -> npt.NDArray[np.uint8]:
        """Get the gamma-corrected 8-bit image, rows ordered top to bottom.

        Returns:
            NumPy array of shape (height, width, 3) with dtype uint8.
        """
        return get_pixels_numpy()

    def save_image(self, filepath: str | Path) -> None:
        """Save the rendered image to a file.

        The format follows the extension: ".ppm" writes plain-text PPM,
        anything else is handed to Pillow.

        Args:
            filepath: Path to save the image (e.g., "output.png").
        """
        from spheretracer.preview.export import save_image

        save_image(self.get_pixels(), filepath)
        logger.info("Saved %dx%d image to %s", self.width, self.height, filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count})"
        )
