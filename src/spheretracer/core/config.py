"""Render configuration.

The process-wide rendering constants (resolution, samples per pixel, bounce
limit, sky color) are gathered into one RenderConfig value that is threaded
explicitly into the renderer instead of living as mutable module globals.

Example:
    >>> from spheretracer.core.config import RenderConfig
    >>> config = RenderConfig(width=200, height=100, samples_per_pixel=4)
    >>> config.validate()
    >>> config.aspect_ratio
    2.0
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

# Defaults matching the reference render: 1000x500, 10 samples, 50 bounces
DEFAULT_WIDTH = 1000
DEFAULT_HEIGHT = 500
DEFAULT_SAMPLES_PER_PIXEL = 10
DEFAULT_MAX_DEPTH = 50

# Color blended with white along the vertical sky gradient
DEFAULT_SKY_COLOR = (0.5, 0.7, 1.0)

# Render target buffers are preallocated to this size
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048


@dataclass
class RenderConfig:
    """Configuration for a single render session.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of scatter bounces per camera ray. A path
            that would need more bounces resolves to black.
        sky_color: RGB color at the top of the sky gradient (bottom is white).
        jitter: If True, sub-pixel sample offsets are uniform random;
            otherwise every sample goes through the pixel center.
        seed: Seed for the Taichi random streams and the scene generator.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    max_depth: int = DEFAULT_MAX_DEPTH
    sky_color: tuple[float, float, float] = field(default=DEFAULT_SKY_COLOR)
    jitter: bool = True
    seed: int = 0

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    def validate(self) -> None:
        """Check the configuration values.

        Raises:
            ValueError: If any dimension or sample count is not positive, if
                the image is larger than the preallocated render target,
                if max_depth is negative, or if a sky color component is
                outside [0, 1].
        """
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        if self.samples_per_pixel <= 0:
            raise ValueError(
                f"samples_per_pixel must be positive, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if len(self.sky_color) != 3:
            raise ValueError(f"sky_color must have 3 components, got {self.sky_color}")
        for i, component in enumerate(self.sky_color):
            if component < 0.0 or component > 1.0:
                raise ValueError(
                    f"Sky color component {i} = {component} is outside [0, 1]"
                )

    def to_dict(self) -> dict[str, Any]:
        """Export the configuration as a plain dictionary."""
        data = asdict(self)
        data["sky_color"] = list(self.sky_color)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RenderConfig:
        """Build a configuration from a dictionary, ignoring unknown keys.

        Args:
            data: Mapping with any subset of the RenderConfig fields.

        Returns:
            A validated RenderConfig.
        """
        known = {name for name in cls.__dataclass_fields__}
        values = {key: value for key, value in data.items() if key in known}
        if "sky_color" in values:
            values["sky_color"] = tuple(float(c) for c in values["sky_color"])
        config = cls(**values)
        config.validate()
        return config
