"""Image export utilities for rendered images.

This module turns an accumulated Image into 8-bit pixels and writes them to
disk with Pillow. The accumulation buffer stores row 0 at the bottom of the
screen; exported arrays and files are flipped so the top row comes first.

Supported formats are whatever Pillow infers from the file suffix; TGA and
PNG are the usual choices.

Example:
    >>> from gus.output.export import save_image
    >>> image = tracer.stop()
    >>> save_image(image, "out.tga", scale=10.0)
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from gus.core.image import Image

logger = logging.getLogger(__name__)


def apply_gamma(
    values: npt.NDArray[np.float64],
    gamma: float = 1.0,
) -> npt.NDArray[np.float64]:
    """Apply gamma encoding to values already clamped to [0, 1].

    Args:
        values: Linear values in [0, 1].
        gamma: Gamma value; 1.0 leaves values unchanged.

    Returns:
        values ** (1 / gamma).
    """
    if gamma == 1.0:
        return values
    return np.power(values, 1.0 / gamma)


def image_to_array(
    image: Image,
    scale: float = 1.0,
    gamma: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert an accumulated image to a displayable uint8 array.

    Each channel is averaged over the sample passes, multiplied by scale,
    clamped to [0, 1], gamma encoded and truncated to a byte. An image with
    no passes is black.

    Args:
        image: The accumulated image.
        scale: Exposure multiplier.
        gamma: Gamma value (default 1.0, linear).

    Returns:
        Array of shape (vertical_count, horizontal_count, 3), top row first.
    """
    size = image.size
    averaged = np.nan_to_num(image.average() * scale, nan=0.0)
    clamped = np.clip(averaged, 0.0, 1.0)
    encoded = apply_gamma(clamped, gamma)

    # Convert to 8-bit
    image_uint8 = (encoded * 255.0).astype(np.uint8)
    grid = image_uint8.reshape(size.vertical_count, size.horizontal_count, 3)

    # Flip vertically (row 0 is the bottom of the screen)
    return np.ascontiguousarray(np.flipud(grid))


def save_image(
    image: Image,
    filepath: str | Path,
    scale: float = 1.0,
    gamma: float = 1.0,
) -> Path:
    """Save an accumulated image to a file.

    Args:
        image: The accumulated image.
        filepath: Output path. The format is chosen from its suffix.
        scale: Exposure multiplier.
        gamma: Gamma value.

    Returns:
        The path written.

    Raises:
        ValueError: If Pillow does not recognise the suffix.
        OSError: If the file cannot be written.
    """
    path = Path(filepath)
    pixels = image_to_array(image, scale=scale, gamma=gamma)

    # Save using Pillow
    pil_image = PILImage.fromarray(pixels)
    pil_image.save(path)

    logger.info("Saved %s (%d passes)", path, image.count)
    return path
