"""Accumulation buffer for progressive rendering.

An Image holds one running RGB sum per pixel plus the number of sample
passes folded into it. A sample pass adds one estimate to every pixel and
increments the count by exactly one, so the displayed colour is
data / count. Images of identical Size merge by summing both the
accumulators and the counts, which is commutative and associative; this is
how worker images and checkpoints are combined.

The pixel buffer is a dense row-major float64 array of shape
(horizontal_count * vertical_count, 3). Row 0 is the bottom row of the
screen.

Example:
    >>> from gus.core.image import Image, Size
    >>> total = Image(Size(4, 3))
    >>> total.append(worker_image)
    >>> raw = total.raw_rgb(scale=10.0)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
import numpy.typing as npt

from gus.materials.spectrum import RGB


@dataclass(frozen=True, slots=True)
class Size:
    """Pixel grid dimensions.

    Attributes:
        horizontal_count: Number of columns.
        vertical_count: Number of rows.

    Raises:
        ValueError: If either count is not positive.
    """

    horizontal_count: int
    vertical_count: int

    def __post_init__(self) -> None:
        if self.horizontal_count <= 0 or self.vertical_count <= 0:
            raise ValueError(
                f"Image size must be positive, got "
                f"{self.horizontal_count}x{self.vertical_count}"
            )

    @property
    def pixel_count(self) -> int:
        return self.horizontal_count * self.vertical_count


class Image:
    """Per-pixel RGB accumulators plus a sample pass count.

    Attributes:
        size: Pixel grid dimensions.
        data: float64 array of shape (pixel_count, 3).
        count: Number of sample passes accumulated.
    """

    def __init__(self, size: Size) -> None:
        self.size = size
        self.data: npt.NDArray[np.float64] = np.zeros((size.pixel_count, 3), dtype=np.float64)
        self.count = 0

    def index(self, row: int, column: int) -> int:
        """Flat pixel index of (row, column)."""
        return row * self.size.horizontal_count + column

    def add(self, index: int, rgb: RGB) -> None:
        """Add one estimate to the accumulator of a pixel."""
        pixel = self.data[index]
        pixel[0] += rgb.r
        pixel[1] += rgb.g
        pixel[2] += rgb.b

    def append(self, other: Image) -> None:
        """Merge another image into this one.

        Args:
            other: Image with exactly the same size.

        Raises:
            ValueError: If the sizes differ. Images are never cropped or
                resized to fit.
        """
        if other.size != self.size:
            raise ValueError(f"Cannot merge image of size {other.size} into {self.size}")
        self.data += other.data
        self.count += other.count

    def copy(self) -> Image:
        image = Image(self.size)
        image.data[:] = self.data
        image.count = self.count
        return image

    def pixel(self, row: int, column: int) -> RGB:
        """Accumulated (not averaged) value of a pixel."""
        r, g, b = self.data[self.index(row, column)]
        return RGB(float(r), float(g), float(b))

    def average(self) -> npt.NDArray[np.float64]:
        """Per-pixel mean over the sample passes; zeros before any pass."""
        if self.count == 0:
            return np.zeros_like(self.data)
        return self.data / self.count

    def bitmap(self, scale: float = 1.0) -> npt.NDArray[np.uint8]:
        """Quantize the averaged image to bytes.

        Each channel is scaled, clamped to [0, 1] and truncated to a byte,
        pixel by pixel in R, G, B order, bottom row first.

        Args:
            scale: Exposure multiplier applied before clamping.

        Returns:
            Flat uint8 array of length pixel_count * 3.
        """
        averaged = np.nan_to_num(self.average() * scale, nan=0.0)
        clamped = np.clip(averaged, 0.0, 1.0)
        return (clamped * 255.0).astype(np.uint8).reshape(-1)

    def raw_rgb(self, scale: float = 1.0) -> bytes:
        """Bytes of bitmap(scale)."""
        return self.bitmap(scale).tobytes()

    def to_state(self) -> dict[str, Any]:
        """Self-describing snapshot for persistence.

        Returns:
            Dictionary with the grid dimensions, the sample count and a copy
            of the accumulators.
        """
        return {
            "horizontal_count": self.size.horizontal_count,
            "vertical_count": self.size.vertical_count,
            "count": self.count,
            "data": self.data.copy(),
        }

    @classmethod
    def from_state(cls, state: dict[str, Any]) -> Image:
        """Rebuild an image from to_state() output.

        Raises:
            KeyError: If a field is missing.
            ValueError: If the accumulators do not match the dimensions or
                the count is negative.
        """
        size = Size(int(state["horizontal_count"]), int(state["vertical_count"]))
        data = np.asarray(state["data"], dtype=np.float64)
        if data.shape != (size.pixel_count, 3):
            raise ValueError(
                f"Accumulator shape {data.shape} does not match size "
                f"{size.horizontal_count}x{size.vertical_count}"
            )
        count = int(state["count"])
        if count < 0:
            raise ValueError(f"Sample count must be non-negative, got {count}")

        image = cls(size)
        image.data[:] = data
        image.count = count
        return image

    def __repr__(self) -> str:
        return (
            f"Image(size={self.size.horizontal_count}x{self.size.vertical_count}, "
            f"count={self.count})"
        )
