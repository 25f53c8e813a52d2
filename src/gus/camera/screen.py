"""Eye configuration and screen sampling.

The Eye describes a pinhole camera by an orthonormal frame (forward, right,
up), a viewport of width x height placed at distance along forward, and a
position. Pixel (row i, column j) maps to the viewport point

    x = width  * ((j + dx) / horizontal_count - 0.5)
    y = height * ((i + dy) / vertical_count - 0.5)

where (dx, dy) is a sub-pixel jitter in [-0.5, 0.5). Row 0 is the bottom of
the screen.

A sample pass traces, for every pixel, one jittered ray per spectral bin,
folds the returned contributions into a Beam and adds the Beam's RGB
projection to the pixel. The image count grows by one per pass.

Example:
    >>> import numpy as np
    >>> from gus.camera.screen import Eye, Screen
    >>> from gus.core.image import Size
    >>> screen = Screen(Size(96, 54), eye)
    >>> image = screen.create_image()
    >>> screen.sample(scene, image, np.random.default_rng(0))
    >>> image.count
    1
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from gus.core.algebra import Vector3
from gus.core.image import Image, Size
from gus.core.ray import Ray
from gus.materials.spectrum import SIZE, Beam, Frequency

if TYPE_CHECKING:
    from gus.scene.manager import Scene


@dataclass(frozen=True)
class Eye:
    """Pinhole camera configuration.

    Attributes:
        position: Camera position in world space.
        forward: Unit view direction.
        right: Unit vector pointing right in the image plane.
        up: Unit vector pointing up in the image plane.
        width: Viewport width.
        height: Viewport height.
        distance: Distance from position to the viewport along forward.
    """

    position: Vector3
    forward: Vector3
    right: Vector3
    up: Vector3
    width: float
    height: float
    distance: float


class Screen:
    """Maps the pixel grid to camera rays and runs sample passes.

    Screens are immutable after construction and safe to share between
    worker threads.
    """

    __slots__ = ("_size", "_eye")

    def __init__(self, size: Size, eye: Eye) -> None:
        self._size = size
        self._eye = eye

    @property
    def size(self) -> Size:
        return self._size

    @property
    def eye(self) -> Eye:
        return self._eye

    def create_image(self) -> Image:
        """A zeroed image matching this screen."""
        return Image(self._size)

    def direction(self, row: int, column: int, dx: float = 0.0, dy: float = 0.0) -> Vector3:
        """Unit direction through a (jittered) pixel position."""
        eye = self._eye
        size = self._size
        x = eye.width * ((column + dx) / size.horizontal_count - 0.5)
        y = eye.height * ((row + dy) / size.vertical_count - 0.5)
        return (eye.forward * eye.distance + eye.right * x + eye.up * y).normalize()

    def primary_ray(
        self,
        row: int,
        column: int,
        frequency: Frequency,
        dx: float = 0.0,
        dy: float = 0.0,
    ) -> Ray:
        """Camera ray of one frequency through a pixel."""
        return Ray(self._eye.position, self.direction(row, column, dx, dy), frequency)

    def sample_pixel(
        self,
        scene: Scene,
        row: int,
        column: int,
        rng: np.random.Generator,
    ) -> Beam:
        """Trace one jittered ray per spectral bin and fold the results.

        Args:
            scene: Scene to trace.
            row: Pixel row (0 = bottom).
            column: Pixel column (0 = left).
            rng: Per-worker random generator.

        Returns:
            Beam with one unit boost per emission contribution.
        """
        beam = Beam()
        for k in range(SIZE):
            dx, dy = rng.uniform(-0.5, 0.5, size=2)
            ray = self.primary_ray(row, column, Frequency(k), float(dx), float(dy))
            for contribution in scene.trace(ray, rng):
                beam = beam.boost(contribution.frequency)
        return beam

    def sample(self, scene: Scene, image: Image, rng: np.random.Generator) -> None:
        """Run one full sample pass into image.

        Args:
            scene: Scene to trace.
            image: Accumulation buffer of this screen's size.
            rng: Per-worker random generator.

        Raises:
            ValueError: If the image size does not match the screen.
        """
        if image.size != self._size:
            raise ValueError(f"Image size {image.size} does not match screen size {self._size}")

        for row in range(self._size.vertical_count):
            for column in range(self._size.horizontal_count):
                beam = self.sample_pixel(scene, row, column, rng)
                image.add(image.index(row, column), beam.rgb())

        image.count += 1
