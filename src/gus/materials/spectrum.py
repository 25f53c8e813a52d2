"""Discretized spectral light representation.

Light is described by a Beam: a power density for each of SIZE wavelength
bins. A single ray only ever carries one bin (a Frequency); colour emerges
from averaging many rays of different frequencies, which is what makes the
renderer spectral.

The red, green and blue basis beams are read from a fixed reference table
and normalized to unit length, so projecting a beam onto them yields display
RGB. The three reference bands do not overlap, hence the bases are mutually
orthogonal and Beam.red().rgb() is exactly (1, 0, 0).

Example:
    >>> from gus.materials.spectrum import Beam, Frequency
    >>> white = Beam.red() + Beam.green() + Beam.blue()
    >>> lit = Beam().boost(Frequency(20))
    >>> lit.rgb()
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

# Number of discretized wavelength bins
SIZE = 24

# Reference colour table: (wavelength in nm, (r, g, b) response).
# Blue, green and red bands are disjoint.
COLOR_TABLE: tuple[tuple[float, tuple[float, float, float]], ...] = (
    (390.0, (0.0, 0.0, 0.25)),
    (405.0, (0.0, 0.0, 0.5)),
    (420.0, (0.0, 0.0, 0.8)),
    (435.0, (0.0, 0.0, 1.0)),
    (450.0, (0.0, 0.0, 1.0)),
    (465.0, (0.0, 0.0, 0.85)),
    (480.0, (0.0, 0.0, 0.6)),
    (495.0, (0.0, 0.0, 0.3)),
    (510.0, (0.0, 0.3, 0.0)),
    (525.0, (0.0, 0.6, 0.0)),
    (540.0, (0.0, 0.9, 0.0)),
    (555.0, (0.0, 1.0, 0.0)),
    (570.0, (0.0, 1.0, 0.0)),
    (585.0, (0.0, 0.9, 0.0)),
    (600.0, (0.0, 0.6, 0.0)),
    (615.0, (0.0, 0.3, 0.0)),
    (630.0, (0.4, 0.0, 0.0)),
    (645.0, (0.8, 0.0, 0.0)),
    (660.0, (1.0, 0.0, 0.0)),
    (675.0, (1.0, 0.0, 0.0)),
    (690.0, (0.9, 0.0, 0.0)),
    (705.0, (0.7, 0.0, 0.0)),
    (720.0, (0.45, 0.0, 0.0)),
    (735.0, (0.2, 0.0, 0.0)),
)

TABLE_SIZE = len(COLOR_TABLE)


@dataclass(frozen=True, slots=True)
class Frequency:
    """Index of one spectral bin, always reduced modulo SIZE."""

    index: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "index", int(self.index) % SIZE)

    def wavelength(self) -> float:
        """Reference wavelength (nm) of this bin."""
        return COLOR_TABLE[(self.index * TABLE_SIZE) // SIZE][0]


@dataclass(frozen=True, slots=True)
class RGB:
    """Display-space colour triple.

    Attributes:
        r: Red channel.
        g: Green channel.
        b: Blue channel.
    """

    r: float = 0.0
    g: float = 0.0
    b: float = 0.0

    def __add__(self, other: RGB) -> RGB:
        return RGB(self.r + other.r, self.g + other.g, self.b + other.b)

    def __mul__(self, scalar: float) -> RGB:
        return RGB(self.r * scalar, self.g * scalar, self.b * scalar)

    def __truediv__(self, count: float) -> RGB:
        return RGB(self.r / count, self.g / count, self.b / count)

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.r, self.g, self.b)

    def to_bytes(self) -> tuple[int, int, int]:
        """Clamp each channel to [0, 1] and quantize to a byte.

        Returns:
            Tuple of (r, g, b) integers in [0, 255].
        """
        return (_to_byte(self.r), _to_byte(self.g), _to_byte(self.b))


def _to_byte(value: float) -> int:
    # NaN fails both comparisons and maps to black
    if not value > 0.0:
        return 0
    if value >= 1.0:
        return 255
    return int(value * 255.0)


class Beam:
    """A spectral power distribution over SIZE bins.

    Beams are immutable: every operation returns a new Beam and the
    underlying array is read-only.
    """

    __slots__ = ("_powers",)

    def __init__(self, powers: npt.ArrayLike | None = None) -> None:
        """Create a beam.

        Args:
            powers: Density per bin (SIZE values). Defaults to all zero.

        Raises:
            ValueError: If powers does not have exactly SIZE entries.
        """
        if powers is None:
            array = np.zeros(SIZE, dtype=np.float64)
        else:
            array = np.array(powers, dtype=np.float64)
            if array.shape != (SIZE,):
                raise ValueError(f"Beam needs {SIZE} bins, got shape {array.shape}")
        array.flags.writeable = False
        self._powers = array

    @classmethod
    def _wrap(cls, array: npt.NDArray[np.float64]) -> Beam:
        beam = cls.__new__(cls)
        array.flags.writeable = False
        beam._powers = array
        return beam

    @classmethod
    def constant(cls, value: float) -> Beam:
        """A flat beam with the same density in every bin."""
        return cls._wrap(np.full(SIZE, float(value), dtype=np.float64))

    @classmethod
    def red(cls) -> Beam:
        return _RED

    @classmethod
    def green(cls) -> Beam:
        return _GREEN

    @classmethod
    def blue(cls) -> Beam:
        return _BLUE

    @property
    def powers(self) -> npt.NDArray[np.float64]:
        """Read-only view of the per-bin densities."""
        return self._powers

    def density(self, frequency: Frequency) -> float:
        return float(self._powers[frequency.index])

    def dot(self, other: Beam) -> float:
        """Spectral overlap of two beams."""
        return float(np.dot(self._powers, other._powers))

    def boost(self, frequency: Frequency, weight: float = 1.0) -> Beam:
        """Return a copy with weight added at the bin of frequency."""
        powers = self._powers.copy()
        powers[frequency.index] += weight
        return Beam._wrap(powers)

    def rgb(self) -> RGB:
        """Project onto the red, green and blue basis beams."""
        return RGB(self.dot(_RED), self.dot(_GREEN), self.dot(_BLUE))

    def __add__(self, other: Beam) -> Beam:
        return Beam._wrap(self._powers + other._powers)

    def __mul__(self, scalar: float) -> Beam:
        return Beam._wrap(self._powers * float(scalar))

    __rmul__ = __mul__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Beam):
            return NotImplemented
        return bool(np.array_equal(self._powers, other._powers))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Beam({self._powers.tolist()!r})"


def _populate(channel: int) -> Beam:
    powers = np.empty(SIZE, dtype=np.float64)
    for i in range(SIZE):
        j = (i * TABLE_SIZE) // SIZE
        powers[i] = COLOR_TABLE[j][1][channel]
    length = float(np.sqrt(np.dot(powers, powers)))
    return Beam._wrap(powers / length)


_RED = _populate(0)
_GREEN = _populate(1)
_BLUE = _populate(2)
