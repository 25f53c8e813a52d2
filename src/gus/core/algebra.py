"""Three-component vector algebra for the spectral path tracer.

This module provides the immutable Vector3 value type used for positions,
directions and normals throughout the renderer, plus the adjugate helpers
used by the triangle intersection test.

The adjugate of the matrix whose rows are (a, b, c) has the columns
(b x c, c x a, a x b). Applying the adjugate twice scales the input rows
by the determinant a . (b x c), which gives a cheap self-consistency check:

    adjugate(*adjugate(a, b, c)) == determinant(a, b, c) * (a, b, c)

Example:
    >>> from gus.core.algebra import Vector3
    >>> v = Vector3(3.0, 0.0, 4.0)
    >>> v.length()
    5.0
    >>> v.normalize()
    Vector3(x=0.6, y=0.0, z=0.8)
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Vector3:
    """An immutable 3D vector.

    Attributes:
        x: First component.
        y: Second component.
        z: Third component.
    """

    x: float
    y: float
    z: float

    @classmethod
    def zero(cls) -> Vector3:
        """Return the zero vector."""
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def of(cls, values: tuple[float, float, float]) -> Vector3:
        """Build a vector from an (x, y, z) tuple."""
        x, y, z = values
        return cls(float(x), float(y), float(z))

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vector3:
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vector3:
        return Vector3(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> Vector3:
        return Vector3(-self.x, -self.y, -self.z)

    def dot(self, other: Vector3) -> float:
        """Compute the dot product self . other."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vector3) -> Vector3:
        """Compute the cross product self x other."""
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length_squared(self) -> float:
        return self.dot(self)

    def length(self) -> float:
        return math.sqrt(self.dot(self))

    def normalize(self) -> Vector3:
        """Return a unit vector in the same direction.

        Returns:
            The normalized vector. A zero-length vector is returned unchanged
            so callers never see NaN components.
        """
        length = self.length()
        if length == 0.0:
            return self
        return self / length

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


def determinant(a: Vector3, b: Vector3, c: Vector3) -> float:
    """Determinant of the matrix with rows a, b, c (the scalar triple product)."""
    return a.dot(b.cross(c))


def adjugate(a: Vector3, b: Vector3, c: Vector3) -> tuple[Vector3, Vector3, Vector3]:
    """Adjugate rows of the matrix with rows a, b, c.

    Each returned row is orthogonal to two of the inputs and has the
    determinant as its dot product with the third:

        a . (b x c) == b . (c x a) == c . (a x b) == det

    Args:
        a: First row.
        b: Second row.
        c: Third row.

    Returns:
        Tuple (b x c, c x a, a x b).
    """
    return b.cross(c), c.cross(a), a.cross(b)
