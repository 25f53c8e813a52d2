"""Sphere primitive with geometric ray-sphere intersection.

The intersection uses the geometric form rather than the algebraic quadratic.
With q the offset from the ray origin to the centre and d the unit ray
direction:

    b = d . q                 (projection of the centre onto the ray)
    s = q . q - r^2           (positive when the origin is outside)
    discriminant = b^2 - s
    t = b -/+ sqrt(discriminant)

The nearest non-negative root wins. The sign of s is remembered as the
orientation (+r outside, -r inside) so result() can divide by it and always
return a normal facing the ray origin: outward when hit from outside, inward
when the ray starts inside the sphere.

Example:
    >>> from gus.core.algebra import Vector3
    >>> from gus.core.ray import Ray
    >>> from gus.geometry.sphere import Sphere
    >>> from gus.materials.material import Material
    >>> from gus.materials.spectrum import Frequency
    >>> sphere = Sphere(Vector3(0, 0, 0), 1.0, Material())
    >>> ray = Ray(Vector3(0, 0, 5), Vector3(0, 0, -1), Frequency(0))
    >>> sphere.intersect(ray).distance
    4.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from gus.core.algebra import Vector3
from gus.core.ray import Ray
from gus.geometry.primitive import IntersectInfo, IntersectResult
from gus.materials.material import Material


@dataclass(frozen=True)
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (positive).
        material: Surface response of the sphere.

    Raises:
        ValueError: If radius is not positive.
    """

    center: Vector3
    radius: float
    material: Material

    def __post_init__(self) -> None:
        if not self.radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")

    def intersect(self, ray: Ray) -> IntersectInfo | None:
        """Test for ray-sphere intersection.

        Args:
            ray: The ray to test (direction should be unit length).

        Returns:
            IntersectInfo for the nearest non-negative root, or None if the
            ray misses, the sphere lies behind the ray, or the direction is
            degenerate.
        """
        p = ray.direction
        if p.length_squared() == 0.0:
            return None

        q = self.center - ray.position
        b = p.dot(q)
        s = q.dot(q) - self.radius * self.radius
        orientation = self.radius if s >= 0.0 else -self.radius
        discriminant = b * b - s

        # NaN fails every comparison below and falls through to a miss
        if not discriminant >= 0.0:
            return None

        root = math.sqrt(discriminant)
        t0 = b - root
        t1 = b + root
        if t0 >= 0.0:
            return IntersectInfo(t0, orientation)
        if t1 >= 0.0:
            return IntersectInfo(t1, orientation)
        return None

    def result(self, ray: Ray, info: IntersectInfo) -> IntersectResult:
        """Resolve the hit point and oriented normal."""
        position = ray.at(info.distance)
        normal = (position - self.center) / info.orientation
        return IntersectResult(position=position, normal=normal, material=self.material)
