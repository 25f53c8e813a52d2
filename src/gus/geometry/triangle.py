"""Triangle primitive with adjugate-based ray-triangle intersection.

With a, b, c the vertex offsets from the ray origin, the adjugate rows

    A = b x c,  B = c x a,  C = a x b

form the dual basis of (a, b, c) scaled by det = a . (b x c). Projecting the
ray direction d onto them gives its barycentric weights (up to det), so the
ray passes through the cone spanned by the triangle exactly when d . A,
d . B and d . C share a sign. That sign also tells which face the ray sees.

The sum A + B + C equals (b - a) x (c - a), the unnormalized plane normal n,
hence the hit distance is det / (d . n). The normal is only normalized in
result(), for the nearest winner.

Example:
    >>> from gus.core.algebra import Vector3
    >>> from gus.core.ray import Ray
    >>> from gus.geometry.triangle import Triangle
    >>> from gus.materials.material import Material
    >>> from gus.materials.spectrum import Frequency
    >>> tri = Triangle(Vector3(-1, -1, 5), Vector3(1, -1, 5), Vector3(0, 1, 5), Material())
    >>> tri.intersect(Ray(Vector3(0, 0, 0), Vector3(0, 0, 1), Frequency(0))).distance
    5.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from gus.core.algebra import Vector3, adjugate
from gus.core.ray import Ray
from gus.geometry.primitive import IntersectInfo, IntersectResult
from gus.materials.material import Material


@dataclass(frozen=True)
class Triangle:
    """A triangle defined by three vertices.

    Attributes:
        a: First vertex.
        b: Second vertex.
        c: Third vertex.
        material: Surface response of the triangle.
        normal: Unit geometric normal (b - a) x (c - a), zero when the
            triangle is degenerate.
    """

    a: Vector3
    b: Vector3
    c: Vector3
    material: Material
    normal: Vector3 = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        n = (self.b - self.a).cross(self.c - self.a)
        object.__setattr__(self, "normal", n.normalize())

    def area(self) -> float:
        return 0.5 * (self.b - self.a).cross(self.c - self.a).length()

    def intersect(self, ray: Ray) -> IntersectInfo | None:
        """Test for ray-triangle intersection.

        Args:
            ray: The ray to test.

        Returns:
            IntersectInfo whose orientation is +1 or -1 so that
            orientation * normal faces the ray origin, or None on a miss,
            a parallel ray, or a degenerate triangle.
        """
        a = self.a - ray.position
        b = self.b - ray.position
        c = self.c - ray.position
        row_a, row_b, row_c = adjugate(a, b, c)

        d = ray.direction
        pa = d.dot(row_a)
        pb = d.dot(row_b)
        pc = d.dot(row_c)

        if pa >= 0.0 and pb >= 0.0 and pc >= 0.0:
            side = 1.0
        elif pa <= 0.0 and pb <= 0.0 and pc <= 0.0:
            side = -1.0
        else:
            return None

        denominator = pa + pb + pc
        if denominator == 0.0:
            return None

        distance = a.dot(row_a) / denominator
        if not math.isfinite(distance) or distance < 0.0:
            return None

        # The direction runs along the plane normal when side is positive
        return IntersectInfo(distance, -side)

    def result(self, ray: Ray, info: IntersectInfo) -> IntersectResult:
        """Resolve the hit point and the normal facing the ray origin."""
        return IntersectResult(
            position=ray.at(info.distance),
            normal=self.normal * info.orientation,
            material=self.material,
        )
