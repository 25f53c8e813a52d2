"""Shared two-phase intersection contract for primitives.

Every primitive answers intersect(ray) with an IntersectInfo (or None for a
miss) and, only for the nearest winner, resolves the hit with
result(ray, info). Splitting the two phases lets the nearest-hit search
compare plain distances before paying for normals.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from gus.core.algebra import Vector3
from gus.core.ray import Ray
from gus.materials.material import Material


@dataclass(frozen=True, order=True, slots=True)
class IntersectInfo:
    """Distance to a hit plus a primitive-specific orientation value.

    Ordering and equality use the distance only.

    Attributes:
        distance: Distance along the ray to the hit (infinite if none).
        orientation: Signed value used by result() to orient the normal
            towards the ray origin without redoing the intersection.
    """

    distance: float = math.inf
    orientation: float = field(default=1.0, compare=False)


@dataclass(frozen=True, slots=True)
class IntersectResult:
    """Resolved hit.

    Attributes:
        position: Hit point.
        normal: Unit normal facing the side the ray came from.
        material: Material of the hit primitive.
    """

    position: Vector3
    normal: Vector3
    material: Material


@runtime_checkable
class Primitive(Protocol):
    """Intersection contract shared by Sphere and Triangle."""

    material: Material

    def intersect(self, ray: Ray) -> IntersectInfo | None: ...

    def result(self, ray: Ray, info: IntersectInfo) -> IntersectResult: ...
