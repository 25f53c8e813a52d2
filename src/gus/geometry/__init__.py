"""Geometry module for shape primitives.

Components:
    primitive: IntersectInfo, IntersectResult and the Primitive protocol
    sphere: Sphere with geometric ray-sphere intersection
    triangle: Triangle with adjugate-based intersection

Intersection is two-phase: intersect() returns the distance and any data
needed later, and result() is evaluated only for the nearest hit.
"""

from .primitive import IntersectInfo, IntersectResult, Primitive
from .sphere import Sphere
from .triangle import Triangle

__all__ = [
    "IntersectInfo",
    "IntersectResult",
    "Primitive",
    "Sphere",
    "Triangle",
]
