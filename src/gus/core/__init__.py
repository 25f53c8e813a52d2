"""Core rendering module.

Components:
    algebra: Vector3, determinant and adjugate
    ray: Single-frequency rays and their scattering transforms
    image: Size and the mergeable Image accumulator
    integrator: Path tracing of one primary ray
    tracer: Worker pool that runs sample passes

Note: integrator and tracer are NOT imported here to avoid circular imports.
Import them directly, e.g. ``from gus.core.tracer import Tracer``.
"""

from .algebra import Vector3, adjugate, determinant
from .image import Image, Size
from .ray import EPSILON, Ray, random_unit_vector, reflect, refract

__all__ = [
    "Vector3",
    "adjugate",
    "determinant",
    "Image",
    "Size",
    "EPSILON",
    "Ray",
    "random_unit_vector",
    "reflect",
    "refract",
]
