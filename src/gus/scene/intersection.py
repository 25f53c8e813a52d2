"""Scene-level nearest-hit search.

Scenes are small, so the search is a linear scan: every primitive is
intersected, misses are dropped, and the smallest distance wins. Ties are
broken arbitrarily. Only the winner is resolved with result().

Example:
    >>> from gus.scene.intersection import find_nearest, resolve_nearest
    >>> hit = find_nearest(primitives, ray)
    >>> if hit is not None:
    ...     primitive, info = hit
"""

from __future__ import annotations

from collections.abc import Iterable

from gus.core.ray import Ray
from gus.geometry.primitive import IntersectInfo, IntersectResult, Primitive


def find_nearest(
    primitives: Iterable[Primitive],
    ray: Ray,
) -> tuple[Primitive, IntersectInfo] | None:
    """Find the primitive hit first by the ray.

    Args:
        primitives: Primitives to test.
        ray: The ray to trace.

    Returns:
        A (primitive, info) pair for the closest hit, or None if nothing
        is hit.
    """
    nearest: tuple[Primitive, IntersectInfo] | None = None
    for primitive in primitives:
        info = primitive.intersect(ray)
        if info is None:
            continue
        if nearest is None or info < nearest[1]:
            nearest = (primitive, info)
    return nearest


def resolve_nearest(primitives: Iterable[Primitive], ray: Ray) -> IntersectResult | None:
    """Find the nearest hit and resolve its position, normal and material."""
    nearest = find_nearest(primitives, ray)
    if nearest is None:
        return None
    primitive, info = nearest
    return primitive.result(ray, info)
