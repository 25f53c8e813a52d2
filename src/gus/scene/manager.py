"""Scene container.

A Scene owns an immutable collection of primitives. It is built once and
then shared read-only by every tracing worker, so no locking is needed.

Example:
    >>> from gus.core.algebra import Vector3
    >>> from gus.geometry.sphere import Sphere
    >>> from gus.materials.material import Material
    >>> from gus.materials.spectrum import Beam
    >>> from gus.scene.manager import Scene
    >>> light = Material.emissive(Beam.red() + Beam.green() + Beam.blue())
    >>> scene = Scene([Sphere(Vector3(0, 10, 0), 3.0, light)])
    >>> contributions = scene.trace(ray, rng)
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

import numpy as np

from gus.core.integrator import MAX_DEPTH, trace_path
from gus.core.ray import Ray
from gus.geometry.primitive import IntersectInfo, IntersectResult, Primitive
from gus.scene.intersection import find_nearest, resolve_nearest


class Scene:
    """Read-only collection of primitives with path tracing.

    Attributes:
        primitives: Tuple of primitives, in insertion order.
    """

    __slots__ = ("_primitives",)

    def __init__(self, primitives: Iterable[Primitive] = ()) -> None:
        """Create a scene.

        Args:
            primitives: Spheres, triangles or any other Primitive.

        Raises:
            TypeError: If an element does not follow the Primitive contract.
        """
        items = tuple(primitives)
        for item in items:
            if not isinstance(item, Primitive):
                raise TypeError(f"Not a primitive: {item!r}")
        self._primitives = items

    @property
    def primitives(self) -> tuple[Primitive, ...]:
        return self._primitives

    def __len__(self) -> int:
        return len(self._primitives)

    def __iter__(self) -> Iterator[Primitive]:
        return iter(self._primitives)

    def nearest(self, ray: Ray) -> tuple[Primitive, IntersectInfo] | None:
        """Nearest primitive hit by ray, with its intersection info."""
        return find_nearest(self._primitives, ray)

    def resolve(self, ray: Ray) -> IntersectResult | None:
        """Position, normal and material of the nearest hit, if any."""
        return resolve_nearest(self._primitives, ray)

    def trace(
        self,
        ray: Ray,
        rng: np.random.Generator,
        max_depth: int = MAX_DEPTH,
    ) -> list[Ray]:
        """Trace a primary ray; see gus.core.integrator.trace_path."""
        return trace_path(self, ray, rng, max_depth)

    def __repr__(self) -> str:
        return f"Scene(primitives={len(self._primitives)})"
