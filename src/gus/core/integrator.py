"""Spectral light-transport integrator.

This module follows a single-frequency ray through the scene. At every
surface the material's fate decides whether the surface emits into the ray
and which one scattering event (if any) continues the path:

    - emission fired: the incoming ray is recorded as a contribution (the
      ray that struck the light carries the energy back to the eye);
    - diffuse / reflect / refract: one new ray continues at depth + 1;
    - decay: the path is absorbed.

Paths are cut off at MAX_DEPTH bounces. This is a hard truncation, not a
compensated Russian roulette; termination probability already comes from
the material's decay mass.

Example:
    >>> import numpy as np
    >>> from gus.core.integrator import trace_path
    >>> contributions = trace_path(scene, ray, np.random.default_rng(7))
    >>> [c.frequency for c in contributions]
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from gus.core.ray import Ray
from gus.materials.material import Scatter

if TYPE_CHECKING:
    from gus.scene.manager import Scene

# Maximum number of surface interactions along one path
MAX_DEPTH = 7


def trace_path(
    scene: Scene,
    ray: Ray,
    rng: np.random.Generator,
    max_depth: int = MAX_DEPTH,
) -> list[Ray]:
    """Trace one primary ray and collect its emission contributions.

    Args:
        scene: The scene to trace against.
        ray: The primary ray.
        rng: Per-worker random generator.
        max_depth: Number of surface interactions before the path is cut.

    Returns:
        The rays that received emission, in path order. Usually empty or a
        single ray; a path revisiting emitters may deposit several.
    """
    contributions: list[Ray] = []
    current: Ray | None = ray

    for _ in range(max_depth):
        if current is None:
            break

        hit = scene.resolve(current)
        if hit is None:
            break

        fate = hit.material.fate(current.frequency, rng)
        if fate.emission:
            contributions.append(current)

        if fate.scatter == Scatter.DIFFUSE:
            current = current.diffuse(hit.position, hit.normal, rng)
        elif fate.scatter == Scatter.REFLECT:
            current = current.reflect(hit.position, hit.normal)
        elif fate.scatter == Scatter.REFRACT:
            current = current.refract(hit.position, hit.normal, fate.factor)
        else:
            current = None

    return contributions
