"""Photon-carrying ray and the three scattering transforms.

A Ray has a position, a unit direction and exactly one Frequency. Rays are
immutable; scattering at a surface produces a new ray whose origin is pushed
EPSILON along the new direction to avoid hitting the same surface again.

The surface normal passed to the transforms must face the side the incoming
ray arrived from (primitives' result() guarantees this), so:

- diffuse picks a uniform direction on the sphere and flips it into the
  normal's hemisphere;
- reflect mirrors the direction about the normal;
- refract bends the direction through the surface by Snell's law, falling
  back to reflect on total internal reflection.

Example:
    >>> import numpy as np
    >>> from gus.core.algebra import Vector3
    >>> from gus.core.ray import Ray
    >>> from gus.materials.spectrum import Frequency
    >>> ray = Ray(Vector3(0, 0, 0), Vector3(0, 0, 1), Frequency(3))
    >>> bounced = ray.reflect(Vector3(0, 0, 5), Vector3(0, 0, -1))
    >>> bounced.direction
    Vector3(x=0.0, y=0.0, z=-1.0)
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from gus.core.algebra import Vector3
from gus.materials.spectrum import Frequency

# Offset of a scattered ray's origin along its direction
EPSILON = 0.01


@dataclass(frozen=True, slots=True)
class Ray:
    """A ray carrying one spectral sample.

    Attributes:
        position: Origin of the ray.
        direction: Unit direction of travel.
        frequency: The spectral bin this ray carries.
    """

    position: Vector3
    direction: Vector3
    frequency: Frequency

    def at(self, distance: float) -> Vector3:
        """Point at the given distance along the ray."""
        return self.position + self.direction * distance

    def _continue(self, position: Vector3, direction: Vector3) -> Ray:
        return Ray(position + direction * EPSILON, direction, self.frequency)

    def diffuse(self, position: Vector3, normal: Vector3, rng: np.random.Generator) -> Ray:
        """Scatter uniformly into the hemisphere around normal.

        Args:
            position: Hit point on the surface.
            normal: Unit normal facing the incoming side.
            rng: Per-worker random generator.

        Returns:
            The scattered ray.
        """
        direction = random_unit_vector(rng)
        if direction.dot(normal) < 0.0:
            direction = -direction
        return self._continue(position, direction)

    def reflect(self, position: Vector3, normal: Vector3) -> Ray:
        """Mirror reflection about normal."""
        return self._continue(position, reflect(self.direction, normal))

    def refract(self, position: Vector3, normal: Vector3, factor: float) -> Ray:
        """Refract through the surface.

        Args:
            position: Hit point on the surface.
            normal: Unit normal facing the incoming side.
            factor: Ratio of refraction indices (incident / transmitted).

        Returns:
            The transmitted ray, or the reflected ray on total internal
            reflection.
        """
        direction = refract(self.direction, normal, factor)
        if direction is None:
            return self.reflect(position, normal)
        return self._continue(position, direction)


def random_unit_vector(rng: np.random.Generator) -> Vector3:
    """Uniform direction on the unit sphere (azimuth and height sampling)."""
    azimuth = rng.uniform(0.0, 2.0 * math.pi)
    z = rng.uniform(-1.0, 1.0)
    r = math.sqrt(max(0.0, 1.0 - z * z))
    return Vector3(r * math.sin(azimuth), r * math.cos(azimuth), z)


def reflect(incident: Vector3, normal: Vector3) -> Vector3:
    """Reflect an incident direction about a unit normal."""
    return incident - normal * (2.0 * incident.dot(normal))


def refract(incident: Vector3, normal: Vector3, factor: float) -> Vector3 | None:
    """Transmitted direction by Snell's law.

    The tangential part of the incident direction is n x (d x n); its length
    is sin(theta_i), so sin(theta_t) = |tangential| * factor.

    Args:
        incident: Unit incoming direction.
        normal: Unit normal facing the incoming side.
        factor: Ratio of refraction indices (incident / transmitted).

    Returns:
        The unit transmitted direction, or None on total internal reflection.
    """
    tangential = normal.cross(incident.cross(normal))
    sin_t = tangential.length() * factor
    if sin_t >= 1.0:
        return None
    cos_t = math.sqrt(1.0 - sin_t * sin_t)
    return tangential * factor - normal * cos_t
