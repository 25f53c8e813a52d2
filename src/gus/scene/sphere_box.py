"""Sphere box demo scene.

A closed room built from six very large spheres whose visible caps act as
nearly flat walls, lit by a huge emissive sphere that pokes through the
ceiling, with three mostly mirror-like balls inside.

The room spans roughly x in [-10, 10], y in [-10, 10] and z in [-10, 20].
Opposite walls share a colour:

- x walls: blue + red diffuse
- y walls (floor and ceiling): green + blue diffuse
- far z wall: red + green diffuse
- near z wall (behind the eye): grey diffuse at half strength

The eye sits at z = -9 looking along +z with a 16:9 viewport.

Example:
    >>> from gus.scene.sphere_box import create_sphere_box_scene
    >>> from gus.camera.screen import Screen
    >>> from gus.core.image import Size
    >>> scene, eye = create_sphere_box_scene()
    >>> len(scene)
    10
    >>> screen = Screen(Size(192, 108), eye)
"""

from __future__ import annotations

from dataclasses import dataclass

from gus.camera.screen import Eye
from gus.core.algebra import Vector3
from gus.geometry.sphere import Sphere
from gus.materials.material import Material
from gus.materials.spectrum import Beam
from gus.scene.manager import Scene

# Radius of the wall spheres; large enough that their caps read as planes
WALL_RADIUS = 100000.0

# Distance from the origin to the side, floor and ceiling walls
ROOM_HALF_EXTENT = 10.0

# Distance from the origin to the far wall
FAR_WALL_DISTANCE = 20.0

LIGHT_RADIUS = 1000.0
# The light sphere dips 0.02 below the ceiling plane
LIGHT_CENTER = Vector3(0.0, LIGHT_RADIUS + 9.98, 0.0)


@dataclass
class SphereBoxParams:
    """Tunable materials of the sphere box.

    Attributes:
        light_level: Scale of the ceiling light's emission beam. Per-bin
            emission densities are probabilities, so a level that pushes any
            bin above 1 is a caller error.
        mirror_reflection: Reflection weight of the balls.
        mirror_diffuse: Diffuse weight of the balls.
        near_wall_level: Diffuse weight of the grey wall behind the eye.
    """

    light_level: float = 1.0
    mirror_reflection: float = 0.9
    mirror_diffuse: float = 0.01
    near_wall_level: float = 0.5


def _grey() -> Beam:
    return Beam.red() + Beam.green() + Beam.blue()


def create_sphere_box_scene(
    params: SphereBoxParams | None = None,
) -> tuple[Scene, Eye]:
    """Create the sphere box scene and its eye.

    Args:
        params: Optional SphereBoxParams. If None, uses the defaults.

    Returns:
        A tuple of (Scene, Eye). The scene holds six walls, three balls and
        the light, in that order.
    """
    if params is None:
        params = SphereBoxParams()

    r = WALL_RADIUS
    extent = ROOM_HALF_EXTENT
    grey = _grey()

    # Wall materials
    red_green = Material.diffusive(Beam.red() + Beam.green())
    green_blue = Material.diffusive(Beam.green() + Beam.blue())
    blue_red = Material.diffusive(Beam.blue() + Beam.red())
    near_wall = Material.diffusive(grey) * params.near_wall_level

    light = Material.emissive(grey * params.light_level)
    mirror = (
        Material.diffusive(grey) * params.mirror_diffuse
        + Material.reflective(grey) * params.mirror_reflection
    )

    walls = [
        Sphere(Vector3(0.0, 0.0, r + FAR_WALL_DISTANCE), r, red_green),
        Sphere(Vector3(0.0, 0.0, -r - extent), r, near_wall),
        Sphere(Vector3(0.0, r + extent, 0.0), r, green_blue),
        Sphere(Vector3(0.0, -r - extent, 0.0), r, green_blue),
        Sphere(Vector3(r + extent, 0.0, 0.0), r, blue_red),
        Sphere(Vector3(-r - extent, 0.0, 0.0), r, blue_red),
    ]

    balls = [
        Sphere(Vector3(-2.0, 0.0, 15.0), 2.0, mirror),
        Sphere(Vector3(3.5, -1.0, 12.0), 3.0, mirror),
        Sphere(Vector3(-1.5, 3.0, 9.0), 3.5, mirror),
    ]

    source = Sphere(LIGHT_CENTER, LIGHT_RADIUS, light)

    eye = Eye(
        position=Vector3(0.0, 0.0, -9.0),
        forward=Vector3(0.0, 0.0, 1.0),
        right=Vector3(1.0, 0.0, 0.0),
        up=Vector3(0.0, 1.0, 0.0),
        width=1.6,
        height=0.9,
        distance=1.5,
    )

    return Scene([*walls, *balls, source]), eye
