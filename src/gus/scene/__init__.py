"""Scene module for scene management and nearest-hit queries.

Components:
    intersection: Linear nearest-hit search over primitives
    manager: Read-only Scene container with path tracing
    sphere_box: Demo room built from large spheres
"""

from .intersection import find_nearest, resolve_nearest
from .manager import Scene
from .sphere_box import SphereBoxParams, create_sphere_box_scene

__all__ = [
    "find_nearest",
    "resolve_nearest",
    "Scene",
    "SphereBoxParams",
    "create_sphere_box_scene",
]
