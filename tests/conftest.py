"""Pytest configuration for gus tests.

This module provides shared fixtures for all test modules: seeded random
generators, common materials and tiny scenes and screens that keep sample
passes cheap.
"""

import logging

import numpy as np
import pytest

from gus.camera.screen import Eye, Screen
from gus.core.algebra import Vector3
from gus.core.image import Size
from gus.geometry.sphere import Sphere
from gus.materials.material import Material
from gus.materials.spectrum import Beam
from gus.scene.manager import Scene


@pytest.fixture
def rng():
    """A seeded generator so every test sees the same stream."""
    return np.random.default_rng(42)


@pytest.fixture
def grey():
    """Sum of the red, green and blue basis beams."""
    return Beam.red() + Beam.green() + Beam.blue()


@pytest.fixture
def always_emits():
    """Material that emits in every bin and absorbs everything."""
    return Material.emissive(Beam.constant(1.0))


@pytest.fixture
def eye():
    """Eye at the origin looking along +z with a square viewport."""
    return Eye(
        position=Vector3(0.0, 0.0, 0.0),
        forward=Vector3(0.0, 0.0, 1.0),
        right=Vector3(1.0, 0.0, 0.0),
        up=Vector3(0.0, 1.0, 0.0),
        width=1.0,
        height=1.0,
        distance=1.0,
    )


@pytest.fixture
def small_screen(eye):
    """A 4x3 screen; one pass traces 4 * 3 * 24 primary rays."""
    return Screen(Size(4, 3), eye)


@pytest.fixture
def glowing_shell(always_emits):
    """A single emissive sphere enclosing the eye."""
    return Scene([Sphere(Vector3(0.0, 0.0, 0.0), 5.0, always_emits)])


@pytest.fixture
def lit_room(grey):
    """A diffuse room around the eye with a small light overhead."""
    return Scene(
        [
            Sphere(Vector3(0.0, 0.0, 0.0), 10.0, Material.diffusive(grey) * 0.8),
            Sphere(Vector3(0.0, 9.0, 3.0), 2.0, Material.emissive(grey)),
            Sphere(Vector3(0.0, -1.0, 5.0), 1.0, Material.reflective(grey) * 0.9),
        ]
    )


@pytest.fixture
def clean_gus_logger():
    """Remove handlers installed on the gus logger during a test."""
    logger = logging.getLogger("gus")
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
