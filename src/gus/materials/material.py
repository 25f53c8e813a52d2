"""Surface response model with stochastic per-frequency fate sampling.

A Material is five beams: emission, diffuse, reflection and refraction
densities (probabilities per bin), plus a per-bin refraction index factor.
Composite materials are built by scaling and summing simple ones:

    >>> from gus.materials.material import Material
    >>> from gus.materials.spectrum import Beam
    >>> gray = Beam.red() + Beam.green() + Beam.blue()
    >>> mirror_ish = Material.diffusive(gray) * 0.01 + Material.reflective(gray) * 0.9

For a ray of one frequency hitting the surface, Material.fate draws:

1. whether emission fires, with probability equal to the emission density;
2. exactly one of diffuse / reflect / refract / decay, using cumulative
   thresholds diffuse, +reflection, +refraction. Whatever probability mass is
   left is absorption (decay), which acts as Russian roulette termination.

Each draw consumes its own uniform sample from the caller's generator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np

from gus.materials.spectrum import Beam, Frequency


class Scatter(IntEnum):
    """Single scattering outcome of a fate draw."""

    DIFFUSE = 0
    REFLECT = 1
    REFRACT = 2
    DECAY = 3


@dataclass(frozen=True, slots=True)
class Fate:
    """Outcome of sampling a material at one frequency.

    Attributes:
        emission: Whether the surface emitted into the incoming ray.
        scatter: Which scattering event (or decay) occurred.
        factor: Refraction index factor of the bin; only meaningful for
            Scatter.REFRACT.
    """

    emission: bool
    scatter: Scatter
    factor: float = 1.0


@dataclass(frozen=True)
class Material:
    """Per-bin surface response.

    Attributes:
        emission: Probability per bin that the surface emits.
        diffuse: Probability per bin of diffuse scattering.
        reflection: Probability per bin of mirror reflection.
        refraction: Probability per bin of refraction.
        refraction_factor: Refraction index factor per bin (not a probability).
    """

    emission: Beam = field(default_factory=Beam)
    diffuse: Beam = field(default_factory=Beam)
    reflection: Beam = field(default_factory=Beam)
    refraction: Beam = field(default_factory=Beam)
    refraction_factor: Beam = field(default_factory=Beam)

    @classmethod
    def emissive(cls, beam: Beam) -> Material:
        return cls(emission=beam)

    @classmethod
    def diffusive(cls, beam: Beam) -> Material:
        return cls(diffuse=beam)

    @classmethod
    def reflective(cls, beam: Beam) -> Material:
        return cls(reflection=beam)

    @classmethod
    def refractive(cls, beam: Beam, factor: Beam | float) -> Material:
        """Material that refracts with the given per-bin index factor.

        Args:
            beam: Refraction probability per bin.
            factor: Index factor per bin, or one scalar applied to every bin.
        """
        if not isinstance(factor, Beam):
            factor = Beam.constant(factor)
        return cls(refraction=beam, refraction_factor=factor)

    def __add__(self, other: Material) -> Material:
        return Material(
            emission=self.emission + other.emission,
            diffuse=self.diffuse + other.diffuse,
            reflection=self.reflection + other.reflection,
            refraction=self.refraction + other.refraction,
            refraction_factor=self.refraction_factor + other.refraction_factor,
        )

    def __mul__(self, scalar: float) -> Material:
        # The index factor is a physical constant and keeps its value
        return Material(
            emission=self.emission * scalar,
            diffuse=self.diffuse * scalar,
            reflection=self.reflection * scalar,
            refraction=self.refraction * scalar,
            refraction_factor=self.refraction_factor,
        )

    __rmul__ = __mul__

    def fate(self, frequency: Frequency, rng: np.random.Generator) -> Fate:
        """Sample emission and a single scattering event at one frequency.

        Args:
            frequency: The bin carried by the incoming ray.
            rng: Per-worker random generator.

        Returns:
            The sampled Fate.
        """
        index = frequency.index
        emitted = rng.random() < self.emission.powers[index]

        diffuse = self.diffuse.powers[index]
        reflect = diffuse + self.reflection.powers[index]
        refract = reflect + self.refraction.powers[index]

        draw = rng.random()
        if draw < diffuse:
            scatter = Scatter.DIFFUSE
        elif draw < reflect:
            scatter = Scatter.REFLECT
        elif draw < refract:
            scatter = Scatter.REFRACT
        else:
            scatter = Scatter.DECAY

        return Fate(
            emission=bool(emitted),
            scatter=scatter,
            factor=float(self.refraction_factor.powers[index]),
        )

