"""Materials module for spectral surface response.

Components:
    spectrum: Frequency bins, Beam spectra and RGB projection
    material: Material beams and stochastic fate sampling
"""

from .material import Fate, Material, Scatter
from .spectrum import RGB, SIZE, TABLE_SIZE, Beam, Frequency

__all__ = [
    "SIZE",
    "TABLE_SIZE",
    "Beam",
    "Frequency",
    "RGB",
    "Fate",
    "Material",
    "Scatter",
]
