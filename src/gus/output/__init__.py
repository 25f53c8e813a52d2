"""Output module for exporting and persisting rendered images.

Components:
    export: 8-bit conversion and image files via Pillow
    checkpoint: Lossless .npz snapshots for resuming renders

Example:
    >>> from gus.output import load_checkpoint, save_checkpoint, save_image
    >>> image = tracer.stop()
    >>> save_checkpoint(image, "box.npz")
    >>> save_image(image, "box.png", scale=10.0)
"""

from .checkpoint import load_checkpoint, save_checkpoint
from .export import apply_gamma, image_to_array, save_image

__all__ = [
    "apply_gamma",
    "image_to_array",
    "save_image",
    "load_checkpoint",
    "save_checkpoint",
]
