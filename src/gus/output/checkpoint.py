"""Checkpoint persistence for accumulated images.

A checkpoint is the Image snapshot (grid size, sample count and float64
accumulators) stored as an uncompressed numpy .npz archive. Loading is
lenient: a missing, unreadable or corrupt checkpoint is logged and reported
as None so a render can fall back to a fresh start.

Example:
    >>> from gus.output.checkpoint import load_checkpoint, save_checkpoint
    >>> previous = load_checkpoint("render.npz")
    >>> tracer.start(4, checkpoint=previous)
    >>> save_checkpoint(tracer.stop(), "render.npz")
"""

from __future__ import annotations

import logging
import os
import zipfile
from pathlib import Path

import numpy as np

from gus.core.image import Image

logger = logging.getLogger(__name__)

_FIELDS = ("horizontal_count", "vertical_count", "count", "data")


def save_checkpoint(image: Image, filepath: str | Path) -> Path:
    """Write an image snapshot.

    The archive is written next to the target and moved into place, so an
    interrupted save never leaves a truncated checkpoint behind.

    Args:
        image: Image to persist.
        filepath: Destination path, used verbatim.

    Returns:
        The path written.

    Raises:
        OSError: If the file cannot be written.
    """
    path = Path(filepath)
    state = image.to_state()
    partial = path.with_name(path.name + ".partial")

    with open(partial, "wb") as handle:
        np.savez(
            handle,
            horizontal_count=np.int64(state["horizontal_count"]),
            vertical_count=np.int64(state["vertical_count"]),
            count=np.int64(state["count"]),
            data=state["data"],
        )
    os.replace(partial, path)

    logger.info("Saved checkpoint %s (%d passes)", path, image.count)
    return path


def load_checkpoint(filepath: str | Path) -> Image | None:
    """Read an image snapshot written by save_checkpoint.

    Args:
        filepath: Checkpoint path.

    Returns:
        The restored image, or None if the file is missing or cannot be
        decoded.
    """
    path = Path(filepath)
    if not path.exists():
        logger.warning("Checkpoint %s not found, starting fresh", path)
        return None

    try:
        image = _read(path)
    except (OSError, EOFError, ValueError, KeyError, zipfile.BadZipFile) as exc:
        logger.warning("Checkpoint %s is unreadable, starting fresh: %s", path, exc)
        return None

    logger.info(
        "Loaded checkpoint %s (%dx%d, %d passes)",
        path,
        image.size.horizontal_count,
        image.size.vertical_count,
        image.count,
    )
    return image


def _read(path: Path) -> Image:
    loaded = np.load(path, allow_pickle=False)
    if not isinstance(loaded, np.lib.npyio.NpzFile):
        raise ValueError("not an .npz archive")
    with loaded as archive:
        state = {name: archive[name] for name in _FIELDS}
    return Image.from_state(state)
