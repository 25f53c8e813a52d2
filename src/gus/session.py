"""Render session driver.

run_session ties the pieces together the way a long render is usually run:
resume from a checkpoint when one exists, sample with a worker pool until a
stopping condition holds, then persist the merged accumulation and export
it. Repeating the same session keeps refining the same checkpoint.

Example:
    >>> from gus.config import RenderConfig
    >>> from gus.session import run_session
    >>> config = RenderConfig(threads=4, duration=30.0, checkpoint_path=Path("box.npz"))
    >>> image = run_session(scene, screen, config)
"""

from __future__ import annotations

import logging
import threading
import time

from gus.camera.screen import Screen
from gus.config import RenderConfig
from gus.core.image import Image
from gus.core.tracer import ProgressCallback, Tracer
from gus.output.checkpoint import load_checkpoint, save_checkpoint
from gus.output.export import save_image
from gus.scene.manager import Scene

logger = logging.getLogger(__name__)

# Interval between stopping-condition checks
POLL_INTERVAL = 0.05


def _load_baseline(screen: Screen, config: RenderConfig) -> Image | None:
    if config.checkpoint_path is None:
        return None

    checkpoint = load_checkpoint(config.checkpoint_path)
    if checkpoint is not None and checkpoint.size != screen.size:
        logger.warning(
            "Checkpoint %s has size %dx%d, screen is %dx%d; starting fresh",
            config.checkpoint_path,
            checkpoint.size.horizontal_count,
            checkpoint.size.vertical_count,
            screen.size.horizontal_count,
            screen.size.vertical_count,
        )
        return None
    return checkpoint


def _wait(tracer: Tracer, config: RenderConfig, stop_event: threading.Event) -> None:
    deadline = None if config.duration is None else time.monotonic() + config.duration

    while not stop_event.is_set():
        if tracer.failed():
            logger.error("A worker failed, ending session")
            return
        if tracer.finished():
            # Every worker reached the pass target
            return
        if deadline is not None and time.monotonic() >= deadline:
            return
        stop_event.wait(POLL_INTERVAL)


def run_session(
    scene: Scene,
    screen: Screen,
    config: RenderConfig,
    stop_event: threading.Event | None = None,
    progress: ProgressCallback | None = None,
) -> Image:
    """Run one checkpointed render session.

    Args:
        scene: Scene to render.
        screen: Screen (pixel grid and eye) to sample.
        config: Session settings.
        stop_event: Optional event that ends the session when set, e.g. from
            a signal handler. Without a duration or pass target this is the
            only way the session ends.
        progress: Optional per-pass callback handed to the tracer.

    Returns:
        The merged image, including any checkpointed passes.

    Raises:
        ValueError: If the config is unbounded and no stop_event is given.
        WorkerError: If a worker fails; nothing is saved in that case.
    """
    if stop_event is None:
        if config.unbounded:
            raise ValueError("Session needs a duration, a pass target or a stop_event")
        stop_event = threading.Event()

    baseline = _load_baseline(screen, config)

    tracer = Tracer(scene, screen)
    tracer.start(
        config.threads,
        checkpoint=baseline,
        progress=progress,
        seed=config.seed,
        pass_limit=config.passes,
    )

    started = time.monotonic()
    try:
        _wait(tracer, config, stop_event)
    finally:
        image = tracer.stop()

    logger.info(
        "Session finished in %.2fs, %d passes accumulated",
        time.monotonic() - started,
        image.count,
    )

    if config.checkpoint_path is not None:
        save_checkpoint(image, config.checkpoint_path)
    save_image(image, config.output_path, scale=config.scale, gamma=config.gamma)

    return image
