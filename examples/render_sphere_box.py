#!/usr/bin/env python3
"""Render the sphere box scene.

This script renders the sphere box demo scene with a pool of worker threads.
Each run resumes from the checkpoint (if given), keeps sampling until the
duration or pass target is reached or Ctrl-C is pressed, then saves the
checkpoint and the exported image. Running it repeatedly keeps refining the
same render.

Usage:
    python examples/render_sphere_box.py [options]

Options:
    --width WIDTH         Image width in pixels (default: 192)
    --height HEIGHT       Image height in pixels (default: 108)
    --threads THREADS     Worker threads (default: CPU count)
    --duration SECONDS    Render time in seconds
    --passes PASSES       Sample passes per worker
    --checkpoint PATH     Checkpoint to resume from and save to
    --output OUTPUT       Output file path (default: out.tga)
    --scale SCALE         Exposure multiplier (default: 10.0)
    --gamma GAMMA         Gamma on export (default: 1.0)
    --seed SEED           Root random seed
    --log-level LEVEL     Log level (default: INFO)
    --quiet               Only log warnings and errors

Example:
    python examples/render_sphere_box.py --duration 60 --checkpoint box.npz
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path

from gus.camera.screen import Screen
from gus.config import RenderConfig
from gus.core.image import Image, Size
from gus.core.tracer import WorkerError
from gus.logging_config import LOG_LEVELS, setup_logging
from gus.scene.sphere_box import create_sphere_box_scene
from gus.session import run_session

logger = logging.getLogger("gus.examples.render_sphere_box")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the sphere box scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=192,
        help="Image width in pixels (default: 192)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=108,
        help="Image height in pixels (default: 108)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="Worker threads (default: CPU count)",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Render time in seconds",
    )
    parser.add_argument(
        "--passes",
        type=int,
        default=None,
        help="Sample passes per worker",
    )
    parser.add_argument(
        "--checkpoint",
        type=Path,
        default=None,
        help="Checkpoint to resume from and save to",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("out.tga"),
        help="Output file path (default: out.tga)",
    )
    parser.add_argument(
        "--scale",
        type=float,
        default=10.0,
        help="Exposure multiplier (default: 10.0)",
    )
    parser.add_argument(
        "--gamma",
        type=float,
        default=1.0,
        help="Gamma on export (default: 1.0)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Root random seed",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="INFO",
        help="Log level (default: INFO)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    return parser.parse_args()


def render_sphere_box(size: Size, config: RenderConfig) -> Image:
    """Render the sphere box scene and save to file.

    Args:
        size: Image size in pixels.
        config: Session settings.

    Returns:
        The accumulated image.
    """
    scene, eye = create_sphere_box_scene()
    screen = Screen(size, eye)

    logger.info(
        "Rendering sphere box (%dx%d) with %d thread(s)",
        size.horizontal_count,
        size.vertical_count,
        config.threads,
    )
    if config.unbounded:
        logger.info("No duration or pass target set, press Ctrl-C to stop")

    return run_session(scene, screen, config, stop_event=_interrupt_event())


def _interrupt_event() -> threading.Event:
    """An event that is set by Ctrl-C instead of raising KeyboardInterrupt."""
    event = threading.Event()

    def handle(signum: int, frame: object) -> None:
        logger.info("Interrupted, finishing current passes")
        event.set()

    signal.signal(signal.SIGINT, handle)
    return event


def main() -> int:
    """Main entry point."""
    args = parse_args()
    setup_logging("WARNING" if args.quiet else args.log_level)

    try:
        size = Size(args.width, args.height)
        kwargs = {} if args.threads is None else {"threads": args.threads}
        config = RenderConfig(
            seed=args.seed,
            checkpoint_path=args.checkpoint,
            output_path=args.output,
            scale=args.scale,
            gamma=args.gamma,
            duration=args.duration,
            passes=args.passes,
            log_level=args.log_level,
            **kwargs,
        )
    except ValueError as e:
        logger.error("Invalid arguments: %s", e)
        return 2

    try:
        image = render_sphere_box(size, config)
    except (WorkerError, OSError) as e:
        logger.error("Render failed: %s", e)
        return 1

    logger.info("Saved to: %s (%d passes)", config.output_path.absolute(), image.count)
    return 0


if __name__ == "__main__":
    sys.exit(main())
