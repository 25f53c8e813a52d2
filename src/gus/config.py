"""Render configuration.

RenderConfig collects everything a render session needs besides the scene
and the screen: worker count, seeding, checkpoint and output paths, export
tone settings and the stopping condition. Values can come from code, from
the command line (see examples/render_sphere_box.py) or from GUS_*
environment variables via RenderConfig.from_env().

Example:
    >>> from gus.config import RenderConfig
    >>> config = RenderConfig(threads=4, duration=60.0, checkpoint_path=Path("box.npz"))
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from gus.logging_config import LOG_LEVELS


def _default_threads() -> int:
    return os.cpu_count() or 1


@dataclass
class RenderConfig:
    """Settings for a render session.

    Attributes:
        threads: Number of worker threads. Defaults to the CPU count.
        seed: Root seed for the worker generators; None for OS entropy.
        checkpoint_path: Where to resume from and save to. None disables
            checkpointing.
        output_path: Exported image path; the suffix picks the format.
        scale: Exposure multiplier applied on export.
        gamma: Gamma applied on export (1.0 is linear).
        duration: Seconds to render. None means no time limit.
        passes: Per-worker pass target. None means no pass limit.
        log_level: Level name for setup_logging.

    Raises:
        ValueError: If a value is out of range.
    """

    threads: int = field(default_factory=_default_threads)
    seed: int | None = None
    checkpoint_path: Path | None = None
    output_path: Path = Path("out.tga")
    scale: float = 10.0
    gamma: float = 1.0
    duration: float | None = None
    passes: int | None = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.threads < 1:
            raise ValueError(f"threads must be at least 1, got {self.threads}")
        if self.scale <= 0:
            raise ValueError(f"scale must be positive, got {self.scale}")
        if self.gamma <= 0:
            raise ValueError(f"gamma must be positive, got {self.gamma}")
        if self.duration is not None and self.duration < 0:
            raise ValueError(f"duration must be non-negative, got {self.duration}")
        if self.passes is not None and self.passes < 1:
            raise ValueError(f"passes must be at least 1, got {self.passes}")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

        self.output_path = Path(self.output_path)
        if self.checkpoint_path is not None:
            self.checkpoint_path = Path(self.checkpoint_path)

    @property
    def unbounded(self) -> bool:
        """True when neither a duration nor a pass target is set."""
        return self.duration is None and self.passes is None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RenderConfig:
        """Build a config from GUS_* environment variables.

        Recognised variables: GUS_THREADS, GUS_SEED, GUS_CHECKPOINT,
        GUS_OUTPUT, GUS_SCALE, GUS_GAMMA, GUS_DURATION, GUS_PASSES and
        GUS_LOG_LEVEL. Unset variables keep their defaults.

        Args:
            environ: Mapping to read instead of os.environ.

        Raises:
            ValueError: If a variable cannot be parsed or is out of range.
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}

        if "GUS_THREADS" in env:
            kwargs["threads"] = int(env["GUS_THREADS"])
        if "GUS_SEED" in env:
            kwargs["seed"] = int(env["GUS_SEED"])
        if "GUS_CHECKPOINT" in env:
            kwargs["checkpoint_path"] = Path(env["GUS_CHECKPOINT"])
        if "GUS_OUTPUT" in env:
            kwargs["output_path"] = Path(env["GUS_OUTPUT"])
        if "GUS_SCALE" in env:
            kwargs["scale"] = float(env["GUS_SCALE"])
        if "GUS_GAMMA" in env:
            kwargs["gamma"] = float(env["GUS_GAMMA"])
        if "GUS_DURATION" in env:
            kwargs["duration"] = float(env["GUS_DURATION"])
        if "GUS_PASSES" in env:
            kwargs["passes"] = int(env["GUS_PASSES"])
        if "GUS_LOG_LEVEL" in env:
            kwargs["log_level"] = env["GUS_LOG_LEVEL"]

        return cls(**kwargs)  # type: ignore[arg-type]
