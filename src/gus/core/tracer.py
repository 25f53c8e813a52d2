"""Concurrent, checkpointable sampling engine.

The Tracer owns a Scene and a Screen and drives a fixed pool of worker
threads. Each worker owns a private Image and its own random generator and
loops: one sample pass over the whole screen, a progress callback, then a
non-blocking check of its cancellation event. Given a pass limit, a worker
also exits on its own after exactly that many passes. There is no shared
mutable state while running, so the sampling path takes no locks.

stop() signals every worker, waits for each in-flight pass to finish, and
merges the checkpoint image (if one was given to start()) with all worker
images into the returned Image. A Tracer runs once:

    IDLE --start()--> RUNNING --stop()--> STOPPED

Example:
    >>> from gus.core.tracer import Tracer
    >>> tracer = Tracer(scene, screen)
    >>> tracer.start(4, checkpoint=previous_image, seed=1234)
    >>> time.sleep(60)
    >>> image = tracer.stop()
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from enum import Enum

import numpy as np

from gus.camera.screen import Screen
from gus.core.image import Image
from gus.scene.manager import Scene

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (worker_id, pass_index, pass_seconds)
ProgressCallback = Callable[[int, int, float], None]


class TracerState(Enum):
    """Lifecycle of a Tracer."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class WorkerError(RuntimeError):
    """A worker thread terminated abnormally; the run has no result."""


def spawn_generators(seed: int | None, count: int) -> list[np.random.Generator]:
    """Independent random generators for count workers.

    The same seed always yields the same streams, so a seeded run can be
    reproduced worker by worker.

    Args:
        seed: Root entropy, or None for fresh OS entropy.
        count: Number of generators.

    Returns:
        List of count generators with statistically independent streams.
    """
    children = np.random.SeedSequence(seed).spawn(count)
    return [np.random.default_rng(child) for child in children]


def log_progress(worker_id: int, pass_index: int, seconds: float) -> None:
    """Default progress callback."""
    logger.debug("thread: %d, sample: %d (%.3fs)", worker_id, pass_index, seconds)


class _Worker(threading.Thread):
    """One sampling thread with a private image and a cancellation permit."""

    def __init__(
        self,
        worker_id: int,
        scene: Scene,
        screen: Screen,
        rng: np.random.Generator,
        progress: ProgressCallback,
        pass_limit: int | None = None,
    ) -> None:
        super().__init__(name=f"gus-worker-{worker_id}", daemon=True)
        self.worker_id = worker_id
        self.image = screen.create_image()
        self.cancelled = threading.Event()
        self.error: BaseException | None = None
        self._scene = scene
        self._screen = screen
        self._rng = rng
        self._progress = progress
        self._pass_limit = pass_limit

    def run(self) -> None:
        pass_index = 0
        try:
            while True:
                started = time.perf_counter()
                self._screen.sample(self._scene, self.image, self._rng)
                pass_index += 1
                self._progress(self.worker_id, pass_index, time.perf_counter() - started)
                if self.cancelled.is_set():
                    break
                if self._pass_limit is not None and pass_index >= self._pass_limit:
                    break
        except BaseException as exc:
            # Surfaced to the caller by Tracer.stop()
            logger.exception("Worker %d failed during pass %d", self.worker_id, pass_index + 1)
            self.error = exc


class Tracer:
    """Worker pool that accumulates sample passes into a mergeable Image.

    Attributes:
        scene: Scene shared read-only by every worker.
        screen: Screen shared read-only by every worker.
    """

    def __init__(self, scene: Scene, screen: Screen) -> None:
        self.scene = scene
        self.screen = screen
        self._workers: list[_Worker] = []
        self._checkpoint: Image | None = None
        self._state = TracerState.IDLE

    @property
    def state(self) -> TracerState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is TracerState.RUNNING

    @property
    def thread_count(self) -> int:
        return len(self._workers)

    def pass_counts(self) -> list[int]:
        """Completed sample passes per worker, in worker order."""
        return [worker.image.count for worker in self._workers]

    def failed(self) -> bool:
        """True once any worker has died with an exception."""
        return any(worker.error is not None for worker in self._workers)

    def finished(self) -> bool:
        """True once every worker has exited, e.g. after reaching its pass limit."""
        return not any(worker.is_alive() for worker in self._workers)

    def start(
        self,
        thread_count: int,
        checkpoint: Image | None = None,
        progress: ProgressCallback | None = None,
        seed: int | None = None,
        pass_limit: int | None = None,
    ) -> None:
        """Spawn the worker pool.

        Args:
            thread_count: Number of worker threads (at least 1).
            checkpoint: Previously accumulated image used as the merge
                baseline by stop(). It is copied, never modified.
            progress: Called from each worker after every pass with
                (worker_id, pass_index, pass_seconds). Must return quickly.
            seed: Root seed for the per-worker generators.
            pass_limit: If given, each worker exits on its own after exactly
                this many passes, unless cancelled earlier.

        Raises:
            RuntimeError: If the tracer was already started.
            ValueError: If thread_count or pass_limit is not positive, or the
                checkpoint size differs from the screen size.
        """
        if self._state is not TracerState.IDLE:
            raise RuntimeError(f"Tracer cannot start from state {self._state.value}")
        if thread_count < 1:
            raise ValueError(f"thread_count must be at least 1, got {thread_count}")
        if pass_limit is not None and pass_limit < 1:
            raise ValueError(f"pass_limit must be at least 1, got {pass_limit}")
        if checkpoint is not None and checkpoint.size != self.screen.size:
            raise ValueError(
                f"Checkpoint size {checkpoint.size} does not match screen size {self.screen.size}"
            )

        callback = progress if progress is not None else log_progress
        generators = spawn_generators(seed, thread_count)
        workers = [
            _Worker(i, self.scene, self.screen, rng, callback, pass_limit)
            for i, rng in enumerate(generators)
        ]
        # Assigned before starting so callbacks can cancel() from the first pass
        self._workers = workers
        started: list[_Worker] = []
        try:
            for worker in workers:
                worker.start()
                started.append(worker)
        except BaseException:
            # Leave no orphaned threads behind; the tracer stays IDLE
            for worker in started:
                worker.cancelled.set()
            for worker in started:
                worker.join()
            self._workers = []
            raise

        self._checkpoint = checkpoint
        self._state = TracerState.RUNNING

        logger.info(
            "Started %d worker(s), checkpoint passes: %d",
            thread_count,
            checkpoint.count if checkpoint is not None else 0,
        )

    def cancel(self) -> None:
        """Ask every worker to stop after its current pass, without waiting."""
        for worker in self._workers:
            worker.cancelled.set()

    def stop(self) -> Image:
        """Stop all workers and merge their images.

        Blocks until every worker has finished its in-flight pass.

        Returns:
            The checkpoint (or a fresh image) with every worker image
            appended.

        Raises:
            RuntimeError: If the tracer is not running.
            WorkerError: If any worker failed; no partial image is returned.
        """
        if self._state is not TracerState.RUNNING:
            raise RuntimeError(f"Tracer cannot stop from state {self._state.value}")

        self.cancel()
        for worker in self._workers:
            worker.join()
        self._state = TracerState.STOPPED

        workers, self._workers = self._workers, []
        checkpoint, self._checkpoint = self._checkpoint, None

        for worker in workers:
            if worker.error is not None:
                raise WorkerError(f"Worker {worker.worker_id} failed") from worker.error

        result = checkpoint.copy() if checkpoint is not None else self.screen.create_image()
        for worker in workers:
            result.append(worker.image)

        logger.info("Stopped %d worker(s), total passes: %d", len(workers), result.count)
        return result

    def __repr__(self) -> str:
        return f"Tracer(state={self._state.value}, threads={self.thread_count})"
