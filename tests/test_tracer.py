"""Tests for the multi-threaded Tracer.

This module tests the Tracer lifecycle including:
- Start validation and lifecycle errors
- Exactly-one-pass runs driven from the progress callback
- Merging with a checkpoint image (K + 1 passes, exact sums)
- Progress reporting
- Worker failure propagation, including BaseException exits
- Cleanup when a worker thread cannot be started
- Per-worker pass limits

Runs are stopped from the progress callback so every test knows exactly how
many passes each worker completed.
"""

import logging
import threading

import numpy as np
import pytest

from gus.core.image import Image, Size
from gus.core.tracer import Tracer, TracerState, WorkerError, _Worker, spawn_generators
from gus.materials.material import Material


class ExplodingPrimitive:
    """Primitive whose intersection always fails."""

    material = Material()

    def intersect(self, ray):
        raise RuntimeError("boom")

    def result(self, ray, info):
        raise AssertionError("never resolved")


def cancel_after_first_pass(tracer, calls=None):
    lock = threading.Lock()

    def progress(worker_id, pass_index, seconds):
        if calls is not None:
            with lock:
                calls.append((worker_id, pass_index, seconds))
        tracer.cancel()

    return progress


def random_checkpoint(size, count):
    image = Image(size)
    image.data[:] = np.random.default_rng(11).uniform(0.0, 2.0, size=image.data.shape)
    image.count = count
    return image


class TestSpawnGenerators:
    """Tests for per-worker generator creation."""

    def test_count(self):
        assert len(spawn_generators(1, 3)) == 3

    def test_seeded_streams_are_reproducible(self):
        first = [g.random() for g in spawn_generators(5, 3)]
        second = [g.random() for g in spawn_generators(5, 3)]
        assert first == second

    def test_streams_differ_between_workers(self):
        draws = [g.random() for g in spawn_generators(5, 3)]
        assert len(set(draws)) == 3


class TestTracerLifecycle:
    """Tests for state transitions and misuse."""

    def test_initial_state(self, lit_room, small_screen):
        tracer = Tracer(lit_room, small_screen)
        assert tracer.state is TracerState.IDLE
        assert not tracer.running
        assert tracer.thread_count == 0

    def test_rejects_zero_threads(self, lit_room, small_screen):
        tracer = Tracer(lit_room, small_screen)
        with pytest.raises(ValueError, match="thread_count"):
            tracer.start(0)
        assert tracer.state is TracerState.IDLE

    def test_rejects_mismatched_checkpoint(self, lit_room, small_screen):
        tracer = Tracer(lit_room, small_screen)
        with pytest.raises(ValueError, match="Checkpoint size"):
            tracer.start(1, checkpoint=Image(Size(2, 2)))

    def test_stop_before_start(self, lit_room, small_screen):
        tracer = Tracer(lit_room, small_screen)
        with pytest.raises(RuntimeError, match="cannot stop"):
            tracer.stop()

    def test_start_twice(self, lit_room, small_screen):
        tracer = Tracer(lit_room, small_screen)
        tracer.start(1, progress=cancel_after_first_pass(tracer))
        try:
            assert tracer.running
            with pytest.raises(RuntimeError, match="cannot start"):
                tracer.start(1)
        finally:
            tracer.stop()

    def test_not_reusable_after_stop(self, lit_room, small_screen):
        tracer = Tracer(lit_room, small_screen)
        tracer.start(1, progress=cancel_after_first_pass(tracer))
        tracer.stop()

        assert tracer.state is TracerState.STOPPED
        with pytest.raises(RuntimeError, match="cannot start"):
            tracer.start(1)
        with pytest.raises(RuntimeError, match="cannot stop"):
            tracer.stop()


class TestTracerRun:
    """Tests for sampling runs."""

    def test_single_pass_without_checkpoint(self, lit_room, small_screen):
        tracer = Tracer(lit_room, small_screen)
        tracer.start(1, progress=cancel_after_first_pass(tracer), seed=3)
        image = tracer.stop()

        assert image.size == small_screen.size
        assert image.count == 1

    def test_checkpoint_plus_one_pass(self, lit_room, small_screen):
        """Test that a K-pass checkpoint plus one worker pass gives exactly K + 1."""
        checkpoint = random_checkpoint(small_screen.size, count=7)
        baseline = checkpoint.copy()

        tracer = Tracer(lit_room, small_screen)
        tracer.start(1, checkpoint=checkpoint, progress=cancel_after_first_pass(tracer), seed=21)
        image = tracer.stop()

        # Reproduce the worker's only pass with the same generator stream
        single_pass = small_screen.create_image()
        small_screen.sample(lit_room, single_pass, spawn_generators(21, 1)[0])

        assert image.count == 8
        assert np.array_equal(image.data, baseline.data + single_pass.data)

    def test_checkpoint_is_not_modified(self, lit_room, small_screen):
        checkpoint = random_checkpoint(small_screen.size, count=2)
        baseline = checkpoint.copy()

        tracer = Tracer(lit_room, small_screen)
        tracer.start(1, checkpoint=checkpoint, progress=cancel_after_first_pass(tracer))
        tracer.stop()

        assert checkpoint.count == 2
        assert np.array_equal(checkpoint.data, baseline.data)

    def test_multiple_workers_merge(self, lit_room, small_screen):
        """Test that each worker contributes exactly its one pass."""
        calls = []
        tracer = Tracer(lit_room, small_screen)
        tracer.start(3, progress=cancel_after_first_pass(tracer, calls), seed=8)
        assert tracer.thread_count == 3
        image = tracer.stop()

        assert image.count == 3
        assert sorted(worker_id for worker_id, _, _ in calls) == [0, 1, 2]
        assert all(pass_index == 1 for _, pass_index, _ in calls)
        assert all(seconds >= 0.0 for _, _, seconds in calls)

    def test_seeded_runs_match(self, lit_room, small_screen):
        images = []
        for _ in range(2):
            tracer = Tracer(lit_room, small_screen)
            tracer.start(2, progress=cancel_after_first_pass(tracer), seed=99)
            images.append(tracer.stop())
        assert np.array_equal(images[0].data, images[1].data)

    def test_runs_until_stopped(self, glowing_shell, small_screen):
        """Test that workers keep sampling until stop is called."""
        reached = threading.Event()

        def progress(worker_id, pass_index, seconds):
            if pass_index >= 3:
                reached.set()

        tracer = Tracer(glowing_shell, small_screen)
        tracer.start(1, progress=progress)
        assert reached.wait(timeout=60.0)
        image = tracer.stop()

        assert image.count >= 3
        assert tracer.pass_counts() == []

    def test_default_progress_logs(self, glowing_shell, small_screen, caplog):
        caplog.set_level(logging.DEBUG, logger="gus.core.tracer")
        tracer = Tracer(glowing_shell, small_screen)
        tracer.start(1)
        tracer.cancel()
        tracer.stop()

        assert "thread: 0, sample: 1" in caplog.text


class TestWorkerFailure:
    """Tests for abnormal worker termination."""

    def test_failure_is_raised_from_stop(self, small_screen):
        from gus.scene.manager import Scene

        tracer = Tracer(Scene([ExplodingPrimitive()]), small_screen)
        tracer.start(2)

        with pytest.raises(WorkerError) as excinfo:
            tracer.stop()

        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert str(excinfo.value.__cause__) == "boom"
        assert tracer.state is TracerState.STOPPED

    def test_dead_workers_are_reported(self, small_screen):
        from gus.scene.manager import Scene

        tracer = Tracer(Scene([ExplodingPrimitive()]), small_screen)
        tracer.start(1)
        for _ in range(600):
            if tracer.finished():
                break
            threading.Event().wait(0.01)

        assert tracer.failed()
        with pytest.raises(WorkerError):
            tracer.stop()

    def test_system_exit_is_raised_from_stop(self, glowing_shell, small_screen):
        """Test that a worker leaving through SystemExit yields no partial image."""
        tracer = Tracer(glowing_shell, small_screen)

        def progress(worker_id, pass_index, seconds):
            if worker_id == 0:
                raise SystemExit(3)
            tracer.cancel()

        tracer.start(2, progress=progress, seed=4)

        with pytest.raises(WorkerError) as excinfo:
            tracer.stop()

        assert isinstance(excinfo.value.__cause__, SystemExit)
        assert tracer.state is TracerState.STOPPED


class TestStartFailure:
    """Tests for a thread that cannot be started."""

    def test_started_workers_are_cancelled(self, glowing_shell, small_screen, monkeypatch):
        started = []
        original_start = _Worker.start

        def start_once(worker):
            if started:
                raise RuntimeError("can't start new thread")
            started.append(worker)
            original_start(worker)

        monkeypatch.setattr(_Worker, "start", start_once)
        tracer = Tracer(glowing_shell, small_screen)

        with pytest.raises(RuntimeError, match="can't start new thread"):
            tracer.start(3)

        assert len(started) == 1
        assert not started[0].is_alive()
        assert tracer.state is TracerState.IDLE
        assert tracer.thread_count == 0


class TestPassLimit:
    """Tests for workers that stop on their own after a fixed pass count."""

    def test_exact_pass_count(self, lit_room, small_screen):
        tracer = Tracer(lit_room, small_screen)
        tracer.start(2, pass_limit=3, seed=12)
        for _ in range(6000):
            if tracer.finished():
                break
            threading.Event().wait(0.01)

        assert tracer.finished()
        assert not tracer.failed()
        assert tracer.pass_counts() == [3, 3]
        assert tracer.stop().count == 6

    def test_seeded_limited_runs_match(self, lit_room, small_screen):
        images = []
        for _ in range(2):
            tracer = Tracer(lit_room, small_screen)
            tracer.start(2, pass_limit=2, seed=31)
            while not tracer.finished():
                threading.Event().wait(0.01)
            images.append(tracer.stop())

        assert images[0].count == images[1].count == 4
        assert np.array_equal(images[0].data, images[1].data)

    def test_rejects_non_positive_limit(self, lit_room, small_screen):
        tracer = Tracer(lit_room, small_screen)
        with pytest.raises(ValueError, match="pass_limit"):
            tracer.start(1, pass_limit=0)
        assert tracer.state is TracerState.IDLE
