"""
Multi-threaded Monte Carlo harness.

A fixed pool of worker threads claims trajectory tickets until the iteration
budget is exhausted or cancellation is requested. Every outcome is folded
into a single reducer under one lock; the same lock guards the progress
counter and checkpoint rendering, so a checkpoint always reflects a prefix
of completed trajectories.
"""
from __future__ import annotations

import itertools
import logging
import sys
import threading
import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, Generic, Protocol, TypeVar

import numpy as np
from tqdm import tqdm

from index_effectiveness.core.events.event_bus import EventBus
from index_effectiveness.core.events.events import CheckpointEvent, RunCompletedEvent
from index_effectiveness.core.events.sinks.null_event_bus import NullEventBus
from index_effectiveness.simulation.harness.cancellation import CancellationToken
from index_effectiveness.simulation.harness.table import CsvTable

LOGGER = logging.getLogger(__name__)

OutcomeT = TypeVar("OutcomeT")
OutcomeT_contra = TypeVar("OutcomeT_contra", contravariant=True)

Trajectory = Callable[[np.random.Generator], OutcomeT]


class Reducer(Protocol[OutcomeT_contra]):
    def fold(self, outcome: OutcomeT_contra) -> None:
        """Accumulate one trajectory outcome."""

    def table(self) -> CsvTable:
        """Snapshot the accumulated statistics."""


@dataclass(frozen=True, slots=True)
class HarnessOutcome:
    completed: int
    total: int
    cancelled: bool
    duration_seconds: float
    table: CsvTable


class MonteCarloHarness(Generic[OutcomeT]):
    """Runs ``iterations`` independent trajectories on ``threads`` workers."""

    def __init__(
        self,
        *,
        experiment: str,
        trajectory: Trajectory[OutcomeT],
        reducer: Reducer[OutcomeT],
        iterations: int,
        threads: int,
        seed: int | None = None,
        event_bus: EventBus | None = None,
        token: CancellationToken | None = None,
        on_dump: Callable[[], None] | None = None,
        progress: bool = False,
        checkpoint_every: int | None = None,
        poll_interval: float = 0.2,
    ) -> None:
        if iterations < 1:
            raise ValueError("iterations must be >= 1")
        if threads < 1:
            raise ValueError("threads must be >= 1")

        self._experiment = experiment
        self._trajectory = trajectory
        self._reducer = reducer
        self._iterations = iterations
        self._threads = threads
        self._seed = seed
        self._event_bus = event_bus if event_bus is not None else NullEventBus()
        self._token = token if token is not None else CancellationToken()
        self._on_dump = on_dump
        self._progress = progress
        self._checkpoint_every = checkpoint_every or max(1, iterations // 100)
        self._poll_interval = poll_interval

        self._lock = threading.Lock()
        self._tickets = itertools.count()
        self._completed = 0
        self._bar: tqdm | None = None

    @property
    def token(self) -> CancellationToken:
        return self._token

    # ------------------------------------------------------------------
    # Worker side
    # ------------------------------------------------------------------

    def _worker(self, rng: np.random.Generator) -> int:
        done = 0
        while not self._token.cancelled:
            # itertools.count is advanced atomically under the GIL.
            if next(self._tickets) >= self._iterations:
                break
            outcome = self._trajectory(rng)
            self._fold(outcome)
            done += 1
        return done

    def _fold(self, outcome: OutcomeT) -> None:
        with self._lock:
            self._reducer.fold(outcome)
            self._completed += 1
            if self._bar is not None:
                self._bar.update(1)
            if self._completed % self._checkpoint_every == 0:
                self._event_bus.emit(
                    CheckpointEvent(
                        experiment=self._experiment,
                        completed=self._completed,
                        total=self._iterations,
                        table=self._reducer.table(),
                    )
                )

    # ------------------------------------------------------------------
    # Main thread
    # ------------------------------------------------------------------

    def run(self) -> HarnessOutcome:
        started = time.perf_counter()
        children = np.random.SeedSequence(self._seed).spawn(self._threads)

        LOGGER.info(
            "Monte Carlo run started",
            extra={
                "experiment": self._experiment,
                "iterations": self._iterations,
                "threads": self._threads,
                "seed": self._seed,
            },
        )

        with tqdm(
            total=self._iterations,
            disable=not self._progress,
            file=sys.stderr,
            desc=self._experiment,
            unit="traj",
        ) as bar:
            self._bar = bar
            try:
                with ThreadPoolExecutor(
                    max_workers=self._threads, thread_name_prefix="mc-worker"
                ) as executor:
                    futures = [
                        executor.submit(self._worker, np.random.default_rng(child))
                        for child in children
                    ]
                    self._supervise(futures)
            finally:
                self._bar = None

        with self._lock:
            completed = self._completed
            table = self._reducer.table()

        duration = time.perf_counter() - started
        cancelled = self._token.cancelled and completed < self._iterations
        self._event_bus.emit(
            RunCompletedEvent(
                experiment=self._experiment,
                completed=completed,
                total=self._iterations,
                cancelled=cancelled,
                duration_seconds=duration,
            )
        )
        return HarnessOutcome(
            completed=completed,
            total=self._iterations,
            cancelled=cancelled,
            duration_seconds=duration,
            table=table,
        )

    def _supervise(self, futures: list) -> None:
        pending = set(futures)
        while pending:
            done, pending = wait(pending, timeout=self._poll_interval, return_when=FIRST_EXCEPTION)
            if self._token.take_dump_request() and self._on_dump is not None:
                self._on_dump()
            for future in done:
                exc = future.exception()
                if exc is not None:
                    # Stop the remaining workers before propagating.
                    self._token.cancel()
                    wait(pending)
                    raise exc
