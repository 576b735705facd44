"""
Experiment definitions: a trajectory function paired with its reducer and
the comment preamble of its report.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from index_effectiveness.core.domain.types import TheoreticalMoments, TrajectoryResult
from index_effectiveness.core.gaps.process import GapModel
from index_effectiveness.simulation.engine.exit_time import simulate_exit_times
from index_effectiveness.simulation.engine.segment_count import simulate_segment_counts
from index_effectiveness.simulation.harness.monte_carlo import HarnessOutcome, MonteCarloHarness
from index_effectiveness.simulation.harness.reducers import ExitTimeReducer, SegmentCountReducer
from index_effectiveness.simulation.harness.table import Cell

if TYPE_CHECKING:
    import numpy as np

    from index_effectiveness.core.config.experiment_config import (
        ExperimentConfig,
        SegmentCountConfig,
    )
    from index_effectiveness.core.events.event_bus import EventBus
    from index_effectiveness.core.gaps.distributions import GapDistribution
    from index_effectiveness.simulation.harness.cancellation import CancellationToken

LOGGER = logging.getLogger(__name__)


class ExitTimeExperiment:
    """Paired OPT/MET exit times over a range of ε."""

    name = "exit-time"

    def __init__(self, config: ExperimentConfig, distribution: GapDistribution) -> None:
        self.config = config
        self.distribution = distribution
        self.model = config.gap_model(distribution)
        self.moments: TheoreticalMoments = self.model.theoretical_moments()

    def trajectory(self, rng: np.random.Generator) -> tuple[int, TrajectoryResult]:
        offset = int(rng.integers(0, self.config.epsilon_span, endpoint=True))
        epsilon = self.config.snap_epsilon(offset)
        result = simulate_exit_times(
            self.model,
            epsilon,
            rng,
            met_only=self.config.met_only,
            max_steps=self.config.max_steps,
        )
        return epsilon, result

    def new_reducer(self) -> ExitTimeReducer:
        return ExitTimeReducer(self.config.reported_epsilons())

    def comments(self) -> list[tuple[str, Cell]]:
        lines: list[tuple[str, Cell]] = [
            ("mean", self.moments.mean),
            ("variance", self.moments.variance),
        ]
        if self.model.is_autoregressive:
            lines.append(("autoregressive process phi", self.config.ar1_phi))
        else:
            lines.append(("moving-average process order", self.config.effective_ma_order))
        lines.append(("met constant", self.moments.met_constant))
        return lines

    def harness(
        self,
        *,
        reducer: ExitTimeReducer,
        event_bus: EventBus | None = None,
        token: CancellationToken | None = None,
        on_dump: Callable[[], None] | None = None,
        progress: bool = False,
    ) -> MonteCarloHarness[tuple[int, TrajectoryResult]]:
        return MonteCarloHarness(
            experiment=self.name,
            trajectory=self.trajectory,
            reducer=reducer,
            iterations=self.config.iterations,
            threads=self.config.threads,
            seed=self.config.seed,
            event_bus=event_bus,
            token=token,
            on_dump=on_dump,
            progress=progress,
        )

    def run(self, **kwargs) -> tuple[ExitTimeReducer, HarnessOutcome]:
        reducer = self.new_reducer()
        outcome = self.harness(reducer=reducer, **kwargs).run()
        if reducer.censored_opt:
            LOGGER.info(
                "Censored trajectories dropped",
                extra={"censored_opt": reducer.censored_opt, "completed": outcome.completed},
            )
        return reducer, outcome


class SegmentCountExperiment:
    """Growth of the MET segment count with stream length."""

    name = "segment-count"

    def __init__(self, config: SegmentCountConfig, distribution: GapDistribution) -> None:
        self.config = config
        self.distribution = distribution
        self.model = GapModel(distribution=distribution)
        self.moments: TheoreticalMoments = self.model.theoretical_moments()

    def trajectory(self, rng: np.random.Generator) -> list[int]:
        return simulate_segment_counts(
            self.model, self.config.epsilon, self.config.n, self.config.step, rng
        )

    def new_reducer(self) -> SegmentCountReducer:
        return SegmentCountReducer(self.config.checkpoints, self.config.step)

    def comments(self) -> list[tuple[str, Cell]]:
        return [
            ("mean", self.moments.mean),
            ("variance", self.moments.variance),
            ("epsilon", self.config.epsilon),
            ("met constant", self.moments.met_constant),
        ]

    def harness(
        self,
        *,
        reducer: SegmentCountReducer,
        event_bus: EventBus | None = None,
        token: CancellationToken | None = None,
        on_dump: Callable[[], None] | None = None,
        progress: bool = False,
    ) -> MonteCarloHarness[list[int]]:
        return MonteCarloHarness(
            experiment=self.name,
            trajectory=self.trajectory,
            reducer=reducer,
            iterations=self.config.iterations,
            threads=self.config.threads,
            seed=self.config.seed,
            event_bus=event_bus,
            token=token,
            on_dump=on_dump,
            progress=progress,
        )

    def run(self, **kwargs) -> tuple[SegmentCountReducer, HarnessOutcome]:
        reducer = self.new_reducer()
        outcome = self.harness(reducer=reducer, **kwargs).run()
        return reducer, outcome

