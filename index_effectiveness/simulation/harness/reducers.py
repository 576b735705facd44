"""Per-bucket aggregation of trajectory outcomes.

Reducers are not synchronized; the harness serializes every call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from index_effectiveness.core.domain.running_stat import RunningStatistic
from index_effectiveness.core.domain.types import TrajectoryResult
from index_effectiveness.simulation.harness.table import CsvTable

EXIT_TIME_COLUMNS = (
    "epsilon",
    "opt_avg",
    "opt_std",
    "opt_lo_avg",
    "opt_lo_std",
    "opt_hi_avg",
    "opt_hi_std",
    "met_avg",
    "met_std",
    "samples",
)

SEGMENT_COUNT_COLUMNS = ("n", "segments_avg", "segments_std")


@dataclass(slots=True)
class ExitTimeBucket:
    opt: RunningStatistic = field(default_factory=RunningStatistic)
    opt_lo: RunningStatistic = field(default_factory=RunningStatistic)
    opt_hi: RunningStatistic = field(default_factory=RunningStatistic)
    met: RunningStatistic = field(default_factory=RunningStatistic)
    samples: int = 0


class ExitTimeReducer:
    """Folds ``(epsilon, TrajectoryResult)`` pairs into per-ε buckets.

    Trajectories whose OPT segment never closed are counted as censored and
    otherwise ignored. A censored MET inside a folded trajectory still
    counts towards ``samples`` but is kept out of the MET statistic.
    """

    def __init__(self, epsilons: Sequence[int]) -> None:
        if not epsilons:
            raise ValueError("at least one epsilon bucket is required")
        self._buckets: dict[int, ExitTimeBucket] = {eps: ExitTimeBucket() for eps in epsilons}
        self.censored_opt = 0
        self.censored_met = 0

    @property
    def epsilons(self) -> list[int]:
        return list(self._buckets)

    def bucket(self, epsilon: int) -> ExitTimeBucket:
        return self._buckets[epsilon]

    @property
    def folded(self) -> int:
        return sum(b.samples for b in self._buckets.values())

    def fold(self, outcome: tuple[int, TrajectoryResult]) -> None:
        epsilon, result = outcome
        if result.opt_censored:
            self.censored_opt += 1
            return

        bucket = self._buckets[epsilon]
        bucket.samples += 1
        bucket.opt.push(result.opt_exit_time)
        bucket.opt_lo.push(result.slope_lo)
        bucket.opt_hi.push(result.slope_hi)
        if result.met_censored:
            self.censored_met += 1
        else:
            bucket.met.push(result.met_exit_time)

    def table(self) -> CsvTable:
        rows = []
        for eps, b in self._buckets.items():
            rows.append(
                (
                    eps,
                    b.opt.mean(),
                    b.opt.standard_deviation(),
                    b.opt_lo.mean(),
                    b.opt_lo.standard_deviation(),
                    b.opt_hi.mean(),
                    b.opt_hi.standard_deviation(),
                    b.met.mean(),
                    b.met.standard_deviation(),
                    b.samples,
                )
            )
        return CsvTable(columns=EXIT_TIME_COLUMNS, rows=tuple(rows))


class SegmentCountReducer:
    """Aggregates segment counts per checkpoint index."""

    def __init__(self, checkpoints: int, step: int) -> None:
        self._step = step
        self._stats = [RunningStatistic() for _ in range(checkpoints)]

    def statistic(self, index: int) -> RunningStatistic:
        return self._stats[index]

    def fold(self, outcome: Sequence[int]) -> None:
        if len(outcome) != len(self._stats):
            raise ValueError(
                f"expected {len(self._stats)} segment counts, got {len(outcome)}"
            )
        for stat, count in zip(self._stats, outcome):
            stat.push(count)

    def table(self) -> CsvTable:
        rows = []
        for i, stat in enumerate(self._stats):
            # The empty prefix is reported as n = 1.
            n = i * self._step if i else 1
            rows.append((n, stat.mean(), stat.standard_deviation()))
        return CsvTable(columns=SEGMENT_COUNT_COLUMNS, rows=tuple(rows))
