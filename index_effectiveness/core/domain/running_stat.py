"""Numerically stable streaming accumulator for a scalar metric."""

from __future__ import annotations

import math


class RunningStatistic:
    """Welford accumulator tracking count, mean, variance and total.

    Not thread-safe on its own: concurrent writers must hold an external lock
    around ``push`` (see ``ExitTimeReducer``).
    """

    __slots__ = ("_n", "_mean", "_s", "_total")

    def __init__(self) -> None:
        self._n = 0
        self._mean = 0.0
        self._s = 0.0
        self._total = 0.0

    def push(self, x: float) -> None:
        self._n += 1
        if self._n == 1:
            self._mean = x
            self._s = 0.0
            self._total = x
            return

        old_mean = self._mean
        new_mean = old_mean + (x - old_mean) / self._n
        self._s = self._s + (x - old_mean) * (x - new_mean)
        self._mean = new_mean
        self._total += x

    def samples(self) -> int:
        return self._n

    def mean(self) -> float:
        return self._mean if self._n > 0 else 0.0

    def variance(self) -> float:
        return self._s / (self._n - 1) if self._n > 1 else 0.0

    def standard_deviation(self) -> float:
        return math.sqrt(self.variance())

    def total(self) -> float:
        return self._total if self._n > 0 else 0.0

    def __repr__(self) -> str:
        return (
            f"RunningStatistic(samples={self._n}, mean={self.mean()!r}, "
            f"std={self.standard_deviation()!r})"
        )
