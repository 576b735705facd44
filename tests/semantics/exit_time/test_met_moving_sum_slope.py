"""
Semantic test: MET under a moving-sum gap process.

Invariant:
For an order-m moving sum the MET line has slope 1 / (mean * m), and the
simulated MET exit time is the first y with |y - slope * x_y| > epsilon
on that same stream.
"""

from __future__ import annotations

import numpy as np

from index_effectiveness.core.gaps.distributions import ExponentialGaps
from index_effectiveness.core.gaps.process import GapModel
from index_effectiveness.simulation.engine.exit_time import simulate_exit_times


def _first_met_exit(model: GapModel, slope: float, epsilon: float, seed: int) -> int:
    gaps = model.stream(np.random.default_rng(seed))
    x = 0.0
    y = 0
    while True:
        y += 1
        x += next(gaps)
        if abs(y - slope * x) > epsilon:
            return y


def test_met_exit_uses_moving_sum_slope() -> None:
    model = GapModel(distribution=ExponentialGaps(rate=1.0), ma_order=4)

    for seed in range(20):
        result = simulate_exit_times(
            model, 3, np.random.default_rng(seed), met_only=True, max_steps=1_000_000
        )
        assert result.met_exit_time == _first_met_exit(model, 0.25, 3, seed)
