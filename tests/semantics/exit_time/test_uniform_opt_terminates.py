"""
Semantic test: OPT exits on i.i.d. uniform gaps.

Invariant:
With uniform(0, 1) gaps and epsilon = 5, virtually every trajectory
breaks well inside a 10_000 step budget, and the reported slope ranges
centre on the true slope 1 / mean = 2.
"""

from __future__ import annotations

import numpy as np

from index_effectiveness.core.gaps.distributions import UniformGaps
from index_effectiveness.core.gaps.process import GapModel
from index_effectiveness.simulation.engine.exit_time import simulate_exit_times


def test_opt_exit_time_is_finite() -> None:
    model = GapModel(distribution=UniformGaps(low=0.0, high=1.0))
    rng = np.random.default_rng(2024)

    results = [simulate_exit_times(model, 5, rng, max_steps=10_000) for _ in range(200)]

    finite = [r for r in results if not r.opt_censored]
    assert len(finite) / len(results) > 0.999
    assert all(r.opt_exit_time >= 2 for r in finite)


def test_slope_range_is_ordered() -> None:
    model = GapModel(distribution=UniformGaps(low=0.0, high=1.0))
    rng = np.random.default_rng(99)

    midpoints = []
    for _ in range(50):
        result = simulate_exit_times(model, 5, rng, max_steps=10_000)
        assert result.slope_lo <= result.slope_hi
        midpoints.append((result.slope_lo + result.slope_hi) / 2.0)

    assert 1.5 < float(np.mean(midpoints)) < 2.5
