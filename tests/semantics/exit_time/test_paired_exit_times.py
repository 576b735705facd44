"""
Semantic test: OPT and MET are measured on the same gap sequence.

Invariant:
A trajectory is a pure function of the generator state, and the MET exit
time of a paired run equals the exit time of a met-only run on the same
seed.
"""

from __future__ import annotations

import numpy as np
import pytest

from index_effectiveness.core.domain.errors import InvalidParameter
from index_effectiveness.core.domain.types import INFINITE_EXIT_TIME
from index_effectiveness.core.gaps.distributions import ExponentialGaps, UniformGaps
from index_effectiveness.core.gaps.process import GapModel
from index_effectiveness.simulation.engine.exit_time import simulate_exit_times


def test_same_seed_same_trajectory() -> None:
    model = GapModel(distribution=ExponentialGaps(rate=1.0))

    a = simulate_exit_times(model, 4, np.random.default_rng(123), max_steps=20_000)
    b = simulate_exit_times(model, 4, np.random.default_rng(123), max_steps=20_000)

    assert a == b


@pytest.mark.parametrize("seed", range(10))
def test_met_only_matches_paired_met(seed: int) -> None:
    model = GapModel(distribution=UniformGaps(low=0.0, high=1.0))

    paired = simulate_exit_times(model, 3, np.random.default_rng(seed), max_steps=50_000)
    met_only = simulate_exit_times(
        model, 3, np.random.default_rng(seed), met_only=True, max_steps=50_000
    )

    assert met_only.opt_exit_time == 0
    assert (met_only.slope_lo, met_only.slope_hi) == (0.0, 0.0)
    if paired.met_exit_time != INFINITE_EXIT_TIME:
        assert met_only.met_exit_time == paired.met_exit_time
    else:
        # The paired run stopped at the OPT break before MET triggered.
        assert met_only.met_exit_time > paired.opt_exit_time


def test_exhausted_budget_is_censored() -> None:
    model = GapModel(distribution=UniformGaps(low=0.0, high=1.0))

    result = simulate_exit_times(model, 1_000, np.random.default_rng(0), max_steps=50)

    assert result.opt_exit_time == INFINITE_EXIT_TIME
    assert result.opt_censored
    assert (result.slope_lo, result.slope_hi) == (0.0, 1.0)


def test_budget_above_sentinel_is_invalid() -> None:
    model = GapModel(distribution=UniformGaps(low=0.0, high=1.0))

    with pytest.raises(InvalidParameter):
        simulate_exit_times(
            model, 1, np.random.default_rng(0), max_steps=INFINITE_EXIT_TIME + 1
        )
