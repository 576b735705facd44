"""
Semantic test: theoretical moments and the MET slope.

Invariant:
The MET slope is 1 / (mean * m) for an order-m moving sum, AR(1) with
phi = 0 is the uncorrelated model, and missing moments are infinite.
"""

from __future__ import annotations

import math

import pytest

from index_effectiveness.core.domain.errors import InvalidParameter
from index_effectiveness.core.gaps.distributions import (
    ExponentialGaps,
    GammaGaps,
    LognormalGaps,
    ParetoGaps,
    UniformGaps,
)
from index_effectiveness.core.gaps.process import GapModel


def test_moving_average_slope() -> None:
    dist = ExponentialGaps(rate=1.0)

    moments = GapModel(distribution=dist, ma_order=4).theoretical_moments()

    assert moments.slope == pytest.approx(0.25, rel=1e-12)
    assert moments.met_constant == pytest.approx(1.0, rel=1e-12)


def test_zero_phi_matches_uncorrelated_model() -> None:
    dist = UniformGaps(low=0.0, high=1.0)

    plain = GapModel(distribution=dist).theoretical_moments()
    ar = GapModel(distribution=dist, ar1_phi=0.0).theoretical_moments()

    assert plain == ar
    assert plain.mean == pytest.approx(0.5)
    assert plain.variance == pytest.approx(1.0 / 12.0)
    assert plain.met_constant == pytest.approx(3.0)


def test_autoregressive_moments() -> None:
    dist = ExponentialGaps(rate=1.0)
    phi = 0.5

    moments = GapModel(distribution=dist, ar1_phi=phi).theoretical_moments()

    assert moments.mean == pytest.approx(2.0)
    assert moments.variance == pytest.approx(1.0 / 0.75)
    assert moments.slope == pytest.approx(0.5)
    assert moments.met_constant == pytest.approx((0.5 / 1.5) * 4.0 * 0.75)


def test_closed_form_moments() -> None:
    assert GammaGaps(shape=3.0, scale=2.0).moments() == pytest.approx((6.0, 12.0))
    mean, variance = LognormalGaps(mu=0.0, sigma=1.0).moments()
    assert mean == pytest.approx(math.exp(0.5))
    assert variance == pytest.approx((math.e - 1.0) * math.e)


def test_pareto_missing_moments_are_infinite() -> None:
    assert ParetoGaps(scale=1.0, shape=0.8).moments() == (math.inf, math.inf)
    mean, variance = ParetoGaps(scale=1.0, shape=1.5).moments()
    assert mean == pytest.approx(3.0)
    assert variance == math.inf


@pytest.mark.parametrize(
    ("ma_order", "phi"),
    [(0, 0.0), (1, 1.0), (1, -0.1), (3, 0.5)],
)
def test_invalid_correlation_rejected(ma_order: int, phi: float) -> None:
    with pytest.raises(InvalidParameter):
        GapModel(distribution=ExponentialGaps(rate=1.0), ma_order=ma_order, ar1_phi=phi)
