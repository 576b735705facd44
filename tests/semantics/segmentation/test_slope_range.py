"""
Semantic test: admissible slope range.

Invariant:
With one point, or right after a reset, the slope is unconstrained;
with two points (x0, y0), (x1, y1) the range is [(dy - 2eps)/dx, (dy + 2eps)/dx].
"""

from __future__ import annotations

import math

import pytest

from index_effectiveness.core.model.piecewise_linear import OptimalPiecewiseLinearModel


def test_single_point_is_unconstrained() -> None:
    model = OptimalPiecewiseLinearModel(epsilon=1)
    model.add_point(0.0, 0.0)

    assert model.get_slope_range() == (-math.inf, math.inf)


def test_two_points_bound_the_slope() -> None:
    model = OptimalPiecewiseLinearModel(epsilon=0.5)
    model.add_point(0.0, 0.0)
    model.add_point(1.0, 1.0)

    assert model.get_slope_range() == pytest.approx((0.0, 2.0))


def test_reset_discards_region() -> None:
    model = OptimalPiecewiseLinearModel(epsilon=0.5)
    model.add_point(0.0, 0.0)
    model.add_point(1.0, 1.0)

    model.reset()

    assert model.points_in_segment == 0
    assert model.get_slope_range() == (-math.inf, math.inf)
    assert model.add_point(2.0, 100.0)
    assert model.get_slope_range() == (-math.inf, math.inf)
