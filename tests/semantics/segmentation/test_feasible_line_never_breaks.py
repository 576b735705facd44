"""
Semantic test: points on a line are never split.

Invariant:
If every point lies within epsilon of one line, add_point accepts all of
them and the stream yields a single segment.
"""

from __future__ import annotations

import math

from index_effectiveness.core.model.piecewise_linear import (
    OptimalPiecewiseLinearModel,
    segment_stream,
)


def test_exact_line_is_one_segment() -> None:
    points = [(0.5 * i, float(i)) for i in range(200)]

    segments = segment_stream(points, epsilon=0)

    assert len(segments) == 1
    assert (segments[0].start, segments[0].end) == (0, 200)


def test_noisy_line_within_epsilon_is_accepted() -> None:
    model = OptimalPiecewiseLinearModel(epsilon=2)
    for i in range(500):
        y = 3 * i + (1 if i % 2 else -1)
        assert model.add_point(float(i), float(y))

    lo, hi = model.get_slope_range()
    assert lo <= 3 <= hi
    assert math.isfinite(lo) and math.isfinite(hi)
    assert model.points_in_segment == 500
