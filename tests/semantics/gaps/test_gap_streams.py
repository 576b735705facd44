"""
Semantic test: correlated gap streams.

Invariant:
An order-m moving-average stream emits the sum of the last m raw draws,
and the AR(1) stream follows gap[t] = phi * gap[t-1] + noise[t] from 0.
"""

from __future__ import annotations

import itertools

import numpy as np
import pytest

from index_effectiveness.core.gaps.distributions import ExponentialGaps
from index_effectiveness.core.gaps.process import GapModel


def test_moving_average_is_sum_of_last_draws() -> None:
    dist = ExponentialGaps(rate=1.0)
    order = 3

    raw_rng = np.random.default_rng(21)
    raw = [dist.sample(raw_rng) for _ in range(order + 50)]

    stream = GapModel(distribution=dist, ma_order=order).stream(np.random.default_rng(21))
    emitted = list(itertools.islice(stream, 50))

    for t, value in enumerate(emitted, start=1):
        window = raw[t : t + order]
        assert value == pytest.approx(sum(window), rel=1e-9)


def test_order_one_is_iid() -> None:
    dist = ExponentialGaps(rate=1.0)
    raw_rng = np.random.default_rng(4)
    raw = [dist.sample(raw_rng) for _ in range(21)]

    stream = GapModel(distribution=dist).stream(np.random.default_rng(4))

    assert list(itertools.islice(stream, 20)) == pytest.approx(raw[1:])


def test_autoregressive_recursion() -> None:
    dist = ExponentialGaps(rate=1.0)
    phi = 0.25
    noise_rng = np.random.default_rng(9)
    noise = [dist.sample(noise_rng) for _ in range(30)]

    stream = GapModel(distribution=dist, ar1_phi=phi).stream(np.random.default_rng(9))

    expected = []
    gap = 0.0
    for n in noise:
        gap = phi * gap + n
        expected.append(gap)
    assert list(itertools.islice(stream, 30)) == pytest.approx(expected)


def test_streams_from_equal_seeds_are_identical() -> None:
    model = GapModel(distribution=ExponentialGaps(rate=3.0), ma_order=2)

    a = list(itertools.islice(model.stream(np.random.default_rng(77)), 100))
    b = list(itertools.islice(model.stream(np.random.default_rng(77)), 100))

    assert a == b
