"""Growth of the MET segment count along a stream of increasing length."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import numpy as np

    from index_effectiveness.core.gaps.process import GapModel


def simulate_segment_counts(
    model: GapModel,
    epsilon: float,
    n: int,
    step: int,
    rng: np.random.Generator,
) -> list[int]:
    """Count MET segments over one stream of ``n`` gaps.

    A segment restarts (x and the index origin reset) whenever
    ``|(j - start) - slope * x| > epsilon``. The returned list holds the
    segment count after every multiple of ``step``: ``counts[k]`` is the count
    at ``j = k * step``, with ``counts[0] = 1`` for the empty prefix.
    """
    slope = model.theoretical_moments().slope
    gaps = model.stream(rng)

    counts = [0] * (n // step + 1)
    counts[0] = 1

    x = 0.0
    segments = 1
    start = 0
    for j in range(1, n + 1):
        x += next(gaps)
        if abs((j - start) - slope * x) > epsilon:
            segments += 1
            x = 0.0
            start = j
        if j % step == 0:
            counts[j // step] = segments

    return counts
