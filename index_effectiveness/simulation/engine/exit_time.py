"""Exit-time simulation of one synthetic trajectory.

OPT and MET exit times are measured on the same gap sequence so that every
comparison is paired.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from index_effectiveness.core.domain.errors import InvalidParameter
from index_effectiveness.core.domain.types import INFINITE_EXIT_TIME, TrajectoryResult
from index_effectiveness.core.model.piecewise_linear import OptimalPiecewiseLinearModel

if TYPE_CHECKING:
    import numpy as np

    from index_effectiveness.core.gaps.process import GapModel

# Slope range reported for a trajectory whose OPT segment never closed.
CENSORED_SLOPE_RANGE = (0.0, 1.0)


def simulate_exit_times(
    model: GapModel,
    epsilon: float,
    rng: np.random.Generator,
    *,
    met_only: bool = False,
    max_steps: int = INFINITE_EXIT_TIME,
) -> TrajectoryResult:
    """Run one trajectory until OPT breaks or the step budget is exhausted.

    Points are ``(x_y, y)`` for ``y = 1 .. max_steps - 1`` after the anchor
    ``(0, 0)``, where ``x_y`` is the cumulative gap sum.

    - OPT exit time: first ``y`` the segmentation engine rejects.
    - MET exit time: first ``y`` with ``|y - slope * x_y| > epsilon`` for the
      model's fixed theoretical slope.

    In ``met_only`` mode the engine is skipped and the trajectory stops as soon
    as MET triggers, reporting ``opt_exit_time = 0``. Unreached exit times are
    reported as ``INFINITE_EXIT_TIME``.
    """
    if max_steps > INFINITE_EXIT_TIME:
        raise InvalidParameter(
            f"max_steps must not exceed {INFINITE_EXIT_TIME}, got {max_steps}"
        )

    slope = model.theoretical_moments().slope
    gaps = model.stream(rng)

    met_exit_time = INFINITE_EXIT_TIME
    x = 0.0

    opt: OptimalPiecewiseLinearModel | None = None
    if not met_only:
        opt = OptimalPiecewiseLinearModel(epsilon)
        opt.add_point(0.0, 0)

    for y in range(1, max_steps):
        x += next(gaps)

        if met_exit_time == INFINITE_EXIT_TIME and abs(y - slope * x) > epsilon:
            met_exit_time = y
            if opt is None:
                return TrajectoryResult(0, met_exit_time, 0.0, 0.0)

        if opt is not None and not opt.add_point(x, y):
            lo, hi = opt.get_slope_range()
            return TrajectoryResult(y, met_exit_time, lo, hi)

    lo, hi = CENSORED_SLOPE_RANGE
    return TrajectoryResult(INFINITE_EXIT_TIME, met_exit_time, lo, hi)
