"""Bounded-error online piecewise-linear segmentation.

The feasible region of (slope, intercept) pairs is tracked through its dual
in the (x, y) plane: every admitted point contributes the vertical segment
``[(x, y - eps), (x, y + eps)]`` and a line is feasible iff it stabs all of
them. Two monotone chains keep the convex hull of the upper endpoints
(``upper``) and of the lower endpoints (``lower``); four rectangle vertices
hold the lines of minimum and maximum admissible slope. Each point pushes at
most one vertex per chain and every vertex is popped at most once, so
``add_point`` runs in amortized O(1).
"""

from __future__ import annotations

import logging
import math
from typing import Iterable

from index_effectiveness.core.domain.errors import InvalidParameter, PreconditionViolation
from index_effectiveness.core.domain.types import Segment

LOGGER = logging.getLogger(__name__)

Point = tuple[float, float]


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------
#
# A slope is kept as the difference vector (dx, dy) and compared by cross
# multiplication. Callers only ever compare vectors whose dx share the same
# sign, which keeps the comparison exact in direction.


def _slope_lt(a_dx: float, a_dy: float, b_dx: float, b_dy: float) -> bool:
    return a_dy * b_dx < b_dy * a_dx


def _cross(o: Point, a: Point, b: Point) -> float:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


class OptimalPiecewiseLinearModel:
    """Feasible region of one segment, updated one point at a time.

    ``add_point`` returns False when the point cannot be covered by any line
    together with the points already admitted. The rejected point is not
    admitted; the next call opens a fresh region, so callers re-offer the
    rejected point to start the following segment.
    """

    # pylint: disable=too-many-instance-attributes

    def __init__(self, epsilon: float) -> None:
        if not epsilon >= 0:
            raise InvalidParameter(f"epsilon must be >= 0, got {epsilon!r}")

        self.epsilon = epsilon

        self._upper: list[Point] = []
        self._lower: list[Point] = []
        self._upper_start = 0
        self._lower_start = 0
        self._points_in_hull = 0
        # [0]/[1]: upper/lower endpoint anchoring the min/max slope line,
        # [2]/[3]: lower/upper endpoint closing the min/max slope line.
        self._rectangle: list[Point] = [(0.0, 0.0)] * 4

        self._last_x: float | None = None
        self._last_y: float | None = None

    @property
    def points_in_segment(self) -> int:
        """Number of points admitted into the currently open region."""
        return self._points_in_hull

    def reset(self) -> None:
        """Discard the current region; the next point opens a new one."""
        self._points_in_hull = 0
        self._rectangle = [(0.0, 0.0)] * 4

    def add_point(self, x: float, y: float) -> bool:
        if self._last_x is not None:
            if x <= self._last_x:
                raise PreconditionViolation(
                    f"x must be strictly increasing ({x!r} after {self._last_x!r})",
                    x=x,
                    y=y,
                )
            if y < self._last_y:
                raise PreconditionViolation(
                    f"y must be non-decreasing ({y!r} after {self._last_y!r})",
                    x=x,
                    y=y,
                )

        eps = self.epsilon
        p1 = (x, y + eps)
        p2 = (x, y - eps)

        if self._points_in_hull == 0:
            self._rectangle[0] = p1
            self._rectangle[1] = p2
            self._upper = [p1]
            self._lower = [p2]
            self._upper_start = 0
            self._lower_start = 0
            self._admit(x, y)
            return True

        rect = self._rectangle
        upper = self._upper
        lower = self._lower

        if self._points_in_hull == 1:
            rect[2] = p2
            rect[3] = p1
            upper.append(p1)
            lower.append(p2)
            self._admit(x, y)
            return True

        r0, r1, r2, r3 = rect
        min_dx, min_dy = r2[0] - r0[0], r2[1] - r0[1]
        max_dx, max_dy = r3[0] - r1[0], r3[1] - r1[1]

        outside_min = _slope_lt(p1[0] - r2[0], p1[1] - r2[1], min_dx, min_dy)
        outside_max = _slope_lt(max_dx, max_dy, p2[0] - r3[0], p2[1] - r3[1])
        if outside_min or outside_max:
            # Region stays as it was so get_slope_range() describes the
            # segment that just closed.
            self._points_in_hull = 0
            return False

        if _slope_lt(p1[0] - r1[0], p1[1] - r1[1], max_dx, max_dy):
            # The upper endpoint tightens the maximum slope: rotate it around
            # the lower chain to the most restrictive support vertex.
            best = lower[self._lower_start]
            best_dx, best_dy = best[0] - p1[0], best[1] - p1[1]
            best_i = self._lower_start
            for i in range(self._lower_start + 1, len(lower)):
                cand = lower[i]
                dx, dy = cand[0] - p1[0], cand[1] - p1[1]
                if _slope_lt(best_dx, best_dy, dx, dy):
                    break
                best_dx, best_dy, best_i = dx, dy, i

            rect[1] = lower[best_i]
            rect[3] = p1
            self._lower_start = best_i

            end = len(upper)
            while end >= self._upper_start + 2 and _cross(upper[end - 2], upper[end - 1], p1) <= 0:
                end -= 1
            del upper[end:]
            upper.append(p1)

        if _slope_lt(min_dx, min_dy, p2[0] - r0[0], p2[1] - r0[1]):
            # Symmetric case: the lower endpoint raises the minimum slope.
            best = upper[self._upper_start]
            best_dx, best_dy = best[0] - p2[0], best[1] - p2[1]
            best_i = self._upper_start
            for i in range(self._upper_start + 1, len(upper)):
                cand = upper[i]
                dx, dy = cand[0] - p2[0], cand[1] - p2[1]
                if _slope_lt(dx, dy, best_dx, best_dy):
                    break
                best_dx, best_dy, best_i = dx, dy, i

            rect[0] = upper[best_i]
            rect[2] = p2
            self._upper_start = best_i

            end = len(lower)
            while end >= self._lower_start + 2 and _cross(lower[end - 2], lower[end - 1], p2) >= 0:
                end -= 1
            del lower[end:]
            lower.append(p2)

        self._admit(x, y)
        return True

    def _admit(self, x: float, y: float) -> None:
        self._points_in_hull += 1
        self._last_x = x
        self._last_y = y

    def get_slope_range(self) -> tuple[float, float]:
        """Return ``(lo, hi)`` bounds on the admissible slope.

        After a rejected point this still describes the segment that closed.
        With fewer than two points in the region the slope is unconstrained.
        """
        if self._points_in_hull == 1:
            return (-math.inf, math.inf)
        r0, r1, r2, r3 = self._rectangle
        if r2[0] == r0[0] or r3[0] == r1[0]:
            return (-math.inf, math.inf)
        lo = (r2[1] - r0[1]) / (r2[0] - r0[0])
        hi = (r3[1] - r1[1]) / (r3[0] - r1[0])
        return (lo, hi)


def segment_stream(
    points: Iterable[tuple[float, float]],
    epsilon: float,
    *,
    closed_only: bool = False,
) -> list[Segment]:
    """Split a stream into maximal ε-segments.

    The returned segments partition ``[0, n)``: each break re-offers the
    rejected point as the first point of the next segment. With
    ``closed_only`` the trailing segment, which no rejected point has
    closed yet, is left out.
    """
    model = OptimalPiecewiseLinearModel(epsilon)
    segments: list[Segment] = []
    start = 0
    n = 0

    for n, (x, y) in enumerate(points, start=1):
        if model.add_point(x, y):
            continue

        lo, hi = model.get_slope_range()
        segments.append(Segment(start=start, end=n - 1, slope_lo=lo, slope_hi=hi))
        start = n - 1
        model.add_point(x, y)

    if model.points_in_segment > 0 and not closed_only:
        lo, hi = model.get_slope_range()
        segments.append(Segment(start=start, end=n, slope_lo=lo, slope_hi=hi))

    LOGGER.debug(
        "Stream segmented",
        extra={"epsilon": epsilon, "points": n, "segments": len(segments)},
    )
    return segments
