"""Core value types exchanged between the simulation layers.

These are hot-path records (one per trajectory or per segment), so they are
plain frozen dataclasses rather than validated pydantic models.
"""

from __future__ import annotations

from dataclasses import dataclass

# Step count marking an exit time that was not observed within the budget.
# Every genuine exit time is strictly smaller.
INFINITE_EXIT_TIME = 1_000_000_000


def is_censored(exit_time: int) -> bool:
    """Return True if the exit time is the "never reached" sentinel."""
    return exit_time >= INFINITE_EXIT_TIME


@dataclass(frozen=True, slots=True)
class Segment:
    """Maximal run of points ``[start, end)`` sharing one feasible region.

    ``slope_lo``/``slope_hi`` is the admissible slope interval just before
    the segment closed.
    """

    start: int
    end: int
    slope_lo: float
    slope_hi: float

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True, slots=True)
class TrajectoryResult:
    """Outcome of one simulated trajectory."""

    opt_exit_time: int
    met_exit_time: int
    slope_lo: float
    slope_hi: float

    @property
    def opt_censored(self) -> bool:
        return is_censored(self.opt_exit_time)

    @property
    def met_censored(self) -> bool:
        return is_censored(self.met_exit_time)


@dataclass(frozen=True, slots=True)
class TheoreticalMoments:
    """Stationary moments of a gap process and the derived MET parameters.

    ``slope`` is the fixed slope used by the MET threshold test and
    ``met_constant`` the normalised squared mean over variance.
    """

    mean: float
    variance: float
    met_constant: float
    slope: float
