"""Correlated gap processes built on top of an i.i.d. gap distribution."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from index_effectiveness.core.domain.errors import InvalidParameter
from index_effectiveness.core.domain.types import TheoreticalMoments

if TYPE_CHECKING:
    import numpy as np

    from index_effectiveness.core.gaps.distributions import GapDistribution


class MovingAverageGapStream(Iterator):
    """Moving sum of the last ``order`` raw draws.

    The window is pre-filled with ``order`` draws, then every step replaces
    the oldest draw and returns the window sum. Order 1 is the i.i.d. stream.
    """

    __slots__ = ("_distribution", "_rng", "_memory", "_memory_sum", "_order", "_t")

    def __init__(self, distribution: GapDistribution, order: int, rng: np.random.Generator) -> None:
        self._distribution = distribution
        self._rng = rng
        self._order = order
        self._memory = [distribution.sample(rng) for _ in range(order)]
        self._memory_sum = sum(self._memory)
        self._t = 0

    def __next__(self) -> float:
        slot = self._t % self._order
        self._t += 1
        gap = self._distribution.sample(self._rng)
        self._memory_sum -= self._memory[slot]
        increment = gap + self._memory_sum
        self._memory[slot] = gap
        self._memory_sum += gap
        return increment


class AutoregressiveGapStream(Iterator):
    """AR(1) stream ``gap[t] = phi * gap[t-1] + noise[t]`` with ``gap[0] = 0``."""

    __slots__ = ("_distribution", "_rng", "_phi", "_gap")

    def __init__(self, distribution: GapDistribution, phi: float, rng: np.random.Generator) -> None:
        self._distribution = distribution
        self._rng = rng
        self._phi = phi
        self._gap = 0.0

    def __next__(self) -> float:
        self._gap = self._phi * self._gap + self._distribution.sample(self._rng)
        return self._gap


@dataclass(frozen=True, slots=True)
class GapModel:
    """A gap distribution plus its optional correlation process.

    ``ma_order == 1`` and ``ar1_phi == 0`` is the uncorrelated case. The two
    correlation modes are mutually exclusive.
    """

    distribution: GapDistribution
    ma_order: int = 1
    ar1_phi: float = 0.0

    def __post_init__(self) -> None:
        if self.ma_order < 1:
            raise InvalidParameter(f"ma_order must be >= 1, got {self.ma_order}")
        if not 0.0 <= self.ar1_phi < 1.0:
            raise InvalidParameter(f"ar1_phi must be in [0, 1), got {self.ar1_phi}")
        if self.ma_order > 1 and self.ar1_phi != 0.0:
            raise InvalidParameter("moving-average and autoregressive modes are exclusive")

    @property
    def is_autoregressive(self) -> bool:
        return self.ar1_phi != 0.0

    def theoretical_moments(self) -> TheoreticalMoments:
        """Stationary moments and the fixed slope used by the MET test."""
        base_mean, base_variance = self.distribution.moments()

        if self.is_autoregressive:
            phi = self.ar1_phi
            mean = base_mean / (1.0 - phi)
            variance = base_variance / (1.0 - phi * phi)
            met_constant = ((1.0 - phi) / (1.0 + phi)) * mean * mean / variance
            return TheoreticalMoments(
                mean=mean,
                variance=variance,
                met_constant=met_constant,
                slope=1.0 / mean,
            )

        return TheoreticalMoments(
            mean=base_mean,
            variance=base_variance,
            met_constant=base_mean * base_mean / base_variance,
            slope=1.0 / (base_mean * self.ma_order),
        )

    def stream(self, rng: np.random.Generator) -> Iterator[float]:
        """Return a fresh, independent gap stream drawing from ``rng``."""
        if self.is_autoregressive:
            return AutoregressiveGapStream(self.distribution, self.ar1_phi, rng)
        return MovingAverageGapStream(self.distribution, self.ma_order, rng)
