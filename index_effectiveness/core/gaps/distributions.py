"""Gap distributions.

Each distribution is an immutable pydantic model exposing ``sample(rng)`` and
``moments()``. Models are frozen, so a single instance can be shared by all
worker threads; randomness always comes from the caller's generator.
"""

# pylint: disable=missing-function-docstring
from __future__ import annotations

import math
from typing import Annotated, Any, Literal, Sequence

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator

from index_effectiveness.core.domain.errors import InvalidParameter


class _GapDistributionBase(BaseModel):
    """Common interface of all gap distributions."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    def sample(self, rng: np.random.Generator) -> float:
        """Draw one non-negative gap."""
        raise NotImplementedError("sample() must be implemented by subclasses")

    def moments(self) -> tuple[float, float]:
        """Return the theoretical ``(mean, variance)``.

        Moments that do not exist are reported as ``inf``.
        """
        raise NotImplementedError("moments() must be implemented by subclasses")


# ---------------------------------------------------------------------------
# Concrete distributions
# ---------------------------------------------------------------------------


class UniformGaps(_GapDistributionBase):
    """Continuous uniform on ``[low, high)``."""

    kind: Literal["uniform"] = "uniform"
    low: float = Field(..., ge=0)
    high: float

    @model_validator(mode="after")
    def validate_bounds(self) -> UniformGaps:
        if not self.high > self.low:
            raise ValueError("high must be greater than low")
        return self

    def sample(self, rng: np.random.Generator) -> float:
        return float(rng.uniform(self.low, self.high))

    def moments(self) -> tuple[float, float]:
        interval = self.high - self.low
        return ((self.low + self.high) / 2.0, interval * interval / 12.0)


class ParetoGaps(_GapDistributionBase):
    """Pareto type I with minimum ``scale`` and tail index ``shape``."""

    kind: Literal["pareto"] = "pareto"
    scale: float = Field(..., gt=0)
    shape: float = Field(..., gt=0)

    def sample(self, rng: np.random.Generator) -> float:
        return self.scale * math.exp(rng.exponential(1.0 / self.shape))

    def moments(self) -> tuple[float, float]:
        a, k = self.shape, self.scale
        mean = a * k / (a - 1.0) if a > 1.0 else math.inf
        variance = k * k * a / ((a - 1.0) * (a - 1.0) * (a - 2.0)) if a > 2.0 else math.inf
        return (mean, variance)


class LognormalGaps(_GapDistributionBase):
    """Lognormal with log-mean ``mu`` and log-standard deviation ``sigma``."""

    kind: Literal["lognormal"] = "lognormal"
    mu: float
    sigma: float = Field(..., gt=0)

    def sample(self, rng: np.random.Generator) -> float:
        return float(rng.lognormal(self.mu, self.sigma))

    def moments(self) -> tuple[float, float]:
        v = self.sigma * self.sigma
        return (
            math.exp(self.mu + v / 2.0),
            (math.exp(v) - 1.0) * math.exp(2.0 * self.mu + v),
        )


class ExponentialGaps(_GapDistributionBase):
    """Exponential with rate ``rate``."""

    kind: Literal["exponential"] = "exponential"
    rate: float = Field(..., gt=0)

    def sample(self, rng: np.random.Generator) -> float:
        return float(rng.exponential(1.0 / self.rate))

    def moments(self) -> tuple[float, float]:
        return (1.0 / self.rate, 1.0 / (self.rate * self.rate))


class GammaGaps(_GapDistributionBase):
    """Gamma with shape ``shape`` and scale ``scale``."""

    kind: Literal["gamma"] = "gamma"
    shape: float = Field(..., gt=0)
    scale: float = Field(..., gt=0)

    def sample(self, rng: np.random.Generator) -> float:
        return float(rng.gamma(self.shape, self.scale))

    def moments(self) -> tuple[float, float]:
        return (self.shape * self.scale, self.shape * self.scale * self.scale)


GapDistribution = Annotated[
    UniformGaps | ParetoGaps | LognormalGaps | ExponentialGaps | GammaGaps,
    Field(discriminator="kind"),
]

_DISTRIBUTION_ADAPTER: TypeAdapter[GapDistribution] = TypeAdapter(GapDistribution)

# Positional parameter order accepted on the command line.
DISTRIBUTION_PARAMETERS: dict[str, tuple[str, ...]] = {
    "uniform": ("low", "high"),
    "pareto": ("scale", "shape"),
    "lognormal": ("mu", "sigma"),
    "exponential": ("rate",),
    "gamma": ("shape", "scale"),
}


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def distribution_from_json_obj(obj: dict[str, Any]) -> GapDistribution:
    """Validate a ``{"kind": ..., <params>}`` object into a distribution."""
    try:
        return _DISTRIBUTION_ADAPTER.validate_python(obj)
    except ValidationError as exc:
        raise InvalidParameter(f"invalid distribution {obj!r}: {exc}") from exc


def build_distribution(name: str, parameters: Sequence[float]) -> GapDistribution:
    """Build a distribution from its name and positional parameters."""
    if name not in DISTRIBUTION_PARAMETERS:
        raise InvalidParameter(
            f"unknown distribution {name!r}; expected one of "
            f"{', '.join(sorted(DISTRIBUTION_PARAMETERS))}"
        )

    names = DISTRIBUTION_PARAMETERS[name]
    if len(parameters) != len(names):
        raise InvalidParameter(
            f"{name} takes {len(names)} parameter(s) ({', '.join(names)}), "
            f"got {len(parameters)}"
        )

    obj: dict[str, Any] = {"kind": name}
    obj.update(zip(names, parameters, strict=True))
    return distribution_from_json_obj(obj)
