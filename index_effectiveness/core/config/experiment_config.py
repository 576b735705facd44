"""Experiment configuration models.

All models are frozen: a configuration is validated once, before any work
starts, and is read-only for the whole run.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from index_effectiveness.core.domain.errors import InvalidParameter
from index_effectiveness.core.domain.types import INFINITE_EXIT_TIME
from index_effectiveness.core.gaps.distributions import GapDistribution
from index_effectiveness.core.gaps.process import GapModel

ConfigT = TypeVar("ConfigT", bound=BaseModel)


def validate_config(cls: type[ConfigT], obj: dict[str, Any]) -> ConfigT:
    """Validate a JSON-compatible object, raising ``InvalidParameter``."""
    try:
        return cls.model_validate(obj)
    except ValidationError as exc:
        raise InvalidParameter(f"invalid {cls.__name__}: {exc}") from exc


class ExperimentConfig(BaseModel):
    """Parameters of an OPT/MET exit-time experiment."""

    min_epsilon: int = Field(1, ge=0)
    max_epsilon: int = Field(16, ge=0)
    step: int = Field(1, ge=1, description="Output resolution over the ε range.")
    iterations: int = Field(10_000_000, ge=1, description="Number of simulated streams.")
    threads: int = Field(4, ge=1)
    met_only: bool = False

    # Correlation: at most one of the two may be set.
    ma_order: int = Field(0, ge=0, description="Moving-average order (0 = uncorrelated).")
    ar1_phi: float = Field(0.0, ge=0.0, lt=1.0, description="AR(1) coefficient (0 = off).")

    max_steps: int = Field(
        INFINITE_EXIT_TIME,
        ge=2,
        le=INFINITE_EXIT_TIME,
        description="Per-trajectory step budget.",
    )
    seed: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def from_json_obj(cls, obj: dict[str, Any]) -> ExperimentConfig:
        """Create an ExperimentConfig from a JSON-compatible object."""
        return validate_config(cls, obj)

    @model_validator(mode="after")
    def validate_consistency(self) -> ExperimentConfig:
        if self.min_epsilon > self.max_epsilon:
            raise ValueError("min_epsilon must not exceed max_epsilon")
        if self.ma_order > 0 and self.ar1_phi != 0.0:
            raise ValueError("ma_order and ar1_phi are mutually exclusive")
        return self

    @property
    def epsilon_span(self) -> int:
        return self.max_epsilon - self.min_epsilon

    @property
    def effective_ma_order(self) -> int:
        return self.ma_order if self.ma_order > 0 else 1

    def snap_epsilon(self, offset: int) -> int:
        """Snap a raw offset in ``[0, span]`` to the nearest reported bucket.

        Buckets are the multiples of ``step`` that fit inside the range, so
        every trajectory lands in a row of the output.
        """
        nearest = ((offset + self.step // 2) // self.step) * self.step
        top = (self.epsilon_span // self.step) * self.step
        return self.min_epsilon + min(top, nearest)

    def reported_epsilons(self) -> list[int]:
        return list(range(self.min_epsilon, self.max_epsilon + 1, self.step))

    def gap_model(self, distribution: GapDistribution) -> GapModel:
        return GapModel(
            distribution=distribution,
            ma_order=self.effective_ma_order,
            ar1_phi=self.ar1_phi,
        )


class SegmentCountConfig(BaseModel):
    """Parameters of the segment-count growth experiment."""

    epsilon: int = Field(16, ge=0)
    n: int = Field(..., ge=1, description="Maximum length of each stream.")
    step: int = Field(1, ge=1, description="Record the count every `step` points.")
    iterations: int = Field(10_000_000, ge=1)
    threads: int = Field(4, ge=1)
    seed: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def from_json_obj(cls, obj: dict[str, Any]) -> SegmentCountConfig:
        return validate_config(cls, obj)

    @model_validator(mode="after")
    def validate_consistency(self) -> SegmentCountConfig:
        if self.step > self.n:
            raise ValueError("step must not exceed n")
        return self

    @property
    def checkpoints(self) -> int:
        return self.n // self.step + 1


class RealGapsConfig(BaseModel):
    """Parameters of the OPT evaluation on real datasets."""

    paths: list[Path] = Field(..., min_length=1)
    min_epsilon: int = Field(1, ge=0)
    max_epsilon: int = Field(16, ge=0, description="Exclusive upper bound.")
    threads: int = Field(4, ge=1)
    binary: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def from_json_obj(cls, obj: dict[str, Any]) -> RealGapsConfig:
        return validate_config(cls, obj)

    @model_validator(mode="after")
    def validate_consistency(self) -> RealGapsConfig:
        if self.min_epsilon > self.max_epsilon:
            raise ValueError("min_epsilon must not exceed max_epsilon")
        return self

    def epsilons(self) -> list[int]:
        return list(range(self.min_epsilon, self.max_epsilon))
