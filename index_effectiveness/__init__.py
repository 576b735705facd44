"""Public API for the index_effectiveness package.

Only symbols imported here are considered part of the stable,
supported external interface.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ----------------------------------------------------------------------
# Configuration
# ----------------------------------------------------------------------
from index_effectiveness.core.config.experiment_config import (
    ExperimentConfig,
    RealGapsConfig,
    SegmentCountConfig,
)

# ----------------------------------------------------------------------
# Domain types and errors
# ----------------------------------------------------------------------
from index_effectiveness.core.domain.errors import (
    IndexEffectivenessError,
    InvalidParameter,
    PreconditionViolation,
)
from index_effectiveness.core.domain.running_stat import RunningStatistic
from index_effectiveness.core.domain.types import (
    INFINITE_EXIT_TIME,
    Segment,
    TheoreticalMoments,
    TrajectoryResult,
)

# ----------------------------------------------------------------------
# Gap generation
# ----------------------------------------------------------------------
from index_effectiveness.core.gaps.distributions import (
    ExponentialGaps,
    GammaGaps,
    GapDistribution,
    LognormalGaps,
    ParetoGaps,
    UniformGaps,
    build_distribution,
)
from index_effectiveness.core.gaps.process import GapModel

# ----------------------------------------------------------------------
# Segmentation and simulation
# ----------------------------------------------------------------------
from index_effectiveness.core.model.piecewise_linear import (
    OptimalPiecewiseLinearModel,
    segment_stream,
)
from index_effectiveness.simulation.engine.exit_time import simulate_exit_times
from index_effectiveness.simulation.harness.experiments import (
    ExitTimeExperiment,
    SegmentCountExperiment,
)
from index_effectiveness.simulation.harness.monte_carlo import MonteCarloHarness

# ----------------------------------------------------------------------
# Public API definition
# ----------------------------------------------------------------------

__all__ = [
    # Config
    "ExperimentConfig",
    "SegmentCountConfig",
    "RealGapsConfig",

    # Errors
    "IndexEffectivenessError",
    "InvalidParameter",
    "PreconditionViolation",

    # Domain
    "RunningStatistic",
    "Segment",
    "TrajectoryResult",
    "TheoreticalMoments",
    "INFINITE_EXIT_TIME",

    # Gaps
    "GapDistribution",
    "UniformGaps",
    "ParetoGaps",
    "LognormalGaps",
    "ExponentialGaps",
    "GammaGaps",
    "build_distribution",
    "GapModel",

    # Segmentation and simulation
    "OptimalPiecewiseLinearModel",
    "segment_stream",
    "simulate_exit_times",
    "MonteCarloHarness",
    "ExitTimeExperiment",
    "SegmentCountExperiment",

    # Version
    "__version__",
]

# ----------------------------------------------------------------------
# Package version
# ----------------------------------------------------------------------

try:
    __version__ = version("index-effectiveness")
except PackageNotFoundError:
    __version__ = "0.0.0"
