"""OPT segmentation of real key sets."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from index_effectiveness.core.domain.running_stat import RunningStatistic
from index_effectiveness.core.model.piecewise_linear import segment_stream

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DatasetSegmentation:
    """Segment-length statistics of one dataset at one ε."""

    dataset: str
    dataset_size: int
    epsilon: int
    opt_avg: float
    opt_std: float
    samples: int


def segment_lengths(gaps: np.ndarray, epsilon: float) -> RunningStatistic:
    """Segment the stream ``(cumsum(gaps)[i], i)`` and collect segment lengths.

    Only segments closed by a rejected point are counted. The open tail is
    cut short by the end of the data, like a censored trajectory.
    """
    xs = np.cumsum(gaps, dtype=np.float64)
    stat = RunningStatistic()
    for segment in segment_stream(zip(xs.tolist(), range(len(xs))), epsilon, closed_only=True):
        stat.push(len(segment))
    return stat


def evaluate_dataset(
    name: str,
    gaps: np.ndarray,
    epsilons: Sequence[int],
    *,
    threads: int,
) -> list[DatasetSegmentation]:
    """Segment one dataset for every ε, in parallel, rows in ε order."""

    def _evaluate(epsilon: int) -> DatasetSegmentation:
        stat = segment_lengths(gaps, epsilon)
        LOGGER.info(
            "Dataset segmented",
            extra={"dataset": name, "epsilon": epsilon, "segments": stat.samples()},
        )
        return DatasetSegmentation(
            dataset=name,
            dataset_size=len(gaps),
            epsilon=epsilon,
            opt_avg=stat.mean(),
            opt_std=stat.standard_deviation(),
            samples=stat.samples(),
        )

    with ThreadPoolExecutor(max_workers=threads, thread_name_prefix="real-gaps") as executor:
        return list(executor.map(_evaluate, epsilons))
