"""
Run events.

Events are immutable facts observed while a Monte Carlo run progresses.
They are consumed by the checkpoint buffer, loggers and file recorders.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from index_effectiveness.simulation.harness.table import CsvTable


@dataclass(frozen=True, slots=True)
class CheckpointEvent:
    """A consistent snapshot of the aggregated statistics."""

    experiment: str
    completed: int
    total: int
    table: CsvTable

    @property
    def fraction(self) -> float:
        return self.completed / self.total if self.total else 1.0

    def render(self) -> str:
        return self.table.render()


@dataclass(frozen=True, slots=True)
class RunCompletedEvent:
    experiment: str
    completed: int
    total: int
    cancelled: bool
    duration_seconds: float
