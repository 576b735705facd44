"""
Logging event sink.
"""
from __future__ import annotations

import logging
from typing import Any

from index_effectiveness.core.events.events import CheckpointEvent, RunCompletedEvent


class LoggingEventSink:
    """Reports run progress through the standard logging module."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def on_event(self, event: Any) -> None:
        if isinstance(event, CheckpointEvent):
            self._logger.info(
                "Checkpoint taken",
                extra={
                    "experiment": event.experiment,
                    "completed": event.completed,
                    "total": event.total,
                },
            )
        elif isinstance(event, RunCompletedEvent):
            self._logger.info(
                "Run finished",
                extra={
                    "experiment": event.experiment,
                    "completed": event.completed,
                    "cancelled": event.cancelled,
                    "duration_seconds": event.duration_seconds,
                },
            )
        else:
            self._logger.debug("run_event", extra={"event": event})
