"""
In-memory holder of the latest checkpoint.
"""
from __future__ import annotations

import threading
from typing import Any

from index_effectiveness.core.events.events import CheckpointEvent


class CheckpointBuffer:
    """Keeps the most recent checkpoint text for signal-driven dumps.

    Reads and writes go through a dedicated lock so a dump never sees a
    partially replaced value.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest: CheckpointEvent | None = None
        self._text = ""

    def on_event(self, event: Any) -> None:
        if not isinstance(event, CheckpointEvent):
            return
        text = event.render()
        with self._lock:
            self._latest = event
            self._text = text

    @property
    def latest(self) -> CheckpointEvent | None:
        with self._lock:
            return self._latest

    def read(self) -> str:
        with self._lock:
            return self._text
