"""
Checkpoint file sink.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from index_effectiveness.core.events.events import CheckpointEvent

LOGGER = logging.getLogger(__name__)


class FileCheckpointSink:
    """Mirrors every checkpoint to a file.

    The file is replaced atomically, so readers only ever see a complete
    table. Write failures are logged and the run continues.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._tmp_path = self._path.with_name(self._path.name + ".tmp")
        self._writes = 0

    @property
    def writes(self) -> int:
        return self._writes

    def on_event(self, event: Any) -> None:
        if not isinstance(event, CheckpointEvent):
            return
        try:
            self._tmp_path.write_text(event.render(), encoding="utf-8")
            os.replace(self._tmp_path, self._path)
        except OSError as exc:
            LOGGER.warning(
                "Checkpoint file write failed",
                extra={"path": str(self._path), "error": str(exc)},
            )
            return
        self._writes += 1
