"""
Event sink interface.

Sinks consume run events. They may be called from worker threads, always
under the harness reducer lock, so a sink never sees two events at once.
"""
from __future__ import annotations

from typing import Any, Protocol


class EventSink(Protocol):
    def on_event(self, event: Any) -> None:
        """Consume a run event."""
