"""
Synchronous event bus.
"""
from __future__ import annotations

from typing import Any, Iterable

from index_effectiveness.core.events.event_sink import EventSink


class EventBus:
    """Fans run events out to registered sinks, in registration order."""

    def __init__(self, sinks: Iterable[EventSink] | None = None) -> None:
        self._sinks: list[EventSink] = list(sinks) if sinks is not None else []
        self._closed = False

    @property
    def sinks(self) -> tuple[EventSink, ...]:
        return tuple(self._sinks)

    def register(self, sink: EventSink) -> None:
        if self._closed:
            raise RuntimeError("cannot register a sink on a closed EventBus")
        self._sinks.append(sink)

    def emit(self, event: Any) -> None:
        if self._closed:
            return
        for sink in self._sinks:
            sink.on_event(event)

    def close(self) -> None:
        """Close every sink that has a close() method. Idempotent."""
        if self._closed:
            return
        self._closed = True
        for sink in self._sinks:
            close_fn = getattr(sink, "close", None)
            if callable(close_fn):
                close_fn()
