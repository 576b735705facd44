from __future__ import annotations

from index_effectiveness.core.events.event_bus import EventBus


class NullEventBus(EventBus):
    """EventBus without sinks; every emitted event is dropped."""

    def __init__(self) -> None:
        super().__init__(sinks=())
