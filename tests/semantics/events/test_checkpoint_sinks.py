"""
Semantic test: checkpoint sinks.

Invariant:
The buffer holds the latest checkpoint only, the file sink replaces its
target with complete tables, and a closed bus drops events.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from index_effectiveness.core.events.event_bus import EventBus
from index_effectiveness.core.events.events import CheckpointEvent, RunCompletedEvent
from index_effectiveness.core.events.sinks.checkpoint_buffer import CheckpointBuffer
from index_effectiveness.core.events.sinks.file_recorder import FileCheckpointSink
from index_effectiveness.core.events.sinks.null_event_bus import NullEventBus
from index_effectiveness.core.events.sinks.sink_logging import LoggingEventSink
from index_effectiveness.simulation.harness.table import CsvTable


def _checkpoint(completed: int) -> CheckpointEvent:
    return CheckpointEvent(
        experiment="test",
        completed=completed,
        total=10,
        table=CsvTable(columns=("n",), rows=((completed,),)),
    )


def test_buffer_keeps_latest() -> None:
    buffer = CheckpointBuffer()
    assert buffer.read() == ""

    bus = EventBus([buffer])
    bus.emit(_checkpoint(1))
    bus.emit(_checkpoint(2))
    bus.emit(RunCompletedEvent("test", 2, 10, True, 0.1))

    assert buffer.read() == "n\n2\n"
    assert buffer.latest is not None and buffer.latest.fraction == pytest.approx(0.2)


def test_file_sink_replaces_content(tmp_path: Path) -> None:
    target = tmp_path / "out" / "checkpoint.csv"
    sink = FileCheckpointSink(target)

    sink.on_event(_checkpoint(3))
    sink.on_event(_checkpoint(4))

    assert target.read_text(encoding="utf-8") == "n\n4\n"
    assert sink.writes == 2
    assert not target.with_name("checkpoint.csv.tmp").exists()


def test_logging_sink_reports_checkpoints(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("index_effectiveness.test")
    sink = LoggingEventSink(logger)

    with caplog.at_level(logging.INFO, logger="index_effectiveness.test"):
        sink.on_event(_checkpoint(5))

    assert any(r.message == "Checkpoint taken" and r.completed == 5 for r in caplog.records)


def test_closed_bus_drops_events() -> None:
    buffer = CheckpointBuffer()
    bus = EventBus([buffer])
    bus.close()

    bus.emit(_checkpoint(1))

    assert buffer.read() == ""
    with pytest.raises(RuntimeError):
        bus.register(CheckpointBuffer())


def test_null_bus_has_no_sinks() -> None:
    bus = NullEventBus()
    bus.emit(_checkpoint(1))

    assert bus.sinks == ()
