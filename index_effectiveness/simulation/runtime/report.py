"""Report assembly for the CLI outputs."""

from __future__ import annotations

from dataclasses import astuple
from typing import TYPE_CHECKING, Iterable, Sequence, TextIO

from index_effectiveness.simulation.harness.table import Cell, CsvTable, render_comments

if TYPE_CHECKING:
    from index_effectiveness.simulation.engine.real_gaps import DatasetSegmentation

REAL_GAPS_COLUMNS = ("dataset", "dataset_size", "epsilon", "opt_avg", "opt_std", "samples")


def write_comments(out: TextIO, comments: Sequence[tuple[str, Cell]]) -> None:
    out.write(render_comments(comments))
    out.flush()


def write_table(out: TextIO, table: CsvTable) -> None:
    out.write(table.render())
    out.flush()


def write_text(out: TextIO, text: str) -> None:
    out.write(text)
    out.flush()


def real_gaps_table(rows: Iterable[DatasetSegmentation]) -> CsvTable:
    return CsvTable(columns=REAL_GAPS_COLUMNS, rows=tuple(astuple(row) for row in rows))
