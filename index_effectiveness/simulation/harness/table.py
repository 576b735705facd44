"""CSV rendering of aggregated statistics."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Sequence

Cell = int | float | str


def format_cell(value: Cell) -> str:
    """Format a cell; floats keep 17 significant digits."""
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, float):
        return format(value, ".17g")
    return str(value)


@dataclass(frozen=True, slots=True)
class CsvTable:
    """Immutable snapshot of a statistics table."""

    columns: tuple[str, ...]
    rows: tuple[tuple[Cell, ...], ...] = field(default_factory=tuple)

    def column(self, name: str) -> list[Cell]:
        index = self.columns.index(name)
        return [row[index] for row in self.rows]

    def render(self, *, header: bool = True) -> str:
        out = io.StringIO()
        if header:
            out.write(",".join(self.columns) + "\n")
        for row in self.rows:
            out.write(",".join(format_cell(value) for value in row) + "\n")
        return out.getvalue()


def render_comments(comments: Sequence[tuple[str, Cell]]) -> str:
    """Render ``# key value`` preamble lines."""
    return "".join(f"# {key} {format_cell(value)}\n" for key, value in comments)
