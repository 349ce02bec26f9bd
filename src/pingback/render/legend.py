"""Column-major legend grid for the latency gradient."""

from __future__ import annotations

import math
from dataclasses import dataclass

from rich.text import Text

from .colors import ColorMapper
from .streams import glyph_for

DEFAULT_LEGEND_STEPS = 90
# glyph, the space after it and the trailing separator
_ENTRY_DECORATION = 3


def format_latency_label(latency: float) -> str:
    return f"{latency:.0f}" if latency >= 100 else f"{latency:.1f}"


@dataclass(frozen=True, slots=True)
class LegendEntry:
    glyph: Text
    label: str
    width: int

    def render(self, cell_width: int) -> Text:
        cell = Text(no_wrap=True)
        cell.append_text(self.glyph)
        cell.append(f" {self.label} ")
        cell.append(" " * max(0, cell_width - self.width))
        return cell


@dataclass(frozen=True, slots=True)
class LegendGrid:
    """Entries laid out top to bottom, then left to right."""

    entries: tuple[LegendEntry, ...]
    cell_width: int
    columns: int
    rows: int

    @property
    def grid(self) -> list[list[LegendEntry]]:
        """Columns of entries; the last column may be shorter."""

        return [
            list(self.entries[start : start + self.rows])
            for start in range(0, len(self.entries), self.rows)
        ]

    @property
    def used_columns(self) -> int:
        return len(self.grid)

    @property
    def rendered_width(self) -> int:
        return self.used_columns * self.cell_width

    def render(self) -> Text:
        columns = self.grid
        lines: list[Text] = []
        for row in range(self.rows):
            line = Text(no_wrap=True)
            for column in columns:
                if row < len(column):
                    line.append_text(column[row].render(self.cell_width))
            lines.append(line)
        return Text("\n", no_wrap=True).join(lines)


def legend_latencies(mapper: ColorMapper, steps: int) -> list[float]:
    """``steps`` latencies evenly spaced on a log scale across the current range."""

    if steps <= 0:
        raise ValueError("legend needs at least one step")
    if steps == 1:
        return [mapper.latency_at(0.0)]
    return [mapper.latency_at(i / (steps - 1)) for i in range(steps)]


def build_legend(
    mapper: ColorMapper, available_width: int, steps: int = DEFAULT_LEGEND_STEPS
) -> LegendGrid:
    entries: list[LegendEntry] = []
    for latency in legend_latencies(mapper, steps):
        label = format_latency_label(latency)
        entries.append(
            LegendEntry(
                glyph=glyph_for(latency, mapper),
                label=label,
                width=_ENTRY_DECORATION + len(label),
            )
        )
    cell_width = max(entry.width for entry in entries)
    columns = max(1, available_width // cell_width)
    rows = math.ceil(len(entries) / columns)
    return LegendGrid(entries=tuple(entries), cell_width=cell_width, columns=columns, rows=rows)


class LegendCache:
    """Rebuilds the legend only when the latency range or the width changed."""

    def __init__(self, steps: int = DEFAULT_LEGEND_STEPS) -> None:
        self.steps = steps
        self._grid: LegendGrid | None = None
        self._width: int | None = None
        self.rebuilds = 0

    def get(self, mapper: ColorMapper, available_width: int, *, dirty: bool) -> LegendGrid:
        if dirty or self._grid is None or self._width != available_width:
            self._grid = build_legend(mapper, available_width, self.steps)
            self._width = available_width
            self.rebuilds += 1
        return self._grid


__all__ = [
    "DEFAULT_LEGEND_STEPS",
    "LegendCache",
    "LegendEntry",
    "LegendGrid",
    "build_legend",
    "format_latency_label",
    "legend_latencies",
]
